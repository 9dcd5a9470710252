"""
Event and attendee API routes
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.attendee import AttendeeCreate
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_service import EventService
from app.utils.responses import success_response
from app.utils.security import verify_admin_token

router = APIRouter()

def _dump(view) -> dict:
    return view.model_dump(by_alias=True, mode="json")

@router.get("/events")
async def list_events(
    status: Optional[str] = Query(None, description="Computed status: scheduled, happening or finished"),
    location: Optional[str] = Query(None),
    keyword: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    min_attendees: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db)
):
    """List events with their attendees, soonest first"""
    events = EventService.get_all_events(
        db,
        status=status,
        location=location,
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        min_attendees=min_attendees
    )
    return success_response(
        message="Events retrieved successfully",
        data=[_dump(event) for event in events]
    )

@router.get("/events/{event_id}")
async def get_event(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Get a single event with its attendees"""
    event = EventService.get_event(db, event_id)
    return success_response(
        message="Event retrieved successfully",
        data=_dump(event)
    )

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Create a new event"""
    event = EventService.create_event(db, event_data.model_dump())
    return success_response(
        message="Event created successfully",
        data=_dump(event),
        status_code=201
    )

@router.put("/events/{event_id}")
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Update event fields; the attendee list is never modified here"""
    event = EventService.update_event(db, event_id, event_data.model_dump(exclude_unset=True))
    return success_response(
        message="Event updated successfully",
        data=_dump(event)
    )

@router.delete("/events/{event_id}")
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(verify_admin_token)
):
    """Delete an event together with all of its attendees"""
    EventService.delete_event(db, event_id)
    return success_response(
        message="Event deleted successfully",
        data={"deletedEventId": event_id}
    )

@router.post("/events/{event_id}/attendees")
async def join_event(
    event_id: int,
    attendee_data: AttendeeCreate,
    db: Session = Depends(get_db)
):
    """Admit an attendee to an event"""
    event = EventService.add_attendee(db, event_id, attendee_data.model_dump())
    return success_response(
        message="Successfully joined the event",
        data=_dump(event),
        status_code=201
    )

@router.delete("/events/{event_id}/attendees/{phone_or_name}")
async def leave_event(
    event_id: int,
    phone_or_name: str,
    db: Session = Depends(get_db)
):
    """Remove an attendee, matched by phone or, failing that, by name"""
    event = EventService.remove_attendee(db, event_id, phone_or_name)
    return success_response(
        message="Attendee removed successfully",
        data=_dump(event)
    )
