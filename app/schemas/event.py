"""
Event-related Pydantic schemas

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from app.schemas.attendee import AttendeeResponse

class EventCreate(BaseModel):
    """Schema for creating an event; required fields are checked by the service"""
    title: Optional[str] = None
    description: Optional[str] = ""
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    max_attendees: Optional[int] = Field(None, alias="maxAttendees")
    status: Optional[str] = None

    class Config:
        populate_by_name = True

class EventUpdate(BaseModel):
    """Schema for updating event fields. Any attendee list in the payload is ignored."""
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    max_attendees: Optional[int] = Field(None, alias="maxAttendees")
    status: Optional[str] = None

    class Config:
        populate_by_name = True

class EventResponse(BaseModel):
    """Event with derived capacity/status fields and its attendee roster"""
    id: int
    title: str
    description: str
    date: str
    time: str
    location: str
    max_attendees: int = Field(alias="maxAttendees")
    capacity: int
    status: str
    computed_status: str = Field(alias="computedStatus")
    attendee_count: int = Field(alias="attendeeCount")
    spots_left: int = Field(alias="spotsLeft")
    is_full: bool = Field(alias="isFull")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    attendees: List[AttendeeResponse] = []

    class Config:
        populate_by_name = True
