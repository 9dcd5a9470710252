"""
Event and attendee orchestration

Every public operation runs in one request-scoped session and either commits
as a whole or rolls back, leaving events and attendees untouched.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Attendee, Event
from app.models.event import (
    DEFAULT_MAX_ATTENDEES,
    LOCATION_MAX_LENGTH,
    STATUS_MAX_LENGTH,
    TIME_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from app.schemas.attendee import AttendeeResponse
from app.schemas.event import EventResponse
from app.services.admission_service import AdmissionService, effective_capacity
from app.services.event_status import (
    EventStatus,
    compute_event_status,
    parse_event_date,
    parse_event_time,
)
from app.services.exceptions import (
    DuplicateAttendeeError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationFailedError,
)
from app.services.repositories import AttendeeRepo, EventRepo, store_operation
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

MIN_MAX_ATTENDEES = 1
MAX_MAX_ATTENDEES = 1000
DEFAULT_STORED_STATUS = "planned"

EVENT_FIELDS = ("title", "description", "date", "time", "location", "max_attendees", "status")


def attendee_to_response(attendee: Attendee) -> AttendeeResponse:
    return AttendeeResponse(
        id=attendee.id,
        name=attendee.name,
        team=attendee.team,
        phone=attendee.phone,
        role=attendee.role,
        joined_at=attendee.joined_at,
        join_order=attendee.join_order,
    )


def event_to_response(event: Event, now: Optional[datetime] = None) -> EventResponse:
    """Combined view of an event's fields, derived status/capacity and roster"""
    attendees = sorted(event.attendees, key=lambda a: a.join_order)
    capacity = effective_capacity(event.max_attendees)
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description or "",
        date=event.date.isoformat(),
        time=event.time,
        location=event.location,
        max_attendees=event.max_attendees,
        capacity=capacity,
        status=event.status,
        computed_status=compute_event_status(event.date, event.time, now).value,
        attendee_count=len(attendees),
        spots_left=max(capacity - len(attendees), 0),
        is_full=len(attendees) >= capacity,
        created_at=event.created_at,
        updated_at=event.updated_at,
        attendees=[attendee_to_response(a) for a in attendees],
    )


def _normalize_time(value: str) -> str:
    clock = parse_event_time(value)
    if clock is None:
        return value
    return f"{clock[0]:02d}:{clock[1]:02d}"


def validate_event_data(data: Dict[str, Any], partial: bool = False) -> Tuple[List[str], Dict[str, Any]]:
    """
    Check event fields and return (errors, cleaned values).

    With ``partial`` only the fields present in ``data`` are checked, which
    is how updates work. Missing optional fields get their defaults on create.
    """
    errors: List[str] = []
    cleaned: Dict[str, Any] = {}

    def present(field: str) -> bool:
        return not partial or data.get(field) is not None

    def check_length(label: str, value: str, limit: int) -> None:
        if len(value) > limit:
            errors.append(f"Event {label} must be at most {limit} characters")

    if present("title"):
        title = (data.get("title") or "").strip()
        if not title:
            errors.append("Event title is required")
        check_length("title", title, TITLE_MAX_LENGTH)
        cleaned["title"] = title

    if present("description"):
        cleaned["description"] = (data.get("description") or "").strip()

    if present("date"):
        raw_date = data.get("date")
        if not raw_date or not str(raw_date).strip():
            errors.append("Event date is required")
        else:
            parsed = parse_event_date(raw_date)
            if parsed is None:
                errors.append("Event date must be a valid date (YYYY-MM-DD)")
            cleaned["date"] = parsed

    if present("time"):
        raw_time = (data.get("time") or "").strip()
        if not raw_time:
            errors.append("Event time is required")
        cleaned["time"] = _normalize_time(raw_time)
        check_length("time", cleaned["time"], TIME_MAX_LENGTH)

    if present("location"):
        location = (data.get("location") or "").strip()
        if not location:
            errors.append("Event location is required")
        check_length("location", location, LOCATION_MAX_LENGTH)
        cleaned["location"] = location

    max_attendees = data.get("max_attendees")
    if max_attendees is not None:
        if not (MIN_MAX_ATTENDEES <= max_attendees <= MAX_MAX_ATTENDEES):
            errors.append(
                f"Max attendees must be between {MIN_MAX_ATTENDEES} and {MAX_MAX_ATTENDEES}"
            )
        cleaned["max_attendees"] = max_attendees
    elif not partial:
        cleaned["max_attendees"] = DEFAULT_MAX_ATTENDEES

    status = (data.get("status") or "").strip()
    if status:
        check_length("status", status, STATUS_MAX_LENGTH)
        cleaned["status"] = status
    elif not partial:
        cleaned["status"] = DEFAULT_STORED_STATUS

    return errors, cleaned


class EventService:
    """Create/read/update/delete for events, add/remove for attendees"""

    @staticmethod
    def get_all_events(
        db: Session,
        status: Optional[str] = None,
        location: Optional[str] = None,
        keyword: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        min_attendees: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[EventResponse]:
        """Every event with its roster, soonest first, optionally filtered"""
        if status is not None:
            try:
                status = EventStatus(status).value
            except ValueError:
                allowed = ", ".join(s.value for s in EventStatus)
                raise ValidationFailedError([f"Status must be one of: {allowed}"])

        with store_operation(db, "fetch events"):
            events = EventRepo.list_ordered(
                db,
                location=location,
                keyword=keyword,
                start_date=start_date,
                end_date=end_date,
            )
            views = [event_to_response(event, now) for event in events]

        if status is not None:
            views = [view for view in views if view.computed_status == status]
        if min_attendees is not None:
            views = [view for view in views if view.attendee_count >= min_attendees]
        return views

    @staticmethod
    def get_event(db: Session, event_id: int, now: Optional[datetime] = None) -> EventResponse:
        with store_operation(db, "fetch event"):
            event = EventRepo.get_by_id(db, event_id)
            if not event:
                raise NotFoundError("Event", event_id)
            return event_to_response(event, now)

    @staticmethod
    def create_event(db: Session, data: Dict[str, Any]) -> EventResponse:
        errors, cleaned = validate_event_data(data)
        if errors:
            raise ValidationFailedError(errors)

        with store_operation(db, "create event"):
            now = utc_now()
            event = EventRepo.create(db, created_at=now, updated_at=now, **cleaned)
            db.commit()
            db.refresh(event)

        logger.info(f"Created new event: {event.title} (ID: {event.id})")
        return event_to_response(event)

    @staticmethod
    def update_event(db: Session, event_id: int, data: Dict[str, Any]) -> EventResponse:
        """
        Update event columns only.

        The attendee roster is never read from or written by this call, even
        when the payload carries an attendee list.
        """
        fields = {key: value for key, value in data.items() if key in EVENT_FIELDS}
        errors, cleaned = validate_event_data(fields, partial=True)
        if errors:
            raise ValidationFailedError(errors)

        with store_operation(db, "update event"):
            event = EventRepo.get_by_id(db, event_id)
            if not event:
                raise NotFoundError("Event", event_id)

            if "max_attendees" in cleaned:
                current = AttendeeRepo.count_for_event(db, event_id)
                if effective_capacity(cleaned["max_attendees"]) < current:
                    raise ValidationFailedError([
                        f"Max attendees cannot be lower than the current attendee count ({current})"
                    ])

            for field, value in cleaned.items():
                setattr(event, field, value)
            event.updated_at = utc_now()
            db.commit()
            db.refresh(event)

        logger.info(f"Updated event: {event.title} (ID: {event.id})")
        return event_to_response(event)

    @staticmethod
    def delete_event(db: Session, event_id: int) -> bool:
        """
        Delete an event and all of its attendees as one unit.

        Raises NotFoundError without touching any row when the event is
        missing. Rolls back if any attendee row survives the delete.
        """
        try:
            event = EventRepo.get_for_update(db, event_id)
            if not event:
                raise NotFoundError("Event", event_id)

            attendee_count = AttendeeRepo.count_for_event(db, event_id)
            EventRepo.delete_with_attendees(db, event_id)

            remaining = AttendeeRepo.count_for_event(db, event_id)
            if remaining:
                logger.error(f"{remaining} attendees still reference deleted event {event_id}")
                raise StoreError("delete event")

            db.commit()
        except ServiceError:
            db.rollback()
            raise
        except Exception as exc:
            db.rollback()
            logger.exception(f"Failed to delete event {event_id}")
            raise StoreError("delete event") from exc

        logger.info(f"Deleted event {event_id} and {attendee_count} attendees")
        return True

    @staticmethod
    def add_attendee(
        db: Session,
        event_id: int,
        data: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> EventResponse:
        """Admit an attendee and return the refreshed event view"""
        try:
            AdmissionService.admit(
                db,
                event_id,
                name=data.get("name"),
                team=data.get("team"),
                phone=data.get("phone"),
                role=data.get("role"),
                now=now,
            )
            db.commit()
        except ServiceError as exc:
            db.rollback()
            logger.info(f"Rejected join for event {event_id}: {exc.code}")
            raise
        except IntegrityError as exc:
            # A concurrent request registered the same phone first
            db.rollback()
            phone = (data.get("phone") or "").strip()
            if AttendeeRepo.find_by_phone(db, event_id, phone):
                raise DuplicateAttendeeError(phone) from exc
            logger.exception(f"Integrity failure while admitting to event {event_id}")
            raise StoreError("join event") from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception(f"Store failure while admitting to event {event_id}")
            raise StoreError("join event") from exc

        with store_operation(db, "join event"):
            db.expire_all()
            return EventService.get_event(db, event_id, now)

    @staticmethod
    def remove_attendee(
        db: Session,
        event_id: int,
        phone_or_name: str,
        now: Optional[datetime] = None,
    ) -> EventResponse:
        """Remove an attendee by phone (or name) and return the refreshed event view"""
        with store_operation(db, "leave event"):
            try:
                AdmissionService.remove(db, event_id, phone_or_name)
                db.commit()
            except ServiceError:
                db.rollback()
                raise

            db.expire_all()
            return EventService.get_event(db, event_id, now)

    @staticmethod
    def get_statistics(db: Session) -> Dict[str, Any]:
        with store_operation(db, "read store statistics"):
            return {
                "totalEvents": EventRepo.count(db),
                "totalAttendees": AttendeeRepo.count(db),
            }

    @staticmethod
    def check_integrity(db: Session) -> Dict[str, Any]:
        """Counts plus any attendee rows whose event no longer exists"""
        with store_operation(db, "check database integrity"):
            orphans = AttendeeRepo.orphans(db)
            return {
                "totalEvents": EventRepo.count(db),
                "totalAttendees": AttendeeRepo.count(db),
                "orphanedAttendees": len(orphans),
                "orphanedDetails": orphans,
                "eventsWithCounts": EventRepo.attendee_counts(db),
            }
