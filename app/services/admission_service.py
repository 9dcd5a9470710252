"""
Attendee admission and removal rules
"""

import logging
import re
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.models import Attendee
from app.models.attendee import NAME_MAX_LENGTH, PHONE_MAX_LENGTH, ROLE_MAX_LENGTH, TEAM_MAX_LENGTH
from app.models.event import DEFAULT_MAX_ATTENDEES
from app.services.exceptions import (
    DuplicateAttendeeError,
    EventFullError,
    InvalidPhoneError,
    NotFoundError,
    ValidationFailedError,
)
from app.services.repositories import AttendeeRepo, EventRepo
from app.utils.clock import utc_now

logger = logging.getLogger(__name__)

# Hard ceiling on attendees per event, whatever max_attendees says
CAPACITY_CEILING = 20

PHONE_PATTERN = re.compile(r"^[+]?[\d\s\-()]{10,}$")

DEFAULT_ROLE = "guest"

FIELD_MAX_LENGTHS = {
    "name": NAME_MAX_LENGTH,
    "team": TEAM_MAX_LENGTH,
    "role": ROLE_MAX_LENGTH,
}


def effective_capacity(max_attendees: Optional[int]) -> int:
    """The real admission ceiling for an event"""
    return min(max_attendees or DEFAULT_MAX_ATTENDEES, CAPACITY_CEILING)


def is_valid_phone(phone: str) -> bool:
    return len(phone) <= PHONE_MAX_LENGTH and bool(PHONE_PATTERN.match(phone))


class AdmissionService:
    """Decides whether a join request may be admitted and records it"""

    @staticmethod
    def clean_candidate(
        name: Optional[str],
        team: Optional[str],
        phone: Optional[str],
        role: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Trim the candidate fields, rejecting blanks, values longer than their
        columns and malformed phones. A blank role becomes the default role.
        """
        candidate = {
            "name": (name or "").strip(),
            "team": (team or "").strip(),
            "phone": (phone or "").strip(),
        }

        missing = [field for field, value in candidate.items() if not value]
        if missing:
            raise ValidationFailedError(
                missing,
                message=f"Missing required fields: {', '.join(missing)}"
            )

        candidate["role"] = (role or "").strip() or DEFAULT_ROLE

        too_long = [
            field for field, limit in FIELD_MAX_LENGTHS.items()
            if len(candidate[field]) > limit
        ]
        if too_long:
            raise ValidationFailedError(
                too_long,
                message=f"Fields too long: {', '.join(too_long)}"
            )

        if not is_valid_phone(candidate["phone"]):
            raise InvalidPhoneError(candidate["phone"])

        return candidate

    @staticmethod
    def next_join_order(db: Session, event_id: int) -> int:
        """
        Reserve the next join order for an event.

        The sequence row remembers the highest order ever handed out, so an
        order freed by a removal is never given to a later attendee.
        """
        sequence = AttendeeRepo.get_sequence(db, event_id)
        current = max(sequence.last_join_order or 0, AttendeeRepo.max_join_order(db, event_id))
        sequence.last_join_order = current + 1
        return sequence.last_join_order

    @staticmethod
    def admit(
        db: Session,
        event_id: int,
        name: Optional[str],
        team: Optional[str],
        phone: Optional[str],
        role: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Attendee:
        """
        Admit a candidate to an event inside the caller's transaction.

        The event row is locked first so the duplicate check, the capacity
        check and the insert see a stable attendee set. Nothing is written
        unless every check passes. The caller commits.
        """
        event = EventRepo.get_for_update(db, event_id)
        if not event:
            raise NotFoundError("Event", event_id)

        candidate = AdmissionService.clean_candidate(name, team, phone, role)

        if AttendeeRepo.find_by_phone(db, event_id, candidate["phone"]):
            raise DuplicateAttendeeError(candidate["phone"])

        capacity = effective_capacity(event.max_attendees)
        if AttendeeRepo.count_for_event(db, event_id) >= capacity:
            raise EventFullError(capacity)

        attendee = AttendeeRepo.create(
            db,
            event_id=event_id,
            name=candidate["name"],
            team=candidate["team"],
            phone=candidate["phone"],
            role=candidate["role"],
            joined_at=now or utc_now(),
            join_order=AdmissionService.next_join_order(db, event_id),
        )
        logger.info(f"Admitted {attendee.name} to event {event_id} (join order {attendee.join_order})")
        return attendee

    @staticmethod
    def remove(db: Session, event_id: int, phone_or_name: str) -> Attendee:
        """
        Remove one attendee, matched by phone first and by name otherwise.

        Remaining join orders are left as they are.
        """
        event = EventRepo.get_for_update(db, event_id)
        if not event:
            raise NotFoundError("Event", event_id)

        key = (phone_or_name or "").strip()
        attendee = None
        if key:
            attendee = AttendeeRepo.find_by_phone(db, event_id, key) or \
                AttendeeRepo.find_by_name(db, event_id, key)
        if not attendee:
            raise NotFoundError("Attendee", key)

        AttendeeRepo.delete(db, attendee)
        logger.info(f"Removed {attendee.name} from event {event_id}")
        return attendee
