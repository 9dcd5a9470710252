"""
Repository layer over the relational store (events, attendees, users).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, lazyload

from app.core.db import is_sqlite
from app.models import Attendee, Event, JoinSequence, User
from app.services.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def store_operation(db: Session, action: str) -> Iterator[None]:
    """Roll back and raise StoreError when the database fails mid-operation."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"Store failure while trying to {action}")
        raise StoreError(action) from exc


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id(db: Session, event_id: int) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def get_for_update(db: Session, event_id: int) -> Optional[Event]:
        """Fetch an event and lock its row until the transaction ends."""
        query = db.query(Event).filter(Event.id == event_id)
        # SQLite has no FOR UPDATE; its single-writer lock serialises admissions
        if not is_sqlite(db):
            query = query.options(lazyload("*")).with_for_update()
        return query.first()

    @staticmethod
    def list_ordered(
        db: Session,
        location: Optional[str] = None,
        keyword: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Event]:
        """Events soonest first, optionally narrowed by location, keyword and date range"""
        query = db.query(Event)
        if location:
            query = query.filter(func.lower(Event.location).like(f"%{location.lower()}%"))
        if keyword:
            pattern = f"%{keyword.lower()}%"
            query = query.filter(
                func.lower(Event.title).like(pattern) |
                func.lower(func.coalesce(Event.description, "")).like(pattern)
            )
        if start_date:
            query = query.filter(Event.date >= start_date)
        if end_date:
            query = query.filter(Event.date <= end_date)
        return query.order_by(Event.date, Event.time, Event.id).all()

    @staticmethod
    def create(db: Session, **fields) -> Event:
        event = Event(**fields)
        db.add(event)
        db.flush()
        return event

    @staticmethod
    def delete_with_attendees(db: Session, event_id: int) -> None:
        db.query(Attendee).filter(Attendee.event_id == event_id).delete(synchronize_session=False)
        db.query(JoinSequence).filter(JoinSequence.event_id == event_id).delete(synchronize_session=False)
        db.query(Event).filter(Event.id == event_id).delete(synchronize_session=False)

    @staticmethod
    def count(db: Session) -> int:
        return db.query(func.count(Event.id)).scalar() or 0

    @staticmethod
    def attendee_counts(db: Session) -> List[dict]:
        rows = db.query(
            Event.id,
            Event.title,
            func.count(Attendee.id).label("attendee_count")
        ).outerjoin(
            Attendee, Attendee.event_id == Event.id
        ).group_by(Event.id, Event.title).order_by(Event.id).all()
        return [
            {"id": row.id, "title": row.title, "attendeeCount": row.attendee_count}
            for row in rows
        ]


# -------- Attendee repository --------

class AttendeeRepo:
    @staticmethod
    def count_for_event(db: Session, event_id: int) -> int:
        return db.query(func.count(Attendee.id)).filter(Attendee.event_id == event_id).scalar() or 0

    @staticmethod
    def find_by_phone(db: Session, event_id: int, phone: str) -> Optional[Attendee]:
        return db.query(Attendee).filter(
            Attendee.event_id == event_id,
            Attendee.phone == phone
        ).first()

    @staticmethod
    def find_by_name(db: Session, event_id: int, name: str) -> Optional[Attendee]:
        return db.query(Attendee).filter(
            Attendee.event_id == event_id,
            Attendee.name == name
        ).order_by(Attendee.join_order).first()

    @staticmethod
    def max_join_order(db: Session, event_id: int) -> int:
        return db.query(func.max(Attendee.join_order)).filter(
            Attendee.event_id == event_id
        ).scalar() or 0

    @staticmethod
    def get_sequence(db: Session, event_id: int) -> JoinSequence:
        sequence = db.query(JoinSequence).filter(JoinSequence.event_id == event_id).first()
        if sequence is None:
            sequence = JoinSequence(event_id=event_id, last_join_order=0)
            db.add(sequence)
        return sequence

    @staticmethod
    def create(db: Session, **fields) -> Attendee:
        attendee = Attendee(**fields)
        db.add(attendee)
        db.flush()
        return attendee

    @staticmethod
    def delete(db: Session, attendee: Attendee) -> None:
        db.delete(attendee)
        db.flush()

    @staticmethod
    def count(db: Session) -> int:
        return db.query(func.count(Attendee.id)).scalar() or 0

    @staticmethod
    def orphans(db: Session) -> List[dict]:
        rows = db.query(Attendee.id, Attendee.name, Attendee.event_id).outerjoin(
            Event, Attendee.event_id == Event.id
        ).filter(Event.id.is_(None)).all()
        return [{"id": row.id, "name": row.name, "eventId": row.event_id} for row in rows]


# -------- User repository --------

class UserRepo:
    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def has_admin(db: Session) -> bool:
        return db.query(User.id).filter(User.role == "admin").first() is not None

    @staticmethod
    def create(db: Session, **fields) -> User:
        user = User(**fields)
        db.add(user)
        db.flush()
        return user
