"""
Attendee model and per-event join order sequence
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.utils.clock import utc_now

# Column sizes, checked before insert
NAME_MAX_LENGTH = 255
TEAM_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 30
ROLE_MAX_LENGTH = 50

class Attendee(Base):
    __tablename__ = "attendees"
    
    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    team = Column(String(TEAM_MAX_LENGTH), nullable=False)
    phone = Column(String(PHONE_MAX_LENGTH), nullable=False)
    role = Column(String(ROLE_MAX_LENGTH), nullable=False, default="guest")
    joined_at = Column(DateTime, default=utc_now)
    join_order = Column(Integer, nullable=False)
    
    # Relationships
    event = relationship("Event", back_populates="attendees")
    
    __table_args__ = (
        UniqueConstraint("event_id", "phone", name="uq_attendee_event_phone"),
        UniqueConstraint("event_id", "join_order", name="uq_attendee_event_join_order"),
    )

class JoinSequence(Base):
    """Highest join order ever handed out for an event."""
    __tablename__ = "event_join_sequences"
    
    event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        primary_key=True,
    )
    last_join_order = Column(Integer, nullable=False, default=0)
