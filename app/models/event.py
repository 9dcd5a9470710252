"""
Event model
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.utils.clock import utc_now

DEFAULT_MAX_ATTENDEES = 20

# Column sizes, checked before insert
TITLE_MAX_LENGTH = 255
TIME_MAX_LENGTH = 10
LOCATION_MAX_LENGTH = 255
STATUS_MAX_LENGTH = 50

class Event(Base):
    __tablename__ = "events"
    
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, default="")
    date = Column(Date, nullable=False, index=True)
    time = Column(String(TIME_MAX_LENGTH), nullable=False)
    location = Column(String(LOCATION_MAX_LENGTH), nullable=False)
    max_attendees = Column(Integer, nullable=False, default=DEFAULT_MAX_ATTENDEES)
    # Stored label only; the time-based status is computed on read
    status = Column(String(STATUS_MAX_LENGTH), nullable=False, default="planned")
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)
    
    # Relationships
    attendees = relationship(
        "Attendee",
        back_populates="event",
        order_by="Attendee.join_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
