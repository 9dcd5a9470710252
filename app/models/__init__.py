"""
Database models package
"""

from .event import Event
from .attendee import Attendee, JoinSequence
from .user import User

__all__ = ["Event", "Attendee", "JoinSequence", "User"]
