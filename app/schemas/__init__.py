"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .attendee import *
from .auth import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "AttendeeCreate",
    "AttendeeResponse",
    "LoginRequest",
    "LoginResponse",
    "ChangePasswordRequest",
    "UserProfile",
]
