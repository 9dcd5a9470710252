"""
Response envelopes shared by all routes
"""

from typing import Any, Optional
from pydantic import BaseModel

class StandardResponse(BaseModel):
    """Successful call: a human message plus the event/user payload"""
    success: bool
    message: str
    data: Optional[Any] = None

class ErrorResponse(BaseModel):
    """
    Rejected call.

    error_code is a stable reason (EventFull, DuplicateAttendee, ...) and
    details carries field lists or the offending value.
    """
    success: bool = False
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None
