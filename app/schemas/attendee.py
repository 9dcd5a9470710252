"""
Attendee-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class AttendeeCreate(BaseModel):
    """Join request"""
    name: Optional[str] = None
    team: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None

class AttendeeResponse(BaseModel):
    """Attendee response schema"""
    id: int
    name: str
    team: str
    phone: str
    role: str
    joined_at: Optional[datetime] = Field(None, alias="joinedAt")
    join_order: int = Field(alias="joinOrder")

    class Config:
        from_attributes = True
        populate_by_name = True
