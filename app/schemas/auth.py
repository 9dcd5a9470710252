"""
Authentication Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class LoginRequest(BaseModel):
    username: str
    password: str

class ChangePasswordRequest(BaseModel):
    user_id: int = Field(alias="userId")
    new_password: str = Field(alias="newPassword")

    class Config:
        populate_by_name = True

class UserProfile(BaseModel):
    """User profile returned on login; never carries the password hash"""
    id: int
    username: str
    role: str
    name: Optional[str] = None
    phone: Optional[str] = None
    must_change_password: bool = Field(False, alias="mustChangePassword")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        from_attributes = True
        populate_by_name = True

class LoginResponse(BaseModel):
    success: bool
    message: str
    user: Optional[dict] = None
