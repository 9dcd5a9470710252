"""
Authentication API routes
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse
from app.services.auth_service import AuthService
from app.utils.responses import success_response

router = APIRouter()

@router.post("/login")
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db)
):
    """Log in with username and password"""
    profile = AuthService.authenticate(db, credentials.username, credentials.password)
    response = LoginResponse(
        success=True,
        message="Login successful",
        user=profile.model_dump(by_alias=True, mode="json")
    )
    return JSONResponse(content=response.model_dump(mode="json"))

@router.post("/change-password")
async def change_password(
    request: ChangePasswordRequest,
    db: Session = Depends(get_db)
):
    """Replace a user's password"""
    profile = AuthService.change_password(db, request.user_id, request.new_password)
    return success_response(
        message="Password changed successfully",
        data={"user": profile.model_dump(by_alias=True, mode="json")}
    )
