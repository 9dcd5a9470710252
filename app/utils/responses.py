"""
Standardized response utilities
"""

from typing import Any, Optional
from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from app.schemas.common import StandardResponse, ErrorResponse

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=data
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=status_code
    )

def unauthorized_error(message: str = "Unauthorized"):
    """Create unauthorized error"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message
    )
