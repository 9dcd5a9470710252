"""
Event Tracker - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.core.config import settings
from app.core.db import SessionLocal, init_db
from app.api import routes_auth, routes_events, routes_public
from app.services.auth_service import AuthService
from app.services.exceptions import ServiceError
from app.utils.responses import error_response
from app.utils.security import SecureTransportMiddleware

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Create database tables
    init_db()
    logger.info("Database tables created")

    db = SessionLocal()
    try:
        AuthService.ensure_default_admin(db)
    finally:
        db.close()

    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Event Tracker",
    description="Event registration backend with capacity-limited attendee rosters",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Redirect to HTTPS when enforced, security headers on every response
app.add_middleware(SecureTransportMiddleware, enforce_https=settings.ENFORCE_HTTPS)

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render service errors with their stable reason code"""
    return error_response(
        message=exc.message,
        error_code=exc.code,
        details=exc.details,
        status_code=exc.status_code
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Wrong-typed request fields get the same 400 ValidationFailed envelope"""
    fields = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ())[1:]]
        field = ".".join(location) or "body"
        if field not in fields:
            fields.append(field)
    logger.info(f"Rejected {request.method} {request.url.path}: invalid fields {fields}")
    return error_response(
        message=f"Invalid fields: {', '.join(fields)}",
        error_code="ValidationFailed",
        details=fields,
        status_code=400
    )

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_events.router, tags=["events"])
app.include_router(routes_auth.router, prefix="/auth", tags=["auth"])

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
