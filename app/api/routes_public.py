"""
Public diagnostic routes - no authentication required
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.services.event_service import EventService
from app.utils.clock import utc_now

router = APIRouter()

API_ENDPOINTS = {
    "GET /events": "Get all events",
    "GET /events/{id}": "Get single event by ID",
    "POST /events": "Create new event",
    "PUT /events/{id}": "Update event",
    "DELETE /events/{id}": "Delete event",
    "POST /events/{id}/attendees": "Join an event",
    "DELETE /events/{id}/attendees/{phoneOrName}": "Leave an event",
    "POST /auth/login": "Log in",
    "POST /auth/change-password": "Change password",
    "GET /health": "Health check",
    "GET /status": "Database status",
    "GET /db-integrity": "Database integrity check",
}

def _timestamp() -> str:
    return utc_now().isoformat() + "Z"

@router.get("/")
async def index():
    """API information"""
    return {
        "name": "Event Tracker API",
        "version": "1.0.0",
        "status": "Running",
        "timestamp": _timestamp(),
        "endpoints": API_ENDPOINTS,
    }

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "OK", "timestamp": _timestamp()}

@router.get("/status")
async def database_status(db: Session = Depends(get_db)):
    """Event and attendee totals"""
    return {"status": "OK", **EventService.get_statistics(db), "timestamp": _timestamp()}

@router.get("/db-integrity")
async def database_integrity(db: Session = Depends(get_db)):
    """Report orphaned attendees and per-event attendee counts"""
    return {
        "status": "OK",
        "integrity": EventService.check_integrity(db),
        "timestamp": _timestamp(),
    }
