"""
HTTP-level tests for the event, attendee and auth routes
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

import app.utils.security as security
from app.core.config import settings
from app.core.db import Base, get_db
from app.models import Attendee, Event
from app.services.auth_service import AuthService
from app.services.repositories import AttendeeRepo
from app.utils.security import SecureTransportMiddleware
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_api.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db_session, monkeypatch):
    """Test client bound to the test database, without the startup hooks"""
    monkeypatch.setattr(settings, "ADMIN_TOKEN", None)
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

def create_event(client, **overrides):
    payload = {
        "title": "Summer Picnic",
        "description": "Food and frisbee",
        "date": "2025-06-01",
        "time": "12:00",
        "location": "Riverside Park",
    }
    payload.update(overrides)
    response = client.post("/events", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]

def join(client, event_id, name, phone, team="Blue"):
    return client.post(f"/events/{event_id}/attendees", json={
        "name": name, "team": team, "phone": phone
    })

def test_health_and_index(client):
    assert client.get("/health").json()["status"] == "OK"
    index = client.get("/").json()
    assert "GET /events" in index["endpoints"]

def test_security_headers_are_set(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"

def test_create_event_uses_camel_case(client):
    event = create_event(client, maxAttendees=5)
    assert event["maxAttendees"] == 5
    assert event["capacity"] == 5
    assert event["status"] == "planned"
    assert event["computedStatus"] in ("scheduled", "happening", "finished")
    assert event["attendees"] == []
    assert "createdAt" in event and "updatedAt" in event

def test_create_event_validation_lists_fields(client):
    response = client.post("/events", json={"title": "", "description": "?"})
    body = response.json()

    assert response.status_code == 400
    assert body["success"] is False
    assert body["error_code"] == "ValidationFailed"
    assert "Event title is required" in body["details"]
    assert "Event location is required" in body["details"]

def test_get_missing_event_is_404(client):
    response = client.get("/events/999")
    assert response.status_code == 404
    assert response.json()["error_code"] == "NotFound"

def test_join_flow_with_reason_codes(client):
    event = create_event(client, maxAttendees=2)

    first = join(client, event["id"], "A", "+15551234567")
    assert first.status_code == 201
    assert first.json()["data"]["attendees"][0]["joinOrder"] == 1

    duplicate = join(client, event["id"], "A again", "+15551234567")
    assert duplicate.status_code == 400
    assert duplicate.json()["error_code"] == "DuplicateAttendee"

    bad_phone = join(client, event["id"], "B", "123")
    assert bad_phone.json()["error_code"] == "InvalidPhone"

    missing = client.post(f"/events/{event['id']}/attendees", json={"name": "B"})
    assert missing.json()["error_code"] == "ValidationFailed"
    assert missing.json()["details"] == ["team", "phone"]

    second = join(client, event["id"], "B", "+15551234568")
    assert second.json()["data"]["isFull"] is True

    full = join(client, event["id"], "C", "+15551234569")
    assert full.status_code == 400
    assert full.json()["error_code"] == "EventFull"

    left = client.delete(f"/events/{event['id']}/attendees/+15551234567")
    assert left.status_code == 200
    assert [a["name"] for a in left.json()["data"]["attendees"]] == ["B"]

    rejoin = join(client, event["id"], "C", "+15551234569")
    assert [a["joinOrder"] for a in rejoin.json()["data"]["attendees"]] == [2, 3]

def test_leave_unknown_attendee_is_404(client):
    event = create_event(client)
    response = client.delete(f"/events/{event['id']}/attendees/nobody")
    assert response.status_code == 404

def test_update_ignores_attendee_payload(client):
    event = create_event(client)
    join(client, event["id"], "Alice", "+15551234567")

    response = client.put(f"/events/{event['id']}", json={
        "title": "Autumn Picnic",
        "attendees": [],
    })
    data = response.json()["data"]

    assert response.status_code == 200
    assert data["title"] == "Autumn Picnic"
    assert data["location"] == "Riverside Park"
    assert [a["name"] for a in data["attendees"]] == ["Alice"]

def test_update_missing_event_is_404(client):
    response = client.put("/events/999", json={"title": "Ghost"})
    assert response.status_code == 404

def test_delete_event(client):
    event = create_event(client)
    join(client, event["id"], "Alice", "+15551234567")

    response = client.delete(f"/events/{event['id']}")
    assert response.status_code == 200
    assert client.get(f"/events/{event['id']}").status_code == 404
    assert client.delete(f"/events/{event['id']}").status_code == 404

    integrity = client.get("/db-integrity").json()["integrity"]
    assert integrity["totalAttendees"] == 0
    assert integrity["orphanedAttendees"] == 0

def test_list_events_with_status_filter(client):
    create_event(client, title="Long Ago", date="2000-01-01")
    create_event(client, title="Far Future", date="2999-01-01")

    everything = client.get("/events").json()["data"]
    assert [e["title"] for e in everything] == ["Long Ago", "Far Future"]

    finished = client.get("/events", params={"status": "finished"}).json()["data"]
    assert [e["title"] for e in finished] == ["Long Ago"]

    assert client.get("/events", params={"status": "bogus"}).status_code == 400

def test_status_counts(client):
    event = create_event(client)
    join(client, event["id"], "Alice", "+15551234567")
    body = client.get("/status").json()
    assert body["totalEvents"] == 1
    assert body["totalAttendees"] == 1

def test_admin_token_guards_event_management(client, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_TOKEN", "s3cret")
    payload = {"title": "T", "date": "2025-06-01", "time": "10:00", "location": "L"}

    assert client.post("/events", json=payload).status_code == 401
    assert client.post(
        "/events", json=payload, headers={"Authorization": "Bearer wrong"}
    ).status_code == 401
    assert client.post(
        "/events", json=payload, headers={"Authorization": "Bearer s3cret"}
    ).status_code == 201

def test_login_and_change_password(client, db_session):
    admin = AuthService.ensure_default_admin(db_session)

    response = client.post("/auth/login", json={
        "username": settings.DEFAULT_ADMIN_USERNAME,
        "password": settings.DEFAULT_ADMIN_PASSWORD,
    })
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["user"]["username"] == settings.DEFAULT_ADMIN_USERNAME
    assert "passwordHash" not in body["user"]

    short = client.post("/auth/change-password", json={"userId": admin.id, "newPassword": "short"})
    assert short.status_code == 400

    changed = client.post("/auth/change-password", json={"userId": admin.id, "newPassword": "much-longer-pass"})
    assert changed.status_code == 200
    assert changed.json()["data"]["user"]["mustChangePassword"] is False

def test_login_failures_look_the_same(client, db_session):
    AuthService.ensure_default_admin(db_session)

    wrong = client.post("/auth/login", json={"username": settings.DEFAULT_ADMIN_USERNAME, "password": "nope"})
    unknown = client.post("/auth/login", json={"username": "ghost", "password": "nope"})

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert wrong.json()["error_code"] == "InvalidCredentials"

def test_https_redirect_when_enforced():
    secure_app = FastAPI()
    secure_app.add_middleware(SecureTransportMiddleware, enforce_https=True)

    @secure_app.get("/ping")
    async def ping():
        return {"pong": True}

    client = TestClient(secure_app)
    redirected = client.get("/ping", follow_redirects=False)
    assert redirected.status_code == 301
    assert redirected.headers["location"].startswith("https://")

    forwarded = client.get("/ping", headers={"X-Forwarded-Proto": "https"})
    assert forwarded.status_code == 200
    assert "Strict-Transport-Security" in forwarded.headers

def test_wrong_typed_join_field_is_validation_failed(client):
    event = create_event(client)
    response = client.post(f"/events/{event['id']}/attendees", json={
        "name": "A", "team": "Blue", "phone": 15551234567
    })
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "ValidationFailed"
    assert body["details"] == ["phone"]

def test_wrong_typed_max_attendees_is_validation_failed(client, db_session):
    response = client.post("/events", json={
        "title": "Summer Picnic",
        "date": "2025-06-01",
        "time": "12:00",
        "location": "Riverside Park",
        "maxAttendees": "lots",
    })
    assert response.status_code == 400
    assert response.json()["error_code"] == "ValidationFailed"
    assert response.json()["details"] == ["maxAttendees"]
    assert db_session.query(Event).count() == 0

def test_overlong_phone_is_invalid_phone(client):
    event = create_event(client)
    response = join(client, event["id"], "A", "+1" + "5" * 30)
    assert response.status_code == 400
    assert response.json()["error_code"] == "InvalidPhone"

def test_store_failure_hides_driver_detail(client, db_session, monkeypatch):
    event = create_event(client)

    def failing_create(db, **fields):
        raise OperationalError("INSERT INTO attendees", {}, Exception("disk I/O error at /var/lib/secret.db"))

    monkeypatch.setattr(AttendeeRepo, "create", staticmethod(failing_create))
    response = join(client, event["id"], "A", "+15551234567")

    assert response.status_code == 500
    body = response.json()
    assert body["error_code"] == "StoreError"
    assert body["message"] == "Failed to join event"
    assert body["details"] is None
    assert "secret" not in response.text
    assert "INSERT" not in response.text
    assert db_session.query(Attendee).count() == 0
