"""
Service layer exceptions

Each error carries a stable reason code that clients can switch on to show
a specific message, plus the HTTP status the API layer answers with.
"""

from typing import Any, List, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "ServiceError"
    status_code = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationFailedError(ServiceError):
    """Raised when required input is missing or out of range."""

    code = "ValidationFailed"

    def __init__(self, errors: List[str], message: str = "Validation failed"):
        self.errors = errors
        super().__init__(message, details=errors)


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    code = "NotFound"
    status_code = 404

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")


class EventFullError(ServiceError):
    code = "EventFull"

    def __init__(self, capacity: int):
        self.capacity = capacity
        super().__init__(
            f"Event is full ({capacity} attendees maximum)",
            details={"capacity": capacity},
        )


class DuplicateAttendeeError(ServiceError):
    code = "DuplicateAttendee"

    def __init__(self, phone: str):
        self.phone = phone
        super().__init__(
            f"A person with this phone number ({phone}) is already registered for this event",
            details={"phone": phone},
        )


class InvalidPhoneError(ServiceError):
    code = "InvalidPhone"

    def __init__(self, phone: str):
        self.phone = phone
        super().__init__("Please enter a valid phone number", details={"phone": phone})


class InvalidCredentialsError(ServiceError):
    """Same message whether the user is unknown or the password is wrong."""

    code = "InvalidCredentials"
    status_code = 401

    def __init__(self):
        super().__init__("Invalid username or password")


class StoreError(ServiceError):
    """Unexpected database failure. The message never includes driver detail."""

    code = "StoreError"
    status_code = 500

    def __init__(self, action: str = "complete the request"):
        self.action = action
        super().__init__(f"Failed to {action}")
