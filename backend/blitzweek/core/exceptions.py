"""Domain exceptions raised by the registration and statistics services.

Each exception knows the HTTP status it maps to and the JSON payload the
API returns for it; ``blitzweek.main`` installs the handlers.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional


class RegistrationError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(RegistrationError):
    """Raised when a registration request fails field validation."""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["errors"] = self.errors
        return payload


class DuplicateRegistration(RegistrationError):
    """Raised when the LDAP ID or roll number is already registered."""

    status_code = 409
    message = "You have already registered for the event"

    def __init__(
        self,
        message: Optional[str] = None,
        registration_number: Optional[str] = None,
        registration_date: Optional[datetime] = None,
    ):
        super().__init__(message)
        self.registration_number = registration_number
        self.registration_date = registration_date

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.registration_number:
            payload["registrationNumber"] = self.registration_number
        if self.registration_date:
            payload["registrationDate"] = self.registration_date.isoformat()
        return payload


class NotFound(RegistrationError):
    """Raised when no registration matches a lookup."""

    status_code = 404
    message = "Registration not found"


class InvalidStatus(RegistrationError):
    status_code = 400
    message = "Invalid status"


class InvalidEvent(RegistrationError):
    status_code = 400
    message = "Invalid event name"


class InternalFailure(RegistrationError):
    """Raised for store faults. The detail is logged, never returned."""

    status_code = 500
    message = "Something went wrong. Please try again later."
