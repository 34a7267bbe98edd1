"""Error taxonomy shared by the gateway, services and routes.

Every error carries the HTTP status it surfaces as. The app-level exception
handler renders them as ``{"status": "error", "message": ..., "details": ...}``.
"""

from typing import Any


class SmartRentError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class MissingCredential(SmartRentError):
    status_code = 401
    default_message = "Authentication token required"


class InvalidCredential(SmartRentError):
    status_code = 401
    default_message = "Invalid authentication token"


class UnregisteredPrincipal(SmartRentError):
    status_code = 404
    default_message = "User not found. Please complete registration."


class Forbidden(SmartRentError):
    status_code = 403
    default_message = "Access denied"


class NotFound(SmartRentError):
    status_code = 404
    default_message = "Not found"


class InvalidInput(SmartRentError):
    status_code = 400
    default_message = "Invalid input"


class InvalidTransition(SmartRentError):
    """Raised when a lease state transition is not allowed."""

    status_code = 400

    def __init__(self, current_status: str, target_status: str, reason: str | None = None):
        self.current_status = current_status
        self.target_status = target_status
        self.reason = reason or "transition is not allowed"
        super().__init__(
            f"Invalid transition from {current_status} to {target_status}: {self.reason}"
        )


class StorageUnavailable(SmartRentError):
    status_code = 500
    default_message = "Storage unavailable"
