from typing import Any, Mapping, Optional


class SmartPlatesError(Exception):
    """Base class for errors raised by SmartPlates services.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, ids)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(SmartPlatesError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(SmartPlatesError):
    """Raised when a requested meal plan or recipe was not found."""

    http_status = 404
    default_message = "Not found"


class ConflictError(SmartPlatesError):
    """Raised when a resource conflict occurs (e.g. a second plan for the same week)."""

    http_status = 409
    default_message = "Conflict"


class UnauthorizedError(SmartPlatesError):
    """Raised when a caller touches plans that belong to another user."""

    http_status = 401
    default_message = "Unauthorized"


class ForbiddenError(SmartPlatesError):
    """Raised when a request names plans that are missing or owned by someone else."""

    http_status = 403
    default_message = "Forbidden"


class RemoteStoreError(SmartPlatesError):
    """Raised by the meal plan store client when a request fails.

    ``status_code`` is the HTTP status returned by the store, or None when the
    request never got a response (connection refused, timeout).
    """

    http_status = 502
    default_message = "Meal plan store request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message, details=details, code=code)
        self.status_code = status_code
