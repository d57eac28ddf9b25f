"""
LinkUp Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for each failure a handler can report.
Why:   Services raise by meaning (not found, conflict, bad credentials) and the
       global handlers in main.py decide status codes and response bodies.
How:   Each exception carries a user-safe message and an optional context dict
       that is logged but never returned to the client.

Exception Hierarchy:
    LinkUpError (base)
    ├── ValidationError           → 400 Bad Request (missing/invalid input)
    ├── InvalidCredentialsError   → 400 Bad Request (same shape for both causes)
    ├── ConflictError             → 400 Bad Request (duplicate email or link)
    ├── AuthenticationError       → 401 Unauthorized (missing/bad bearer token)
    ├── PermissionDeniedError     → 403 Forbidden
    ├── NotFoundError             → 404 Not Found
    ├── UploadError               → 400 {success: false, ...}
    │   └── FileStorageError      → 400 {success: false, ...}
    └── DatabaseError             → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class LinkUpError(Exception):
    """
    Base exception for all LinkUp application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(LinkUpError):
    """
    Raised when client input fails validation.

    When:    Missing query parameter, malformed identifier, bad request body.
    HTTP:    400 Bad Request

    FastAPI's own RequestValidationError is mapped to the same 400 response so
    clients see one shape for every "fix your input" failure.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidCredentialsError(LinkUpError):
    """
    Raised by login for an unknown email or a wrong password.

    Both causes share one message so the response cannot be used to probe
    which emails are registered.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid Credentials", context=context)


class ConflictError(LinkUpError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Registering an email that exists; linking an ordered pair twice.
    HTTP:    400 Bad Request (the public contract predates a 409)
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(LinkUpError):
    """Bearer token missing, malformed, expired or signed with another secret."""

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(LinkUpError):
    """Authenticated caller is not allowed to act on the resource."""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(LinkUpError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so the 404 is decided in one place. `message` overrides the
    generated text when the public contract fixes the wording.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UploadError(LinkUpError):
    """
    Raised when an upload is rejected.

    HTTP:    400 with the upload endpoint's own body shape:
             {"success": false, "message": ..., "error": ...}
    `error` is optional detail text; it is omitted from the body when None.
    """

    def __init__(
        self,
        message: str = "Failed to upload image",
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.error = error


class FileStorageError(UploadError):
    """
    Raised when writing the uploaded file to disk fails.

    When:    Disk full, permission denied, directory not writable, I/O error.
    The upload contract reports storage failures as a 400, not a 500.
    """

    def __init__(
        self,
        message: str = "Failed to upload image",
        error: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error=error, context=context)


class DatabaseError(LinkUpError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The client always gets a generic message; the SQLAlchemy error text stays
    in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
