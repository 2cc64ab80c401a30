"""
BugLab Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for every error the services can raise.
How:   Each exception carries a user-facing message, an optional `details`
       string (returned only outside production) and a `context` dict that is
       logged but never returned. Global handlers in main.py map each class to
       its HTTP status code.
Who:   Raised by services and the transaction helper; caught by global handlers.

Exception Hierarchy:
    BugLabError (base)
    ├── ValidationError              → 400 Bad Request
    ├── InvalidStateError            → 400 Bad Request
    ├── InvalidCredentialsError      → 401 Unauthorized
    ├── AuthenticationRequiredError  → 401 Unauthorized
    ├── NotFoundError                → 404 Not Found
    ├── ConflictError                → 409 Conflict
    └── DatabaseError                → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BugLabError(Exception):
    """
    Base exception for all BugLab application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        details:  Extra human-readable detail, returned only outside production
        context:  Debug info for the logs (never returned to the client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BugLabError):
    """
    Raised when client input is missing or malformed.

    When:  Missing name/email/password, bad email shape, short password,
           bug fields absent.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, details=details, context=ctx)
        self.field = field


class InvalidStateError(BugLabError):
    """
    Raised when an operation is valid in shape but not for the entity's state.

    When:  Setting a password on a Scientist that has no linked User.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Operation not allowed in the current state",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class InvalidCredentialsError(BugLabError):
    """
    Raised by login for an unknown email or a wrong password.

    The message is identical for both cases.
    HTTP:  401 Unauthorized
    """

    status_code = 401

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid credentials", context=context)


class AuthenticationRequiredError(BugLabError):
    """
    Raised when a session-protected route has no valid session.

    HTTP:  401 Unauthorized
    """

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message)


class NotFoundError(BugLabError):
    """
    Raised when a referenced entity id does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so the handler can answer 404.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(BugLabError):
    """
    Raised on uniqueness violations and assignment state conflicts.

    When:  Email already taken, pair already assigned, pair not assigned, or a
           unique/primary-key constraint fired inside a transaction.
    HTTP:  409 Conflict
    """

    status_code = 409

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class DatabaseError(BugLabError):
    """
    Raised when the store fails unexpectedly.

    The message returned to the client is always generic; the underlying error
    is logged server-side and only exposed as `details` outside production.
    HTTP:  500 Internal Server Error
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)
