"""
SchoolMap Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers in main.py translate them into the failure
       envelope with the matching HTTP status code.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    SchoolMapError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── DirectoryServiceError    → 500 (NEIS API failure)
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SchoolMapError(Exception):
    """
    Base exception for all SchoolMap application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SchoolMapError):
    """
    Raised when client input fails a business rule.

    Schema-level problems (missing body fields, wrong types) are reported by
    FastAPI's RequestValidationError, which main.py maps to the same 400
    response shape.
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


class AuthenticationError(SchoolMapError):
    """
    Raised when login credentials are rejected.

    The message is identical for an unknown login handle and a wrong password,
    so the response does not reveal whether the handle exists.
    """

    def __init__(
        self,
        message: str = "Invalid login ID or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SchoolMapError):
    """
    Raised when a requested resource does not exist.

    Services convert a missing row (None from SQLAlchemy) into this exception
    whenever the caller needs the record.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(SchoolMapError):
    """
    Raised when an insert hits a unique constraint (e.g. duplicate login ID).
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DirectoryServiceError(SchoolMapError):
    """
    Raised when the NEIS school directory API cannot be reached or answers
    with an error. Never retried.
    """

    def __init__(
        self,
        message: str = "The school directory service is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SchoolMapError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; statement and
    driver details are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
