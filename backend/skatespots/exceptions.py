"""
SkateSpots Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error cases the API knows about.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into JSON
       responses; the context is logged, never returned to the client.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    SkateSpotsError (base)       → 500
    ├── ValidationError          → 400 Bad Request (missing query parameters)
    ├── NotFoundError            → 404 Not Found (spot, image index, image file)
    ├── GeocodingError           → 500 (upstream geocoder unreachable or malformed)
    ├── DatabaseError            → 500 (store read/write failed)
    └── FileStorageError         → 500 (upload could not be written)

Unparsable `coords` on spot creation has no exception: it is logged and
stored as an empty point.
"""

from typing import Any, Dict, Optional


class SkateSpotsError(Exception):
    """
    Base exception for all SkateSpots application errors.

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


class ValidationError(SkateSpotsError):
    """
    Raised when the client left out something the request needs.

    When:    GET /api/reverse without `lat` or `lon`.
    HTTP:    400 Bad Request
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


class NotFoundError(SkateSpotsError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown spot ID, image index out of range, image file missing on disk.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class GeocodingError(SkateSpotsError):
    """
    Raised when the reverse-geocoding service fails.

    When:    Network error, timeout, non-2xx status or a body that is not JSON.
    HTTP:    500 Internal Server Error

    The upstream error text is kept in `context` for the logs only.
    """

    def __init__(
        self,
        message: str = "Could not resolve a city for the given coordinates",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SkateSpotsError):
    """
    Raised when a store operation fails.

    When:    Connection missing or lost, malformed spot ID, a value the
             column types cannot hold, any SQLAlchemy error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(SkateSpotsError):
    """
    Raised when an uploaded image cannot be written to the upload directory.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
