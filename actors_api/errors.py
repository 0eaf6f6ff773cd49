"""
Error taxonomy shared by the store, scraper, service and HTTP layers.

Every exception carries an ErrorKind; the HTTP boundary maps the kind to a
status code, so no layer below it knows about HTTP.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    UNAUTHENTICATED = "unauthenticated"
    INTERNAL = "internal"


class ActorsApiError(Exception):
    """Base exception for all anticipated application errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ActorsApiError):
    """Bad input shape or value (blank name, out-of-range pagination)."""

    kind = ErrorKind.VALIDATION


class NotFoundError(ActorsApiError):
    """Referenced actor id is absent."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(ActorsApiError):
    """Rank uniqueness would be violated."""

    kind = ErrorKind.CONFLICT


class UpstreamFetchError(ActorsApiError):
    """The provider page could not be fetched or parsed."""

    kind = ErrorKind.UPSTREAM

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to fetch {url}: {message}")


class UnauthenticatedError(ActorsApiError):
    """Missing or invalid bearer credential."""

    kind = ErrorKind.UNAUTHENTICATED


_ERRORS_BY_KIND = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.UNAUTHENTICATED: UnauthenticatedError,
}


def error_for_kind(kind: ErrorKind, message: str) -> ActorsApiError:
    """Build the exception matching an error kind carried by a service result."""
    error_cls = _ERRORS_BY_KIND.get(kind, ActorsApiError)
    return error_cls(message)
