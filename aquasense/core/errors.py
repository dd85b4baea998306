# aquasense/core/errors.py
"""
Error kinds surfaced by the data access layer and the domain services.

Firestore client exceptions are translated into three kinds (permission
denied, not found, transient network); routes map each kind to one HTTP
status through the handlers registered in create_app.
"""

import functools
import logging

from google.api_core import exceptions as gcp_exceptions

logger = logging.getLogger(__name__)


class AquaSenseError(Exception):
    """Base class for errors with an API error code."""
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "", error_code: str = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class DataAccessError(AquaSenseError):
    """Base class for errors raised while talking to the hosted database."""


class PermissionDeniedError(DataAccessError):
    status_code = 403
    error_code = "FORBIDDEN"


class NotFoundError(DataAccessError):
    status_code = 404
    error_code = "NOT_FOUND"


class TransientNetworkError(DataAccessError):
    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"


class InvalidStatusTransitionError(AquaSenseError):
    status_code = 409
    error_code = "INVALID_STATUS_TRANSITION"


class ConflictError(AquaSenseError):
    status_code = 409
    error_code = "CONFLICT"


_TRANSIENT_ERRORS = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.DeadlineExceeded,
    gcp_exceptions.InternalServerError,
    gcp_exceptions.TooManyRequests,
    gcp_exceptions.RetryError,
    ConnectionError,
    TimeoutError,
)


def translate_firestore_error(err: Exception, path: str = "") -> Exception:
    """Map a Firestore/transport exception onto one of the three data access kinds."""
    if isinstance(err, DataAccessError):
        return err
    if isinstance(err, (gcp_exceptions.PermissionDenied, gcp_exceptions.Unauthenticated)):
        return PermissionDeniedError(f"Permission denied for '{path}'")
    if isinstance(err, gcp_exceptions.NotFound):
        return NotFoundError(f"Document not found: '{path}'")
    if isinstance(err, _TRANSIENT_ERRORS):
        return TransientNetworkError(f"Database temporarily unavailable while accessing '{path}'")
    return err


def firestore_errors(func):
    """
    Decorator for repository methods whose first positional argument after
    self is the document/collection path.
    """
    @functools.wraps(func)
    def wrapper(self, path, *args, **kwargs):
        try:
            return func(self, path, *args, **kwargs)
        except Exception as e:
            translated = translate_firestore_error(e, path)
            if translated is e:
                raise
            logger.warning(f"Firestore call failed ({func.__name__} {path}): {e}")
            raise translated from e
    return wrapper


class FeedActionError(AquaSenseError):
    """The feeder device command could not be issued."""
    status_code = 502
    error_code = "FEED_ACTION_FAILED"


class AuthenticationError(AquaSenseError):
    status_code = 401
    error_code = "INVALID_ID_TOKEN"


class AccountDisabledError(AquaSenseError):
    status_code = 403
    error_code = "ACCOUNT_DISABLED"
