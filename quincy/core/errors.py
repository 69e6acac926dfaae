from functools import wraps

from sqlalchemy.exc import InterfaceError, OperationalError


class QuincyError(Exception):
    """Base class for domain errors raised by Quincy services."""

    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(QuincyError):
    """Malformed input, rejected before touching the store."""

    status_code = 400


class NotFoundError(QuincyError):
    """Target row does not exist or does not belong to the caller."""

    status_code = 404


class TransientStoreError(QuincyError):
    """Network or database failure; the caller may retry."""

    status_code = 503


class NotifierError(QuincyError):
    """A notification could not be delivered. Logged, never propagated."""


class UpstreamServiceError(QuincyError):
    """A third-party API is unconfigured or failed; the caller may retry."""

    status_code = 503


class ProgressNotResolved(ValueError):
    """A loading progress snapshot was fed to the access gate."""


def store_call(func):
    """Translate driver level failures into TransientStoreError."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            raise TransientStoreError(f"Store unavailable: {e.__class__.__name__}") from e

    return wrapper
