"""Mapping of HTTP responses onto the exrs error taxonomy."""

from typing import Optional

from pydantic import ValidationError

from .exceptions import (
    DomainError,
    ExchangeError,
    InternalServerError,
    InvalidListenKeyError,
    InvalidPriceError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownStatusError,
)
from .types import ContentError

INVALID_PRICE_CODE = -1013
INVALID_PRICE_MESSAGE = "Invalid price."
INVALID_LISTEN_KEY_CODE = -1125


def content_error(error: ContentError, status: int = 400) -> DomainError:
    """Promote known (code, message) pairs to dedicated error kinds."""
    if error.code == INVALID_PRICE_CODE and error.msg == INVALID_PRICE_MESSAGE:
        return InvalidPriceError(error.code, error.msg, status=status)
    if error.code == INVALID_LISTEN_KEY_CODE:
        return InvalidListenKeyError(error.code, error.msg, status=status)
    return DomainError(error.code, error.msg, status=status)


def error_for_status(status: int, body: bytes = b"") -> Optional[ExchangeError]:
    """
    Classify a response without raising.

    Args:
        status: HTTP status code
        body: Raw response body

    Returns:
        None for a 2xx status, otherwise the error describing the failure
    """
    if 200 <= status < 300:
        return None
    if status == 401:
        return UnauthorizedError()
    if status == 503:
        return ServiceUnavailableError()
    if 500 <= status < 600:
        return InternalServerError(status)
    if 400 <= status < 500:
        try:
            error = ContentError.model_validate_json(body)
        except ValidationError:
            return UnknownStatusError(status, "unreadable error body")
        return content_error(error, status=status)
    return UnknownStatusError(status)


def classify_response(status: int, body: bytes = b"") -> bytes:
    """Return the body of a successful response or raise its error."""
    error = error_for_status(status, body)
    if error is not None:
        raise error
    return body
