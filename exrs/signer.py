"""Request signing and query-string construction."""

import hashlib
import hmac
import time
from enum import Enum
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode

BytesLike = Union[bytes, str]


def _to_bytes(value: BytesLike) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign(message: BytesLike, secret: BytesLike) -> str:
    """
    Compute the HMAC-SHA256 signature of a canonical request string.

    Args:
        message: Exact query string that will be sent
        secret: API secret key

    Returns:
        Lowercase hex digest
    """
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).hexdigest()


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_request(params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Build a URL-encoded query string, keeping the mapping's order.

    ``None`` values are skipped so optional parameters can be passed through.
    """
    if not params:
        return ""
    pairs = [(key, _format_value(value)) for key, value in params.items() if value is not None]
    return urlencode(pairs)


def build_signed_request(
    params: Optional[Mapping[str, Any]] = None,
    recv_window: int = 0,
    timestamp: Optional[int] = None,
) -> str:
    """
    Build a query string ready to be signed.

    Args:
        params: Endpoint parameters
        recv_window: Validity window in milliseconds, omitted when 0
        timestamp: Epoch milliseconds; defaults to the current time

    Returns:
        Query string including recvWindow and timestamp
    """
    query: dict[str, Any] = dict(params or {})
    if recv_window > 0:
        query["recvWindow"] = recv_window
    query["timestamp"] = timestamp if timestamp is not None else int(time.time() * 1000)
    return build_request(query)
