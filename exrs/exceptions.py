"""Exception hierarchy for the exrs client."""

from typing import Optional


class ExchangeError(Exception):
    """Base class for every error raised by exrs."""


# ============================================================================
# Transport
# ============================================================================


class TransportError(ExchangeError):
    """Network-level failure: connect, send, receive."""


class TimeoutError(TransportError):
    """Request did not complete within the configured timeout."""


class HandshakeError(TransportError):
    """WebSocket upgrade was rejected or could not be negotiated."""


# ============================================================================
# HTTP responses
# ============================================================================


class APIError(ExchangeError):
    """Exchange answered with a non-success HTTP status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class UnauthorizedError(APIError):
    """Credentials were rejected."""

    def __init__(self):
        super().__init__("Unauthorized", status=401)


class ServiceUnavailableError(APIError):
    """Exchange reported it is temporarily unavailable."""

    def __init__(self):
        super().__init__("Service unavailable", status=503)


class InternalServerError(APIError):
    """Exchange failed internally (5xx)."""

    def __init__(self, status: int = 500):
        super().__init__("Internal server error", status=status)


class DomainError(APIError):
    """
    Request rejected by the exchange with an error body.

    Attributes:
        code: Exchange error code (e.g. -1121)
        message: Exchange error message, verbatim
    """

    def __init__(self, code: int, message: str, status: int = 400):
        super().__init__(f"Exchange error {code}: {message}", status=status)
        self.code = code
        self.message = message


class InvalidPriceError(DomainError):
    """Order price was rejected by the exchange filters."""


class InvalidListenKeyError(DomainError):
    """Listen key does not exist or has expired."""


class UnknownStatusError(APIError):
    """Status code outside the handled set, or an unreadable error body."""

    def __init__(self, status: int, detail: str = ""):
        message = f"Received response: {status}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, status=status)
        self.detail = detail


# ============================================================================
# Payloads
# ============================================================================


class DecodeError(ExchangeError):
    """Payload did not match the expected shape."""


# ============================================================================
# Streaming
# ============================================================================


class WebSocketError(ExchangeError):
    """Streaming protocol violation."""


class ConnectionClosedError(WebSocketError):
    """Peer sent a close frame."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(f"Disconnected: {reason or 'no reason given'}")
        self.reason = reason


class StreamExhaustedError(WebSocketError):
    """Connection yielded no further frames without a close frame."""


class NotConnectedError(WebSocketError):
    """Operation needs a live connection but there is none."""


class AlreadyConnectedError(WebSocketError):
    """A live connection already exists for this stream."""


class EventLoopRunningError(WebSocketError):
    """An event loop is already reading from this stream."""


class ConsumerUnreachableError(ExchangeError):
    """The receiving side of the event channel is gone."""
