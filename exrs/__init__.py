"""Exchange REST and WebSocket client for Python."""

# Main unified client
from .sdk import ExchangeClient

# Individual clients
from .client import RestClient
from .websocket import WebSocketStream
from .connection import WebSocketConnection

# Building blocks
from .channel import Sender, Receiver, channel
from .classifier import classify_response, error_for_status
from .config import Config
from .logger import Logger, ConsoleLogger, NoopLogger, StdlibLogger, LogLevel
from .signer import sign, build_request, build_signed_request
from . import streams

# Types
from .types import (
    CombinedStreamEvent,
    ContentError,
    Frame,
    FrameKind,
    StreamState,
)

# Exceptions
from .exceptions import (
    ExchangeError,
    TransportError,
    TimeoutError,
    HandshakeError,
    APIError,
    UnauthorizedError,
    ServiceUnavailableError,
    InternalServerError,
    DomainError,
    InvalidPriceError,
    InvalidListenKeyError,
    UnknownStatusError,
    DecodeError,
    WebSocketError,
    ConnectionClosedError,
    StreamExhaustedError,
    NotConnectedError,
    AlreadyConnectedError,
    EventLoopRunningError,
    ConsumerUnreachableError,
)

__all__ = [
    # Main client
    "ExchangeClient",
    # Individual clients
    "RestClient",
    "WebSocketStream",
    "WebSocketConnection",
    # Building blocks
    "Sender",
    "Receiver",
    "channel",
    "classify_response",
    "error_for_status",
    "Config",
    "Logger",
    "ConsoleLogger",
    "NoopLogger",
    "StdlibLogger",
    "LogLevel",
    "sign",
    "build_request",
    "build_signed_request",
    "streams",
    # Types
    "CombinedStreamEvent",
    "ContentError",
    "Frame",
    "FrameKind",
    "StreamState",
    # Exceptions
    "ExchangeError",
    "TransportError",
    "TimeoutError",
    "HandshakeError",
    "APIError",
    "UnauthorizedError",
    "ServiceUnavailableError",
    "InternalServerError",
    "DomainError",
    "InvalidPriceError",
    "InvalidListenKeyError",
    "UnknownStatusError",
    "DecodeError",
    "WebSocketError",
    "ConnectionClosedError",
    "StreamExhaustedError",
    "NotConnectedError",
    "AlreadyConnectedError",
    "EventLoopRunningError",
    "ConsumerUnreachableError",
]

__version__ = "0.1.0"
