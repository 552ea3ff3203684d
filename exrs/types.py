"""Type definitions for exrs."""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

E = TypeVar("E")


# ============================================================================
# Enums
# ============================================================================


class FrameKind(str, Enum):
    """WebSocket frame kinds surfaced by a connection."""

    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"


class StreamState(str, Enum):
    """Lifecycle of a WebSocket stream."""

    IDLE = "idle"
    CONNECTED = "connected"
    RUNNING = "running"
    STOPPED = "stopped"
    DISCONNECTED = "disconnected"


# ============================================================================
# Transport Models
# ============================================================================


class Frame(BaseModel):
    """A single inbound WebSocket frame."""

    model_config = ConfigDict(frozen=True)

    kind: FrameKind
    data: bytes = b""
    reason: Optional[str] = None

    @classmethod
    def text(cls, data: "bytes | str") -> "Frame":
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(kind=FrameKind.TEXT, data=data)

    @classmethod
    def ping(cls, data: bytes = b"") -> "Frame":
        return cls(kind=FrameKind.PING, data=data)

    @classmethod
    def close(cls, reason: Optional[str] = None) -> "Frame":
        return cls(kind=FrameKind.CLOSE, reason=reason)


class ContentError(BaseModel):
    """Error body returned by the exchange on a rejected request."""

    code: int
    msg: str


# ============================================================================
# WebSocket Message Models
# ============================================================================


class CombinedStreamEvent(BaseModel, Generic[E]):
    """Envelope of a combined-stream payload: ``{"stream": ..., "data": ...}``."""

    stream: str
    data: E
