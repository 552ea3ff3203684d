"""WebSocket streaming engine with a typed, cooperative event loop."""

import asyncio
import json
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Protocol, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .channel import Sender
from .config import Config
from .connection import WebSocketConnection
from .exceptions import (
    AlreadyConnectedError,
    ConnectionClosedError,
    DecodeError,
    EventLoopRunningError,
    ExchangeError,
    NotConnectedError,
    StreamExhaustedError,
)
from .logger import Logger, NoopLogger
from .streams import combined_stream
from .types import FrameKind, StreamState

E = TypeVar("E")

WS_ENDPOINT = "ws"
COMBINED_ENDPOINT = "stream"


class RunningFlag(Protocol):
    """Anything with ``is_set()``: ``asyncio.Event``, ``threading.Event``."""

    def is_set(self) -> bool: ...


class WebSocketStream(Generic[E]):
    """
    One WebSocket connection plus an event loop that decodes inbound text
    frames into ``event_type`` and forwards them through a channel.

    The loop never reconnects or retries. Any fatal condition is raised to
    the caller, which may build a new stream and connect again.

    Example:
        ```python
        sender, receiver = channel()
        stream = WebSocketStream(dict[str, Any], sender, Config.default())
        await stream.connect(agg_trade_stream("BTCUSDT"))

        running = asyncio.Event()
        running.set()
        await stream.run_event_loop(running)
        ```
    """

    def __init__(
        self,
        event_type: Any,
        sender: Sender[E],
        config: Optional[Config] = None,
        logger: Optional[Logger] = None,
        connection_factory: Optional[Callable[[], WebSocketConnection]] = None,
    ):
        """
        Initialize a stream.

        Args:
            event_type: Decode target for text frames (pydantic model, dataclass,
                TypedDict, ``dict[str, Any]``...)
            sender: Producing half of the event channel
            config: Endpoint configuration, production endpoints when omitted
            logger: Logger instance
            connection_factory: Builds the connection on ``connect``
        """
        self.event_type = event_type
        self.sender = sender
        self.config = config or Config.default()
        self.logger = logger or NoopLogger()
        self._adapter: TypeAdapter = TypeAdapter(event_type)
        self._connection_factory = connection_factory or (lambda: WebSocketConnection(logger=self.logger))

        self.connection: Optional[WebSocketConnection] = None
        self.state = StreamState.IDLE

    @property
    def is_connected(self) -> bool:
        return self.connection is not None

    # ========================================================================
    # Connection lifecycle
    # ========================================================================

    async def connect(self, endpoint: str) -> None:
        """Connect to ``{ws_endpoint}/ws/{endpoint}``."""
        await self.connect_url(f"{self.config.ws_endpoint}/{WS_ENDPOINT}/{endpoint}")

    async def connect_combined(self, streams: Iterable[str]) -> None:
        """Connect to a combined stream; payloads arrive as ``{"stream", "data"}``."""
        url = f"{self.config.ws_endpoint}/{COMBINED_ENDPOINT}?streams={combined_stream(streams)}"
        await self.connect_url(url)

    async def connect_url(self, url: str) -> None:
        """
        Open a connection to ``url``.

        Raises:
            AlreadyConnectedError: A connection is already live
            HandshakeError: Upgrade failed; the stream stays unconnected
        """
        if self.connection is not None:
            raise AlreadyConnectedError("Stream already has a live connection")

        connection = self._connection_factory()
        self.logger.debug(f"Connecting to {url}...")
        await connection.connect(url)

        self.connection = connection
        self.state = StreamState.CONNECTED
        self.logger.info(f"WebSocket connected: {url}")

    async def disconnect(self) -> None:
        """
        Close the connection.

        Raises:
            NotConnectedError: There is no connection to close
        """
        if self.connection is None:
            raise NotConnectedError("Not able to close the connection")

        connection = self.connection
        self.connection = None
        self.state = StreamState.DISCONNECTED
        await connection.close()
        self.logger.info("WebSocket disconnected")

    async def subscribe(self, message: Union[str, Mapping[str, Any]]) -> None:
        """
        Send a control frame such as a subscribe request.

        Args:
            message: Raw JSON text, or a mapping serialized to JSON
        """
        if self.connection is None:
            raise NotConnectedError("Cannot send a control frame without a connection")

        text = message if isinstance(message, str) else json.dumps(message)
        self.logger.debug(f"Sending control frame: {text}")
        await self.connection.send_text(text)

    # ========================================================================
    # Event loop
    # ========================================================================

    def _decode(self, data: bytes) -> E:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"Failed to decode event: {e}") from e

    async def run_event_loop(self, running: RunningFlag) -> None:
        """
        Process frames until ``running`` is cleared or the stream ends.

        ``running`` is checked before every receive; it cannot interrupt a read
        already in progress. Call ``disconnect()`` from another task for that.
        A read that comes back empty because of ``disconnect()`` ends the loop
        normally; any other empty read is fatal, whatever the flag says.

        Raises:
            NotConnectedError: No connection to read from
            EventLoopRunningError: Another event loop is reading this stream
            DecodeError: A text frame did not match ``event_type``
            ConsumerUnreachableError: The event receiver is gone
            ConnectionClosedError: Peer sent a close frame
            StreamExhaustedError: Connection ended without a close frame
            TransportError: Read or pong failed
        """
        if self.connection is None:
            raise NotConnectedError("Cannot run the event loop without a connection")
        if self.state is StreamState.RUNNING:
            raise EventLoopRunningError("Event loop is already running on this stream")

        self.state = StreamState.RUNNING
        try:
            while running.is_set():
                connection = self.connection
                if connection is None:
                    return

                frame = await connection.receive_frame()
                if frame is None:
                    if self.connection is None:
                        # disconnect() unblocked the read
                        return
                    raise StreamExhaustedError("WebSocket stream ended unexpectedly")

                self.logger.debug(f"event_loop frame - {frame.kind.value} ({len(frame.data)} bytes)")

                if frame.kind is FrameKind.TEXT:
                    if not frame.data:
                        self.logger.info("Empty text frame, ending event loop")
                        return
                    event = self._decode(frame.data)
                    await self.sender.send(event)
                elif frame.kind is FrameKind.PING:
                    await connection.send_pong(frame.data)
                elif frame.kind is FrameKind.CLOSE:
                    raise ConnectionClosedError(frame.reason)

                await asyncio.sleep(0)
        except ExchangeError as e:
            self.logger.error(f"Event loop stopped: {e}")
            raise
        finally:
            if self.state is StreamState.RUNNING:
                self.state = StreamState.STOPPED
