"""Duplex WebSocket connection exposing every protocol frame."""

import asyncio
from typing import Optional

import aiohttp

from .exceptions import HandshakeError, NotConnectedError, TransportError
from .logger import Logger, NoopLogger
from .types import Frame, FrameKind


DEFAULT_HANDSHAKE_TIMEOUT = 10.0


class WebSocketConnection:
    """
    Thin wrapper around one aiohttp WebSocket.

    Automatic ping replies and automatic close handling are disabled so ping
    and close frames reach the caller, which must answer pings itself.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[Logger] = None,
        handshake_timeout: float = DEFAULT_HANDSHAKE_TIMEOUT,
    ):
        self.logger = logger or NoopLogger()
        self.handshake_timeout = handshake_timeout
        self._session = session
        self._owns_session = session is None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    @property
    def closed(self) -> bool:
        return self._ws is None or self._ws.closed

    def _socket(self) -> aiohttp.ClientWebSocketResponse:
        if self._ws is None:
            raise NotConnectedError("WebSocket is not connected")
        return self._ws

    async def connect(self, url: str) -> None:
        """
        Perform the WebSocket upgrade handshake.

        Raises:
            HandshakeError: Upgrade failed for any reason
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True

        try:
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(
                    url,
                    autoping=False,
                    autoclose=False,
                    max_msg_size=0,
                ),
                self.handshake_timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            await self._close_session()
            raise HandshakeError(f"Error during handshake: {e}") from e

        self.logger.debug(f"WebSocket handshake complete: {url}")

    async def send_text(self, text: str) -> None:
        try:
            await self._socket().send_str(text)
        except (aiohttp.ClientError, ConnectionError) as e:
            raise TransportError(f"Failed to send text frame: {e}") from e

    async def send_pong(self, data: bytes = b"") -> None:
        try:
            await self._socket().pong(data)
        except (aiohttp.ClientError, ConnectionError) as e:
            raise TransportError(f"Failed to send pong: {e}") from e

    async def receive_frame(self) -> Optional[Frame]:
        """
        Wait for the next frame.

        Returns:
            The frame, or None when no further frames are possible

        Raises:
            TransportError: Read failed
        """
        ws = self._socket()
        try:
            msg = await ws.receive()
        except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError) as e:
            raise TransportError(f"Failed to read frame: {e}") from e

        if msg.type == aiohttp.WSMsgType.TEXT:
            return Frame(kind=FrameKind.TEXT, data=msg.data.encode("utf-8"))
        if msg.type == aiohttp.WSMsgType.BINARY:
            return Frame(kind=FrameKind.BINARY, data=msg.data)
        if msg.type == aiohttp.WSMsgType.PING:
            return Frame(kind=FrameKind.PING, data=msg.data or b"")
        if msg.type == aiohttp.WSMsgType.PONG:
            return Frame(kind=FrameKind.PONG, data=msg.data or b"")
        if msg.type == aiohttp.WSMsgType.CLOSE:
            reason = f"code={msg.data}"
            if msg.extra:
                reason = f"{reason} reason={msg.extra}"
            return Frame(kind=FrameKind.CLOSE, reason=reason)
        if msg.type == aiohttp.WSMsgType.ERROR:
            raise TransportError(f"WebSocket read error: {msg.data}")
        # CLOSING / CLOSED: the socket is done
        return None

    async def close(self) -> None:
        """Close the socket and, if owned, the session."""
        ws = self._socket()
        self._ws = None
        try:
            await ws.close()
        except (aiohttp.ClientError, ConnectionError) as e:
            raise TransportError(f"Failed to close WebSocket: {e}") from e
        finally:
            await self._close_session()

    async def _close_session(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None
