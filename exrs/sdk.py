"""Unified client sharing configuration between REST and WebSocket streams."""

from typing import Any, Optional

from .channel import Sender
from .client import RestClient
from .config import Config
from .logger import ConsoleLogger, Logger, LogLevel
from .websocket import WebSocketStream


class ExchangeClient:
    """
    Exchange client with one REST client and a factory for WebSocket streams.

    Example:
        ```python
        async with ExchangeClient(api_key, secret_key, config=Config.testnet()) as client:
            account = await client.rest.get_signed_params("/api/v3/account")

            sender, receiver = channel()
            stream = client.stream(dict[str, Any], sender)
            await stream.connect(trade_stream("BTCUSDT"))
        ```
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        config: Optional[Config] = None,
        timeout: float = 2.0,
        log_level: LogLevel = LogLevel.INFO,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key, omitted for public-only usage
            secret_key: API secret
            config: Endpoint configuration shared by REST and streams
            timeout: REST request timeout in seconds
            log_level: Minimum log level for the default console logger
            logger: Custom logger instance
        """
        self.config = config or Config.default()
        self.logger = logger or ConsoleLogger(level=log_level)
        self.rest = RestClient.from_config(
            self.config,
            api_key=api_key,
            secret_key=secret_key,
            timeout=timeout,
            logger=self.logger,
        )

    async def __aenter__(self) -> "ExchangeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def stream(self, event_type: Any, sender: Sender) -> WebSocketStream:
        """Create an unconnected stream bound to this client's configuration."""
        return WebSocketStream(event_type, sender, config=self.config, logger=self.logger)

    async def close(self) -> None:
        """Close the REST session. Streams are closed by their owners."""
        await self.rest.close()
