"""Endpoint configuration."""

from pydantic import BaseModel, ConfigDict


class Config(BaseModel):
    """
    Immutable endpoint configuration shared by REST and WebSocket clients.

    Example:
        ```python
        config = Config.testnet().with_recv_window(10000)
        ```
    """

    model_config = ConfigDict(frozen=True)

    rest_api_endpoint: str = "https://api.binance.com"
    ws_endpoint: str = "wss://stream.binance.com:9443"
    recv_window: int = 5000

    @classmethod
    def default(cls) -> "Config":
        """Production spot endpoints."""
        return cls()

    @classmethod
    def testnet(cls) -> "Config":
        """Spot testnet endpoints."""
        return cls(
            rest_api_endpoint="https://testnet.binance.vision",
            ws_endpoint="wss://testnet.binance.vision",
        )

    @classmethod
    def futures(cls) -> "Config":
        """Production USD-M futures endpoints."""
        return cls(
            rest_api_endpoint="https://fapi.binance.com",
            ws_endpoint="wss://fstream.binance.com",
        )

    @classmethod
    def futures_testnet(cls) -> "Config":
        """USD-M futures testnet endpoints."""
        return cls(
            rest_api_endpoint="https://testnet.binancefuture.com",
            ws_endpoint="wss://stream.binancefuture.com",
        )

    def with_rest_api_endpoint(self, rest_api_endpoint: str) -> "Config":
        return self.model_copy(update={"rest_api_endpoint": rest_api_endpoint})

    def with_ws_endpoint(self, ws_endpoint: str) -> "Config":
        return self.model_copy(update={"ws_endpoint": ws_endpoint})

    def with_recv_window(self, recv_window: int) -> "Config":
        return self.model_copy(update={"recv_window": recv_window})
