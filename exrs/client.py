"""Authenticated REST client."""

import asyncio
import json
from functools import lru_cache
from typing import Any, Mapping, Optional, TypeVar

import aiohttp
from pydantic import TypeAdapter, ValidationError
from yarl import URL

from .classifier import classify_response
from .config import Config
from .exceptions import DecodeError, TransportError
from .exceptions import TimeoutError as RequestTimeoutError
from .logger import Logger, NoopLogger
from .signer import build_request, build_signed_request, sign

T = TypeVar("T")

USER_AGENT = "exrs"
API_KEY_HEADER = "X-MBX-APIKEY"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@lru_cache(maxsize=128)
def _adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def decode(body: str, model: Optional[Any] = None) -> Any:
    """
    Decode a JSON body, optionally validating it against ``model``.

    Raises:
        DecodeError: Body is not JSON or does not match the model
    """
    try:
        if model is None:
            return json.loads(body)
        return _adapter(model).validate_json(body)
    except (json.JSONDecodeError, ValidationError) as e:
        raise DecodeError(f"Failed to decode response: {e}") from e


class RestClient:
    """
    REST client for signed and public exchange endpoints.

    Calls are never retried: a signed request may already have been applied
    by the exchange when the transport fails.

    Example:
        ```python
        async with RestClient(api_key, secret_key, host=Config.testnet().rest_api_endpoint) as rest:
            query = build_signed_request({"symbol": "BTCUSDT"}, recv_window=5000)
            orders = await rest.get_signed_json("/api/v3/openOrders", query)
        ```
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        host: Optional[str] = None,
        timeout: float = 2.0,
        recv_window: Optional[int] = None,
        logger: Optional[Logger] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize REST client.

        Args:
            api_key: API key, only needed for signed/keyed endpoints
            secret_key: API secret used to sign requests
            host: REST base URL, production endpoint when omitted
            timeout: Total per-request timeout in seconds
            recv_window: Default recvWindow for the ``*_params`` helpers
            logger: Logger instance
            session: Externally managed aiohttp session
        """
        defaults = Config.default()
        self._api_key = api_key or ""
        self._secret_key = secret_key or ""
        self.host = (host or defaults.rest_api_endpoint).rstrip("/")
        self.timeout = timeout
        self.recv_window = recv_window if recv_window is not None else defaults.recv_window
        self.logger = logger or NoopLogger()

        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(
        cls,
        config: Config,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        **kwargs: Any,
    ) -> "RestClient":
        """Create a client bound to the REST endpoint and recvWindow of ``config``."""
        return cls(
            api_key=api_key,
            secret_key=secret_key,
            host=config.rest_api_endpoint,
            recv_window=config.recv_window,
            **kwargs,
        )

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    # ========================================================================
    # Request construction
    # ========================================================================

    def sign_request(self, endpoint: str, request: str) -> str:
        """Return the full URL for ``request`` with its signature appended."""
        signature = sign(request, self._secret_key)
        query = f"{request}&signature={signature}" if request else f"signature={signature}"
        return f"{self.host}{endpoint}?{query}"

    def build_headers(self, signed: bool, content_type: bool = False) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if content_type:
            headers["Content-Type"] = FORM_CONTENT_TYPE
        if signed:
            headers[API_KEY_HEADER] = self._api_key
        return headers

    def _public_url(self, endpoint: str, query: str = "") -> str:
        url = f"{self.host}{endpoint}"
        return f"{url}?{query}" if query else url

    # ========================================================================
    # Transport
    # ========================================================================

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[str] = None,
    ) -> str:
        path = url.split("?", 1)[0]
        self.logger.debug(f"{method} {path}")
        session = self._get_session()
        try:
            # encoded=True keeps the signed query byte-for-byte
            async with session.request(
                method,
                URL(url, encoded=True),
                headers=headers,
                data=body,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                status = response.status
                payload = await response.read()
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(f"{method} {path} timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        self.logger.debug(f"{method} {path} -> {status}")
        content = classify_response(status, payload)
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Response body is not valid UTF-8") from e

    async def signed_request(self, method: str, endpoint: str, request: str = "") -> str:
        """
        Send a signed request.

        Args:
            method: HTTP method
            endpoint: Path such as "/api/v3/order"
            request: Canonical query string; timestamping is the caller's job

        Returns:
            Response body text
        """
        method = method.upper()
        url = self.sign_request(endpoint, request)
        headers = self.build_headers(True, content_type=method in ("POST", "PUT"))
        return await self._send(method, url, headers)

    async def public_request(self, method: str, endpoint: str, query: str = "") -> str:
        """Send an unsigned request without the API key header."""
        method = method.upper()
        return await self._send(method, self._public_url(endpoint, query), self.build_headers(False))

    async def keyed_request(self, method: str, endpoint: str, body: Optional[str] = None) -> str:
        """Send an unsigned request carrying the API key (listen-key management)."""
        method = method.upper()
        headers = self.build_headers(True, content_type=body is not None)
        return await self._send(method, self._public_url(endpoint), headers, body=body)

    # ========================================================================
    # Convenience Methods
    # ========================================================================

    async def get_signed(self, endpoint: str, request: str = "") -> str:
        return await self.signed_request("GET", endpoint, request)

    async def post_signed(self, endpoint: str, request: str = "") -> str:
        return await self.signed_request("POST", endpoint, request)

    async def delete_signed(self, endpoint: str, request: str = "") -> str:
        return await self.signed_request("DELETE", endpoint, request)

    async def get(self, endpoint: str, query: str = "") -> str:
        return await self.public_request("GET", endpoint, query)

    async def post(self, endpoint: str) -> str:
        return await self.keyed_request("POST", endpoint)

    async def put(self, endpoint: str, listen_key: str) -> str:
        return await self.keyed_request("PUT", endpoint, body=f"listenKey={listen_key}")

    async def delete(self, endpoint: str, listen_key: str) -> str:
        return await self.keyed_request("DELETE", endpoint, body=f"listenKey={listen_key}")

    # ========================================================================
    # Decoding wrappers
    # ========================================================================

    async def get_signed_json(self, endpoint: str, request: str = "", model: Optional[type[T]] = None) -> Any:
        return decode(await self.get_signed(endpoint, request), model)

    async def post_signed_json(self, endpoint: str, request: str = "", model: Optional[type[T]] = None) -> Any:
        return decode(await self.post_signed(endpoint, request), model)

    async def delete_signed_json(self, endpoint: str, request: str = "", model: Optional[type[T]] = None) -> Any:
        return decode(await self.delete_signed(endpoint, request), model)

    async def get_json(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        model: Optional[type[T]] = None,
    ) -> Any:
        """GET a public endpoint and decode the JSON body."""
        return decode(await self.get(endpoint, build_request(params)), model)

    async def get_signed_params(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        model: Optional[type[T]] = None,
        recv_window: Optional[int] = None,
    ) -> Any:
        """Timestamp and sign ``params``, GET, then decode."""
        request = build_signed_request(params, self._window(recv_window))
        return await self.get_signed_json(endpoint, request, model)

    async def post_signed_params(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        model: Optional[type[T]] = None,
        recv_window: Optional[int] = None,
    ) -> Any:
        request = build_signed_request(params, self._window(recv_window))
        return await self.post_signed_json(endpoint, request, model)

    async def delete_signed_params(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        model: Optional[type[T]] = None,
        recv_window: Optional[int] = None,
    ) -> Any:
        request = build_signed_request(params, self._window(recv_window))
        return await self.delete_signed_json(endpoint, request, model)

    def _window(self, recv_window: Optional[int]) -> int:
        return self.recv_window if recv_window is None else recv_window
