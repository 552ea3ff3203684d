"""Tests for the REST client against a local aiohttp server."""

import asyncio
import json

import pytest
from aiohttp import web
from aiohttp import test_utils
from pydantic import BaseModel

from exrs import (
    Config,
    DecodeError,
    InvalidPriceError,
    RestClient,
    ServiceUnavailableError,
    TimeoutError,
    TransportError,
    UnauthorizedError,
    build_request,
    sign,
)

API_KEY = "test-key"
SECRET = "test-secret"


class ServerTime(BaseModel):
    serverTime: int


class Recorder:
    """Captures requests seen by the test server."""

    def __init__(self):
        self.requests: list[dict] = []

    async def record(self, request: web.Request) -> dict:
        entry = {
            "method": request.method,
            "path": request.path,
            "query": request.rel_url.raw_query_string,
            "headers": request.headers,
            "body": await request.text(),
        }
        self.requests.append(entry)
        return entry


def make_app(recorder: Recorder) -> web.Application:
    async def echo(request):
        await recorder.record(request)
        return web.json_response({"serverTime": 1499827319559})

    async def status(request):
        await recorder.record(request)
        code = int(request.match_info["code"])
        body = request.rel_url.query.get("body", "")
        return web.Response(status=code, text=body, content_type="application/json")

    async def slow(request):
        await asyncio.sleep(0.5)
        return web.json_response({})

    async def garbage(request):
        return web.Response(text="not json")

    async def binary(request):
        return web.Response(body=b"\xff\xfe\xfd")

    app = web.Application()
    app.router.add_route("*", "/echo", echo)
    app.router.add_route("*", "/status/{code}", status)
    app.router.add_get("/slow", slow)
    app.router.add_get("/garbage", garbage)
    app.router.add_get("/binary", binary)
    return app


def run_with_server(scenario, timeout: float = 2.0):
    """Start a local server and run ``scenario(rest, recorder)`` against it."""
    recorder = Recorder()

    async def main():
        async with test_utils.TestServer(make_app(recorder)) as server:
            host = f"http://{server.host}:{server.port}"
            async with RestClient(API_KEY, SECRET, host=host, timeout=timeout) as rest:
                await scenario(rest, recorder)

    asyncio.run(main())
    return recorder


class TestSignedRequests:
    """Test signed request construction on the wire."""

    def test_signed_get(self):
        """Test signature, API key and user agent."""
        request = "symbol=BTCUSDT&timestamp=1"

        async def scenario(rest, recorder):
            body = await rest.get_signed("/echo", request)
            assert json.loads(body) == {"serverTime": 1499827319559}

        recorder = run_with_server(scenario)
        seen = recorder.requests[0]
        assert seen["method"] == "GET"
        assert seen["query"] == f"{request}&signature={sign(request, SECRET)}"
        assert seen["headers"]["X-MBX-APIKEY"] == API_KEY
        assert seen["headers"]["User-Agent"] == "exrs"
        assert "Content-Type" not in seen["headers"]

    def test_signed_bytes_are_sent_unchanged(self):
        """Test that an encoded query reaches the server exactly as signed."""
        request = build_request({"symbols": '["BTCUSDT","ETHUSDT"]', "timestamp": 7})

        async def scenario(rest, recorder):
            await rest.get_signed("/echo", request)

        recorder = run_with_server(scenario)
        assert recorder.requests[0]["query"] == f"{request}&signature={sign(request, SECRET)}"

    def test_empty_signed_request(self):
        async def scenario(rest, recorder):
            await rest.delete_signed("/echo")

        recorder = run_with_server(scenario)
        assert recorder.requests[0]["method"] == "DELETE"
        assert recorder.requests[0]["query"] == f"signature={sign('', SECRET)}"

    def test_signed_post_has_content_type(self):
        async def scenario(rest, recorder):
            await rest.post_signed("/echo", "symbol=BTCUSDT&timestamp=1")

        recorder = run_with_server(scenario)
        seen = recorder.requests[0]
        assert seen["method"] == "POST"
        assert seen["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    def test_signed_params_decode_model(self):
        """Test the params helper timestamps, signs and decodes."""

        async def scenario(rest, recorder):
            result = await rest.get_signed_params("/echo", {"symbol": "BTCUSDT"}, model=ServerTime)
            assert result == ServerTime(serverTime=1499827319559)

        recorder = run_with_server(scenario)
        query = recorder.requests[0]["query"]
        assert query.startswith("symbol=BTCUSDT&recvWindow=5000&timestamp=")
        unsigned, signature = query.rsplit("&signature=", 1)
        assert signature == sign(unsigned, SECRET)


class TestUnsignedRequests:
    """Test public and API-key-only requests."""

    def test_public_get(self):
        async def scenario(rest, recorder):
            data = await rest.get_json("/echo", {"symbol": "BTCUSDT"})
            assert data["serverTime"] == 1499827319559

        recorder = run_with_server(scenario)
        seen = recorder.requests[0]
        assert seen["query"] == "symbol=BTCUSDT"
        assert "X-MBX-APIKEY" not in seen["headers"]
        assert "signature" not in seen["query"]

    def test_listen_key_put(self):
        async def scenario(rest, recorder):
            await rest.put("/echo", "abc123")

        recorder = run_with_server(scenario)
        seen = recorder.requests[0]
        assert seen["method"] == "PUT"
        assert seen["body"] == "listenKey=abc123"
        assert seen["headers"]["X-MBX-APIKEY"] == API_KEY
        assert seen["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert seen["query"] == ""

    def test_listen_key_post(self):
        async def scenario(rest, recorder):
            await rest.post("/echo")

        recorder = run_with_server(scenario)
        assert recorder.requests[0]["headers"]["X-MBX-APIKEY"] == API_KEY


class TestFailures:
    """Test error mapping through the transport."""

    def test_domain_error(self):
        body = json.dumps({"code": -1013, "msg": "Invalid price."})

        async def scenario(rest, recorder):
            with pytest.raises(InvalidPriceError):
                await rest.get("/status/400", build_request({"body": body}))

        run_with_server(scenario)

    @pytest.mark.parametrize(
        "code, error",
        [(401, UnauthorizedError), (503, ServiceUnavailableError)],
    )
    def test_status_errors(self, code, error):
        async def scenario(rest, recorder):
            with pytest.raises(error):
                await rest.get_signed(f"/status/{code}", "timestamp=1")

        run_with_server(scenario)

    def test_timeout(self):
        async def scenario(rest, recorder):
            with pytest.raises(TimeoutError):
                await rest.get("/slow")

        run_with_server(scenario, timeout=0.1)

    def test_timeout_is_transport_error(self):
        assert issubclass(TimeoutError, TransportError)

    def test_connection_refused(self):
        async def main():
            async with RestClient(host="http://127.0.0.1:1", timeout=1.0) as rest:
                with pytest.raises(TransportError):
                    await rest.get("/api/v3/ping")

        asyncio.run(main())

    def test_decode_error(self):
        async def scenario(rest, recorder):
            with pytest.raises(DecodeError):
                await rest.get_json("/garbage")
            with pytest.raises(DecodeError):
                await rest.get_signed_json("/echo", "timestamp=1", model=list[int])

        run_with_server(scenario)

    def test_non_utf8_body(self):
        async def scenario(rest, recorder):
            with pytest.raises(DecodeError):
                await rest.get("/binary")

        run_with_server(scenario)


class TestClientConfig:
    """Test construction from a Config."""

    def test_from_config(self):
        config = Config.testnet().with_recv_window(10000)
        rest = RestClient.from_config(config, api_key="k", secret_key="s")
        assert rest.host == "https://testnet.binance.vision"
        assert rest.recv_window == 10000

    def test_sign_request_url(self):
        rest = RestClient(secret_key=SECRET, host="https://api.example.com/")
        url = rest.sign_request("/api/v3/order", "a=1")
        assert url == f"https://api.example.com/api/v3/order?a=1&signature={sign('a=1', SECRET)}"
