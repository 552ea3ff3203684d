"""Tests for request signing and query construction."""

import pytest
from exrs import sign, build_request, build_signed_request
from exrs.types import FrameKind

# Example published in the Binance API documentation
DOC_SECRET = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
DOC_QUERY = (
    "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1&price=0.1"
    "&recvWindow=5000&timestamp=1499827319559"
)
DOC_SIGNATURE = "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


class TestSign:
    """Test HMAC signing."""

    def test_known_vector(self):
        """Test against the documented signature."""
        assert sign(DOC_QUERY, DOC_SECRET) == DOC_SIGNATURE

    def test_bytes_and_str_agree(self):
        """Test that bytes and str inputs sign identically."""
        assert sign(DOC_QUERY.encode(), DOC_SECRET.encode()) == sign(DOC_QUERY, DOC_SECRET)

    @pytest.mark.parametrize(
        "message",
        ["", "symbol=BTCUSDT", "symbol=BTCUSDT&timestamp=1", DOC_QUERY],
    )
    def test_deterministic(self, message):
        """Test that identical inputs give identical signatures."""
        assert sign(message, "secret") == sign(message, "secret")

    @pytest.mark.parametrize(
        "message",
        ["symbol=BTCUSDT", "symbol=BTCUSDT&timestamp=1", DOC_QUERY],
    )
    def test_changing_one_byte_changes_signature(self, message):
        """Test sensitivity to both message and secret."""
        flipped = message[:-1] + chr(ord(message[-1]) ^ 1)
        assert sign(flipped, "secret") != sign(message, "secret")
        assert sign(message, "secres") != sign(message, "secret")

    def test_hex_format(self):
        """Test the signature is a 64 character lowercase hex string."""
        signature = sign("a=1", "b")
        assert len(signature) == 64
        assert signature == signature.lower()
        int(signature, 16)


class TestBuildRequest:
    """Test query string construction."""

    def test_empty(self):
        """Test empty and missing params."""
        assert build_request() == ""
        assert build_request({}) == ""

    def test_keeps_order_and_skips_none(self):
        """Test ordering and None filtering."""
        query = build_request({"symbol": "BTCUSDT", "orderId": None, "limit": 5})
        assert query == "symbol=BTCUSDT&limit=5"

    def test_encodes_values(self):
        """Test values are URL-encoded."""
        assert build_request({"symbols": '["BTCUSDT","ETHUSDT"]'}) == (
            "symbols=%5B%22BTCUSDT%22%2C%22ETHUSDT%22%5D"
        )

    def test_bool_and_enum_values(self):
        """Test booleans and str enums are rendered as plain values."""
        assert build_request({"flag": True, "kind": FrameKind.TEXT}) == "flag=true&kind=text"

    def test_signed_request(self):
        """Test recvWindow and timestamp are appended."""
        query = build_signed_request({"symbol": "LTCBTC"}, recv_window=5000, timestamp=1499827319559)
        assert query == "symbol=LTCBTC&recvWindow=5000&timestamp=1499827319559"

    def test_signed_request_without_window(self):
        """Test recvWindow is omitted when zero."""
        query = build_signed_request(None, recv_window=0, timestamp=42)
        assert query == "timestamp=42"

    def test_signed_request_default_timestamp(self):
        """Test that a timestamp is generated when none is given."""
        query = build_signed_request({"symbol": "BTCUSDT"})
        key, value = query.split("&")[-1].split("=")
        assert key == "timestamp"
        assert int(value) > 1_500_000_000_000

    def test_does_not_mutate_params(self):
        """Test the input mapping is left untouched."""
        params = {"symbol": "BTCUSDT"}
        build_signed_request(params, recv_window=5000, timestamp=1)
        assert params == {"symbol": "BTCUSDT"}
