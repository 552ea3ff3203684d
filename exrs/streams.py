"""Stream name builders and subscription control messages."""

import json
from typing import Iterable


def all_ticker_stream() -> str:
    return "!ticker@arr"


def ticker_stream(symbol: str) -> str:
    return f"{symbol.lower()}@ticker"


def agg_trade_stream(symbol: str) -> str:
    return f"{symbol.lower()}@aggTrade"


def trade_stream(symbol: str) -> str:
    return f"{symbol.lower()}@trade"


def kline_stream(symbol: str, interval: str) -> str:
    return f"{symbol.lower()}@kline_{interval}"


def book_ticker_stream(symbol: str) -> str:
    return f"{symbol.lower()}@bookTicker"


def all_book_ticker_stream() -> str:
    return "!bookTicker"


def all_mini_ticker_stream() -> str:
    return "!miniTicker@arr"


def mini_ticker_stream(symbol: str) -> str:
    return f"{symbol.lower()}@miniTicker"


def partial_book_depth_stream(symbol: str, levels: int, update_speed: int) -> str:
    """
    Top-of-book depth stream.

    Args:
        symbol: Market symbol
        levels: 5, 10 or 20
        update_speed: 1000 or 100 (milliseconds)
    """
    if levels not in (5, 10, 20):
        raise ValueError(f"levels must be 5, 10 or 20, got {levels}")
    if update_speed not in (100, 1000):
        raise ValueError(f"update_speed must be 100 or 1000, got {update_speed}")
    return f"{symbol.lower()}@depth{levels}@{update_speed}ms"


def diff_book_depth_stream(symbol: str, update_speed: int) -> str:
    """Incremental depth stream; ``update_speed`` is 1000 or 100 (milliseconds)."""
    if update_speed not in (100, 1000):
        raise ValueError(f"update_speed must be 100 or 1000, got {update_speed}")
    return f"{symbol.lower()}@depth@{update_speed}ms"


def combined_stream(streams: Iterable[str]) -> str:
    return "/".join(streams)


def subscribe_message(streams: Iterable[str], request_id: int = 1) -> str:
    """JSON control frame subscribing to ``streams`` on an open connection."""
    return json.dumps({"method": "SUBSCRIBE", "params": list(streams), "id": request_id})


def unsubscribe_message(streams: Iterable[str], request_id: int = 1) -> str:
    return json.dumps({"method": "UNSUBSCRIBE", "params": list(streams), "id": request_id})
