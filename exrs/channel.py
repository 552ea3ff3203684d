"""Single-producer, single-consumer event channel."""

import asyncio
from typing import Any, Generic, TypeVar

from .exceptions import ConsumerUnreachableError

E = TypeVar("E")

_CLOSED: Any = object()


class _State:
    def __init__(self, maxsize: int):
        self.queue: asyncio.Queue = asyncio.Queue(maxsize)
        self.receiver_closed = False
        self.closed = asyncio.Event()


class Sender(Generic[E]):
    """Producing half of a channel."""

    def __init__(self, state: _State):
        self._state = state

    async def send(self, event: E) -> None:
        """
        Queue an event, waiting for capacity on a bounded channel.

        Raises:
            ConsumerUnreachableError: Receiver has been closed
        """
        if self._state.receiver_closed:
            raise ConsumerUnreachableError("Event receiver is closed")
        await self._state.queue.put(event)
        if self._state.receiver_closed:
            # receiver went away while we were waiting for room
            raise ConsumerUnreachableError("Event receiver is closed")

    def is_closed(self) -> bool:
        return self._state.receiver_closed


class Receiver(Generic[E]):
    """Consuming half of a channel. Supports ``async for``."""

    def __init__(self, state: _State):
        self._state = state

    async def _next(self) -> Any:
        """Wait for an event, or return ``_CLOSED`` once ``close()`` runs."""
        if self._state.receiver_closed:
            return _CLOSED
        getter = asyncio.ensure_future(self._state.queue.get())
        closer = asyncio.ensure_future(self._state.closed.wait())
        try:
            await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closer.cancel()
            if not getter.done():
                getter.cancel()
        if self._state.receiver_closed or getter.cancelled():
            return _CLOSED
        return getter.result()

    async def recv(self) -> E:
        """
        Wait for the next event.

        Raises:
            ConsumerUnreachableError: Receiver was closed before an event arrived
        """
        event = await self._next()
        if event is _CLOSED:
            raise ConsumerUnreachableError("Event receiver is closed")
        return event

    def try_recv(self) -> E:
        """Return a queued event without waiting (raises ``asyncio.QueueEmpty``)."""
        return self._state.queue.get_nowait()

    def qsize(self) -> int:
        return self._state.queue.qsize()

    def close(self) -> None:
        """Drop the receiving side; further sends fail and pending reads end."""
        self._state.receiver_closed = True
        self._state.closed.set()
        # free capacity so a producer blocked on put() wakes up and sees the flag
        while not self._state.queue.empty():
            self._state.queue.get_nowait()

    def __aiter__(self) -> "Receiver[E]":
        return self

    async def __anext__(self) -> E:
        event = await self._next()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event


def channel(maxsize: int = 0) -> tuple[Sender[E], Receiver[E]]:
    """
    Create a connected sender/receiver pair.

    Args:
        maxsize: Capacity; 0 means unbounded

    Returns:
        (sender, receiver)
    """
    state = _State(maxsize)
    return Sender(state), Receiver(state)
