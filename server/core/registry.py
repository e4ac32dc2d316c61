from __future__ import annotations

import asyncio
import logging
from typing import List, Protocol

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Output side of a connection (asyncio.StreamWriter satisfies it)."""

    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...

    def is_closing(self) -> bool: ...


class BroadcastRegistry:
    """
    Process-wide set of connection sinks.

    Registration, deregistration and every fan-out write happen under one lock,
    so all peers observe broadcasts in the order `broadcast` was called. Sinks of
    dead peers are pruned the first time a write to them fails.
    """

    def __init__(self) -> None:
        self._sinks: List[Sink] = []
        self._lock = asyncio.Lock()

    async def register(self, sink: Sink) -> None:
        async with self._lock:
            if sink not in self._sinks:
                self._sinks.append(sink)

    async def deregister(self, sink: Sink) -> None:
        async with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    async def broadcast(self, frame: bytes) -> int:
        """Write `frame` to every sink; returns how many sinks received it."""
        async with self._lock:
            logger.debug("Broadcasting %s bytes to %s client(s)", len(frame), len(self._sinks))
            delivered = 0
            for sink in list(self._sinks):
                try:
                    await _write(sink, frame)
                except (ConnectionError, OSError) as exc:
                    logger.warning("Dropping sink after failed broadcast write: %s", exc)
                    self._sinks.remove(sink)
                    continue
                delivered += 1
            logger.debug("Broadcast delivered to %s client(s)", delivered)
            return delivered

    async def send_to(self, sink: Sink, frame: bytes) -> None:
        """Private write to a single sink; failures surface to the caller."""
        await _write(sink, frame)

    def __len__(self) -> int:
        return len(self._sinks)

    def __contains__(self, sink: object) -> bool:
        return sink in self._sinks


async def _write(sink: Sink, frame: bytes) -> None:
    if sink.is_closing():
        raise ConnectionResetError("Sink is closing")
    sink.write(frame)
    await sink.drain()


__all__ = ["BroadcastRegistry", "Sink"]
