from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, List

from shared.protocol.constants import DEFAULT_HISTORY_SIZE


class HistoryBuffer:
    """Bounded FIFO of recent chat lines served by READ."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._entries: Deque[str] = deque()
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    async def append(self, text: str) -> None:
        async with self._lock:
            self._entries.append(text)
            if len(self._entries) > self._capacity:
                self._entries.popleft()

    async def snapshot(self) -> List[str]:
        """Point-in-time copy, oldest first."""
        async with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
