"""Per-card serialization of limit updates."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class CardLockRegistry:
    """One ``asyncio.Lock`` per card number.

    Feedback adjustments for the same card run one at a time; other cards
    and classification reads are not blocked. A card's lock is dropped once
    nobody holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, number: str) -> AsyncIterator[None]:
        lock = self._locks.get(number)
        if lock is None:
            lock = self._locks[number] = asyncio.Lock()
        self._holders[number] = self._holders.get(number, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[number] -= 1
            if self._holders[number] == 0:
                del self._holders[number]
                del self._locks[number]

    def is_locked(self, number: str) -> bool:
        lock = self._locks.get(number)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


card_locks = CardLockRegistry()
