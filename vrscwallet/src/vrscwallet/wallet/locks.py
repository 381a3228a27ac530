"""
Per-address spend locks.

Two concurrent spends from the same address could select the same UTXOs and
produce conflicting transactions. A spend holds the address lock from coin
selection until broadcast has returned or failed.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger


class SpendLockRegistry:
    """One asyncio.Lock per source address."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get_lock(self, address: str) -> asyncio.Lock:
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        return lock

    def is_locked(self, address: str) -> bool:
        lock = self._locks.get(address)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, address: str) -> AsyncIterator[None]:
        lock = self.get_lock(address)
        if lock.locked():
            logger.debug(f"Waiting for in-flight spend from {address}")
        async with lock:
            yield
