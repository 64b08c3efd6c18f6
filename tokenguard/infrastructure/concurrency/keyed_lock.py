"""Per-key asyncio locks.

Serializes work on the same key (a token id, a subject id) while letting
unrelated keys proceed in parallel. Locks are created on first use and
dropped when the last holder or waiter leaves, so the registry only ever
holds keys that are being worked on right now.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """
    Registry of asyncio.Lock instances keyed by string.

    Usage:
        locks = KeyedLock()
        async with locks.acquire("subject:alice"):
            ...  # read-modify-write for alice only
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        # Holders + waiters per key; the lock is dropped when this reaches zero
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._locks)
