"""Periodic eviction of expired revocation entries and idle lockout records."""

import asyncio
import logging

from tokenguard.domain.exceptions import StoreUnavailableException
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker
from tokenguard.domain.repositories.revocation_store import IRevocationStore

logger = logging.getLogger(__name__)


class RevocationSweeper:
    """
    Background task that keeps the revocation store and lockout table bounded.

    Started and stopped by the application lifespan. A failed sweep is
    logged and the loop carries on at the next interval.
    """

    def __init__(
        self,
        revocation_store: IRevocationStore,
        lockout_tracker: ILockoutTracker,
        interval_seconds: float = 60.0,
    ):
        if interval_seconds <= 0:
            raise ValueError("Sweep interval must be positive")

        self._revocation_store = revocation_store
        self._lockout_tracker = lockout_tracker
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="revocation-sweeper")
        logger.info(f"Revocation sweeper started (every {self._interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Revocation sweeper stopped")

    async def sweep_once(self) -> tuple[int, int]:
        """
        Run one eviction pass.

        Returns:
            (revocation entries removed, lockout records removed)
        """
        revoked = await self._revocation_store.purge_expired()
        idle = await self._lockout_tracker.purge_idle()
        if revoked or idle:
            logger.info(f"Sweep removed {revoked} revocation entries and {idle} lockout records")
        return revoked, idle

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_seconds)
            try:
                await self.sweep_once()
            except StoreUnavailableException as exc:
                logger.error(f"Revocation sweep failed: {exc.message}")
