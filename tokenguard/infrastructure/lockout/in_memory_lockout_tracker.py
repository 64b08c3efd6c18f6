"""In-memory lockout tracker implementation.

One LockoutRecord per login identifier, mutated under that identifier's
lock so concurrent failures never lose an increment. Records that have been
idle (unlocked, no attempt for ``idle_ttl``) are dropped by ``purge_idle``.
"""

import logging
from dataclasses import replace
from datetime import timedelta

from tokenguard.domain.entities.lockout import LockoutRecord, LockStatus
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker
from tokenguard.domain.services.clock import IClock
from tokenguard.infrastructure.concurrency.keyed_lock import KeyedLock

logger = logging.getLogger(__name__)


class InMemoryLockoutTracker(ILockoutTracker):
    """Per-process failed-attempt counters."""

    def __init__(
        self,
        clock: IClock,
        max_failed_attempts: int = 5,
        lockout_duration: timedelta = timedelta(minutes=15),
        failure_window: timedelta = timedelta(minutes=15),
        idle_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        if max_failed_attempts < 1:
            raise ValueError("max_failed_attempts must be at least 1")
        if lockout_duration <= timedelta(0):
            raise ValueError("lockout_duration must be positive")

        self._clock = clock
        self._max_failed_attempts = max_failed_attempts
        self._lockout_duration = lockout_duration
        self._failure_window = failure_window
        self._idle_ttl = idle_ttl

        self._records: dict[str, LockoutRecord] = {}
        self._locks = KeyedLock()

    async def record_failure(self, subject_id: str) -> int:
        async with self._locks.acquire(subject_id):
            record = self._records.get(subject_id)
            if record is None:
                record = LockoutRecord(subject_id=subject_id)
                self._records[subject_id] = record

            now = self._clock.now()
            was_locked = record.is_locked_at(now)
            count = record.register_failure(
                now,
                max_failed_attempts=self._max_failed_attempts,
                lock_duration=self._lockout_duration,
                failure_window=self._failure_window,
            )

            if not was_locked and record.is_locked_at(now):
                logger.warning(
                    f"Locked {subject_id!r} after {count} failed attempts "
                    f"until {record.locked_until.isoformat()}"
                )
            return count

    async def record_success(self, subject_id: str) -> None:
        async with self._locks.acquire(subject_id):
            self._records.pop(subject_id, None)

    async def is_locked(self, subject_id: str) -> LockStatus:
        record = self._records.get(subject_id)
        if record is None:
            return LockStatus.open()
        return record.status_at(self._clock.now())

    async def get_record(self, subject_id: str) -> LockoutRecord | None:
        record = self._records.get(subject_id)
        return replace(record) if record is not None else None

    async def purge_idle(self) -> int:
        now = self._clock.now()
        idle = [s for s, r in self._records.items() if r.is_idle_at(now, self._idle_ttl)]
        for subject_id in idle:
            del self._records[subject_id]

        if idle:
            logger.debug(f"Purged {len(idle)} idle lockout records")
        return len(idle)
