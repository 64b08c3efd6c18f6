"""Lockout domain entity - failed-attempt counter and its state machine.

States per subject:

    Open --(failure, count < max)--> Open
    Open --(failure, count == max)--> Locked(until = now + lock_duration)
    Locked --(now >= until)--> Open(count = 0)      lazy, at next failure
    Open/Locked --(success)--> Open(count = 0)

Attempts made while Locked are refused before reaching this entity; a
failure that still arrives during an active lock leaves the record as is.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from tokenguard.domain.exceptions import InvalidEntityStateException


@dataclass(frozen=True)
class LockStatus:
    """Answer to "may this subject attempt to authenticate now?"."""

    locked: bool
    until: datetime | None = None
    remaining_seconds: int = 0

    @classmethod
    def open(cls) -> "LockStatus":
        return cls(locked=False)


@dataclass
class LockoutRecord:
    """
    Failed-login state for one subject.

    Mutated only by the lockout tracker that owns it, under that subject's
    lock.
    """

    subject_id: str
    failed_attempts: int = 0
    locked_until: datetime | None = None
    last_attempt_at: datetime | None = None

    def __post_init__(self):
        if not self.subject_id:
            raise InvalidEntityStateException("Lockout record requires a subject id.")

        if self.failed_attempts < 0:
            raise InvalidEntityStateException("Failed attempt count cannot be negative.")

    def is_locked_at(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until

    def status_at(self, now: datetime) -> LockStatus:
        """Lock status at ``now``; an elapsed lock reads as open."""
        if not self.is_locked_at(now):
            return LockStatus.open()

        assert self.locked_until is not None
        remaining = math.ceil((self.locked_until - now).total_seconds())
        return LockStatus(
            locked=True,
            until=self.locked_until,
            remaining_seconds=max(remaining, 1),
        )

    def register_failure(
        self,
        now: datetime,
        max_failed_attempts: int,
        lock_duration: timedelta,
        failure_window: timedelta,
    ) -> int:
        """
        Count one failed attempt and lock when the threshold is reached.

        Args:
            now: Current time
            max_failed_attempts: Failures that trigger a lock
            lock_duration: How long a triggered lock lasts
            failure_window: Failures further apart than this start a new count

        Returns:
            Consecutive failure count after this attempt
        """
        if self.is_locked_at(now):
            return self.failed_attempts

        lock_elapsed = self.locked_until is not None
        window_elapsed = (
            self.last_attempt_at is not None
            and now - self.last_attempt_at > failure_window
        )
        if lock_elapsed or window_elapsed:
            self.failed_attempts = 0
            self.locked_until = None

        self.failed_attempts += 1
        self.last_attempt_at = now

        if self.failed_attempts >= max_failed_attempts:
            self.locked_until = now + lock_duration

        return self.failed_attempts

    def is_idle_at(self, now: datetime, idle_after: timedelta) -> bool:
        """Idle records are not locked and have seen no attempt for ``idle_after``."""
        if self.is_locked_at(now):
            return False
        if self.last_attempt_at is None:
            return True
        return now - self.last_attempt_at > idle_after
