"""Lockout tracker interface - domain layer abstraction.

Owns the failed-login counters. Every login attempt reads it before the
credential check and writes it after.
"""

from abc import ABC, abstractmethod

from tokenguard.domain.entities.lockout import LockoutRecord, LockStatus


class ILockoutTracker(ABC):
    """
    Interface for per-subject failed-attempt tracking.

    Increment-and-check must be atomic per subject: concurrent failures
    against the same account may not lose updates.
    """

    @abstractmethod
    async def record_failure(self, subject_id: str) -> int:
        """
        Count a failed attempt, locking the subject at the threshold.

        Args:
            subject_id: Login identifier the attempt was made for

        Returns:
            Consecutive failure count after this attempt

        Raises:
            StoreUnavailableException: If the backing store cannot be reached
        """
        pass

    @abstractmethod
    async def record_success(self, subject_id: str) -> None:
        """
        Reset the subject after a successful authentication.

        Args:
            subject_id: Login identifier that authenticated
        """
        pass

    @abstractmethod
    async def is_locked(self, subject_id: str) -> LockStatus:
        """
        Report whether the subject is currently locked.

        Args:
            subject_id: Login identifier to check

        Returns:
            LockStatus with the lock end and remaining seconds when locked

        Raises:
            StoreUnavailableException: If the backing store cannot be reached
        """
        pass

    @abstractmethod
    async def get_record(self, subject_id: str) -> LockoutRecord | None:
        """
        Return a copy of the subject's record (admin/diagnostic use).

        Args:
            subject_id: Login identifier

        Returns:
            LockoutRecord if the subject has one, None otherwise
        """
        pass

    @abstractmethod
    async def purge_idle(self) -> int:
        """
        Drop unlocked records that saw no attempt for the idle period.

        Returns:
            Number of records removed
        """
        pass
