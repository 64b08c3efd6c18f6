"""Store doubles whose backend is down."""

from datetime import datetime

from tokenguard.domain.entities.lockout import LockoutRecord, LockStatus
from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason
from tokenguard.domain.exceptions import StoreUnavailableException
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker
from tokenguard.domain.repositories.revocation_store import IRevocationStore


class UnavailableRevocationStore(IRevocationStore):
    """Every operation raises StoreUnavailableException."""

    async def revoke_token(
        self, token_id: str, expires_at: datetime, reason: str = RevocationReason.LOGOUT
    ) -> bool:
        raise StoreUnavailableException()

    async def revoke_all_for_subject(
        self,
        subject_id: str,
        since: datetime | None = None,
        reason: str = RevocationReason.ADMIN,
    ) -> RevocationEntry:
        raise StoreUnavailableException()

    async def is_revoked(self, token_id: str, subject_id: str, issued_at: datetime) -> bool:
        raise StoreUnavailableException()

    async def get_entry(self, token_id: str) -> RevocationEntry | None:
        raise StoreUnavailableException()

    async def purge_expired(self) -> int:
        raise StoreUnavailableException()


class UnavailableLockoutTracker(ILockoutTracker):
    """Every operation raises StoreUnavailableException."""

    async def record_failure(self, subject_id: str) -> int:
        raise StoreUnavailableException()

    async def record_success(self, subject_id: str) -> None:
        raise StoreUnavailableException()

    async def is_locked(self, subject_id: str) -> LockStatus:
        raise StoreUnavailableException()

    async def get_record(self, subject_id: str) -> LockoutRecord | None:
        raise StoreUnavailableException()

    async def purge_idle(self) -> int:
        raise StoreUnavailableException()
