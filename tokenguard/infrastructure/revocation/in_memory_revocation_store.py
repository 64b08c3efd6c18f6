"""In-memory revocation store implementation.

This is an INFRASTRUCTURE detail. The domain layer (IRevocationStore
interface) defines WHAT we need (a blacklist with read-after-write
visibility and bounded size), while this implementation defines HOW we do
it (two dictionaries guarded by per-key asyncio locks).

Dependency flow:
    TokenEngine (application) → IRevocationStore (domain) ← InMemoryRevocationStore (infrastructure)

This implementation:
1. Keeps revoked token ids only until the token would have expired
2. Keeps one epoch per subject for "revoke everything" instead of one entry per token
3. Serializes writes per key, never across unrelated keys
4. Evicts on a periodic sweep and opportunistically on lookup

Suitable for single-process deployments. For several workers sharing one
blacklist use RedisRevocationStore.
"""

import logging
from datetime import datetime, timedelta

from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason
from tokenguard.domain.repositories.revocation_store import IRevocationStore
from tokenguard.domain.services.clock import IClock
from tokenguard.infrastructure.concurrency.keyed_lock import KeyedLock

logger = logging.getLogger(__name__)


class InMemoryRevocationStore(IRevocationStore):
    """
    In-process blacklist.

    Reads take no lock: each lookup is a single dictionary access that
    cannot interleave with a write on the event loop. Writes hold the lock
    of their own key so a check-and-insert is atomic for that key.
    """

    def __init__(self, clock: IClock, max_token_lifetime: timedelta) -> None:
        """
        Initialize in-memory storage.

        Args:
            clock: Time source for revocation timestamps and eviction
            max_token_lifetime: Longest lifetime of any token (the refresh
                TTL); a subject epoch is evictable this long after it was set
        """
        self._clock = clock
        self._max_token_lifetime = max_token_lifetime

        # token_id -> entry
        self._tokens: dict[str, RevocationEntry] = {}

        # subject_id -> epoch entry
        self._subjects: dict[str, RevocationEntry] = {}

        self._locks = KeyedLock()

    async def revoke_token(
        self,
        token_id: str,
        expires_at: datetime,
        reason: str = RevocationReason.LOGOUT,
    ) -> bool:
        async with self._locks.acquire(f"token:{token_id}"):
            now = self._clock.now()
            existing = self._tokens.get(token_id)
            if existing is not None and not existing.is_expired_at(now):
                return False

            self._tokens[token_id] = RevocationEntry(
                token_id=token_id,
                revoked_at=now,
                expires_at=expires_at,
                reason=reason,
            )
            return True

    async def revoke_all_for_subject(
        self,
        subject_id: str,
        since: datetime | None = None,
        reason: str = RevocationReason.ADMIN,
    ) -> RevocationEntry:
        async with self._locks.acquire(f"subject:{subject_id}"):
            now = self._clock.now()
            epoch = since or now

            existing = self._subjects.get(subject_id)
            if (
                existing is not None
                and not existing.is_expired_at(now)
                and existing.revoked_at >= epoch
            ):
                return existing

            entry = RevocationEntry(
                subject_id=subject_id,
                revoked_at=epoch,
                expires_at=epoch + self._max_token_lifetime,
                reason=reason,
            )
            self._subjects[subject_id] = entry
            return entry

    async def is_revoked(
        self, token_id: str, subject_id: str, issued_at: datetime
    ) -> bool:
        now = self._clock.now()

        entry = self._tokens.get(token_id)
        if entry is not None:
            if not entry.is_expired_at(now):
                return True
            # Lazy eviction: the token is past its own expiry
            self._tokens.pop(token_id, None)

        epoch = self._subjects.get(subject_id)
        if epoch is not None:
            if epoch.is_expired_at(now):
                self._subjects.pop(subject_id, None)
            elif epoch.covers(issued_at):
                return True

        return False

    async def get_entry(self, token_id: str) -> RevocationEntry | None:
        entry = self._tokens.get(token_id)
        if entry is None or entry.is_expired_at(self._clock.now()):
            return None
        return entry

    async def purge_expired(self) -> int:
        now = self._clock.now()
        removed = 0

        for token_id in [t for t, e in self._tokens.items() if e.is_expired_at(now)]:
            del self._tokens[token_id]
            removed += 1

        for subject_id in [s for s, e in self._subjects.items() if e.is_expired_at(now)]:
            del self._subjects[subject_id]
            removed += 1

        if removed:
            logger.debug(f"Purged {removed} expired revocation entries")
        return removed
