"""Revocation store interface - domain layer abstraction.

This interface defines the contract for the token blacklist: which token
ids, and which subjects as a whole, must be rejected before their tokens
expire naturally.

Why this belongs in the domain:
- Revocation is a BUSINESS REQUIREMENT (logout, admin lockdown, rotation)
- The domain cares about read-after-write visibility and bounded size
- The domain does NOT care about storage mechanism (Redis, memory, etc.)

Size is bounded by design:
- Individual tokens are tracked only once revoked, and only until they expire
- "Revoke everything for a user" is one per-subject epoch, not one entry
  per outstanding token
"""

from abc import ABC, abstractmethod
from datetime import datetime

from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason


class IRevocationStore(ABC):
    """
    Interface for the revocation (blacklist) store.

    Implementations must serialize writes per key (token id or subject id)
    without a global lock, and must make a completed write visible to every
    subsequent read.
    """

    @abstractmethod
    async def revoke_token(
        self,
        token_id: str,
        expires_at: datetime,
        reason: str = RevocationReason.LOGOUT,
    ) -> bool:
        """
        Revoke a single token until its natural expiry.

        This is an atomic add-if-absent: when several callers revoke the
        same token concurrently, exactly one of them gets True. Refresh
        rotation relies on this to let only one caller consume a refresh
        token.

        Args:
            token_id: The token's jti
            expires_at: The token's own expiry (entry is evictable after it)
            reason: Why the token was revoked

        Returns:
            True if this call created the entry, False if it already existed

        Raises:
            StoreUnavailableException: If the backing store cannot be reached
        """
        pass

    @abstractmethod
    async def revoke_all_for_subject(
        self,
        subject_id: str,
        since: datetime | None = None,
        reason: str = RevocationReason.ADMIN,
    ) -> RevocationEntry:
        """
        Revoke every token of a subject issued at or before ``since``.

        Stored as a per-subject epoch at microsecond resolution. A later
        call never lowers an existing epoch, and the epoch and its reason
        are written together.

        Args:
            subject_id: Subject whose tokens are revoked
            since: Epoch (defaults to now)
            reason: Why the subject was revoked

        Returns:
            The epoch entry now in force

        Raises:
            StoreUnavailableException: If the backing store cannot be reached
        """
        pass

    @abstractmethod
    async def is_revoked(
        self, token_id: str, subject_id: str, issued_at: datetime
    ) -> bool:
        """
        Check a token against the token set and its subject's epoch.

        Args:
            token_id: The token's jti
            subject_id: The token's sub
            issued_at: The token's iat

        Returns:
            True if revoked by id, or if a subject epoch >= issued_at exists

        Raises:
            StoreUnavailableException: If the backing store cannot be reached
        """
        pass

    @abstractmethod
    async def get_entry(self, token_id: str) -> RevocationEntry | None:
        """
        Retrieve the live revocation entry of a token, if any.

        Args:
            token_id: The token's jti

        Returns:
            RevocationEntry if the token is revoked by id, None otherwise
        """
        pass

    @abstractmethod
    async def purge_expired(self) -> int:
        """
        Drop entries whose expiry has passed.

        Safe at any time: a purged entry only covered tokens that no longer
        validate anyway.

        Returns:
            Number of entries removed
        """
        pass

    async def aclose(self) -> None:
        """Release connections held by the store (no-op by default)."""
        return None
