"""Revocation domain entity - a blacklist entry for a token or a whole subject."""

from dataclasses import dataclass
from datetime import datetime

from tokenguard.domain.exceptions import InvalidEntityStateException


class RevocationReason:
    """Reasons recorded by the engine itself. Admin revocations may carry free text."""

    LOGOUT = "logout"
    ROTATED = "rotated"
    ADMIN = "admin"
    COMPROMISED = "compromised"


@dataclass(frozen=True)
class RevocationEntry:
    """
    A revoked token id, or a subject epoch covering every token issued up to it.

    ``expires_at`` is when the entry becomes useless: for a token, its own
    expiry; for a subject epoch, the epoch plus the longest token lifetime.
    Entries are kept at least until then.
    """

    revoked_at: datetime
    expires_at: datetime
    reason: str
    token_id: str | None = None
    subject_id: str | None = None

    def __post_init__(self):
        if (self.token_id is None) == (self.subject_id is None):
            raise InvalidEntityStateException(
                "A revocation entry targets exactly one of token_id or subject_id."
            )

    def is_expired_at(self, now: datetime) -> bool:
        return self.expires_at < now

    def covers(self, issued_at: datetime) -> bool:
        """For a subject epoch: does it revoke a token issued at ``issued_at``?"""
        return self.revoked_at >= issued_at
