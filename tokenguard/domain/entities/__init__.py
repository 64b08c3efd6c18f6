"""Domain entities - tokens, accounts, lockout and revocation records."""

from tokenguard.domain.entities.account import AccountSnapshot, AccountStatus, CredentialCheck
from tokenguard.domain.entities.lockout import LockoutRecord, LockStatus
from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason
from tokenguard.domain.entities.token import TokenClaims, TokenPair, TokenType

__all__ = [
    "AccountSnapshot",
    "AccountStatus",
    "CredentialCheck",
    "LockoutRecord",
    "LockStatus",
    "RevocationEntry",
    "RevocationReason",
    "TokenClaims",
    "TokenPair",
    "TokenType",
]
