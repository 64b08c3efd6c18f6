"""Repository interfaces - define contracts for token state and account access."""

from tokenguard.domain.repositories.account_store import IAccountStore
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker
from tokenguard.domain.repositories.revocation_store import IRevocationStore

__all__ = ["IAccountStore", "ILockoutTracker", "IRevocationStore"]
