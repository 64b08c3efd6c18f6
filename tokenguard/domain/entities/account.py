"""Account views returned by the account collaborator.

The core owns no account data. These value objects describe what the
account store answers: whether a credential matched, and the status and
roles of the account it belongs to.
"""

from dataclasses import dataclass, field
from enum import Enum

from tokenguard.domain.exceptions import InvalidEntityStateException


class AccountStatus(str, Enum):
    """
    Status of an account as a single value.

    Replaces independent active/enabled flags so that contradictory
    combinations cannot be expressed.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"  # not yet activated, or expired
    DISABLED = "disabled"  # switched off by an administrator


@dataclass(frozen=True)
class CredentialCheck:
    """Outcome of verifying an identifier + secret against the account store."""

    valid: bool
    subject_id: str | None = None
    status: AccountStatus | None = None
    roles: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.valid and (not self.subject_id or self.status is None):
            raise InvalidEntityStateException(
                "A successful credential check must carry a subject id and account status."
            )

    @classmethod
    def rejected(cls) -> "CredentialCheck":
        """A mismatch that does not say whether identifier or secret was wrong."""
        return cls(valid=False)


@dataclass(frozen=True)
class AccountSnapshot:
    """Current status and roles of an account, read at refresh time."""

    subject_id: str
    status: AccountStatus
    roles: tuple[str, ...] = field(default_factory=tuple)
