"""Account store interface - the external account collaborator.

The core never reads or writes account rows itself. It asks this
collaborator two questions: "does this secret match this identifier?" at
login, and "what is this subject's status and roles right now?" at
refresh.
"""

from abc import ABC, abstractmethod

from tokenguard.domain.entities.account import AccountSnapshot, CredentialCheck


class IAccountStore(ABC):
    """
    Interface for the account/profile store.

    Implementations may do network I/O; callers bound every call with a
    timeout.
    """

    @abstractmethod
    async def verify_credentials(self, identifier: str, secret: str) -> CredentialCheck:
        """
        Verify an identifier and secret.

        Must not reveal which of the two was wrong: an unknown identifier and
        a wrong secret both return ``CredentialCheck.rejected()``.

        Args:
            identifier: Login identifier (normalized by the caller)
            secret: Plain secret as submitted

        Returns:
            CredentialCheck with subject id, status and roles when valid

        Raises:
            AccountStoreUnavailableException: If the store cannot answer
        """
        pass

    @abstractmethod
    async def get_account(self, subject_id: str) -> AccountSnapshot | None:
        """
        Read the current status and roles of a subject.

        Args:
            subject_id: Subject id as carried in tokens

        Returns:
            AccountSnapshot if the account exists, None otherwise

        Raises:
            AccountStoreUnavailableException: If the store cannot answer
        """
        pass
