"""Password hashing interface used by account stores that keep secrets."""

from abc import ABC, abstractmethod


class IPasswordHasher(ABC):
    """
    Interface for password hashing operations.

    Implementations must salt every hash and compare in constant time.
    """

    @abstractmethod
    def hash(self, plain_password: str) -> str:
        """
        Hash a plain text password.

        Args:
            plain_password: The plain text password to hash

        Returns:
            Self-describing hash string (algorithm, parameters, salt)
        """
        pass

    @abstractmethod
    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain text password against a stored hash.

        Args:
            plain_password: The plain text password to verify
            hashed_password: The previously hashed password to check against

        Returns:
            True if password matches, False otherwise
        """
        pass
