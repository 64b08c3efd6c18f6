"""Argon2 password hasher implementation using pwdlib.

Only the reference account store uses it: the token core never sees a
secret or a hash.
"""

import logging

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.argon2 import Argon2Hasher

from tokenguard.domain.services.password_hasher import IPasswordHasher

logger = logging.getLogger(__name__)


class Argon2PasswordHasher(IPasswordHasher):
    """
    Argon2id hasher with pwdlib's defaults (64 MB memory, 3 iterations, 4 lanes).

    Usage:
        hasher = Argon2PasswordHasher()
        hashed = hasher.hash("s3cret")
        hasher.verify("s3cret", hashed)  # True
    """

    def __init__(self):
        self._password_hash = PasswordHash((Argon2Hasher(),))

    def hash(self, plain_password: str) -> str:
        return self._password_hash.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify in constant time.

        A stored value that is not an Argon2 hash never matches.
        """
        try:
            return self._password_hash.verify(plain_password, hashed_password)
        except UnknownHashError:
            logger.warning("Stored password hash has an unrecognized format")
            return False
