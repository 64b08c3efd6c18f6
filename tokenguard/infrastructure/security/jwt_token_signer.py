"""JWT token signer implementation using PyJWT.

This is an INFRASTRUCTURE detail. The domain layer (ITokenSigner interface)
defines WHAT we need (sign claims, verify envelopes), while this
implementation defines HOW we do it (JWS compact serialization via PyJWT).

Dependency flow:
    TokenEngine (application) → ITokenSigner (domain) ← JWTTokenSigner (infrastructure)

JWT Structure:
- Header: {"alg": "HS256", "typ": "JWT", "kid": "<key id>"}
- Payload: sub, jti, typ, iat, exp, iss, aud, roles
- Signature: HMAC over header and payload with the key named by kid

Expiry, issuer and audience are NOT checked here. PyJWT would compare exp
against the wall clock; the token engine compares it against the injected
clock instead, after the signature is known to be good.
"""

import logging
from collections.abc import Mapping

import jwt

from tokenguard.domain.entities.token import TokenClaims
from tokenguard.domain.exceptions import (
    InvalidEntityStateException,
    InvalidSignatureException,
    MalformedTokenException,
)
from tokenguard.domain.services.token_signer import ITokenSigner

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "jti", "typ", "iat", "exp", "iss", "aud")

MIN_SECRET_LENGTH = 32

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
}


class JWTTokenSigner(ITokenSigner):
    """
    HMAC JWT signer with a keyring.

    Tokens are signed with the active key and carry its id in the ``kid``
    header. Verification picks the key named by ``kid``, so tokens signed by
    a previous key keep verifying while that key stays in the keyring.

    Security Considerations:
    - Every secret must be at least 32 characters
    - Only the configured algorithm is accepted (no "none", no downgrade)
    - Failure details are logged, callers only see a generic error
    """

    def __init__(
        self,
        keys: Mapping[str, str],
        active_key_id: str,
        algorithm: str = "HS256",
    ):
        """
        Initialize JWT signer.

        Args:
            keys: Key id -> secret
            active_key_id: Key id used for signing new tokens
            algorithm: JWT signing algorithm (default: HS256)

        Raises:
            ValueError: If the active key is missing or a secret is too short
        """
        if active_key_id not in keys:
            raise ValueError(f"Active signing key {active_key_id!r} is not in the keyring")

        for key_id, secret in keys.items():
            if len(secret) < MIN_SECRET_LENGTH:
                raise ValueError(
                    f"Secret key {key_id!r} must be at least {MIN_SECRET_LENGTH} characters long"
                )

        self._keys = dict(keys)
        self._active_key_id = active_key_id
        self._algorithm = algorithm

    @classmethod
    def from_secret(
        cls, secret_key: str, key_id: str = "default", algorithm: str = "HS256"
    ) -> "JWTTokenSigner":
        """Build a signer with a single key."""
        return cls(keys={key_id: secret_key}, active_key_id=key_id, algorithm=algorithm)

    @property
    def active_key_id(self) -> str:
        return self._active_key_id

    def sign(self, claims: TokenClaims) -> str:
        return jwt.encode(
            claims.to_payload(),
            self._keys[self._active_key_id],
            algorithm=self._algorithm,
            headers={"kid": self._active_key_id},
        )

    def verify(self, token: str) -> TokenClaims:
        # 1. Structure: three segments, decodable header and JSON object payload
        try:
            header = jwt.get_unverified_header(token)
            jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as exc:
            logger.info(f"Rejected malformed token: {exc}")
            raise MalformedTokenException() from exc

        # 2. Signature with the key named by kid
        key_id = header.get("kid")
        secret = self._keys.get(key_id) if isinstance(key_id, str) else None
        if secret is None:
            logger.info(f"Rejected token signed with unknown key id {key_id!r}")
            raise InvalidSignatureException()

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options=_DECODE_OPTIONS,
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
            logger.info(f"Rejected token with bad signature (kid={key_id!r}): {exc}")
            raise InvalidSignatureException() from exc
        except jwt.InvalidTokenError as exc:
            logger.info(f"Rejected undecodable token (kid={key_id!r}): {exc}")
            raise MalformedTokenException() from exc

        # 3. Required claims
        missing = [name for name in REQUIRED_CLAIMS if name not in payload]
        if missing:
            logger.info(f"Rejected token missing claims {missing}")
            raise MalformedTokenException()

        try:
            return TokenClaims.from_payload(payload)
        except (
            KeyError,
            TypeError,
            ValueError,
            OverflowError,
            OSError,
            InvalidEntityStateException,
        ) as exc:
            logger.info(f"Rejected token with invalid claims: {exc}")
            raise MalformedTokenException() from exc
