"""Token domain entities - signed claims and the access/refresh pair.

A token is never persisted as an object. It exists only as the claim set
carried inside its signed envelope, so these entities are immutable.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from tokenguard.domain.exceptions import InvalidEntityStateException


def to_numeric_date(moment: datetime) -> int | float:
    """Seconds since the epoch; whole seconds stay integers, otherwise microsecond fractions."""
    seconds = moment.timestamp()
    return int(seconds) if seconds.is_integer() else seconds


def from_numeric_date(value: Any) -> datetime:
    """Parse a NumericDate claim, rounding to the nearest microsecond."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError("NumericDate claims must be numbers")
    return datetime.fromtimestamp(value, tz=UTC)


class TokenType(str, Enum):
    """Kind of bearer token, carried in the ``typ`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """
    Claims carried by a signed token.

    Wire names follow the registered JWT claims so downstream services can
    read tokens without knowing this package:
    ``sub, jti, typ, iat, exp, iss, aud`` plus the custom ``roles`` claim.
    """

    subject_id: str
    token_id: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str
    roles: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.subject_id:
            raise InvalidEntityStateException("Token subject cannot be empty.")

        if not self.token_id:
            raise InvalidEntityStateException("Token identifier cannot be empty.")

        if self.expires_at <= self.issued_at:
            raise InvalidEntityStateException(
                f"Token expiry {self.expires_at.isoformat()} must be after "
                f"issue time {self.issued_at.isoformat()}."
            )

    @property
    def lifetime_seconds(self) -> int:
        """Configured lifetime of the token (exp - iat)."""
        return int((self.expires_at - self.issued_at).total_seconds())

    def is_expired_at(self, now: datetime) -> bool:
        """A token is expired once the clock passes its expiry."""
        return now > self.expires_at

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JWT payload (fractional NumericDates for iat/exp)."""
        return {
            "sub": self.subject_id,
            "jti": self.token_id,
            "typ": self.token_type.value,
            "iat": to_numeric_date(self.issued_at),
            "exp": to_numeric_date(self.expires_at),
            "iss": self.issuer,
            "aud": self.audience,
            "roles": list(self.roles),
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        """
        Build claims from a decoded JWT payload.

        Raises:
            KeyError: If a registered claim is missing
            ValueError: If a claim has the wrong shape
            InvalidEntityStateException: If the claims break an invariant
        """
        audience = payload["aud"]
        if isinstance(audience, list):
            if len(audience) != 1:
                raise ValueError("Multi-valued audience is not supported")
            audience = audience[0]

        roles = payload.get("roles", [])
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise ValueError("roles claim must be a list of strings")

        return cls(
            subject_id=str(payload["sub"]),
            token_id=str(payload["jti"]),
            token_type=TokenType(payload["typ"]),
            issued_at=from_numeric_date(payload["iat"]),
            expires_at=from_numeric_date(payload["exp"]),
            issuer=str(payload["iss"]),
            audience=str(audience),
            roles=tuple(roles),
        )


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token minted together at login or refresh."""

    access_token: str
    refresh_token: str
    access_claims: TokenClaims
    refresh_claims: TokenClaims

    @property
    def subject_id(self) -> str:
        return self.access_claims.subject_id
