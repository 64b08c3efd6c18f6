"""Authentication DTOs for the application layer."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tokenguard.domain.entities.revocation import RevocationEntry
from tokenguard.domain.entities.token import TokenClaims, TokenPair


class LoginDTO(BaseModel):
    """DTO for login request."""

    identifier: str = Field(..., min_length=1, max_length=255, description="Login identifier")
    password: str = Field(..., min_length=1, description="Account secret")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"identifier": "alice", "password": "correct horse battery staple"}]
        }
    )


class RefreshTokenDTO(BaseModel):
    """DTO for refresh token request."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token to rotate")


class LogoutDTO(BaseModel):
    """Optional logout body: a refresh token to revoke alongside the access token."""

    refresh_token: str | None = Field(default=None, description="Refresh token of the same session")


class IntrospectDTO(BaseModel):
    """DTO for token introspection by other services."""

    token: str = Field(..., min_length=1, description="Token to validate")
    token_type: Literal["access", "refresh"] = Field(
        default="access", description="Expected token type"
    )


class AdminRevokeDTO(BaseModel):
    """DTO for revoking every token of a subject."""

    reason: str = Field(default="admin", min_length=1, max_length=255)


class AuthResultDTO(BaseModel):
    """Token pair plus the minimal identity of the authenticated subject."""

    access_token: str = Field(..., description="Signed access token")
    refresh_token: str = Field(..., description="Signed single-use refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    refresh_expires_in: int = Field(..., description="Refresh token lifetime in seconds")
    subject_id: str
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "AuthResultDTO":
        return cls(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            token_type="bearer",
            expires_in=pair.access_claims.lifetime_seconds,
            refresh_expires_in=pair.refresh_claims.lifetime_seconds,
            subject_id=pair.subject_id,
            roles=list(pair.access_claims.roles),
        )


class ClaimsDTO(BaseModel):
    """Validated claims of a token, as returned by introspection."""

    subject_id: str
    token_id: str
    token_type: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str
    roles: list[str] = Field(default_factory=list)

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "ClaimsDTO":
        return cls(
            subject_id=claims.subject_id,
            token_id=claims.token_id,
            token_type=claims.token_type.value,
            issued_at=claims.issued_at,
            expires_at=claims.expires_at,
            issuer=claims.issuer,
            audience=claims.audience,
            roles=list(claims.roles),
        )


class RevocationResultDTO(BaseModel):
    """Result of a bulk revocation."""

    subject_id: str
    revoked_before: datetime = Field(..., description="Tokens issued at or before this instant are revoked")
    reason: str

    @classmethod
    def from_entry(cls, entry: RevocationEntry) -> "RevocationResultDTO":
        assert entry.subject_id is not None
        return cls(
            subject_id=entry.subject_id,
            revoked_before=entry.revoked_at,
            reason=entry.reason,
        )
