"""Token engine - minting, validation and rotation of bearer tokens.

This service orchestrates the token lifecycle:
1. Mint an access/refresh pair for a subject
2. Validate a presented token (envelope, claims, expiry, type, revocation)
3. Refresh: consume a refresh token exactly once and mint a new pair
4. Revoke single tokens or everything a subject holds

DEPENDENCY INVERSION in action:
- TokenEngine depends on ITokenSigner (abstraction)
- TokenEngine depends on IRevocationStore (abstraction)
- TokenEngine depends on IClock (abstraction)
- No dependency on PyJWT or Redis

Tokens are stateless once signed. The only state the engine consults is
the revocation store, and only after the cheap checks have passed.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta

from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason
from tokenguard.domain.entities.token import TokenClaims, TokenPair, TokenType
from tokenguard.domain.exceptions import (
    MalformedTokenException,
    StoreUnavailableException,
    TokenExpiredException,
    TokenRevokedException,
    WrongTokenTypeException,
)
from tokenguard.domain.repositories.revocation_store import IRevocationStore
from tokenguard.domain.services.clock import IClock
from tokenguard.domain.services.token_signer import ITokenSigner

logger = logging.getLogger(__name__)

RolesResolver = Callable[[TokenClaims], Awaitable[Sequence[str]]]


class TokenEngine:
    """
    Issues, validates and rotates signed tokens.

    Validation order is fixed so failure reasons are unambiguous:
    structure -> signature -> issuer/audience -> expiry -> type -> revocation.
    """

    def __init__(
        self,
        signer: ITokenSigner,
        revocation_store: IRevocationStore,
        clock: IClock,
        issuer: str,
        audience: str,
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(hours=24),
    ):
        """
        Initialize token engine.

        Args:
            signer: Envelope signer/verifier
            revocation_store: Blacklist consulted on every validation
            clock: Time source for iat/exp and expiry checks
            issuer: Value of the iss claim, required on validation
            audience: Value of the aud claim, required on validation
            access_token_ttl: Access token lifetime
            refresh_token_ttl: Refresh token lifetime

        Raises:
            ValueError: If a TTL is not a whole positive number of seconds,
                or the refresh TTL is not longer than the access TTL
        """
        for name, ttl in (("access", access_token_ttl), ("refresh", refresh_token_ttl)):
            if ttl.total_seconds() < 1 or ttl.total_seconds() != int(ttl.total_seconds()):
                raise ValueError(f"{name} token TTL must be a whole positive number of seconds")

        if refresh_token_ttl <= access_token_ttl:
            raise ValueError("Refresh token TTL must be longer than access token TTL")

        self._signer = signer
        self._revocation_store = revocation_store
        self._clock = clock
        self._issuer = issuer
        self._audience = audience
        self._access_token_ttl = access_token_ttl
        self._refresh_token_ttl = refresh_token_ttl

    @property
    def access_token_ttl(self) -> timedelta:
        return self._access_token_ttl

    @property
    def refresh_token_ttl(self) -> timedelta:
        return self._refresh_token_ttl

    def mint(self, subject_id: str, roles: Sequence[str] = ()) -> TokenPair:
        """
        Mint an access/refresh pair.

        Both tokens share iat (microsecond precision) and get distinct
        random jti values, so exp - iat equals the configured TTL exactly.

        Args:
            subject_id: Subject the tokens are issued to
            roles: Role claims to embed

        Returns:
            TokenPair with both encoded tokens and their claims
        """
        now = self._clock.now()
        role_claims = tuple(roles)

        access_claims = self._build_claims(subject_id, role_claims, TokenType.ACCESS, now)
        refresh_claims = self._build_claims(subject_id, role_claims, TokenType.REFRESH, now)

        logger.debug(
            f"Minted token pair for subject {subject_id}: "
            f"access={access_claims.token_id} refresh={refresh_claims.token_id}"
        )

        return TokenPair(
            access_token=self._signer.sign(access_claims),
            refresh_token=self._signer.sign(refresh_claims),
            access_claims=access_claims,
            refresh_claims=refresh_claims,
        )

    async def validate(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Validate a presented token.

        Args:
            token: Encoded token string
            expected_type: Token type the caller requires

        Returns:
            Validated claims

        Raises:
            MalformedTokenException: Bad envelope, missing claims, wrong iss/aud
            InvalidSignatureException: Signature does not verify
            TokenExpiredException: now > exp
            WrongTokenTypeException: typ differs from expected_type
            TokenRevokedException: Revoked by id or by subject epoch, or the
                revocation store could not confirm otherwise
        """
        claims = self._signer.verify(token)

        if claims.issuer != self._issuer or claims.audience != self._audience:
            logger.info(
                f"Rejected token {claims.token_id}: issuer/audience "
                f"{claims.issuer!r}/{claims.audience!r} not accepted"
            )
            raise MalformedTokenException()

        if claims.is_expired_at(self._clock.now()):
            raise TokenExpiredException()

        if claims.token_type is not expected_type:
            logger.info(
                f"Rejected token {claims.token_id}: expected {expected_type.value}, "
                f"got {claims.token_type.value}"
            )
            raise WrongTokenTypeException()

        await self._ensure_not_revoked(claims)
        return claims

    async def refresh(
        self, refresh_token: str, roles_for: RolesResolver | None = None
    ) -> TokenPair:
        """
        Rotate a refresh token into a new pair.

        The presented refresh token is single-use: it is revoked (reason
        "rotated") before the new pair is minted, through the store's atomic
        add-if-absent. If two callers present the same token concurrently,
        exactly one wins; the other gets TokenRevokedException.

        Args:
            refresh_token: Encoded refresh token
            roles_for: Resolves the roles for the new pair from the account
                store. When omitted the roles of the presented token are
                carried over unchanged, never widened.

        Returns:
            Freshly minted TokenPair

        Raises:
            TokenValidationException: Any validation failure of the refresh token
        """
        claims = await self.validate(refresh_token, TokenType.REFRESH)

        roles = await roles_for(claims) if roles_for is not None else claims.roles

        await self._consume(claims)

        pair = self.mint(claims.subject_id, roles)
        logger.info(
            f"Rotated refresh token {claims.token_id} for subject {claims.subject_id} "
            f"into {pair.refresh_claims.token_id}"
        )
        return pair

    async def revoke(self, claims: TokenClaims, reason: str = RevocationReason.LOGOUT) -> bool:
        """
        Revoke a validated token until its natural expiry.

        Returns:
            True if this call revoked it, False if it was already revoked

        Raises:
            StoreUnavailableException: If the revocation store cannot be reached
        """
        revoked = await self._revocation_store.revoke_token(
            claims.token_id, claims.expires_at, reason
        )
        if revoked:
            logger.info(
                f"Revoked {claims.token_type.value} token {claims.token_id} "
                f"of subject {claims.subject_id} ({reason})"
            )
        return revoked

    async def revoke_subject(
        self, subject_id: str, reason: str = RevocationReason.ADMIN
    ) -> RevocationEntry:
        """
        Revoke every token of a subject issued up to now.

        Raises:
            StoreUnavailableException: If the revocation store cannot be reached
        """
        entry = await self._revocation_store.revoke_all_for_subject(subject_id, reason=reason)
        logger.warning(
            f"Revoked all tokens of subject {subject_id} issued at or before "
            f"{entry.revoked_at.isoformat()} ({reason})"
        )
        return entry

    def _build_claims(
        self,
        subject_id: str,
        roles: tuple[str, ...],
        token_type: TokenType,
        now: datetime,
    ) -> TokenClaims:
        ttl = self._access_token_ttl if token_type is TokenType.ACCESS else self._refresh_token_ttl
        return TokenClaims(
            subject_id=subject_id,
            token_id=str(uuid.uuid4()),
            token_type=token_type,
            issued_at=now,
            expires_at=now + ttl,
            issuer=self._issuer,
            audience=self._audience,
            roles=roles,
        )

    async def _ensure_not_revoked(self, claims: TokenClaims) -> None:
        try:
            revoked = await self._revocation_store.is_revoked(
                claims.token_id, claims.subject_id, claims.issued_at
            )
        except StoreUnavailableException as exc:
            # Fail closed: a token we cannot confirm as live is treated as revoked.
            logger.error(
                f"Revocation store unavailable while validating token {claims.token_id}; "
                f"rejecting: {exc.message}"
            )
            raise TokenRevokedException(
                "Token revocation status could not be confirmed",
                subject_id=claims.subject_id,
                token_id=claims.token_id,
            ) from exc

        if not revoked:
            return

        entry = await self._lookup_entry(claims.token_id)
        raise TokenRevokedException(
            reason=entry.reason if entry is not None else None,
            subject_id=claims.subject_id,
            token_id=claims.token_id,
        )

    async def _lookup_entry(self, token_id: str) -> RevocationEntry | None:
        try:
            return await self._revocation_store.get_entry(token_id)
        except StoreUnavailableException:
            logger.warning(f"Could not read revocation reason for token {token_id}")
            return None

    async def _consume(self, claims: TokenClaims) -> None:
        try:
            consumed = await self._revocation_store.revoke_token(
                claims.token_id, claims.expires_at, RevocationReason.ROTATED
            )
        except StoreUnavailableException as exc:
            logger.error(
                f"Revocation store unavailable while rotating token {claims.token_id}: "
                f"{exc.message}"
            )
            raise TokenRevokedException(
                "Token revocation status could not be confirmed",
                subject_id=claims.subject_id,
                token_id=claims.token_id,
            ) from exc

        if not consumed:
            logger.warning(
                f"Refresh token {claims.token_id} of subject {claims.subject_id} "
                "was consumed concurrently; rejecting duplicate rotation"
            )
            raise TokenRevokedException(
                reason=RevocationReason.ROTATED,
                subject_id=claims.subject_id,
                token_id=claims.token_id,
            )
