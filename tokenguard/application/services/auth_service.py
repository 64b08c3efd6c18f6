"""Authentication service - application layer business logic.

This service orchestrates authentication use cases:
1. Login (lockout check + credential validation + token minting)
2. Token refresh (single-use rotation, roles re-read from the account store)
3. Logout (revoke the presented tokens)
4. Admin revoke (revoke everything a subject holds)
5. Introspection (read-only validation for other services)

DEPENDENCY INVERSION in action:
- AuthService depends on CredentialValidator (wraps IAccountStore)
- AuthService depends on ILockoutTracker (abstraction)
- AuthService depends on TokenEngine (wraps ITokenSigner + IRevocationStore)
- No dependencies on PyJWT, Redis or SQLAlchemy
"""

import logging
from collections.abc import Sequence

from tokenguard.application.dtos.auth_dto import (
    AdminRevokeDTO,
    AuthResultDTO,
    ClaimsDTO,
    IntrospectDTO,
    LoginDTO,
    LogoutDTO,
    RefreshTokenDTO,
    RevocationResultDTO,
)
from tokenguard.application.exceptions.exceptions import (
    AccountDisabledError,
    AccountInactiveError,
    AccountLockedError,
    DependencyUnavailableError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
)
from tokenguard.application.services.credential_validator import CredentialValidator
from tokenguard.application.services.token_engine import TokenEngine
from tokenguard.domain.entities.account import AccountStatus
from tokenguard.domain.entities.lockout import LockStatus
from tokenguard.domain.entities.revocation import RevocationReason
from tokenguard.domain.entities.token import TokenClaims, TokenType
from tokenguard.domain.exceptions import (
    StoreUnavailableException,
    TokenExpiredException,
    TokenRevokedException,
    TokenValidationException,
)
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker

logger = logging.getLogger(__name__)


def normalize_identifier(identifier: str) -> str:
    """Lockout and lookups key on the trimmed, case-folded identifier."""
    return identifier.strip().casefold()


class AuthService:
    """
    Authentication orchestrator encapsulating auth-related use cases.

    This service:
    1. Checks the lockout tracker BEFORE asking the account store
    2. Never turns an account store outage into "invalid credentials"
    3. Returns DTOs to the presentation layer
    4. Raises application/domain exceptions (converted to HTTP by presentation)

    Testing:
    - Unit tests use FakeAccountStore and FakeClock with the in-memory stores
    - No database, Redis or network required
    """

    def __init__(
        self,
        credential_validator: CredentialValidator,
        lockout_tracker: ILockoutTracker,
        token_engine: TokenEngine,
        revoke_subject_on_refresh_reuse: bool = False,
        admin_role: str = "admin",
    ):
        """
        Initialize auth service with dependencies.

        Args:
            credential_validator: Timeout-bounded account store access
            lockout_tracker: Failed-attempt counters
            token_engine: Token minting/validation/rotation
            revoke_subject_on_refresh_reuse: Revoke every token of a subject when
                one of its already-rotated refresh tokens is presented again
            admin_role: Role required for administrative revocation
        """
        self._credential_validator = credential_validator
        self._lockout_tracker = lockout_tracker
        self._token_engine = token_engine
        self._revoke_subject_on_refresh_reuse = revoke_subject_on_refresh_reuse
        self._admin_role = admin_role

    async def login(self, dto: LoginDTO) -> AuthResultDTO:
        """
        Authenticate a subject and mint a token pair.

        Business logic:
        1. Refuse locked accounts without calling the account store
        2. Verify credentials; count failures toward lockout
        3. Refuse disabled/inactive accounts
        4. Reset the failure count and mint tokens

        Args:
            dto: Login credentials

        Returns:
            AuthResultDTO with both tokens, lifetimes, subject id and roles

        Raises:
            AccountLockedError: Account is locked (carries remaining seconds)
            InvalidCredentialsError: Identifier or secret is wrong
            DependencyUnavailableError: Account or lockout store cannot answer
            AccountDisabledError: Account has been disabled
            AccountInactiveError: Account is not active
        """
        identifier = normalize_identifier(dto.identifier)

        lock_status = await self._lock_status(identifier)
        if lock_status.locked:
            logger.info(
                f"Login refused for locked account {identifier!r} "
                f"({lock_status.remaining_seconds}s remaining)"
            )
            raise AccountLockedError(retry_after_seconds=lock_status.remaining_seconds)

        check = await self._credential_validator.verify(identifier, dto.password)

        if not check.valid:
            attempts = await self._record_failure(identifier)
            logger.info(f"Failed login for {identifier!r} ({attempts} consecutive)")
            raise InvalidCredentialsError()

        assert check.subject_id is not None
        self._ensure_active(check.status, check.subject_id)

        await self._record_success(identifier)

        pair = self._token_engine.mint(check.subject_id, check.roles)
        logger.info(f"Login succeeded for subject {check.subject_id}")
        return AuthResultDTO.from_pair(pair)

    async def refresh_token(self, dto: RefreshTokenDTO) -> AuthResultDTO:
        """
        Rotate a refresh token into a new pair.

        Refresh tokens are single-use. Presenting one that was already
        rotated fails with TokenRevokedException; when configured, that
        replay also revokes every token of the subject.

        Args:
            dto: Refresh token request

        Returns:
            AuthResultDTO with fresh tokens

        Raises:
            TokenValidationException: Refresh token invalid/expired/revoked
            AccountDisabledError / AccountInactiveError: Account no longer usable
            DependencyUnavailableError: Account store cannot answer
        """
        try:
            pair = await self._token_engine.refresh(
                dto.refresh_token, roles_for=self._current_roles
            )
        except TokenRevokedException as exc:
            if (
                exc.reason == RevocationReason.ROTATED
                and exc.subject_id is not None
                and self._revoke_subject_on_refresh_reuse
            ):
                logger.warning(
                    f"BREACH SUSPECTED: rotated refresh token {exc.token_id} replayed "
                    f"for subject {exc.subject_id}; revoking all of its tokens"
                )
                await self._token_engine.revoke_subject(
                    exc.subject_id, RevocationReason.COMPROMISED
                )
            raise

        return AuthResultDTO.from_pair(pair)

    async def logout(self, access_token: str, dto: LogoutDTO | None = None) -> None:
        """
        Revoke the presented access token, and the session's refresh token if given.

        The access token is revoked whatever state the refresh token is in. A
        refresh token that is already revoked or expired is ignored; any other
        refresh token failure is raised after the access token is revoked. A
        refresh token of another subject is refused and nothing is revoked.
        An expired access token fails with TokenExpiredException: it needs no
        revocation.

        Args:
            access_token: Bearer access token of the caller
            dto: Optional body carrying the refresh token to revoke as well

        Raises:
            TokenValidationException: The access token fails validation, or
                the refresh token is malformed, forged or of the wrong type
            InsufficientPermissionsError: Refresh token belongs to another subject
        """
        claims = await self._token_engine.validate(access_token, TokenType.ACCESS)

        refresh_claims: TokenClaims | None = None
        refresh_error: TokenValidationException | None = None
        if dto is not None and dto.refresh_token:
            try:
                refresh_claims = await self._token_engine.validate(
                    dto.refresh_token, TokenType.REFRESH
                )
            except (TokenRevokedException, TokenExpiredException) as exc:
                logger.info(
                    f"Ignoring stale refresh token at logout of subject {claims.subject_id}: "
                    f"{exc.message}"
                )
            except TokenValidationException as exc:
                refresh_error = exc

            if refresh_claims is not None and refresh_claims.subject_id != claims.subject_id:
                raise InsufficientPermissionsError(
                    "Refresh token does not belong to the authenticated subject"
                )

        await self._token_engine.revoke(claims, RevocationReason.LOGOUT)
        if refresh_claims is not None:
            await self._token_engine.revoke(refresh_claims, RevocationReason.LOGOUT)

        if refresh_error is not None:
            raise refresh_error

    async def admin_revoke(self, subject_id: str, dto: AdminRevokeDTO) -> RevocationResultDTO:
        """
        Revoke every token of a subject issued up to now.

        Tokens minted after this call are unaffected.

        Args:
            subject_id: Subject whose tokens are revoked
            dto: Revocation reason

        Returns:
            RevocationResultDTO describing the epoch now in force
        """
        entry = await self._token_engine.revoke_subject(subject_id, dto.reason)
        return RevocationResultDTO.from_entry(entry)

    async def introspect(self, dto: IntrospectDTO) -> ClaimsDTO:
        """
        Validate a token on behalf of another service, without side effects.

        Args:
            dto: Token and the type it is expected to be

        Returns:
            ClaimsDTO of the validated token

        Raises:
            TokenValidationException: Token fails validation
        """
        claims = await self._token_engine.validate(dto.token, TokenType(dto.token_type))
        return ClaimsDTO.from_claims(claims)

    async def authenticate(self, access_token: str) -> ClaimsDTO:
        """Validate a bearer access token and return its claims."""
        claims = await self._token_engine.validate(access_token, TokenType.ACCESS)
        return ClaimsDTO.from_claims(claims)

    async def authorize_admin(self, access_token: str) -> ClaimsDTO:
        """
        Validate a bearer access token and require the admin role.

        Raises:
            TokenValidationException: Token fails validation
            InsufficientPermissionsError: Token lacks the admin role
        """
        claims = await self._token_engine.validate(access_token, TokenType.ACCESS)
        if not claims.has_role(self._admin_role):
            logger.warning(
                f"Subject {claims.subject_id} attempted an admin operation without "
                f"the {self._admin_role!r} role"
            )
            raise InsufficientPermissionsError()
        return ClaimsDTO.from_claims(claims)

    async def _current_roles(self, claims: TokenClaims) -> Sequence[str]:
        """Re-read roles at refresh so a pair never outlives a role change."""
        account = await self._credential_validator.get_account(claims.subject_id)
        if account is None:
            logger.info(f"Refresh refused: subject {claims.subject_id} no longer exists")
            raise AccountInactiveError("Account is no longer available")

        self._ensure_active(account.status, account.subject_id)
        return account.roles

    def _ensure_active(self, status: AccountStatus | None, subject_id: str) -> None:
        if status is AccountStatus.ACTIVE:
            return

        status_name = status.value if status is not None else "unknown"
        logger.info(f"Authentication refused for subject {subject_id}: account {status_name}")
        if status is AccountStatus.DISABLED:
            raise AccountDisabledError()
        raise AccountInactiveError()

    async def _lock_status(self, identifier: str) -> LockStatus:
        try:
            return await self._lockout_tracker.is_locked(identifier)
        except StoreUnavailableException as exc:
            # Fail safe: an unknown lock state is an outage, never an unlock.
            logger.error(f"Lockout store unavailable for {identifier!r}: {exc.message}")
            raise DependencyUnavailableError() from exc

    async def _record_failure(self, identifier: str) -> int:
        try:
            return await self._lockout_tracker.record_failure(identifier)
        except StoreUnavailableException as exc:
            logger.error(
                f"Lockout store unavailable recording failure for {identifier!r}: {exc.message}"
            )
            raise DependencyUnavailableError() from exc

    async def _record_success(self, identifier: str) -> None:
        try:
            await self._lockout_tracker.record_success(identifier)
        except StoreUnavailableException as exc:
            logger.error(
                f"Lockout store unavailable recording success for {identifier!r}: {exc.message}"
            )
            raise DependencyUnavailableError() from exc
