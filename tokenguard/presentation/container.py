"""Composition root - builds every long-lived collaborator once per application.

The container is created by the FastAPI lifespan, stored on
``app.state.container`` and closed at shutdown. Dependencies read it from the
request instead of from module-level globals, so two applications (or two
tests) never share a revocation store or a lockout table.

This is where we decide:
- PyJWT HMAC signer with a keyring (not an asymmetric signer)
- In-memory or Redis revocation store (Settings.revocation_backend)
- SQLAlchemy + Argon2 reference account store (unless one is injected)
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tokenguard.application.services.auth_service import AuthService
from tokenguard.application.services.credential_validator import CredentialValidator
from tokenguard.application.services.token_engine import TokenEngine
from tokenguard.domain.repositories.account_store import IAccountStore
from tokenguard.domain.repositories.lockout_tracker import ILockoutTracker
from tokenguard.domain.repositories.revocation_store import IRevocationStore
from tokenguard.domain.services.clock import IClock
from tokenguard.infrastructure.accounts.sqlalchemy_account_store import SqlAlchemyAccountStore
from tokenguard.infrastructure.background.revocation_sweeper import RevocationSweeper
from tokenguard.infrastructure.clock.system_clock import SystemClock
from tokenguard.infrastructure.config.settings import Settings
from tokenguard.infrastructure.lockout.in_memory_lockout_tracker import InMemoryLockoutTracker
from tokenguard.infrastructure.persistence.database import (
    create_database_engine,
    create_session_factory,
)
from tokenguard.infrastructure.revocation.in_memory_revocation_store import (
    InMemoryRevocationStore,
)
from tokenguard.infrastructure.revocation.redis_revocation_store import RedisRevocationStore
from tokenguard.infrastructure.security.argon2_password_hasher import Argon2PasswordHasher
from tokenguard.infrastructure.security.jwt_token_signer import JWTTokenSigner

logger = logging.getLogger(__name__)


@dataclass
class AuthContainer:
    """Long-lived services and the resources they hold."""

    settings: Settings
    clock: IClock
    account_store: IAccountStore
    revocation_store: IRevocationStore
    lockout_tracker: ILockoutTracker
    token_engine: TokenEngine
    auth_service: AuthService
    sweeper: RevocationSweeper
    engine: AsyncEngine | None = None

    def start(self) -> None:
        self.sweeper.start()

    async def aclose(self) -> None:
        await self.sweeper.stop()
        await self.revocation_store.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def build_revocation_store(settings: Settings, clock: IClock) -> IRevocationStore:
    """Pick the revocation backend named in settings."""
    if settings.revocation_backend == "redis":
        logger.info("Using Redis revocation store")
        return RedisRevocationStore.from_url(
            settings.redis_url, clock, max_token_lifetime=settings.refresh_token_ttl
        )

    logger.info("Using in-memory revocation store")
    return InMemoryRevocationStore(clock, max_token_lifetime=settings.refresh_token_ttl)


def build_container(
    settings: Settings,
    *,
    clock: IClock | None = None,
    account_store: IAccountStore | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AuthContainer:
    """
    Wire the full object graph from settings.

    Args:
        settings: Application settings
        clock: Time source (SystemClock unless overridden)
        account_store: External account collaborator; the SQLAlchemy reference
            store is built when omitted
        session_factory: Session factory for the reference store; an engine is
            created from settings when omitted

    Returns:
        AuthContainer ready to start
    """
    clock = clock or SystemClock()

    engine: AsyncEngine | None = None
    if account_store is None:
        if session_factory is None:
            engine = create_database_engine(settings)
            session_factory = create_session_factory(engine)
        account_store = SqlAlchemyAccountStore(session_factory, Argon2PasswordHasher())

    signer = JWTTokenSigner(
        keys=settings.signing_keys,
        active_key_id=settings.signing_key_id,
        algorithm=settings.algorithm,
    )
    revocation_store = build_revocation_store(settings, clock)
    lockout_tracker = InMemoryLockoutTracker(
        clock,
        max_failed_attempts=settings.max_failed_attempts,
        lockout_duration=settings.lockout_duration,
        failure_window=settings.failure_window,
        idle_ttl=settings.lockout_idle_ttl,
    )
    token_engine = TokenEngine(
        signer=signer,
        revocation_store=revocation_store,
        clock=clock,
        issuer=settings.token_issuer,
        audience=settings.token_audience,
        access_token_ttl=settings.access_token_ttl,
        refresh_token_ttl=settings.refresh_token_ttl,
    )
    auth_service = AuthService(
        credential_validator=CredentialValidator(
            account_store, timeout_seconds=settings.credential_timeout_seconds
        ),
        lockout_tracker=lockout_tracker,
        token_engine=token_engine,
        revoke_subject_on_refresh_reuse=settings.revoke_subject_on_refresh_reuse,
        admin_role=settings.admin_role,
    )
    sweeper = RevocationSweeper(
        revocation_store,
        lockout_tracker,
        interval_seconds=settings.revocation_sweep_interval_seconds,
    )

    return AuthContainer(
        settings=settings,
        clock=clock,
        account_store=account_store,
        revocation_store=revocation_store,
        lockout_tracker=lockout_tracker,
        token_engine=token_engine,
        auth_service=auth_service,
        sweeper=sweeper,
        engine=engine,
    )
