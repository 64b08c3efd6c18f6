"""Reference account store backed by SQLAlchemy.

Implements the IAccountStore collaborator over an ``accounts`` table so the
service can run standalone. Deployments with their own user directory
provide a different IAccountStore instead.
"""

import asyncio
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenguard.domain.entities.account import (
    AccountSnapshot,
    AccountStatus,
    CredentialCheck,
)
from tokenguard.domain.exceptions import (
    AccountStoreUnavailableException,
    InvalidEntityStateException,
)
from tokenguard.domain.repositories.account_store import IAccountStore
from tokenguard.domain.services.password_hasher import IPasswordHasher
from tokenguard.infrastructure.persistence.models.account_model import AccountModel

logger = logging.getLogger(__name__)


class SqlAlchemyAccountStore(IAccountStore):
    """
    IAccountStore over the accounts table.

    Each call opens its own short-lived session. Hashing runs in a worker
    thread so Argon2 does not block the event loop.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        password_hasher: IPasswordHasher,
    ):
        self._session_factory = session_factory
        self._password_hasher = password_hasher
        # Verified against for unknown identifiers so both paths cost one hash
        self._dummy_hash = password_hasher.hash(uuid.uuid4().hex)

    async def verify_credentials(self, identifier: str, secret: str) -> CredentialCheck:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AccountModel).where(AccountModel.identifier == identifier)
                )
                account = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error(f"Account lookup failed: {exc}")
            raise AccountStoreUnavailableException() from exc

        if account is None:
            await asyncio.to_thread(self._password_hasher.verify, secret, self._dummy_hash)
            return CredentialCheck.rejected()

        matches = await asyncio.to_thread(
            self._password_hasher.verify, secret, account.password_hash
        )
        if not matches:
            return CredentialCheck.rejected()

        snapshot = account.to_snapshot()
        return CredentialCheck(
            valid=True,
            subject_id=snapshot.subject_id,
            status=snapshot.status,
            roles=snapshot.roles,
        )

    async def get_account(self, subject_id: str) -> AccountSnapshot | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AccountModel).where(AccountModel.subject_id == subject_id)
                )
                account = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error(f"Account lookup failed: {exc}")
            raise AccountStoreUnavailableException() from exc

        return account.to_snapshot() if account is not None else None

    async def create_account(
        self,
        identifier: str,
        secret: str,
        roles: tuple[str, ...] = (),
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> AccountSnapshot:
        """
        Register an account (seeding and administration).

        Args:
            identifier: Normalized login identifier
            secret: Plain secret, stored as an Argon2 hash
            roles: Roles copied into issued tokens
            status: Initial account status

        Returns:
            Snapshot of the new account, with a generated subject id

        Raises:
            InvalidEntityStateException: If the identifier is already taken
        """
        password_hash = await asyncio.to_thread(self._password_hasher.hash, secret)
        account = AccountModel(
            subject_id=uuid.uuid4().hex,
            identifier=identifier,
            password_hash=password_hash,
            status=status.value,
            roles=list(roles),
        )
        try:
            async with self._session_factory() as session:
                session.add(account)
                await session.commit()
        except IntegrityError as exc:
            raise InvalidEntityStateException(
                f"Identifier {identifier!r} is already registered"
            ) from exc
        except SQLAlchemyError as exc:
            raise AccountStoreUnavailableException() from exc

        logger.info(f"Created account {account.subject_id}")
        return account.to_snapshot()

    async def set_status(self, subject_id: str, status: AccountStatus) -> bool:
        """Change an account's status; returns False if the subject is unknown."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AccountModel).where(AccountModel.subject_id == subject_id)
                )
                account = result.scalar_one_or_none()
                if account is None:
                    return False
                account.status = status.value
                await session.commit()
        except SQLAlchemyError as exc:
            raise AccountStoreUnavailableException() from exc

        logger.info(f"Account {subject_id} status set to {status.value}")
        return True
