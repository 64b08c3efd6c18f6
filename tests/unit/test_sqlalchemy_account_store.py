"""Unit tests for SqlAlchemyAccountStore over a throwaway SQLite database."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tokenguard.domain.entities.account import AccountStatus
from tokenguard.domain.exceptions import (
    AccountStoreUnavailableException,
    InvalidEntityStateException,
)
from tokenguard.infrastructure.accounts.sqlalchemy_account_store import SqlAlchemyAccountStore
from tokenguard.infrastructure.persistence.database import (
    Base,
    create_schema,
    create_session_factory,
)
from tokenguard.infrastructure.security.argon2_password_hasher import Argon2PasswordHasher

pytestmark = pytest.mark.unit


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine) -> SqlAlchemyAccountStore:
    store = SqlAlchemyAccountStore(create_session_factory(engine), Argon2PasswordHasher())
    await store.create_account("alice", "correct-password", roles=("user",))
    return store


@pytest.mark.asyncio
async def test_verify_correct_credentials(store):
    check = await store.verify_credentials("alice", "correct-password")

    assert check.valid is True
    assert check.status is AccountStatus.ACTIVE
    assert check.roles == ("user",)


@pytest.mark.asyncio
async def test_wrong_secret_and_unknown_identifier_look_the_same(store):
    wrong_secret = await store.verify_credentials("alice", "wrong")
    unknown = await store.verify_credentials("nobody", "correct-password")

    assert wrong_secret == unknown
    assert wrong_secret.valid is False


@pytest.mark.asyncio
async def test_get_account_reflects_status_changes(store):
    check = await store.verify_credentials("alice", "correct-password")

    assert await store.set_status(check.subject_id, AccountStatus.DISABLED) is True

    snapshot = await store.get_account(check.subject_id)
    assert snapshot.status is AccountStatus.DISABLED
    assert await store.get_account("unknown-subject") is None
    assert await store.set_status("unknown-subject", AccountStatus.ACTIVE) is False


@pytest.mark.asyncio
async def test_duplicate_identifier_is_rejected(store):
    with pytest.raises(InvalidEntityStateException):
        await store.create_account("alice", "another-password")


@pytest.mark.asyncio
async def test_database_failure_is_store_unavailable(store, engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    with pytest.raises(AccountStoreUnavailableException):
        await store.verify_credentials("alice", "correct-password")
