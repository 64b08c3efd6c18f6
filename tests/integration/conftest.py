"""Integration test fixtures.

Runs the real application (lifespan, container, routers, exception
handlers) against a throwaway SQLite database file, with the reference
SQLAlchemy account store and Argon2 hashing.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from tokenguard.domain.entities.account import AccountStatus
from tokenguard.infrastructure.config.settings import Settings
from tokenguard.main import create_app
from tests.fakes.account_store_fake import FakeAccountStore

TEST_SECRET = "integration-secret-key-at-least-32-chars"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        secret_key=TEST_SECRET,
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'tokenguard.db'}",
        environment="test",
        max_failed_attempts=3,
    )


@pytest.fixture
def client(settings) -> Generator[TestClient]:
    """
    Test client over the full app, seeded with three accounts:

    alice / correct-password   roles ["user"]
    root  / root-password      roles ["user", "admin"]
    eve   / eve-password       disabled
    """
    app = create_app(settings)

    with TestClient(app) as test_client:
        store = app.state.container.account_store
        test_client.portal.call(store.create_account, "alice", "correct-password", ("user",))
        test_client.portal.call(store.create_account, "root", "root-password", ("user", "admin"))
        test_client.portal.call(
            store.create_account, "eve", "eve-password", (), AccountStatus.DISABLED
        )
        yield test_client


@pytest.fixture
def fake_account_store() -> FakeAccountStore:
    store = FakeAccountStore()
    store.add_account("alice", "correct-password", subject_id="subj-alice", roles=("user",))
    return store


@pytest.fixture
def fake_store_client(settings, fake_account_store) -> Generator[TestClient]:
    """Test client whose account collaborator is a FakeAccountStore."""
    app = create_app(settings, account_store=fake_account_store)

    with TestClient(app) as test_client:
        yield test_client
