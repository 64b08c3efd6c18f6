"""Pytest configuration and fixtures.

Shared fixtures build the real application services around fakes:
- FakeClock instead of the wall clock (expiry and lockout are deterministic)
- FakeAccountStore instead of a database
- The in-memory revocation store and lockout tracker themselves

Each test gets fresh instances, so no state leaks between tests.
"""

from datetime import timedelta

import pytest

from tokenguard.application.services.auth_service import AuthService
from tokenguard.application.services.credential_validator import CredentialValidator
from tokenguard.application.services.token_engine import TokenEngine
from tokenguard.domain.entities.account import AccountStatus
from tokenguard.infrastructure.lockout.in_memory_lockout_tracker import InMemoryLockoutTracker
from tokenguard.infrastructure.revocation.in_memory_revocation_store import (
    InMemoryRevocationStore,
)
from tokenguard.infrastructure.security.jwt_token_signer import JWTTokenSigner
from tests.constants import ACCESS_TTL, REFRESH_TTL, TEST_AUDIENCE, TEST_ISSUER, TEST_SECRET
from tests.fakes.account_store_fake import FakeAccountStore
from tests.fakes.clock_fake import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def signer() -> JWTTokenSigner:
    return JWTTokenSigner.from_secret(TEST_SECRET, key_id="k1")


@pytest.fixture
def revocation_store(clock) -> InMemoryRevocationStore:
    return InMemoryRevocationStore(clock, max_token_lifetime=REFRESH_TTL)


@pytest.fixture
def lockout_tracker(clock) -> InMemoryLockoutTracker:
    return InMemoryLockoutTracker(
        clock,
        max_failed_attempts=5,
        lockout_duration=timedelta(minutes=15),
        failure_window=timedelta(minutes=15),
        idle_ttl=timedelta(hours=1),
    )


@pytest.fixture
def token_engine(signer, revocation_store, clock) -> TokenEngine:
    return TokenEngine(
        signer=signer,
        revocation_store=revocation_store,
        clock=clock,
        issuer=TEST_ISSUER,
        audience=TEST_AUDIENCE,
        access_token_ttl=ACCESS_TTL,
        refresh_token_ttl=REFRESH_TTL,
    )


@pytest.fixture
def account_store() -> FakeAccountStore:
    """
    Provide a FakeAccountStore with two accounts.

    alice / correct-password, roles ("user",)
    root  / root-password,    roles ("user", "admin")
    """
    store = FakeAccountStore()
    store.add_account("alice", "correct-password", subject_id="subj-alice", roles=("user",))
    store.add_account(
        "root", "root-password", subject_id="subj-root", roles=("user", "admin")
    )
    store.add_account(
        "mallory", "mallory-password", subject_id="subj-mallory", status=AccountStatus.DISABLED
    )
    return store


@pytest.fixture
def auth_service(account_store, lockout_tracker, token_engine) -> AuthService:
    """Provide AuthService with the in-memory stores and a fake account store."""
    return AuthService(
        credential_validator=CredentialValidator(account_store, timeout_seconds=0.5),
        lockout_tracker=lockout_tracker,
        token_engine=token_engine,
    )
