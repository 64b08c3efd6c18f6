"""Fake implementations for testing."""

from tests.fakes.account_store_fake import FakeAccountStore
from tests.fakes.clock_fake import FakeClock
from tests.fakes.failing_stores_fake import UnavailableLockoutTracker, UnavailableRevocationStore
from tests.fakes.redis_fake import FakeRedis

__all__ = [
    "FakeAccountStore",
    "FakeClock",
    "FakeRedis",
    "UnavailableLockoutTracker",
    "UnavailableRevocationStore",
]
