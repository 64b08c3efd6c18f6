"""Unit tests for the revocation stores.

The same behavioural contract is checked against both implementations:
InMemoryRevocationStore directly, RedisRevocationStore over FakeRedis.
"""

import asyncio
from datetime import timedelta

import pytest

from tokenguard.domain.entities.revocation import RevocationReason
from tokenguard.domain.exceptions import StoreUnavailableException
from tokenguard.infrastructure.revocation.in_memory_revocation_store import (
    InMemoryRevocationStore,
)
from tokenguard.infrastructure.revocation.redis_revocation_store import RedisRevocationStore
from tests.fakes.redis_fake import FakeRedis

pytestmark = pytest.mark.unit

MAX_LIFETIME = timedelta(hours=24)


@pytest.fixture
def fake_redis(clock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture(params=["memory", "redis"])
def store(request, clock, fake_redis):
    if request.param == "memory":
        return InMemoryRevocationStore(clock, max_token_lifetime=MAX_LIFETIME)
    return RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)


# === SINGLE TOKENS ===


@pytest.mark.asyncio
async def test_revoke_token_is_add_if_absent(store, clock):
    expires_at = clock.now() + timedelta(minutes=15)

    assert await store.revoke_token("jti-1", expires_at) is True
    assert await store.revoke_token("jti-1", expires_at, RevocationReason.ROTATED) is False

    entry = await store.get_entry("jti-1")
    assert entry is not None
    assert entry.reason == RevocationReason.LOGOUT


@pytest.mark.asyncio
async def test_revoked_token_is_reported_until_it_expires(store, clock):
    issued_at = clock.now()
    await store.revoke_token("jti-1", issued_at + timedelta(minutes=15))

    assert await store.is_revoked("jti-1", "subj-alice", issued_at) is True
    assert await store.is_revoked("jti-2", "subj-alice", issued_at) is False

    clock.advance(minutes=16)
    assert await store.get_entry("jti-1") is None


@pytest.mark.asyncio
async def test_get_entry_of_unknown_token_is_none(store):
    assert await store.get_entry("never-revoked") is None


# === SUBJECT EPOCHS ===


@pytest.mark.asyncio
async def test_subject_epoch_covers_tokens_issued_at_or_before(store, clock):
    issued_before = clock.now()
    clock.advance(seconds=10)

    entry = await store.revoke_all_for_subject("subj-alice")
    assert entry.subject_id == "subj-alice"
    assert entry.revoked_at == clock.now()
    assert entry.expires_at == clock.now() + MAX_LIFETIME

    assert await store.is_revoked("jti-1", "subj-alice", issued_before) is True
    assert await store.is_revoked("jti-2", "subj-alice", clock.now()) is True
    assert await store.is_revoked("jti-3", "subj-alice", clock.now() + timedelta(seconds=1)) is False
    assert await store.is_revoked("jti-4", "subj-bob", issued_before) is False


@pytest.mark.asyncio
async def test_subject_epoch_never_moves_backwards(store, clock):
    later = clock.now() + timedelta(minutes=5)
    await store.revoke_all_for_subject("subj-alice", since=later)

    entry = await store.revoke_all_for_subject("subj-alice", since=clock.now())

    assert entry.revoked_at == later
    assert await store.is_revoked("jti-1", "subj-alice", later) is True


@pytest.mark.asyncio
async def test_concurrent_subject_revocations_keep_reason_of_latest_epoch(store, clock):
    later = clock.now() + timedelta(seconds=1)

    first, second = await asyncio.gather(
        store.revoke_all_for_subject("subj-alice", since=later, reason=RevocationReason.COMPROMISED),
        store.revoke_all_for_subject("subj-alice", since=clock.now(), reason=RevocationReason.ADMIN),
    )
    again = await store.revoke_all_for_subject("subj-alice", since=clock.now())

    for entry in (first, second, again):
        assert entry.revoked_at == later
        assert entry.reason == RevocationReason.COMPROMISED


@pytest.mark.asyncio
async def test_subject_epoch_lapses_after_longest_token_lifetime(store, clock):
    issued_at = clock.now()
    await store.revoke_all_for_subject("subj-alice")

    clock.advance(MAX_LIFETIME + timedelta(seconds=2))

    assert await store.is_revoked("jti-1", "subj-alice", issued_at) is False


# === EVICTION ===


@pytest.mark.asyncio
async def test_in_memory_purge_removes_only_expired_entries(clock):
    store = InMemoryRevocationStore(clock, max_token_lifetime=MAX_LIFETIME)
    await store.revoke_token("short", clock.now() + timedelta(minutes=1))
    await store.revoke_token("long", clock.now() + timedelta(hours=2))
    await store.revoke_all_for_subject("subj-alice")

    clock.advance(minutes=2)
    assert await store.purge_expired() == 1

    clock.advance(MAX_LIFETIME)
    assert await store.purge_expired() == 2
    assert await store.purge_expired() == 0


@pytest.mark.asyncio
async def test_redis_purge_trims_stale_subject_epochs(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)
    await store.revoke_all_for_subject("subj-alice")
    clock.advance(hours=1)
    await store.revoke_all_for_subject("subj-bob")

    clock.advance(MAX_LIFETIME - timedelta(minutes=30))

    assert await store.purge_expired() == 1
    assert await fake_redis.zscore("tokenguard:revoked:subjects", "subj-alice") is None
    assert await fake_redis.zscore("tokenguard:revoked:subjects", "subj-bob") is not None


# === REDIS SPECIFICS ===


@pytest.mark.asyncio
async def test_redis_token_keys_expire_with_the_token(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)

    await store.revoke_token("jti-1", clock.now() + timedelta(minutes=15))

    ttl = fake_redis.ttl_of("tokenguard:revoked:token:jti-1")
    assert timedelta(minutes=15) <= ttl <= timedelta(minutes=15, seconds=1)


@pytest.mark.asyncio
async def test_redis_ttl_is_at_least_one_second(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)

    await store.revoke_token("jti-1", clock.now() - timedelta(minutes=1))

    assert fake_redis.ttl_of("tokenguard:revoked:token:jti-1") == timedelta(seconds=1)


@pytest.mark.asyncio
async def test_redis_subject_reason_is_kept(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)

    first = await store.revoke_all_for_subject("subj-alice", reason=RevocationReason.COMPROMISED)
    again = await store.revoke_all_for_subject(
        "subj-alice", since=clock.now() - timedelta(hours=1)
    )

    assert first.reason == RevocationReason.COMPROMISED
    assert again.reason == RevocationReason.COMPROMISED
    assert again.revoked_at == first.revoked_at


@pytest.mark.asyncio
async def test_redis_errors_become_store_unavailable(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)
    fake_redis.fail = True

    with pytest.raises(StoreUnavailableException):
        await store.is_revoked("jti-1", "subj-alice", clock.now())
    with pytest.raises(StoreUnavailableException):
        await store.revoke_token("jti-1", clock.now() + timedelta(minutes=1))
    with pytest.raises(StoreUnavailableException):
        await store.revoke_all_for_subject("subj-alice")


@pytest.mark.asyncio
async def test_redis_aclose_closes_client(clock, fake_redis):
    store = RedisRevocationStore(fake_redis, clock, max_token_lifetime=MAX_LIFETIME)

    await store.aclose()

    assert fake_redis.closed is True
