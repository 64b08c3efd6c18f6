"""Unit tests for TokenEngine.

Tests the token lifecycle against a FakeClock:
1. Minting (TTLs, shared iat, distinct ids)
2. Validation order and failure reasons
3. Revocation of single tokens and whole subjects
4. Refresh rotation, including the concurrent-refresh race
5. Fail-closed behaviour when the revocation store is down
"""

import asyncio
from datetime import timedelta

import pytest

from tokenguard.application.services.token_engine import TokenEngine
from tokenguard.domain.entities.revocation import RevocationReason
from tokenguard.domain.entities.token import TokenType
from tokenguard.domain.exceptions import (
    MalformedTokenException,
    TokenExpiredException,
    TokenRevokedException,
    WrongTokenTypeException,
)
from tests.constants import ACCESS_TTL, REFRESH_TTL, TEST_AUDIENCE, TEST_ISSUER
from tests.fakes.failing_stores_fake import UnavailableRevocationStore

pytestmark = pytest.mark.unit


# === CONSTRUCTION ===


def test_refresh_ttl_must_exceed_access_ttl(signer, revocation_store, clock):
    with pytest.raises(ValueError, match="longer than access"):
        TokenEngine(
            signer, revocation_store, clock, TEST_ISSUER, TEST_AUDIENCE,
            access_token_ttl=timedelta(hours=1), refresh_token_ttl=timedelta(hours=1),
        )


def test_ttl_must_be_whole_seconds(signer, revocation_store, clock):
    with pytest.raises(ValueError, match="whole positive number of seconds"):
        TokenEngine(
            signer, revocation_store, clock, TEST_ISSUER, TEST_AUDIENCE,
            access_token_ttl=timedelta(seconds=1.5),
        )


# === MINT ===


def test_mint_lifetimes_equal_configured_ttls(token_engine):
    pair = token_engine.mint("subj-alice", ["user"])

    access, refresh = pair.access_claims, pair.refresh_claims
    assert access.expires_at - access.issued_at == ACCESS_TTL
    assert refresh.expires_at - refresh.issued_at == REFRESH_TTL
    assert access.issued_at == refresh.issued_at
    assert access.token_id != refresh.token_id
    assert access.token_type is TokenType.ACCESS
    assert refresh.token_type is TokenType.REFRESH
    assert access.roles == ("user",)


def test_mint_keeps_sub_second_issue_time(token_engine, clock):
    clock.advance(microseconds=750_000)

    pair = token_engine.mint("subj-alice")

    assert pair.access_claims.issued_at == clock.now()
    assert pair.access_claims.issued_at.microsecond == 750_000
    assert pair.access_claims.expires_at - pair.access_claims.issued_at == ACCESS_TTL


# === VALIDATE ===


@pytest.mark.asyncio
async def test_validate_freshly_minted_tokens(token_engine):
    pair = token_engine.mint("subj-alice", ["user"])

    access = await token_engine.validate(pair.access_token, TokenType.ACCESS)
    refresh = await token_engine.validate(pair.refresh_token, TokenType.REFRESH)

    assert access == pair.access_claims
    assert refresh == pair.refresh_claims


@pytest.mark.asyncio
async def test_validate_at_exact_expiry_still_passes(token_engine, clock):
    pair = token_engine.mint("subj-alice")
    clock.set(pair.access_claims.expires_at)

    await token_engine.validate(pair.access_token, TokenType.ACCESS)


@pytest.mark.asyncio
async def test_validate_after_expiry_fails_expired(token_engine, clock):
    pair = token_engine.mint("subj-alice")
    clock.advance(ACCESS_TTL + timedelta(seconds=1))

    with pytest.raises(TokenExpiredException):
        await token_engine.validate(pair.access_token, TokenType.ACCESS)

    # The refresh token lives longer
    await token_engine.validate(pair.refresh_token, TokenType.REFRESH)


@pytest.mark.asyncio
async def test_validate_wrong_type_fails(token_engine):
    pair = token_engine.mint("subj-alice")

    with pytest.raises(WrongTokenTypeException):
        await token_engine.validate(pair.refresh_token, TokenType.ACCESS)
    with pytest.raises(WrongTokenTypeException):
        await token_engine.validate(pair.access_token, TokenType.REFRESH)


@pytest.mark.asyncio
async def test_validate_rejects_foreign_audience(signer, revocation_store, clock, token_engine):
    other = TokenEngine(signer, revocation_store, clock, TEST_ISSUER, "some-other-service")
    pair = other.mint("subj-alice")

    with pytest.raises(MalformedTokenException):
        await token_engine.validate(pair.access_token, TokenType.ACCESS)


@pytest.mark.asyncio
async def test_expired_is_reported_before_wrong_type(token_engine, clock):
    pair = token_engine.mint("subj-alice")
    clock.advance(ACCESS_TTL + timedelta(seconds=1))

    with pytest.raises(TokenExpiredException):
        await token_engine.validate(pair.access_token, TokenType.REFRESH)


# === REVOCATION ===


@pytest.mark.asyncio
async def test_revoked_token_fails_until_natural_expiry(token_engine, clock):
    pair = token_engine.mint("subj-alice")
    assert await token_engine.revoke(pair.access_claims) is True

    with pytest.raises(TokenRevokedException) as exc_info:
        await token_engine.validate(pair.access_token, TokenType.ACCESS)
    assert exc_info.value.reason == RevocationReason.LOGOUT

    clock.advance(ACCESS_TTL - timedelta(seconds=1))
    with pytest.raises(TokenRevokedException):
        await token_engine.validate(pair.access_token, TokenType.ACCESS)

    clock.advance(seconds=2)
    with pytest.raises(TokenExpiredException):
        await token_engine.validate(pair.access_token, TokenType.ACCESS)


@pytest.mark.asyncio
async def test_revoke_twice_reports_already_revoked(token_engine):
    pair = token_engine.mint("subj-alice")

    assert await token_engine.revoke(pair.access_claims) is True
    assert await token_engine.revoke(pair.access_claims) is False


@pytest.mark.asyncio
async def test_revoking_one_token_leaves_the_other_valid(token_engine):
    pair = token_engine.mint("subj-alice")

    await token_engine.revoke(pair.access_claims)

    await token_engine.validate(pair.refresh_token, TokenType.REFRESH)


@pytest.mark.asyncio
async def test_subject_revocation_covers_tokens_issued_before_but_not_after(token_engine, clock):
    before = token_engine.mint("subj-alice")
    other_subject = token_engine.mint("subj-bob")
    clock.advance(seconds=5)

    await token_engine.revoke_subject("subj-alice")
    clock.advance(seconds=1)
    after = token_engine.mint("subj-alice")

    with pytest.raises(TokenRevokedException):
        await token_engine.validate(before.access_token, TokenType.ACCESS)
    with pytest.raises(TokenRevokedException):
        await token_engine.validate(before.refresh_token, TokenType.REFRESH)

    await token_engine.validate(after.access_token, TokenType.ACCESS)
    await token_engine.validate(other_subject.access_token, TokenType.ACCESS)


@pytest.mark.asyncio
async def test_subject_revocation_spares_tokens_minted_later_in_the_same_second(
    token_engine, clock
):
    before = token_engine.mint("subj-alice")
    await token_engine.revoke_subject("subj-alice")
    clock.advance(microseconds=300_000)

    after = token_engine.mint("subj-alice")

    with pytest.raises(TokenRevokedException):
        await token_engine.validate(before.access_token, TokenType.ACCESS)
    claims = await token_engine.validate(after.access_token, TokenType.ACCESS)
    assert claims.issued_at == clock.now()
    await token_engine.validate(after.refresh_token, TokenType.REFRESH)


@pytest.mark.asyncio
async def test_unavailable_store_fails_closed(signer, clock):
    engine = TokenEngine(
        signer, UnavailableRevocationStore(), clock, TEST_ISSUER, TEST_AUDIENCE
    )
    pair = engine.mint("subj-alice")

    with pytest.raises(TokenRevokedException, match="could not be confirmed"):
        await engine.validate(pair.access_token, TokenType.ACCESS)


# === REFRESH ===


@pytest.mark.asyncio
async def test_refresh_rotates_and_consumes_old_token(token_engine, clock):
    pair = token_engine.mint("subj-alice", ["user"])
    clock.advance(minutes=1)

    new_pair = await token_engine.refresh(pair.refresh_token)

    assert new_pair.refresh_claims.token_id != pair.refresh_claims.token_id
    assert new_pair.access_claims.issued_at > pair.access_claims.issued_at
    assert new_pair.access_claims.roles == ("user",)
    await token_engine.validate(new_pair.refresh_token, TokenType.REFRESH)

    with pytest.raises(TokenRevokedException) as exc_info:
        await token_engine.refresh(pair.refresh_token)
    assert exc_info.value.reason == RevocationReason.ROTATED


@pytest.mark.asyncio
async def test_refresh_uses_resolved_roles(token_engine):
    pair = token_engine.mint("subj-alice", ["user", "admin"])

    async def current_roles(claims):
        return ["user"]

    new_pair = await token_engine.refresh(pair.refresh_token, roles_for=current_roles)

    assert new_pair.access_claims.roles == ("user",)


@pytest.mark.asyncio
async def test_refresh_with_access_token_fails_wrong_type(token_engine):
    pair = token_engine.mint("subj-alice")

    with pytest.raises(WrongTokenTypeException):
        await token_engine.refresh(pair.access_token)


@pytest.mark.asyncio
async def test_expired_refresh_token_cannot_rotate(token_engine, clock):
    pair = token_engine.mint("subj-alice")
    clock.advance(REFRESH_TTL + timedelta(seconds=1))

    with pytest.raises(TokenExpiredException):
        await token_engine.refresh(pair.refresh_token)


@pytest.mark.asyncio
async def test_concurrent_refresh_has_exactly_one_winner(token_engine):
    pair = token_engine.mint("subj-alice")

    async def current_roles(claims):
        # Yield so both refreshes pass validation before either consumes
        await asyncio.sleep(0)
        return claims.roles

    results = await asyncio.gather(
        *(token_engine.refresh(pair.refresh_token, roles_for=current_roles) for _ in range(5)),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, BaseException)]
    losers = [r for r in results if isinstance(r, BaseException)]
    assert len(winners) == 1
    assert len(losers) == 4
    assert all(isinstance(e, TokenRevokedException) for e in losers)
