"""Redis revocation store implementation.

Shares one blacklist between every worker process. Redis provides what the
in-memory store has to do by hand:

- Revoked tokens are plain keys written with ``SET NX EX``: the NX makes
  the write an atomic add-if-absent, the EX evicts the key when the token
  would have expired anyway.
- Subject epochs live in one sorted set scored by epoch. A Lua script raises
  the epoch and records its reason in one step; ``purge_expired`` trims
  epochs older than the longest token lifetime.

Any Redis failure is raised as StoreUnavailableException; the token engine
then fails closed.
"""

import json
import logging
from datetime import UTC, datetime, timedelta

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from tokenguard.domain.entities.revocation import RevocationEntry, RevocationReason
from tokenguard.domain.exceptions import StoreUnavailableException
from tokenguard.domain.repositories.revocation_store import IRevocationStore
from tokenguard.domain.services.clock import IClock

logger = logging.getLogger(__name__)


class RedisRevocationStore(IRevocationStore):
    """Blacklist backed by Redis."""

    # Raise a subject epoch and record its reason in one step. Returns the
    # epoch in force and its reason; an equal or later epoch is left alone.
    SUBJECT_EPOCH_SCRIPT = """
local current = redis.call('ZSCORE', KEYS[1], ARGV[1])
if current == false or tonumber(current) < tonumber(ARGV[2]) then
  redis.call('ZADD', KEYS[1], ARGV[2], ARGV[1])
  redis.call('HSET', KEYS[2], ARGV[1], ARGV[3])
  return {ARGV[2], ARGV[3]}
end
return {current, redis.call('HGET', KEYS[2], ARGV[1]) or ARGV[3]}
"""

    def __init__(
        self,
        client: aioredis.Redis,
        clock: IClock,
        max_token_lifetime: timedelta,
        key_prefix: str = "tokenguard:revoked",
    ):
        """
        Initialize the store around an existing client.

        Args:
            client: redis.asyncio client created with decode_responses=True
            clock: Time source for revocation timestamps and TTLs
            max_token_lifetime: Longest lifetime of any token (the refresh TTL)
            key_prefix: Namespace for every key this store writes
        """
        self._client = client
        self._clock = clock
        self._max_token_lifetime = max_token_lifetime
        self._prefix = key_prefix
        self._raise_subject_epoch = client.register_script(self.SUBJECT_EPOCH_SCRIPT)

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        clock: IClock,
        max_token_lifetime: timedelta,
        *,
        socket_timeout: float = 5.0,
    ) -> "RedisRevocationStore":
        """Create a store with its own connection pool and explicit timeouts."""
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client, clock, max_token_lifetime)

    def _token_key(self, token_id: str) -> str:
        return f"{self._prefix}:token:{token_id}"

    @property
    def _subjects_key(self) -> str:
        return f"{self._prefix}:subjects"

    @property
    def _reasons_key(self) -> str:
        return f"{self._prefix}:subject_reasons"

    @staticmethod
    def _ttl_seconds(expires_at: datetime, now: datetime) -> int:
        """TTL for an absolute expiry, clamped to at least one second."""
        return max(1, int((expires_at - now).total_seconds()) + 1)

    async def revoke_token(
        self,
        token_id: str,
        expires_at: datetime,
        reason: str = RevocationReason.LOGOUT,
    ) -> bool:
        now = self._clock.now()
        value = json.dumps(
            {
                "revoked_at": now.timestamp(),
                "expires_at": expires_at.timestamp(),
                "reason": reason,
            }
        )
        try:
            created = await self._client.set(
                self._token_key(token_id),
                value,
                ex=self._ttl_seconds(expires_at, now),
                nx=True,
            )
        except RedisError as exc:
            raise StoreUnavailableException(f"Redis revoke_token failed: {exc}") from exc
        return bool(created)

    async def revoke_all_for_subject(
        self,
        subject_id: str,
        since: datetime | None = None,
        reason: str = RevocationReason.ADMIN,
    ) -> RevocationEntry:
        epoch = since or self._clock.now()
        try:
            score, reason = await self._raise_subject_epoch(
                keys=[self._subjects_key, self._reasons_key],
                args=[subject_id, epoch.timestamp(), reason],
            )
        except RedisError as exc:
            raise StoreUnavailableException(
                f"Redis revoke_all_for_subject failed: {exc}"
            ) from exc

        effective = datetime.fromtimestamp(float(score), tz=UTC)
        return RevocationEntry(
            subject_id=subject_id,
            revoked_at=effective,
            expires_at=effective + self._max_token_lifetime,
            reason=reason,
        )

    async def is_revoked(
        self, token_id: str, subject_id: str, issued_at: datetime
    ) -> bool:
        try:
            pipe = self._client.pipeline()
            pipe.exists(self._token_key(token_id))
            pipe.zscore(self._subjects_key, subject_id)
            token_exists, epoch_score = await pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableException(f"Redis is_revoked failed: {exc}") from exc

        if token_exists:
            return True

        if epoch_score is None:
            return False

        epoch = datetime.fromtimestamp(epoch_score, tz=UTC)
        if epoch + self._max_token_lifetime < self._clock.now():
            return False
        return epoch >= issued_at

    async def get_entry(self, token_id: str) -> RevocationEntry | None:
        try:
            raw = await self._client.get(self._token_key(token_id))
        except RedisError as exc:
            raise StoreUnavailableException(f"Redis get_entry failed: {exc}") from exc

        if raw is None:
            return None

        data = json.loads(raw)
        return RevocationEntry(
            token_id=token_id,
            revoked_at=datetime.fromtimestamp(data["revoked_at"], tz=UTC),
            expires_at=datetime.fromtimestamp(data["expires_at"], tz=UTC),
            reason=data["reason"],
        )

    async def purge_expired(self) -> int:
        """Trim stale subject epochs; token keys expire through their Redis TTL."""
        cutoff = (self._clock.now() - self._max_token_lifetime).timestamp()
        try:
            stale = await self._client.zrangebyscore(self._subjects_key, "-inf", f"({cutoff}")
            if not stale:
                return 0
            pipe = self._client.pipeline()
            pipe.zrem(self._subjects_key, *stale)
            pipe.hdel(self._reasons_key, *stale)
            removed, _ = await pipe.execute()
        except RedisError as exc:
            raise StoreUnavailableException(f"Redis purge_expired failed: {exc}") from exc

        logger.debug(f"Purged {removed} expired subject epochs from Redis")
        return int(removed)

    async def aclose(self) -> None:
        await self._client.aclose()
