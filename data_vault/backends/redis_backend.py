"""
Redis storage backend.

Tokens are stored as plain Redis keys (``<prefix><token>``) holding the raw
ciphertext. Uniqueness relies on ``SET ... NX``.

Security Note:
    Never log ciphertext values. Only log token prefixes.
"""
import asyncio
import logging
from typing import Any, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ..config import RedisConfig
from ..exceptions import BackendError, Conflict, NotFound

logger = logging.getLogger("data_vault")

_TRANSPORT_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class RedisBackend:
    """Volatile key-value backend on top of ``redis.asyncio``.

    Args:
        client: A ``redis.asyncio.Redis`` client (``decode_responses=False``).
        prefix: Namespace prepended to every token.
        ttl: Optional expiry in seconds for stored records.
    """

    def __init__(
        self,
        client: Any,
        prefix: str = "data_vault:",
        ttl: Optional[int] = None,
    ):
        self._redis = client
        self._prefix = prefix
        self._ttl = ttl

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def put_if_absent(self, token: str, ciphertext: bytes) -> None:
        try:
            created = await self._redis.set(
                self._key(token), ciphertext, nx=True, ex=self._ttl,
            )
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"Redis SET failed: {type(err).__name__}") from err
        if not created:
            raise Conflict("token already stored")

    async def get(self, token: str) -> bytes:
        try:
            value = await self._redis.get(self._key(token))
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"Redis GET failed: {type(err).__name__}") from err
        if value is None:
            raise NotFound("token not stored")
        return value

    async def close(self) -> None:
        try:
            await self._redis.aclose()
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"Redis close failed: {type(err).__name__}") from err

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisBackend":
        """Build a backend with a bounded, blocking connection pool.

        Callers wait up to ``pool_timeout_wait`` seconds for a free
        connection once ``pool_max_size`` connections are in use.
        """
        pool = aioredis.BlockingConnectionPool.from_url(
            config.url,
            max_connections=config.pool_max_size,
            timeout=config.pool_timeout_wait,
            socket_timeout=config.socket_timeout,
        )
        # client owns the pool, so close() also disconnects it
        client = aioredis.Redis.from_pool(pool)
        logger.info(
            "Redis pool created (max_size=%d)", config.pool_max_size,
        )
        return cls(client, prefix=config.prefix, ttl=config.ttl)
