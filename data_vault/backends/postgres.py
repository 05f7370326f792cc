"""
PostgreSQL storage backend.

DDL (see ``PostgresBackend.create_schema``)::

    CREATE TABLE data_vault (
        id bigserial PRIMARY KEY,
        token varchar(64) NOT NULL,
        ciphertext bytea NOT NULL
    );
    CREATE UNIQUE INDEX data_vault_token_idx ON data_vault (token);

Uniqueness is enforced by the index: a second insert of the same token
fails with ``unique_violation`` and is reported as ``Conflict``.

Security Note:
    Never log ciphertext values. Only log token prefixes.
"""
import asyncio
import logging
from typing import Any, Optional

import asyncpg

from ..config import PostgresConfig, validate_identifier
from ..exceptions import BackendError, Conflict, NotFound

logger = logging.getLogger("data_vault")

_TRANSPORT_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id bigserial PRIMARY KEY,
    token varchar(64) NOT NULL,
    ciphertext bytea NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS {index} ON {table} (token);
"""

_INSERT_RECORD = "INSERT INTO {table} (token, ciphertext) VALUES ($1, $2)"

_SELECT_RECORD = "SELECT ciphertext FROM {table} WHERE token = $1"


class PostgresBackend:
    """Durable relational backend on top of an asyncpg pool.

    Args:
        pool: asyncpg-compatible connection pool.
        table: Table holding the records (optionally schema-qualified).
        acquire_timeout: Seconds to wait for a pooled connection.
    """

    def __init__(
        self,
        pool: Any,
        table: str = "data_vault",
        acquire_timeout: Optional[float] = None,
    ):
        self._pool = pool
        self._table = validate_identifier(table)
        self._acquire_timeout = acquire_timeout
        self._insert = _INSERT_RECORD.format(table=table)
        self._select = _SELECT_RECORD.format(table=table)

    async def create_schema(self) -> None:
        """Create the records table and its unique token index if missing."""
        ddl = _CREATE_TABLE.format(
            table=self._table,
            index=f"{self._table.rsplit('.', 1)[-1]}_token_idx",
        )
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                await conn.execute(ddl)
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"schema creation failed: {type(err).__name__}") from err
        logger.info("Vault table %s ready", self._table)

    async def put_if_absent(self, token: str, ciphertext: bytes) -> None:
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                await conn.execute(self._insert, token, ciphertext)
        except asyncpg.UniqueViolationError:
            raise Conflict("token already stored") from None
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"INSERT failed: {type(err).__name__}") from err

    async def get(self, token: str) -> bytes:
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                row = await conn.fetchrow(self._select, token)
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"SELECT failed: {type(err).__name__}") from err
        if row is None:
            raise NotFound("token not stored")
        return bytes(row["ciphertext"])

    async def close(self) -> None:
        try:
            await self._pool.close()
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"pool close failed: {type(err).__name__}") from err

    @classmethod
    async def from_config(cls, config: PostgresConfig) -> "PostgresBackend":
        """Create the asyncpg pool described by ``config``."""
        try:
            pool = await asyncpg.create_pool(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.dbname,
                min_size=config.pool_min_size,
                max_size=config.pool_max_size,
            )
        except _TRANSPORT_ERRORS as err:
            raise BackendError(f"pool creation failed: {type(err).__name__}") from err
        logger.info(
            "PostgreSQL pool created for %s@%s:%d/%s (max_size=%d)",
            config.user, config.host, config.port, config.dbname,
            config.pool_max_size,
        )
        return cls(pool, table=config.table, acquire_timeout=config.pool_timeout_wait)
