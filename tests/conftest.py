"""Shared fakes for the Redis and PostgreSQL clients."""
import asyncio
from contextlib import asynccontextmanager

import asyncpg
import pytest


class FakeRedis:
    """Minimal ``redis.asyncio.Redis`` stand-in with atomic ``SET NX``."""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.expiry: dict[str, int] = {}
        self.closed = False

    async def set(self, name, value, nx=False, ex=None):
        await asyncio.sleep(0)  # let concurrent callers interleave
        if nx and name in self.data:
            return None
        self.data[name] = bytes(value)
        if ex is not None:
            self.expiry[name] = ex
        return True

    async def get(self, name):
        await asyncio.sleep(0)
        return self.data.get(name)

    async def aclose(self):
        self.closed = True


class FakeConnection:
    """asyncpg connection stand-in backed by a dict with a unique token index."""

    def __init__(self, rows):
        self.rows = rows
        self.statements: list[str] = []

    async def execute(self, query, *args):
        self.statements.append(query)
        await asyncio.sleep(0)
        if query.startswith("INSERT"):
            token, ciphertext = args
            if token in self.rows:
                raise asyncpg.UniqueViolationError(
                    'duplicate key value violates unique constraint "data_vault_token_idx"'
                )
            self.rows[token] = bytes(ciphertext)
            return "INSERT 0 1"
        return "CREATE TABLE"

    async def fetchrow(self, query, *args):
        self.statements.append(query)
        await asyncio.sleep(0)
        ciphertext = self.rows.get(args[0])
        if ciphertext is None:
            return None
        return {"ciphertext": ciphertext}


class FakePool:
    """asyncpg pool stand-in recording acquire timeouts."""

    def __init__(self, acquire_error=None):
        self.rows: dict[str, bytes] = {}
        self.connection = FakeConnection(self.rows)
        self.acquire_error = acquire_error
        self.timeouts: list = []
        self.closed = False

    @asynccontextmanager
    async def acquire(self, timeout=None):
        self.timeouts.append(timeout)
        if self.acquire_error is not None:
            raise self.acquire_error
        yield self.connection

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_pool():
    return FakePool()
