"""Storage backends for the token -> ciphertext mapping."""

from .base import StorageBackend
from .memory import MemoryBackend
from .redis_backend import RedisBackend
from .postgres import PostgresBackend

__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "RedisBackend",
    "PostgresBackend",
]
