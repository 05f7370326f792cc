"""
Vault Configuration — Key material and backend settings.

Reads settings from environment variables:
    ENCRYPTED_DATA_VAULT_KEY = <hex-encoded key>
    ENCRYPTED_DATA_VAULT_IV = <hex-encoded 16-byte IV/nonce seed>
    ENCRYPTED_DATA_VAULT_CIPHER = aesgcm | chacha20
    ENCRYPTED_DATA_VAULT_TOKENIZER = blake3 | sha256
    REDIS_URL = redis://127.0.0.1/
    REDIS_POOL_MAX_SIZE = 16
    PG_HOST, PG_PORT, PG_USER, PG_PASSWORD, PG_DBNAME
    PG_POOL_MAX_SIZE = 16
    PG_POOL_TIMEOUTS_WAIT_SECS = 5

Security Note:
    Never log key material. Only log key lengths and cipher names.
"""
import os
import re
import secrets
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .encryption import CIPHERS
from .exceptions import InvalidKeyError
from .tokenizer import TOKENIZERS, MAX_TOKEN_LENGTH

logger = logging.getLogger("data_vault")

_ENV_PREFIX = "ENCRYPTED_DATA_VAULT_"
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def decode_hex_key(value: str, name: str) -> bytes:
    """Decode hex-encoded key material.

    Raises:
        InvalidKeyError: If ``value`` is not valid hex.
    """
    try:
        return bytes.fromhex(value.strip())
    except ValueError:
        raise InvalidKeyError(f"{name} is not valid hex") from None


def validate_identifier(name: str) -> str:
    """Check that ``name`` is a plain, optionally schema-qualified, SQL identifier."""
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


def generate_key(length: int = 32) -> str:
    """Generate a random key of ``length`` bytes and return it hex-encoded.

    This is a utility for operators to generate new keys.
    """
    return secrets.token_hex(length)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    return float(raw) if raw else default


class EncryptionConfig(BaseModel):
    """Validated key material and algorithm selection."""

    key: bytes = Field(repr=False)
    iv: Optional[bytes] = Field(default=None, repr=False)
    cipher_backend: str = Field(default="aesgcm")
    tokenizer: str = Field(default="blake3")
    token_length: int = Field(default=MAX_TOKEN_LENGTH, ge=16, le=MAX_TOKEN_LENGTH)

    model_config = {"frozen": True}

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in CIPHERS:
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @field_validator("tokenizer")
    @classmethod
    def validate_tokenizer(cls, v: str) -> str:
        """Validate tokenizer is supported."""
        v = v.lower()
        if v not in TOKENIZERS:
            raise ValueError(f"Unsupported tokenizer: {v}")
        return v

    @field_validator("token_length")
    @classmethod
    def validate_token_length(cls, v: int) -> int:
        """Tokens are hex digests, so the length must be even."""
        if v % 2:
            raise ValueError(f"token_length must be even, got {v}")
        return v

    @classmethod
    def from_env(cls) -> "EncryptionConfig":
        """Create EncryptionConfig by loading values from environment.

        Raises:
            RuntimeError: If ENCRYPTED_DATA_VAULT_KEY is not set.
            InvalidKeyError: If key or IV is not valid hex.
        """
        raw_key = os.environ.get(f"{_ENV_PREFIX}KEY")
        if not raw_key:
            raise RuntimeError(
                f"{_ENV_PREFIX}KEY environment variable is not set. "
                f"Set {_ENV_PREFIX}KEY=<hex-encoded key>"
            )
        key = decode_hex_key(raw_key, f"{_ENV_PREFIX}KEY")
        raw_iv = os.environ.get(f"{_ENV_PREFIX}IV")
        iv = decode_hex_key(raw_iv, f"{_ENV_PREFIX}IV") if raw_iv else None
        config = cls(
            key=key,
            iv=iv,
            cipher_backend=os.environ.get(f"{_ENV_PREFIX}CIPHER", "aesgcm"),
            tokenizer=os.environ.get(f"{_ENV_PREFIX}TOKENIZER", "blake3"),
            token_length=_env_int(f"{_ENV_PREFIX}TOKEN_LENGTH", MAX_TOKEN_LENGTH),
        )
        logger.debug(
            "Loaded encryption config: cipher=%s key=%d bytes tokenizer=%s",
            config.cipher_backend, len(key), config.tokenizer,
        )
        return config


class RedisConfig(BaseModel):
    """Connection settings for the Redis backend."""

    url: str = Field(default="redis://127.0.0.1:6379/0")
    pool_max_size: int = Field(default=16, ge=1)
    pool_timeout_wait: Optional[float] = Field(default=5.0, gt=0)
    socket_timeout: Optional[float] = Field(default=None, gt=0)
    ttl: Optional[int] = Field(default=None, ge=1)
    prefix: str = Field(default="data_vault:")

    @classmethod
    def from_env(cls) -> "RedisConfig":
        return cls(
            url=os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/0"),
            pool_max_size=_env_int("REDIS_POOL_MAX_SIZE", 16),
            pool_timeout_wait=_env_float("REDIS_POOL_TIMEOUTS_WAIT_SECS", 5.0),
            socket_timeout=_env_float("REDIS_SOCKET_TIMEOUT", None),
            ttl=_env_int("REDIS_TTL", 0) or None,
            prefix=os.environ.get("REDIS_PREFIX", "data_vault:"),
        )


class PostgresConfig(BaseModel):
    """Connection settings for the PostgreSQL backend."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5432, ge=1, le=65535)
    user: str = Field(default="data_vault")
    password: Optional[str] = Field(default=None, repr=False)
    dbname: str = Field(default="data_vault")
    pool_min_size: int = Field(default=1, ge=0)
    pool_max_size: int = Field(default=16, ge=1)
    pool_timeout_wait: Optional[float] = Field(default=5.0, gt=0)
    table: str = Field(default="data_vault")

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        return validate_identifier(v)

    @model_validator(mode="after")
    def validate_pool_sizes(self) -> "PostgresConfig":
        if self.pool_min_size > self.pool_max_size:
            raise ValueError(
                f"pool_min_size ({self.pool_min_size}) exceeds "
                f"pool_max_size ({self.pool_max_size})"
            )
        return self

    @classmethod
    def from_env(cls) -> "PostgresConfig":
        return cls(
            host=os.environ.get("PG_HOST", "127.0.0.1"),
            port=_env_int("PG_PORT", 5432),
            user=os.environ.get("PG_USER", "data_vault"),
            password=os.environ.get("PG_PASSWORD"),
            dbname=os.environ.get("PG_DBNAME", "data_vault"),
            pool_min_size=min(_env_int("PG_POOL_MIN_SIZE", 1), _env_int("PG_POOL_MAX_SIZE", 16)),
            pool_max_size=_env_int("PG_POOL_MAX_SIZE", 16),
            pool_timeout_wait=_env_float("PG_POOL_TIMEOUTS_WAIT_SECS", 5.0),
            table=os.environ.get("PG_TABLE", "data_vault"),
        )
