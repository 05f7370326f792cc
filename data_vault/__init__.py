"""Data Vault — Credit card tokenization with encrypted storage.

Sensitive payloads are replaced by deterministic tokens; the payload itself
is kept only as authenticated ciphertext in a Redis or PostgreSQL backend.

Security Note (Threat Model):
    Plaintext exists in process memory while a store or retrieve call runs.
    Key material is held by the encryption component for the lifetime of
    the vault. Key rotation and HSM integration are out of scope.
"""

from .version import __version__
from .vault import DataVault
from .models import CreditCard, luhn_checksum
from .config import EncryptionConfig, RedisConfig, PostgresConfig, generate_key
from .encryption import (
    Encryption,
    AesGcmEncryption,
    ChaCha20Poly1305Encryption,
    get_encryption,
)
from .tokenizer import Tokenizer, Blake3Tokenizer, Sha256Tokenizer, get_tokenizer
from .backends import StorageBackend, MemoryBackend, RedisBackend, PostgresBackend
from .exceptions import (
    DataVaultError,
    InvalidInputError,
    InvalidKeyError,
    TokenCollisionError,
    TokenNotFoundError,
    DecryptionError,
    StorageError,
)

__all__ = [
    "__version__",
    "DataVault",
    "CreditCard",
    "luhn_checksum",
    "EncryptionConfig",
    "RedisConfig",
    "PostgresConfig",
    "generate_key",
    "Encryption",
    "AesGcmEncryption",
    "ChaCha20Poly1305Encryption",
    "get_encryption",
    "Tokenizer",
    "Blake3Tokenizer",
    "Sha256Tokenizer",
    "get_tokenizer",
    "StorageBackend",
    "MemoryBackend",
    "RedisBackend",
    "PostgresBackend",
    "DataVaultError",
    "InvalidInputError",
    "InvalidKeyError",
    "TokenCollisionError",
    "TokenNotFoundError",
    "DecryptionError",
    "StorageError",
]
