"""
Data Vault Exceptions.

Component-level errors are raised by encryption and storage backends.
Vault-level errors are what callers of ``DataVault`` see; they always chain
the component error that caused them.

Security Note:
    Exception messages never carry plaintext, ciphertext or key material.
"""


class DataVaultError(Exception):
    """Base exception for all data vault errors."""


class InvalidInputError(DataVaultError, ValueError):
    """Empty or malformed plaintext or token."""


class InvalidKeyError(DataVaultError, ValueError):
    """Key material has the wrong length or encoding."""


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------

class EncryptionError(DataVaultError):
    """Base exception for encryption component errors."""


class AuthenticationError(EncryptionError):
    """Integrity tag did not verify."""


class FormatError(EncryptionError):
    """Ciphertext is too short to contain a nonce and tag."""


# ---------------------------------------------------------------------------
# Storage backends
# ---------------------------------------------------------------------------

class BackendError(DataVaultError):
    """Transport or availability failure against the underlying store."""


class Conflict(DataVaultError):
    """A record already exists for the token."""


class NotFound(DataVaultError):
    """No record exists for the token."""


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------

class VaultError(DataVaultError):
    """Base exception for errors surfaced by DataVault operations."""


class TokenCollisionError(VaultError):
    """Two distinct plaintexts produced the same token."""


class TokenNotFoundError(VaultError):
    """The token is unknown to the storage backend."""


class DecryptionError(VaultError):
    """Stored ciphertext failed authentication or is malformed."""


class StorageError(VaultError):
    """The storage backend failed; the caller may retry at its discretion."""
