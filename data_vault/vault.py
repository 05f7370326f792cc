"""
DataVault — Tokenize, encrypt and persist sensitive payloads.

Provides the public API:
- ``store(plaintext)`` — tokenize, encrypt and persist; returns the token
- ``retrieve(token)`` — fetch and decrypt; returns the plaintext
- ``store_credit_card(card)`` / ``retrieve_credit_card(token)`` — card records
- ``store_string(text)`` / ``retrieve_string(token)`` — UTF-8 text

Storing the same plaintext twice returns the same token. A different
plaintext hashing to an existing token is rejected, never overwritten.

Security Note:
    Never log plaintext, ciphertext or key values. Only log token prefixes
    and operations.
"""
import hmac
import logging
from typing import Union

from .backends.base import StorageBackend
from .config import EncryptionConfig
from .encryption import Encryption, get_encryption
from .exceptions import (
    BackendError,
    Conflict,
    DecryptionError,
    EncryptionError,
    InvalidInputError,
    NotFound,
    StorageError,
    TokenCollisionError,
    TokenNotFoundError,
)
from .models import CreditCard
from .tokenizer import Tokenizer, get_tokenizer

logger = logging.getLogger("data_vault")

MAX_TOKEN_SIZE = 255


def _short(token: str) -> str:
    return f"{token[:8]}..."


class DataVault:
    """Credit card tokenization vault.

    Binds one encryption component, one tokenizer and one storage backend.
    Holds no mutable state of its own, so a single instance can be shared by
    any number of concurrent tasks. Failures are never retried here; the
    caller decides whether a ``StorageError`` is worth another attempt.
    """

    def __init__(
        self,
        encryption: Encryption,
        tokenizer: Tokenizer,
        backend: StorageBackend,
    ):
        self._encryption = encryption
        self._tokenizer = tokenizer
        self._backend = backend

    def __repr__(self) -> str:
        return (
            f"<DataVault encryption={self._encryption!r} "
            f"tokenizer={self._tokenizer!r} backend={type(self._backend).__name__}>"
        )

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_plaintext(plaintext: Union[bytes, str]) -> bytes:
        """Coerce plaintext to bytes.

        Raises:
            InvalidInputError: If plaintext is empty or not bytes/str.
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        elif isinstance(plaintext, (bytearray, memoryview)):
            plaintext = bytes(plaintext)
        elif not isinstance(plaintext, bytes):
            raise InvalidInputError(
                f"plaintext must be bytes or str, got {type(plaintext).__name__}"
            )
        if not plaintext:
            raise InvalidInputError("plaintext cannot be empty")
        return plaintext

    @staticmethod
    def _validate_token(token: str) -> None:
        """Validate a token before it reaches the backend.

        Raises:
            InvalidInputError: If token is empty, too long, or not printable.
        """
        if not isinstance(token, str):
            raise InvalidInputError(
                f"token must be str, got {type(token).__name__}"
            )
        if not token:
            raise InvalidInputError("token cannot be empty")
        if len(token) > MAX_TOKEN_SIZE:
            raise InvalidInputError(
                f"token cannot exceed {MAX_TOKEN_SIZE} characters"
            )
        if not token.isprintable() or any(c.isspace() for c in token):
            raise InvalidInputError("token contains non-printable or whitespace characters")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decrypt(self, ciphertext: bytes) -> bytes:
        try:
            return self._encryption.decrypt(ciphertext)
        except EncryptionError as err:
            raise DecryptionError("stored record failed to decrypt") from err

    async def _fetch(self, token: str) -> bytes:
        try:
            return await self._backend.get(token)
        except NotFound as err:
            raise TokenNotFoundError("token not found") from err
        except BackendError as err:
            raise StorageError("storage backend failed on read") from err

    async def _resolve_conflict(self, token: str, plaintext: bytes) -> str:
        """Compare the already stored record with ``plaintext``.

        Identical plaintext means the store is a repeat and the existing
        token is returned; anything else is a collision.
        """
        try:
            existing = await self._fetch(token)
        except TokenNotFoundError as err:
            # record removed between the insert attempt and this read
            raise StorageError("token vanished during conflict resolution") from err
        stored = self._decrypt(existing)
        if not hmac.compare_digest(stored, plaintext):
            logger.warning("Token collision detected for token=%s", _short(token))
            raise TokenCollisionError(
                "a different record is already stored under this token"
            )
        logger.debug("Vault store (existing): token=%s", _short(token))
        return token

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def store(self, plaintext: Union[bytes, str]) -> str:
        """Tokenize, encrypt and persist plaintext.

        Args:
            plaintext: Data to protect; ``str`` is encoded as UTF-8.

        Returns:
            The token for ``plaintext``.

        Raises:
            InvalidInputError: If plaintext is empty.
            TokenCollisionError: If another plaintext owns the token.
            DecryptionError: If the record owning the token cannot be decrypted.
            StorageError: If the backend fails.
        """
        data = self._validate_plaintext(plaintext)
        token = self._tokenizer.tokenize(data)
        ciphertext = self._encryption.encrypt(data)
        try:
            await self._backend.put_if_absent(token, ciphertext)
        except Conflict:
            return await self._resolve_conflict(token, data)
        except BackendError as err:
            raise StorageError("storage backend failed on write") from err
        logger.debug("Vault store: token=%s", _short(token))
        return token

    async def retrieve(self, token: str) -> bytes:
        """Fetch and decrypt the plaintext stored under ``token``.

        Raises:
            InvalidInputError: If token is empty or malformed.
            TokenNotFoundError: If the token is unknown.
            DecryptionError: If the record fails authentication.
            StorageError: If the backend fails.
        """
        self._validate_token(token)
        ciphertext = await self._fetch(token)
        plaintext = self._decrypt(ciphertext)
        logger.debug("Vault retrieve: token=%s", _short(token))
        return plaintext

    async def store_string(self, text: str) -> str:
        return await self.store(text)

    async def retrieve_string(self, token: str) -> str:
        return (await self.retrieve(token)).decode("utf-8")

    async def store_credit_card(self, credit_card: CreditCard) -> str:
        """Store a card record and return its token."""
        if not isinstance(credit_card, CreditCard):
            raise InvalidInputError(
                f"expected CreditCard, got {type(credit_card).__name__}"
            )
        return await self.store(credit_card.to_bytes())

    async def retrieve_credit_card(self, token: str) -> CreditCard:
        """Retrieve the card record stored under ``token``."""
        data = await self.retrieve(token)
        try:
            return CreditCard.from_bytes(data)
        except ValueError as err:
            raise InvalidInputError("token does not hold a card record") from err

    async def close(self) -> None:
        """Release the backend's resources."""
        await self._backend.close()

    async def __aenter__(self) -> "DataVault":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: EncryptionConfig,
        backend: StorageBackend,
    ) -> "DataVault":
        """Build a vault from validated key material and a backend.

        Raises:
            InvalidKeyError: If the key or IV has the wrong length for the cipher.
        """
        encryption = get_encryption(config.cipher_backend, config.key, config.iv)
        tokenizer = get_tokenizer(config.tokenizer, config.token_length)
        return cls(encryption, tokenizer, backend)
