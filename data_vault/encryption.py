"""
Vault Encryption — Authenticated encryption of card payloads.

Every ciphertext is self-contained:
    [nonce 12B][encrypted_payload + tag 16B]

The working key is derived with HKDF-SHA256 from the configured key, using
the configured IV/nonce seed as salt, so vaults sharing a key but not a seed
cannot read each other's records.

Security Note:
    Never log plaintext, ciphertext or key values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import logging
from typing import Optional, Protocol, runtime_checkable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .exceptions import AuthenticationError, FormatError, InvalidKeyError

logger = logging.getLogger("data_vault")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
IV_SIZE = 16
MIN_CIPHERTEXT_SIZE = NONCE_SIZE + TAG_SIZE

_CONTEXT = "data-vault-aead"


@runtime_checkable
class Encryption(Protocol):
    """Authenticated encryption bound to a key at construction."""

    def encrypt(self, plaintext: bytes) -> bytes: ...

    def decrypt(self, ciphertext: bytes) -> bytes: ...


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(key: bytes, iv: Optional[bytes], context: str) -> bytes:
    """Derive a working key of the same length as ``key`` using HKDF-SHA256.

    Args:
        key: Configured symmetric key.
        iv: Optional IV/nonce seed, used as HKDF salt.
        context: Context string for domain separation.

    Returns:
        Derived key bytes.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=len(key),
        salt=iv,
        info=context.encode("utf-8"),
    )
    return hkdf.derive(key)


# ---------------------------------------------------------------------------
# AEAD implementations
# ---------------------------------------------------------------------------

class _AEADEncryption:
    """Shared nonce handling for the AEAD ciphers."""

    cipher_cls: type = AESGCM
    key_sizes: tuple = ()
    name: str = ""

    def __init__(self, key: bytes, iv: Optional[bytes] = None):
        if not isinstance(key, (bytes, bytearray)) or len(key) not in self.key_sizes:
            raise InvalidKeyError(
                f"{self.name} key must be one of {self.key_sizes} bytes"
            )
        if iv is not None and (
            not isinstance(iv, (bytes, bytearray)) or len(iv) != IV_SIZE
        ):
            raise InvalidKeyError(f"IV/nonce seed must be {IV_SIZE} bytes")
        derived = derive_key(bytes(key), bytes(iv) if iv is not None else None, _CONTEXT)
        self._cipher = self.cipher_cls(derived)
        logger.debug("Initialized %s encryption (%d-bit key)", self.name, len(key) * 8)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext with a fresh random nonce.

        Returns:
            ``nonce + ciphertext + tag``.
        """
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self._cipher.encrypt(nonce, bytes(plaintext), None)

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt a blob produced by :meth:`encrypt`.

        Raises:
            FormatError: If the blob cannot hold a nonce and a tag.
            AuthenticationError: If the tag does not verify.
        """
        if len(ciphertext) < MIN_CIPHERTEXT_SIZE:
            raise FormatError(
                f"ciphertext too short: {len(ciphertext)} bytes "
                f"(minimum {MIN_CIPHERTEXT_SIZE})"
            )
        nonce = bytes(ciphertext[:NONCE_SIZE])
        ct = bytes(ciphertext[NONCE_SIZE:])
        try:
            return self._cipher.decrypt(nonce, ct, None)
        except InvalidTag:
            # same signal for wrong key and corrupted payload
            raise AuthenticationError("ciphertext authentication failed") from None

    def encrypt_string(self, text: str) -> bytes:
        return self.encrypt(text.encode("utf-8"))

    def decrypt_string(self, ciphertext: bytes) -> str:
        return self.decrypt(ciphertext).decode("utf-8")


class AesGcmEncryption(_AEADEncryption):
    """AES-GCM with a 128, 192 or 256-bit key."""

    cipher_cls = AESGCM
    key_sizes = (16, 24, 32)
    name = "aesgcm"


class ChaCha20Poly1305Encryption(_AEADEncryption):
    """ChaCha20-Poly1305 with a 256-bit key."""

    cipher_cls = ChaCha20Poly1305
    key_sizes = (32,)
    name = "chacha20"


CIPHERS = {
    AesGcmEncryption.name: AesGcmEncryption,
    ChaCha20Poly1305Encryption.name: ChaCha20Poly1305Encryption,
}


def get_encryption(name: str, key: bytes, iv: Optional[bytes] = None) -> Encryption:
    """Build the encryption component registered under ``name``.

    Raises:
        ValueError: If the cipher name is unknown.
        InvalidKeyError: If the key or IV has the wrong length.
    """
    try:
        cls = CIPHERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported cipher backend: {name}") from None
    return cls(key, iv)
