"""
Vault Tokenizer — Deterministic tokens derived from plaintext.

Tokens are hex digests of the plaintext bytes. They carry no key and no
salt: identical input always maps to the identical token, which lets the
vault detect repeated stores. Confidentiality is the job of encryption.
"""
from typing import Protocol, runtime_checkable

from blake3 import blake3
from cryptography.hazmat.primitives import hashes

MAX_TOKEN_LENGTH = 64
MIN_TOKEN_LENGTH = 16


@runtime_checkable
class Tokenizer(Protocol):
    """Derives a stable, printable token from plaintext bytes."""

    def tokenize(self, plaintext: bytes) -> str: ...


class _HexDigestTokenizer:
    name: str = ""

    def __init__(self, length: int = MAX_TOKEN_LENGTH):
        if (
            not isinstance(length, int)
            or not MIN_TOKEN_LENGTH <= length <= MAX_TOKEN_LENGTH
            or length % 2
        ):
            raise ValueError(
                f"Token length must be an even number between "
                f"{MIN_TOKEN_LENGTH} and {MAX_TOKEN_LENGTH}, got {length!r}"
            )
        self.length = length

    def __repr__(self) -> str:
        return f"<{type(self).__name__} length={self.length}>"

    def _digest(self, plaintext: bytes) -> bytes:
        raise NotImplementedError

    def tokenize(self, plaintext: bytes) -> str:
        """Return the hex digest of ``plaintext`` truncated to ``length`` chars."""
        return self._digest(bytes(plaintext)).hex()[:self.length]


class Blake3Tokenizer(_HexDigestTokenizer):
    """BLAKE3 digest tokens."""

    name = "blake3"

    def _digest(self, plaintext: bytes) -> bytes:
        return blake3(plaintext).digest()


class Sha256Tokenizer(_HexDigestTokenizer):
    """SHA-256 digest tokens."""

    name = "sha256"

    def _digest(self, plaintext: bytes) -> bytes:
        digest = hashes.Hash(hashes.SHA256())
        digest.update(plaintext)
        return digest.finalize()


TOKENIZERS = {
    Blake3Tokenizer.name: Blake3Tokenizer,
    Sha256Tokenizer.name: Sha256Tokenizer,
}


def get_tokenizer(name: str, length: int = MAX_TOKEN_LENGTH) -> Tokenizer:
    """Build the tokenizer registered under ``name``.

    Raises:
        ValueError: If the tokenizer name or length is invalid.
    """
    try:
        cls = TOKENIZERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unsupported tokenizer: {name}") from None
    return cls(length)
