"""
Storage Backend contract.

A backend persists the token -> ciphertext mapping and is the source of
truth for token uniqueness. The vault depends on nothing beyond this
protocol, so backends are interchangeable.
"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """Async persistence for token -> ciphertext records.

    ``put_if_absent`` must be atomic: among concurrent inserts of the same
    token exactly one succeeds and the rest raise ``Conflict``.
    ``get`` raises ``NotFound`` for unknown tokens, never returns a default.
    Transport failures raise ``BackendError``.
    """

    async def put_if_absent(self, token: str, ciphertext: bytes) -> None: ...

    async def get(self, token: str) -> bytes: ...

    async def close(self) -> None: ...
