"""In-process storage backend."""
import threading

from ..exceptions import Conflict, NotFound


class MemoryBackend:
    """Volatile dict-backed storage.

    Suitable for tests and single-process embedding; records are lost when
    the process exits. Safe to share between threads and tasks.
    """

    def __init__(self):
        self._records: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, token: object) -> bool:
        return token in self._records

    async def put_if_absent(self, token: str, ciphertext: bytes) -> None:
        with self._lock:
            if token in self._records:
                raise Conflict("token already stored")
            self._records[token] = bytes(ciphertext)

    async def get(self, token: str) -> bytes:
        with self._lock:
            try:
                return self._records[token]
            except KeyError:
                raise NotFound("token not stored") from None

    async def close(self) -> None:
        """Nothing to release; records stay readable."""
