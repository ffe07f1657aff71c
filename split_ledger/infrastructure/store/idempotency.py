"""Idempotency-key response cache"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CachedResponse:
    """Result of the first request made with a key"""

    fingerprint: str
    response: Any


class IdempotencyCache:
    """
    Maps idempotency keys to the first response produced under them.

    Check-then-insert must be serialised by the caller around the posting
    itself; the lock here only protects the dict.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._responses: Dict[str, CachedResponse] = {}

    def get(self, key: str) -> Optional[CachedResponse]:
        with self._lock:
            return self._responses.get(key)

    def put(self, key: str, fingerprint: str, response: Any) -> None:
        with self._lock:
            self._responses[key] = CachedResponse(fingerprint=fingerprint, response=response)

    def clear(self) -> None:
        with self._lock:
            self._responses.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._responses)
