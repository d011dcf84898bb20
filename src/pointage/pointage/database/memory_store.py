from __future__ import annotations

import threading
from typing import Dict, List, Optional

from .kv_store import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store with the same single-key semantics as the real backend.

    Used by the test-suite and by the `memory` backend in development.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_keys(self, prefix: str, limit: Optional[int] = None) -> List[str]:
        with self._lock:
            keys = sorted(k for k in self._data if k.startswith(prefix))
        return keys[:limit] if limit is not None else keys

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)
