from __future__ import annotations

import json
from typing import Any, List, Optional, Protocol


class KeyValueStore(Protocol):
    """Single-key storage contract the repositories are written against.

    No operation spans more than one key atomically and there are no
    conditional writes. Every call may raise StoreUnavailable.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list_keys(self, prefix: str, limit: Optional[int] = None) -> List[str]:
        """Keys starting with prefix, in ascending order."""

        raise NotImplementedError


def read_json(store: KeyValueStore, key: str) -> Optional[Any]:
    raw = store.get(key)
    if raw is None:
        return None
    return json.loads(raw)


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.put(key, json.dumps(value, ensure_ascii=False, separators=(",", ":")))
