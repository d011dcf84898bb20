from __future__ import annotations

import logging
import threading
import zlib
from typing import List, Optional

from ..core.constants import DEFAULT_MAX_INDEX_SIZE
from ..core.exceptions import IndexCapacityError
from ..database.kv_store import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)


class KeyLocks:
    """Striped locks that serialize read-modify-write cycles per store key.

    Share one instance between every repository built on the same store.
    Writers in other processes are not covered.
    """

    def __init__(self, stripes: int = 64):
        if stripes <= 0:
            raise ValueError("stripes must be positive")
        self._locks = [threading.Lock() for _ in range(stripes)]

    def for_key(self, key: str) -> threading.Lock:
        return self._locks[zlib.crc32(key.encode("utf-8")) % len(self._locks)]


class UniqueIndex:
    """One-to-one index: the key holds a single record id as a plain string."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, record_id: str) -> None:
        self._store.put(key, record_id)

    def remove(self, key: str, *, expected_id: Optional[str] = None) -> bool:
        """Delete the entry; with expected_id, only if it still points there."""
        if expected_id is not None:
            current = self._store.get(key)
            if current != expected_id:
                return False
        self._store.delete(key)
        return True


class MultiIndex:
    """One-to-many index: the key holds a JSON array of record ids.

    Reads treat an absent key as an empty group. `add` is idempotent and
    `remove` filters the id out; both write the whole array back.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        locks: Optional[KeyLocks] = None,
        max_size: int = DEFAULT_MAX_INDEX_SIZE,
    ):
        self._store = store
        self._locks = locks or KeyLocks()
        self._max_size = int(max_size)

    def members(self, key: str) -> List[str]:
        ids = read_json(self._store, key)
        return list(ids) if ids else []

    def check_room(self, key: str, record_id: str) -> None:
        """Raise IndexCapacityError if adding record_id would push key past the bound.

        Repositories call this before their first write so a full group is
        refused up front. `add` still checks under the lock.
        """
        ids = self.members(key)
        if record_id not in ids and len(ids) >= self._max_size:
            raise IndexCapacityError(key, self._max_size)

    def add(self, key: str, record_id: str) -> bool:
        with self._locks.for_key(key):
            ids = self.members(key)
            if record_id in ids:
                return False
            if len(ids) >= self._max_size:
                raise IndexCapacityError(key, self._max_size)
            ids.append(record_id)
            write_json(self._store, key, ids)
        logger.debug("Indexed %s under %s", record_id, key)
        return True

    def remove(self, key: str, record_id: str) -> bool:
        with self._locks.for_key(key):
            ids = self.members(key)
            if record_id not in ids:
                return False
            remaining = [i for i in ids if i != record_id]
            if remaining:
                write_json(self._store, key, remaining)
            else:
                self._store.delete(key)
        logger.debug("Unindexed %s from %s", record_id, key)
        return True
