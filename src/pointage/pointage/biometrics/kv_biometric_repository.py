from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import now_utc, to_iso_timestamp
from ..core.constants import DEFAULT_MAX_INDEX_SIZE
from ..database.kv_base import Record, new_record_id
from ..database.kv_store import KeyValueStore, read_json, write_json
from ..indexing import keys
from ..indexing.index import KeyLocks, MultiIndex
from ..indexing.journal import WriteJournal
from .repository import BiometricRepository

logger = logging.getLogger(__name__)


def _owner(employee_id: object) -> str:
    return keys.check_key_part(employee_id, "Employee id", reserved=keys.RESERVED_BIOMETRIC_OWNERS)


def _kind(biometric_type: object) -> str:
    return keys.check_key_part(biometric_type, "Biometric type")


class KVBiometricRepository(BiometricRepository):
    """Primary records live under biometric:<employeeId>:<type>; ids are also listed per type."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        locks: Optional[KeyLocks] = None,
        max_index_size: int = DEFAULT_MAX_INDEX_SIZE,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._index = MultiIndex(store, locks=locks, max_size=max_index_size)
        self._clock = clock

    def save(self, data: Record) -> Record:
        employee_id = _owner(data.get("employeeId"))
        biometric_type = _kind(data.get("type"))
        existing = self.get_by_employee_and_type(employee_id, biometric_type)

        stamp = to_iso_timestamp(self._clock())
        record = {
            "id": (existing or {}).get("id") or data.get("id") or new_record_id(),
            "employeeId": employee_id,
            "type": biometric_type,
            "data": data.get("data"),
            "createdAt": (existing or {}).get("createdAt") or data.get("createdAt") or stamp,
            "updatedAt": stamp,
        }
        self._write(record, existing, operation="biometric.save")
        logger.debug("Saved %s biometric for employee %s", biometric_type, employee_id)
        return record

    create = save

    def get_by_employee_and_type(self, employee_id: str, biometric_type: str) -> Optional[Record]:
        return read_json(self._store, keys.biometric_key(_owner(employee_id), _kind(biometric_type)))

    def get_by_employee(self, employee_id: str) -> List[Record]:
        out: List[Record] = []
        for key in self._store.list_keys(keys.biometric_employee_prefix(_owner(employee_id))):
            record = read_json(self._store, key)
            if record is not None:
                out.append(record)
        return out

    def ids_by_type(self, biometric_type: str) -> List[str]:
        return self._index.members(keys.biometric_type_key(_kind(biometric_type)))

    def update(self, employee_id: str, biometric_type: str, patch: Record) -> Optional[Record]:
        existing = self.get_by_employee_and_type(employee_id, biometric_type)
        if not existing:
            return None

        record = dict(existing)
        if "data" in patch:
            record["data"] = patch["data"]
        record["updatedAt"] = to_iso_timestamp(self._clock())
        self._write(record, existing, operation="biometric.update")
        return record

    def delete(self, employee_id: str, biometric_type: str) -> bool:
        existing = self.get_by_employee_and_type(employee_id, biometric_type)
        if not existing:
            return False

        key = keys.biometric_key(_owner(employee_id), _kind(biometric_type))
        type_key = keys.biometric_type_key(_kind(biometric_type))
        record_id = existing.get("id")
        with WriteJournal("biometric.delete", record_id) as journal:
            if record_id:
                journal.run(
                    f"remove from {type_key}",
                    lambda: self._index.remove(type_key, record_id),
                    undo=lambda: self._index.add(type_key, record_id),
                )
            journal.run(
                "delete biometric",
                lambda: self._store.delete(key),
                undo=lambda: write_json(self._store, key, existing),
            )

        logger.debug("Deleted %s biometric for employee %s", biometric_type, employee_id)
        return True

    def delete_for_employee(self, employee_id: str) -> int:
        deleted = 0
        for record in self.get_by_employee(employee_id):
            if self.delete(employee_id, record["type"]):
                deleted += 1
        return deleted

    def _write(self, record: Record, existing: Optional[Record], *, operation: str) -> None:
        key = keys.biometric_key(record["employeeId"], record["type"])
        type_key = keys.biometric_type_key(record["type"])

        def undo_put() -> None:
            if existing is not None:
                write_json(self._store, key, existing)
            else:
                self._store.delete(key)

        self._index.check_room(type_key, record["id"])
        with WriteJournal(operation, record["id"]) as journal:
            journal.run("put biometric", lambda: write_json(self._store, key, record), undo=undo_put)
            journal.run(
                f"add to {type_key}",
                lambda: self._index.add(type_key, record["id"]),
                undo=lambda: self._index.remove(type_key, record["id"]),
            )
