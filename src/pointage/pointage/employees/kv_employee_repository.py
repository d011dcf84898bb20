from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_MAX_INDEX_SIZE
from ..core.exceptions import ConflictError
from ..database.kv_base import Record, fetch_records, merge_patch, stamp_new
from ..database.kv_store import KeyValueStore, read_json, write_json
from ..indexing import keys
from ..indexing.index import KeyLocks, MultiIndex
from ..indexing.journal import WriteJournal
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "email", "employeeId", "position")


class KVEmployeeRepository(EmployeeRepository):
    """Employees plus two multi indexes: department membership and the global id list."""

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

    def create(self, data: Record) -> Record:
        record = stamp_new(data, self._clock())
        employee_id = keys.check_key_part(record["id"], "Employee id", reserved=keys.RESERVED_EMPLOYEE_IDS)
        department_id = keys.optional_key_part(record.get("departmentId"), "Department id")
        if data.get("id") and self.get_by_id(employee_id) is not None:
            raise ConflictError(f"Employee {employee_id!r} already exists")

        index_keys = [keys.employee_ids_key()]
        if department_id:
            index_keys.insert(0, keys.department_employees_key(department_id))
        for index_key in index_keys:
            self._index.check_room(index_key, employee_id)

        key = keys.employee_key(employee_id)
        with WriteJournal("employee.create", employee_id) as journal:
            journal.run("put employee", lambda: write_json(self._store, key, record), undo=lambda: self._store.delete(key))
            for index_key in index_keys:
                self._add(journal, index_key, employee_id)

        logger.debug("Created employee %s (department=%s)", employee_id, department_id)
        return record

    def get_by_id(self, employee_id: str) -> Optional[Record]:
        return read_json(self._store, keys.employee_key(employee_id))

    def get_by_department(self, department_id: str) -> List[Record]:
        ids = self._index.members(keys.department_employees_key(department_id))
        return fetch_records(
            self._store,
            ids,
            keys.employee_key,
            keep=lambda e: str(e.get("departmentId")) == str(department_id),
        )

    def update(self, employee_id: str, patch: Record) -> Optional[Record]:
        existing = self.get_by_id(employee_id)
        if not existing:
            return None

        updated = merge_patch(existing, patch, self._clock())
        old_department = keys.optional_key_part(existing.get("departmentId"), "Department id")
        new_department = keys.optional_key_part(updated.get("departmentId"), "Department id")
        if new_department and new_department != old_department:
            self._index.check_room(keys.department_employees_key(new_department), employee_id)

        key = keys.employee_key(employee_id)
        with WriteJournal("employee.update", employee_id) as journal:
            if old_department != new_department:
                if old_department:
                    self._remove(journal, keys.department_employees_key(old_department), employee_id)
                if new_department:
                    self._add(journal, keys.department_employees_key(new_department), employee_id)
                logger.debug("Moved employee %s: department %s -> %s", employee_id, old_department, new_department)
            journal.run(
                "put employee",
                lambda: write_json(self._store, key, updated),
                undo=lambda: write_json(self._store, key, existing),
            )
        return updated

    def delete(self, employee_id: str) -> bool:
        existing = self.get_by_id(employee_id)
        if not existing:
            return False

        department_id = keys.optional_key_part(existing.get("departmentId"), "Department id")
        key = keys.employee_key(employee_id)
        with WriteJournal("employee.delete", employee_id) as journal:
            if department_id:
                self._remove(journal, keys.department_employees_key(department_id), employee_id)
            self._remove(journal, keys.employee_ids_key(), employee_id)
            journal.run(
                "delete employee",
                lambda: self._store.delete(key),
                undo=lambda: write_json(self._store, key, existing),
            )

        logger.debug("Deleted employee %s", employee_id)
        return True

    def list_all(self) -> List[Record]:
        ids = self._index.members(keys.employee_ids_key())
        return fetch_records(self._store, ids, keys.employee_key)

    def search(self, query: str) -> List[Record]:
        employees = self.list_all()
        if not query:
            return employees

        needle = query.lower()
        return [
            e for e in employees
            if any(needle in str(e.get(field) or "").lower() for field in SEARCH_FIELDS)
        ]

    def _add(self, journal: WriteJournal, index_key: str, employee_id: str) -> None:
        journal.run(
            f"add to {index_key}",
            lambda: self._index.add(index_key, employee_id),
            undo=lambda: self._index.remove(index_key, employee_id),
        )

    def _remove(self, journal: WriteJournal, index_key: str, employee_id: str) -> None:
        journal.run(
            f"remove from {index_key}",
            lambda: self._index.remove(index_key, employee_id),
            undo=lambda: self._index.add(index_key, employee_id),
        )
