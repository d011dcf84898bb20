from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..common.datetime_utils import DayLike, iter_day_keys, now_utc, to_day_key
from ..core.constants import DEFAULT_MAX_INDEX_SIZE
from ..core.exceptions import ConflictError, ValidationError
from ..database.kv_base import Record, fetch_records, merge_patch, stamp_new
from ..database.kv_store import KeyValueStore, read_json, write_json
from ..indexing import keys
from ..indexing.index import KeyLocks, MultiIndex
from ..indexing.journal import WriteJournal
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def day_key(value: DayLike) -> str:
    """to_day_key, with bad input reported as a ValidationError."""
    try:
        return to_day_key(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid attendance date: {value!r}") from exc


def record_day(record: Record) -> str:
    """The day a record is filed under: its `date`, or `createdAt` when missing."""
    return day_key(record.get("date") or record.get("createdAt"))


class KVAttendanceRepository(AttendanceRepository):
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
        attendance_id = keys.check_key_part(record["id"], "Attendance id")
        employee_id = keys.optional_key_part(record.get("employeeId"), "Employee id")
        day = record_day(record)
        if data.get("id") and self.get_by_id(attendance_id) is not None:
            raise ConflictError(f"Attendance {attendance_id!r} already exists")

        index_keys = self._index_keys(employee_id, day)
        for index_key in index_keys:
            self._index.check_room(index_key, attendance_id)

        key = keys.attendance_key(attendance_id)
        with WriteJournal("attendance.create", attendance_id) as journal:
            journal.run("put attendance", lambda: write_json(self._store, key, record), undo=lambda: self._store.delete(key))
            for index_key in index_keys:
                self._add(journal, index_key, attendance_id)

        logger.debug("Created attendance %s for %s on %s", attendance_id, employee_id, day)
        return record

    def get_by_id(self, attendance_id: str) -> Optional[Record]:
        return read_json(self._store, keys.attendance_key(attendance_id))

    def get_by_date(self, day: DayLike) -> List[Record]:
        day = day_key(day)
        ids = self._index.members(keys.attendance_date_key(day))
        return fetch_records(self._store, ids, keys.attendance_key, keep=lambda r: record_day(r) == day)

    def get_by_employee_and_date(self, employee_id: str, day: DayLike) -> List[Record]:
        day = day_key(day)
        ids = self._index.members(keys.attendance_employee_date_key(employee_id, day))
        return fetch_records(
            self._store,
            ids,
            keys.attendance_key,
            keep=lambda r: record_day(r) == day and str(r.get("employeeId")) == str(employee_id),
        )

    def get_by_employee_and_date_range(self, employee_id: str, start: DayLike, end: DayLike) -> List[Record]:
        out: List[Record] = []
        for day in iter_day_keys(day_key(start), day_key(end)):
            out.extend(self.get_by_employee_and_date(employee_id, day))
        return out

    def update(self, attendance_id: str, patch: Record) -> Optional[Record]:
        existing = self.get_by_id(attendance_id)
        if not existing:
            return None

        updated = merge_patch(existing, patch, self._clock())
        old_keys = self._index_keys(
            keys.optional_key_part(existing.get("employeeId"), "Employee id"), record_day(existing)
        )
        new_keys = self._index_keys(
            keys.optional_key_part(updated.get("employeeId"), "Employee id"), record_day(updated)
        )

        for index_key in new_keys:
            if index_key not in old_keys:
                self._index.check_room(index_key, attendance_id)

        key = keys.attendance_key(attendance_id)
        with WriteJournal("attendance.update", attendance_id) as journal:
            for index_key in old_keys:
                if index_key not in new_keys:
                    self._remove(journal, index_key, attendance_id)
            for index_key in new_keys:
                if index_key not in old_keys:
                    self._add(journal, index_key, attendance_id)
            journal.run(
                "put attendance",
                lambda: write_json(self._store, key, updated),
                undo=lambda: write_json(self._store, key, existing),
            )

        if old_keys != new_keys:
            logger.debug("Re-filed attendance %s: %s -> %s", attendance_id, old_keys, new_keys)
        return updated

    def delete(self, attendance_id: str) -> bool:
        existing = self.get_by_id(attendance_id)
        if not existing:
            return False

        employee_id = keys.optional_key_part(existing.get("employeeId"), "Employee id")
        key = keys.attendance_key(attendance_id)
        with WriteJournal("attendance.delete", attendance_id) as journal:
            for index_key in reversed(self._index_keys(employee_id, record_day(existing))):
                self._remove(journal, index_key, attendance_id)
            journal.run(
                "delete attendance",
                lambda: self._store.delete(key),
                undo=lambda: write_json(self._store, key, existing),
            )

        logger.debug("Deleted attendance %s", attendance_id)
        return True

    @staticmethod
    def _index_keys(employee_id: Optional[str], day: str) -> Tuple[str, ...]:
        """Index groups a record belongs to: (employee+day, day), employee part only when set."""
        if employee_id:
            return (keys.attendance_employee_date_key(employee_id, day), keys.attendance_date_key(day))
        return (keys.attendance_date_key(day),)

    def _add(self, journal: WriteJournal, index_key: str, attendance_id: str) -> None:
        journal.run(
            f"add to {index_key}",
            lambda: self._index.add(index_key, attendance_id),
            undo=lambda: self._index.remove(index_key, attendance_id),
        )

    def _remove(self, journal: WriteJournal, index_key: str, attendance_id: str) -> None:
        journal.run(
            f"remove from {index_key}",
            lambda: self._index.remove(index_key, attendance_id),
            undo=lambda: self._index.add(index_key, attendance_id),
        )
