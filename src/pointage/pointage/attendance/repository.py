from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..common.datetime_utils import DayLike


class AttendanceRepository(Protocol):
    """Attendance records indexed by day and by (employee, day).

    Every `day` argument accepts a date, a datetime or an ISO string; it is
    reduced to its YYYY-MM-DD calendar day in UTC.
    """

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_date(self, day: DayLike) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_employee_and_date(self, employee_id: str, day: DayLike) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_employee_and_date_range(
        self, employee_id: str, start: DayLike, end: DayLike
    ) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def update(self, attendance_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def delete(self, attendance_id: str) -> bool:
        raise NotImplementedError
