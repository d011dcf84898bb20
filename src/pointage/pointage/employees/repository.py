from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence


class EmployeeRepository(Protocol):
    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def get_by_id(self, employee_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_department(self, department_id: str) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def update(self, employee_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def delete(self, employee_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Dict[str, Any]]:
        """Every live employee, in creation order."""

        raise NotImplementedError

    def search(self, query: str) -> Sequence[Dict[str, Any]]:
        """Case-insensitive match on name, email, employeeId or position."""

        raise NotImplementedError
