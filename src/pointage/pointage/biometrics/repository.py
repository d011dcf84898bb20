from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence


class BiometricRepository(Protocol):
    """Biometric templates, at most one per (employeeId, type)."""

    def save(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the record for data's (employeeId, type)."""

        raise NotImplementedError

    def get_by_employee_and_type(self, employee_id: str, biometric_type: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_employee(self, employee_id: str) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError

    def ids_by_type(self, biometric_type: str) -> List[str]:
        raise NotImplementedError

    def update(self, employee_id: str, biometric_type: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def delete(self, employee_id: str, biometric_type: str) -> bool:
        raise NotImplementedError

    def delete_for_employee(self, employee_id: str) -> int:
        raise NotImplementedError
