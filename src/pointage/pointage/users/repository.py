from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.constants import DEFAULT_USER_LIST_LIMIT


class UserRepository(Protocol):
    """Repository interface for User records.

    Note (DIP): services and controllers depend on this interface, never on a
    concrete store.
    """

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def update(self, user_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Merge patch into the record. Returns None if the user does not exist."""

        raise NotImplementedError

    def delete(self, user_id: str) -> bool:
        raise NotImplementedError

    def list_all(self, limit: int = DEFAULT_USER_LIST_LIMIT) -> Sequence[Dict[str, Any]]:
        raise NotImplementedError
