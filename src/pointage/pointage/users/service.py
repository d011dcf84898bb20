from __future__ import annotations

from typing import Any, Dict, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_choice, require_email, require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

PASSWORD_FIELD = "passwordHash"
MIN_PASSWORD_LENGTH = 6


def public_view(user: Dict[str, Any]) -> Dict[str, Any]:
    """User record without credential fields, safe to return to clients."""
    return {k: v for k, v in user.items() if k not in (PASSWORD_FIELD, "password")}


class UserService:
    """Use case: manage accounts and authenticate them."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        profile: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = Role(require_choice(role, "Role", [r.value for r in Role]))

        data = dict(profile or {})
        data.update(email=email, role=role.value)
        data[PASSWORD_FIELD] = generate_password_hash(password)
        return public_view(self._users.create(data))

    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        user = self._users.get_by_email((email or "").strip())
        if not user or user.get("isActive") is False:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.get(PASSWORD_FIELD) or "", password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return public_view(user)

    def update_account(
        self, user_id: str, patch: Dict[str, Any], *, password: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Apply a profile patch. Everything is validated before the single write."""
        changes = {k: v for k, v in patch.items() if k not in (PASSWORD_FIELD, "password")}
        if changes.get("email"):
            changes["email"] = require_email(changes["email"])
        if "role" in changes:
            changes["role"] = Role(require_choice(changes["role"], "Role", [r.value for r in Role])).value
        if password is not None:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            changes[PASSWORD_FIELD] = generate_password_hash(password)

        updated = self._users.update(user_id, changes)
        return public_view(updated) if updated else None

    def change_password(self, user_id: str, *, new_password: str) -> bool:
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        updated = self._users.update(user_id, {PASSWORD_FIELD: generate_password_hash(new_password)})
        return updated is not None

    def list_accounts(self, *, limit: int = 100) -> List[Dict[str, Any]]:
        return [public_view(u) for u in self._users.list_all(limit)]

    def ensure_account(self, *, email: str, password: str, role: Role = Role.ADMIN, name: str = "") -> Dict[str, Any]:
        """Create the account, or reset its password and role if the email exists."""
        existing = self._users.get_by_email(email)
        if existing is None:
            return self.create_account(email=email, password=password, role=role, profile={"name": name})

        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        updated = self._users.update(
            existing["id"],
            {PASSWORD_FIELD: generate_password_hash(password), "role": Role(role).value},
        )
        return public_view(updated or existing)
