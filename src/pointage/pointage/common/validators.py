from __future__ import annotations

from typing import Any, Iterable, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: Optional[str], field_name: str = "Email") -> str:
    """Loose shape check only: something@domain.tld."""
    email = require_non_empty(value, field_name)
    local, at, domain = email.partition("@")
    if not at or not local or "." not in domain.strip("."):
        raise ValidationError(f"{field_name} is not a valid address: {email!r}")
    return email


def require_choice(value: Any, field_name: str, choices: Iterable[str]) -> Any:
    allowed = sorted(choices)
    if value not in allowed:
        raise ValidationError(f"{field_name} must be one of {allowed}, got {value!r}")
    return value
