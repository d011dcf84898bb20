"""Store key layout.

Every key the repositories touch is built here. The layout matches data
already written by earlier versions of the system, so the prefixes overlap:
primary keys and index keys share `user:`, `employee:`, `attendance:` and
`biometric:`. Primary keys are kept distinguishable by refusing key parts
that contain a colon or equal a reserved discriminator.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..core.constants import (
    ATTENDANCE_PREFIX,
    BIOMETRIC_PREFIX,
    DEPARTMENT_PREFIX,
    EMPLOYEE_IDS_KEY,
    EMPLOYEE_PREFIX,
    USER_PREFIX,
)
from ..core.exceptions import ValidationError

SEPARATOR = ":"

# Values that would turn a primary key into an existing index key.
RESERVED_BIOMETRIC_OWNERS = frozenset({"type"})
# An employee id is also a biometric owner.
RESERVED_EMPLOYEE_IDS = frozenset({EMPLOYEE_IDS_KEY[len(EMPLOYEE_PREFIX):]}) | RESERVED_BIOMETRIC_OWNERS


def check_key_part(value: object, field_name: str, *, reserved: Iterable[str] = ()) -> str:
    """Return value as a key segment, or raise ValidationError if it is unsafe."""
    if value is None:
        raise ValidationError(f"{field_name} is required")
    text = str(value)
    if not text:
        raise ValidationError(f"{field_name} must not be empty")
    if SEPARATOR in text:
        raise ValidationError(f"{field_name} must not contain {SEPARATOR!r}: {text!r}")
    if text in set(reserved):
        raise ValidationError(f"{field_name} {text!r} is reserved")
    return text


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def user_email_key(email: str) -> str:
    return f"{USER_PREFIX}email:{email}"


def is_user_primary_key(key: str) -> bool:
    return key.startswith(USER_PREFIX) and SEPARATOR not in key[len(USER_PREFIX):]


def employee_key(employee_id: str) -> str:
    return f"{EMPLOYEE_PREFIX}{employee_id}"


def employee_ids_key() -> str:
    return EMPLOYEE_IDS_KEY


def department_employees_key(department_id: str) -> str:
    return f"{DEPARTMENT_PREFIX}{department_id}:employees"


def attendance_key(attendance_id: str) -> str:
    return f"{ATTENDANCE_PREFIX}{attendance_id}"


def attendance_date_key(day: str) -> str:
    return f"{ATTENDANCE_PREFIX}date:{day}"


def attendance_employee_date_key(employee_id: str, day: str) -> str:
    return f"{ATTENDANCE_PREFIX}employee:{employee_id}:date:{day}"


def biometric_key(employee_id: str, biometric_type: str) -> str:
    return f"{BIOMETRIC_PREFIX}{employee_id}:{biometric_type}"


def biometric_employee_prefix(employee_id: str) -> str:
    return f"{BIOMETRIC_PREFIX}{employee_id}:"


def biometric_type_key(biometric_type: str) -> str:
    return f"{BIOMETRIC_PREFIX}type:{biometric_type}"


def optional_key_part(value: object, field_name: str) -> Optional[str]:
    """Like check_key_part, but None and "" mean "not set"."""
    if value is None or value == "":
        return None
    return check_key_part(value, field_name)
