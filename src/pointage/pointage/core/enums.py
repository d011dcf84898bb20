from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class BiometricType(str, Enum):
    """Biometric kinds known to the capture clients.

    Repositories accept any string type; these are the values in use.
    """

    FACE = "face"
    FINGERPRINT = "fingerprint"
