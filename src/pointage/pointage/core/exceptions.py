from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(ValidationError):
    """Raised when a unique value is already owned by another record."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class StoreError(Exception):
    """Base exception for key-value store failures."""


class StoreUnavailable(StoreError):
    """Raised when a single store call fails (network, backend)."""


class IndexCapacityError(StoreError):
    """Raised when a multi index group would grow past its configured bound."""

    def __init__(self, key: str, max_size: int):
        super().__init__(f"Index {key!r} is full ({max_size} ids)")
        self.key = key
        self.max_size = max_size


class PartialWriteFailure(StoreError):
    """A multi-step write failed after some of its steps had completed.

    `rolled_back` is True when every completed step was compensated; otherwise
    `compensation_errors` lists what could not be undone and the store may hold
    an unindexed record or a stale index entry.
    """

    def __init__(
        self,
        *,
        operation: str,
        record_id: Optional[str],
        completed: Sequence[str],
        compensation_errors: Sequence[Exception] = (),
    ):
        self.operation = operation
        self.record_id = record_id
        self.completed = list(completed)
        self.compensation_errors = list(compensation_errors)
        self.rolled_back = not self.compensation_errors
        state = "rolled back" if self.rolled_back else "left partially applied"
        super().__init__(
            f"{operation} failed for {record_id!r} after {len(self.completed)} step(s); {state}"
        )
