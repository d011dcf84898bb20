from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

import pytest

from pointage.attendance.kv_attendance_repository import KVAttendanceRepository
from pointage.biometrics.kv_biometric_repository import KVBiometricRepository
from pointage.core.exceptions import StoreUnavailable
from pointage.database.memory_store import InMemoryKeyValueStore
from pointage.employees.kv_employee_repository import KVEmployeeRepository
from pointage.indexing.index import KeyLocks
from pointage.users.kv_user_repository import KVUserRepository

FIXED_NOW = datetime(2024, 1, 10, 8, 0, 0, tzinfo=timezone.utc)
FIXED_STAMP = "2024-01-10T08:00:00.000Z"


class FlakyStore:
    """Wraps a store and raises StoreUnavailable for calls matching `fail_when`."""

    def __init__(self, inner: InMemoryKeyValueStore):
        self.inner = inner
        self.fail_when: Optional[Callable[[str, str], bool]] = None
        self.calls: List[tuple] = []

    def _check(self, op: str, key: str) -> None:
        self.calls.append((op, key))
        if self.fail_when is not None and self.fail_when(op, key):
            raise StoreUnavailable(f"{op} {key} failed")

    def get(self, key):
        self._check("get", key)
        return self.inner.get(key)

    def put(self, key, value):
        self._check("put", key)
        self.inner.put(key, value)

    def delete(self, key):
        self._check("delete", key)
        self.inner.delete(key)

    def list_keys(self, prefix, limit=None):
        self._check("list", prefix)
        return self.inner.list_keys(prefix, limit)


class RendezvousStore:
    """Makes the first `parties` reads of one key wait for each other.

    Forces concurrent read-modify-write cycles to interleave deterministically.
    """

    def __init__(self, inner: InMemoryKeyValueStore, key: str, parties: int = 2):
        self.inner = inner
        self._key = key
        self._barrier = threading.Barrier(parties, timeout=5)
        self._remaining = parties
        self._guard = threading.Lock()

    def get(self, key):
        value = self.inner.get(key)
        if key == self._key:
            with self._guard:
                wait = self._remaining > 0
                self._remaining -= 1
            if wait:
                self._barrier.wait()
        return value

    def put(self, key, value):
        self.inner.put(key, value)

    def delete(self, key):
        self.inner.delete(key)

    def list_keys(self, prefix, limit=None):
        return self.inner.list_keys(prefix, limit)


class SlowStore:
    """Sleeps after each read, widening the read-modify-write window."""

    def __init__(self, inner: InMemoryKeyValueStore, delay: float = 0.002):
        self.inner = inner
        self._delay = delay

    def get(self, key):
        value = self.inner.get(key)
        time.sleep(self._delay)
        return value

    def put(self, key, value):
        self.inner.put(key, value)

    def delete(self, key):
        self.inner.delete(key)

    def list_keys(self, prefix, limit=None):
        return self.inner.list_keys(prefix, limit)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def flaky_store(store) -> FlakyStore:
    return FlakyStore(store)


@pytest.fixture
def locks() -> KeyLocks:
    return KeyLocks()


@pytest.fixture
def users(store, locks, clock) -> KVUserRepository:
    return KVUserRepository(store, locks=locks, clock=clock)


@pytest.fixture
def employees(store, locks, clock) -> KVEmployeeRepository:
    return KVEmployeeRepository(store, locks=locks, clock=clock)


@pytest.fixture
def attendance(store, locks, clock) -> KVAttendanceRepository:
    return KVAttendanceRepository(store, locks=locks, clock=clock)


@pytest.fixture
def biometrics(store, locks, clock) -> KVBiometricRepository:
    return KVBiometricRepository(store, locks=locks, clock=clock)


@pytest.fixture
def make_rendezvous(store):
    def _make(key: str, parties: int = 2) -> RendezvousStore:
        return RendezvousStore(store, key, parties)

    return _make


@pytest.fixture
def make_slow(store):
    def _make(delay: float = 0.002) -> SlowStore:
        return SlowStore(store, delay)

    return _make
