from __future__ import annotations

from dataclasses import dataclass

from .attendance.kv_attendance_repository import KVAttendanceRepository
from .biometrics.kv_biometric_repository import KVBiometricRepository
from .core.constants import DEFAULT_MAX_INDEX_SIZE
from .database.connection import DatabaseConnection, DBConfig
from .database.kv_store import KeyValueStore
from .database.memory_store import InMemoryKeyValueStore
from .database.mysql_store import MySQLKeyValueStore
from .employees.kv_employee_repository import KVEmployeeRepository
from .indexing.index import KeyLocks
from .users.kv_user_repository import KVUserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    store: KeyValueStore
    locks: KeyLocks

    users_repo: KVUserRepository
    employees_repo: KVEmployeeRepository
    attendance_repo: KVAttendanceRepository
    biometrics_repo: KVBiometricRepository

    user_service: UserService


def build_store(*, backend: str, db_config: dict | None = None) -> KeyValueStore:
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql backend")
        config = DBConfig(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )
        return MySQLKeyValueStore(DatabaseConnection.get_instance(config))
    raise ValueError(f"Unknown store backend: {backend!r}")


def build_container(*, store: KeyValueStore, max_index_size: int = DEFAULT_MAX_INDEX_SIZE) -> Container:
    # One lock registry per store so every repository serializes on the same keys.
    locks = KeyLocks()

    users_repo = KVUserRepository(store, locks=locks)
    employees_repo = KVEmployeeRepository(store, locks=locks, max_index_size=max_index_size)
    attendance_repo = KVAttendanceRepository(store, locks=locks, max_index_size=max_index_size)
    biometrics_repo = KVBiometricRepository(store, locks=locks, max_index_size=max_index_size)

    return Container(
        store=store,
        locks=locks,
        users_repo=users_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        biometrics_repo=biometrics_repo,
        user_service=UserService(users_repo),
    )
