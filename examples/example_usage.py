"""Example: using the repositories directly (no Flask).

Controllers are a thin layer; everything below is what they call.
"""

from pointage.container import build_container
from pointage.database.memory_store import InMemoryKeyValueStore


def main():
    container = build_container(store=InMemoryKeyValueStore())

    alice = container.employees_repo.create({"name": "Alice", "email": "alice@example.com", "departmentId": "ops"})
    container.attendance_repo.create({"employeeId": alice["id"], "date": "2024-01-10", "status": "present"})

    print(container.employees_repo.get_by_department("ops"))
    print(container.attendance_repo.get_by_employee_and_date(alice["id"], "2024-01-10"))


if __name__ == "__main__":
    main()
