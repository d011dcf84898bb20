import threading

import pytest

from pointage.core.exceptions import (
    ConflictError,
    IndexCapacityError,
    PartialWriteFailure,
    StoreUnavailable,
    ValidationError,
)
from pointage.database.kv_store import read_json, write_json
from pointage.employees.kv_employee_repository import KVEmployeeRepository
from pointage.indexing.index import KeyLocks


def ids_of(records):
    return sorted(r["id"] for r in records)


def test_department_membership_for_sequential_creates(employees):
    created = [employees.create({"name": f"E{i}", "departmentId": "d1"}) for i in range(3)]
    employees.create({"name": "Other", "departmentId": "d2"})

    assert ids_of(employees.get_by_department("d1")) == ids_of(created)


def test_repeated_update_into_same_department_does_not_duplicate(employees, store):
    e = employees.create({"name": "A", "departmentId": "d1"})

    employees.update(e["id"], {"departmentId": "d1"})
    employees.update(e["id"], {"departmentId": "d1", "position": "lead"})

    assert read_json(store, "department:d1:employees") == [e["id"]]


def test_employee_move_between_departments(employees):
    e = employees.create({"name": "A", "departmentId": "d1"})

    employees.update(e["id"], {"departmentId": "d2"})

    assert employees.get_by_department("d1") == []
    assert ids_of(employees.get_by_department("d2")) == [e["id"]]


def test_clearing_department_removes_membership(employees, store):
    e = employees.create({"name": "A", "departmentId": "d1"})

    employees.update(e["id"], {"departmentId": None})

    assert store.get("department:d1:employees") is None


def test_update_without_department_field_keeps_membership(employees):
    e = employees.create({"name": "A", "departmentId": "d1"})

    employees.update(e["id"], {"position": "lead"})

    assert ids_of(employees.get_by_department("d1")) == [e["id"]]


def test_list_all_tracks_creates_and_deletes(employees, store):
    a = employees.create({"name": "A"})
    b = employees.create({"name": "B", "departmentId": "d1"})

    assert ids_of(employees.list_all()) == ids_of([a, b])

    assert employees.delete(b["id"]) is True

    assert read_json(store, "employee:ids") == [a["id"]]
    assert employees.get_by_id(b["id"]) is None
    assert employees.get_by_department("d1") == []
    assert store.get("department:d1:employees") is None
    assert employees.delete(b["id"]) is False


def test_stale_ids_are_skipped_on_read(employees, store):
    e = employees.create({"name": "A", "departmentId": "d1"})
    write_json(store, "department:d1:employees", [e["id"], "ghost"])
    write_json(store, "employee:ids", ["ghost", e["id"]])

    assert ids_of(employees.get_by_department("d1")) == [e["id"]]
    assert ids_of(employees.list_all()) == [e["id"]]


def test_search(employees):
    employees.create({"name": "Karim Haddad", "email": "karim@x.com", "position": "Technician"})
    employees.create({"name": "Lina", "email": "lina@x.com", "employeeId": "EMP-042"})

    assert [e["name"] for e in employees.search("KARIM")] == ["Karim Haddad"]
    assert [e["name"] for e in employees.search("emp-04")] == ["Lina"]
    assert [e["name"] for e in employees.search("techn")] == ["Karim Haddad"]
    assert len(employees.search("")) == 2


def test_reserved_and_unsafe_ids_are_rejected(employees):
    with pytest.raises(ValidationError):
        employees.create({"id": "ids", "name": "A"})
    with pytest.raises(ValidationError):
        employees.create({"id": "type", "name": "A"})
    with pytest.raises(ValidationError):
        employees.create({"name": "A", "departmentId": "d1:x"})


def test_create_with_existing_id_conflicts(employees):
    employees.create({"id": "e1", "name": "A"})

    with pytest.raises(ConflictError):
        employees.create({"id": "e1", "name": "B"})


def test_full_department_is_refused_before_any_write(store, clock):
    repo = KVEmployeeRepository(store, max_index_size=2, clock=clock)
    repo.create({"id": "e1", "departmentId": "d1"})
    repo.create({"id": "e2", "departmentId": "d1"})
    before = store.snapshot()

    with pytest.raises(IndexCapacityError) as info:
        repo.create({"id": "e3", "departmentId": "d1"})

    assert info.value.key == "department:d1:employees"
    assert store.snapshot() == before


def test_move_into_full_department_is_refused(store, clock):
    repo = KVEmployeeRepository(store, max_index_size=1, clock=clock)
    repo.create({"id": "e1", "departmentId": "d1"})
    # The global id list is bounded too; keep it out of the way.
    store.delete("employee:ids")
    repo.create({"id": "e2"})
    before = store.snapshot()

    with pytest.raises(IndexCapacityError):
        repo.update("e2", {"departmentId": "d1"})

    assert store.snapshot() == before
    # Re-saving into the department it already belongs to needs no room.
    assert repo.update("e1", {"departmentId": "d1", "position": "lead"})["position"] == "lead"


def test_full_employee_list_is_refused(store, clock):
    repo = KVEmployeeRepository(store, max_index_size=1, clock=clock)
    repo.create({"id": "e1"})

    with pytest.raises(IndexCapacityError) as info:
        repo.create({"id": "e2"})

    assert info.value.key == "employee:ids"
    assert repo.get_by_id("e2") is None


def test_partial_create_is_rolled_back(flaky_store, clock):
    repo = KVEmployeeRepository(flaky_store, clock=clock)
    flaky_store.fail_when = lambda op, key: op == "put" and key == "employee:ids"

    with pytest.raises(PartialWriteFailure) as info:
        repo.create({"id": "e1", "departmentId": "d1"})

    assert info.value.completed == ["put employee", "add to department:d1:employees"]
    assert info.value.rolled_back is True
    assert flaky_store.inner.snapshot() == {}


def test_partial_delete_is_rolled_back(flaky_store, clock):
    repo = KVEmployeeRepository(flaky_store, clock=clock)
    repo.create({"id": "e1", "departmentId": "d1"})
    before = flaky_store.inner.snapshot()
    flaky_store.fail_when = lambda op, key: op == "delete" and key == "employee:e1"

    with pytest.raises(PartialWriteFailure):
        repo.delete("e1")

    assert flaky_store.inner.snapshot() == before


def test_unrecoverable_partial_write_is_reported(flaky_store, clock):
    repo = KVEmployeeRepository(flaky_store, clock=clock)
    # The index write fails and so does the undo of the primary write.
    flaky_store.fail_when = lambda op, key: (op, key) in {
        ("put", "department:d1:employees"),
        ("delete", "employee:e1"),
    }

    with pytest.raises(PartialWriteFailure) as info:
        repo.create({"id": "e1", "departmentId": "d1"})

    assert info.value.rolled_back is False
    # Unindexed but still retrievable by id.
    flaky_store.fail_when = None
    assert repo.get_by_id("e1")["id"] == "e1"
    assert repo.get_by_department("d1") == []


def test_store_failure_before_any_write_propagates(flaky_store, clock):
    repo = KVEmployeeRepository(flaky_store, clock=clock)
    flaky_store.fail_when = lambda op, key: op == "put"

    with pytest.raises(StoreUnavailable):
        repo.create({"name": "A"})


def _create_concurrently(repos, department_id):
    errors = []

    def worker(repo, employee_id):
        try:
            repo.create({"id": employee_id, "departmentId": department_id})
        except Exception as exc:  # surfaced through `errors`
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(repo, f"e{i}")) for i, repo in enumerate(repos)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []


def test_concurrent_creates_sharing_locks_keep_every_member(make_slow, clock):
    slow = make_slow()
    locks = KeyLocks()
    repos = [KVEmployeeRepository(slow, locks=locks, clock=clock) for _ in range(8)]

    _create_concurrently(repos, "d1")

    assert ids_of(repos[0].get_by_department("d1")) == sorted(f"e{i}" for i in range(8))
    assert len(repos[0].list_all()) == 8


def test_writers_without_shared_locks_can_still_lose_an_update(make_rendezvous, clock):
    # Two processes each have their own lock registry; the store offers no
    # conditional write, so read-modify-write on the same group can race.
    store = make_rendezvous("department:d1:employees")
    repos = [KVEmployeeRepository(store, locks=KeyLocks(), clock=clock) for _ in range(2)]

    _create_concurrently(repos, "d1")

    members = repos[0].get_by_department("d1")
    assert len(members) == 1
    assert repos[0].get_by_id("e0") is not None
    assert repos[0].get_by_id("e1") is not None
