import pytest

from pointage.core.enums import Role
from pointage.core.exceptions import AuthenticationError, ValidationError
from pointage.users.service import UserService


@pytest.fixture
def service(users):
    return UserService(users)


def test_create_account_hashes_password_and_hides_it(service, users):
    account = service.create_account(email="a@x.com", password="secret1", role=Role.MANAGER, profile={"name": "A"})

    assert "passwordHash" not in account
    assert account["role"] == "manager"
    stored = users.get_by_id(account["id"])
    assert stored["passwordHash"] != "secret1"


def test_create_account_validates_input(service):
    with pytest.raises(ValidationError):
        service.create_account(email=" ", password="secret1")
    with pytest.raises(ValidationError):
        service.create_account(email="a@x.com", password="123")
    with pytest.raises(ValidationError):
        service.create_account(email="a@x.com", password="secret1", role="overlord")


def test_authenticate(service):
    service.create_account(email="a@x.com", password="secret1")

    user = service.authenticate("a@x.com", "secret1")
    assert user["email"] == "a@x.com"
    assert "passwordHash" not in user

    with pytest.raises(AuthenticationError):
        service.authenticate("a@x.com", "wrong")
    with pytest.raises(AuthenticationError):
        service.authenticate("nobody@x.com", "secret1")


def test_authenticate_rejects_corrupt_hash(service, users):
    users.create({"email": "b@x.com", "passwordHash": "CHANGE_ME"})

    with pytest.raises(AuthenticationError):
        service.authenticate("b@x.com", "CHANGE_ME")


def test_ensure_account_creates_then_resets(service):
    first = service.ensure_account(email="admin@x.com", password="first-pass", name="Admin")
    second = service.ensure_account(email="admin@x.com", password="second-pass")

    assert first["id"] == second["id"]
    assert second["role"] == "admin"
    service.authenticate("admin@x.com", "second-pass")
    with pytest.raises(AuthenticationError):
        service.authenticate("admin@x.com", "first-pass")


def test_change_password(service):
    account = service.create_account(email="a@x.com", password="secret1")

    assert service.change_password(account["id"], new_password="secret2") is True
    service.authenticate("a@x.com", "secret2")
    assert service.change_password("missing", new_password="secret2") is False


def test_update_account_validates_before_writing(service, users):
    account = service.create_account(email="a@x.com", password="secret1", profile={"name": "A"})

    with pytest.raises(ValidationError):
        service.update_account(account["id"], {"name": "B"}, password="123")
    with pytest.raises(ValidationError):
        service.update_account(account["id"], {"name": "B", "role": "overlord"})
    with pytest.raises(ValidationError):
        service.update_account(account["id"], {"name": "B", "email": "not-an-email"})

    assert users.get_by_id(account["id"])["name"] == "A"


def test_update_account_changes_profile_and_password_together(service):
    account = service.create_account(email="a@x.com", password="secret1")

    updated = service.update_account(account["id"], {"name": "B", "passwordHash": "x"}, password="secret2")

    assert updated["name"] == "B"
    assert "passwordHash" not in updated
    service.authenticate("a@x.com", "secret2")
    assert service.update_account("missing", {"name": "B"}) is None
