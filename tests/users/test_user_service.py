from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from src.intern_attendance.intern_attendance.core.enums import Role
from src.intern_attendance.intern_attendance.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    StorageError,
    ValidationError,
)
from src.intern_attendance.intern_attendance.storage.photo_storage import FileSystemPhotoStorage
from src.intern_attendance.intern_attendance.users.model import AuthAccount, User
from src.intern_attendance.intern_attendance.users.service import AuthService, UserService
from tests.fakes import InMemoryAccounts, InMemoryUsers


@pytest.fixture
def ahmad():
    return User(user_id="u1", name="Ahmad", username="ahmad", role=Role.INTERN, email="ahmad@example.com")


@pytest.fixture
def users(ahmad):
    return InMemoryUsers([ahmad])


@pytest.fixture
def accounts():
    return InMemoryAccounts(
        [AuthAccount(account_id="u1", email="ahmad@example.com", password_hash=generate_password_hash("rahasia"))]
    )


@pytest.fixture
def user_service(users, accounts, tmp_path, tz):
    return UserService(users, accounts, FileSystemPhotoStorage(tmp_path / "storage"), tz=tz)


def test_auth_success_returns_session_user(users, accounts):
    s_user = AuthService(users, accounts).authenticate("ahmad", "rahasia")

    assert (s_user.user_id, s_user.name, s_user.role) == ("u1", "Ahmad", Role.INTERN)


def test_auth_unknown_username(users, accounts):
    with pytest.raises(AuthenticationError, match='Username "budi" tidak ditemukan.'):
        AuthService(users, accounts).authenticate("budi", "rahasia")


def test_auth_profile_without_email(accounts):
    users = InMemoryUsers([User(user_id="u1", name="Ahmad", username="ahmad", role=Role.INTERN)])

    with pytest.raises(AuthenticationError, match="tidak memiliki email"):
        AuthService(users, accounts).authenticate("ahmad", "rahasia")


def test_auth_wrong_password(users, accounts):
    with pytest.raises(AuthenticationError, match="Password yang dimasukkan salah."):
        AuthService(users, accounts).authenticate("ahmad", "salah")


def test_auth_account_without_profile(users, accounts):
    accounts.by_id.clear()
    accounts.create(AuthAccount(account_id="ghost", email="ahmad@example.com", password_hash=generate_password_hash("rahasia")))

    with pytest.raises(AuthenticationError, match="Profil pengguna tidak ditemukan"):
        AuthService(users, accounts).authenticate("ahmad", "rahasia")


def test_auth_requires_credentials(users, accounts):
    with pytest.raises(ValidationError):
        AuthService(users, accounts).authenticate("", "rahasia")


def test_create_user_creates_account_and_profile(user_service, users, accounts):
    user = user_service.create_user(
        name="Budi", username="budi", email="budi@example.com", password="rahasia1", division="  "
    )

    assert users.get_by_id(user.user_id).username == "budi"
    assert user.division is None
    assert user.role == Role.INTERN
    assert check_password_hash(accounts.get_by_id(user.user_id).password_hash, "rahasia1")


def test_create_user_rolls_back_account_when_profile_fails(user_service, users, accounts):
    users.fail_create = True

    with pytest.raises(StorageError):
        user_service.create_user(name="Budi", username="budi", email="budi@example.com", password="rahasia1")

    assert accounts.get_by_email("budi@example.com") is None


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(username="ahmad", email="new@example.com"),
        dict(username="budi", email="ahmad@example.com"),
        dict(username="budi", email="budi@example.com", password="123"),
        dict(username="budi", email="budi@example.com", role="manager"),
    ],
)
def test_create_user_validation(user_service, kwargs):
    params = dict(name="Budi", password="rahasia1")
    params.update(kwargs)

    with pytest.raises(ValidationError):
        user_service.create_user(**params)


def test_update_user_changes_email_and_password(user_service, accounts):
    updated = user_service.update_user(
        user_id="u1",
        name="Ahmad S",
        username="ahmad",
        role="admin",
        email="ahmad.s@example.com",
        password="barubaru",
    )

    assert updated.role == Role.ADMIN
    account = accounts.get_by_id("u1")
    assert account.email == "ahmad.s@example.com"
    assert check_password_hash(account.password_hash, "barubaru")


def test_update_user_rejects_taken_username(user_service, users):
    users.create(User(user_id="u2", name="Budi", username="budi", role=Role.INTERN))

    with pytest.raises(ValidationError):
        user_service.update_user(user_id="u2", name="Budi", username="ahmad", role="intern")


def test_update_user_without_account_needs_password(user_service, users):
    users.create(User(user_id="u2", name="Budi", username="budi", role=Role.INTERN))

    with pytest.raises(ValidationError):
        user_service.update_user(user_id="u2", name="Budi", username="budi", role="intern", email="budi@example.com")


def test_cannot_delete_self(user_service, users):
    with pytest.raises(AuthorizationError):
        user_service.delete_user(actor_id="u1", user_id="u1")
    assert users.get_by_id("u1") is not None


def test_delete_user_removes_profile_and_account(user_service, users, accounts):
    user_service.delete_user(actor_id="admin", user_id="u1")

    assert users.get_by_id("u1") is None
    assert accounts.get_by_id("u1") is None


def test_update_profile_photo(user_service, users, fixed_now, png_data_url):
    user = user_service.update_profile_photo(user_id="u1", photo=png_data_url, now=fixed_now)

    assert user.profile_photo_url.startswith("/api/files/profile-photos/u1/2026-06-30_")
    assert users.get_by_id("u1").profile_photo_url == user.profile_photo_url
