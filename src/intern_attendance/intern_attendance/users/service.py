from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MAX_PROFILE_PHOTO_BYTES, PROFILE_PHOTO_BUCKET
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..storage.photo_storage import PhotoStorage, decode_data_url, normalise_image, photo_key
from .model import AuthAccount, User
from .repository import AuthAccountRepository, UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    name: str
    role: Role


def _parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Role tidak valid: {value!r}")


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class AuthService:
    """Use case: authenticate user (login).

    Username -> profile email -> password check -> profile by account id. Each
    failure raises AuthenticationError with its own message.
    """

    def __init__(self, users: UserRepository, accounts: AuthAccountRepository):
        self._users = users
        self._accounts = accounts

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "Username")
        require_non_empty(password, "Password")

        user = self._users.get_by_username(username)
        if not user:
            logger.info("Login rejected: unknown username %r", username)
            raise AuthenticationError(f'Username "{username}" tidak ditemukan.')
        if not user.email:
            logger.info("Login rejected: %r has no email", username)
            raise AuthenticationError("Akun pengguna tidak memiliki email terkait.")

        account = self._accounts.get_by_email(user.email)
        try:
            ok = bool(account) and check_password_hash(account.password_hash, password)
        except ValueError:
            # unparseable stored hash
            ok = False
        if not ok:
            logger.info("Login rejected: wrong password for %r", username)
            raise AuthenticationError("Password yang dimasukkan salah.")

        profile = self._users.get_by_id(account.account_id)
        if not profile:
            logger.warning("Login rejected: account %s has no profile", account.account_id)
            raise AuthenticationError("Profil pengguna tidak ditemukan setelah login.")

        logger.info("User %s logged in", profile.username)
        return SessionUser(user_id=profile.user_id, name=profile.name, role=profile.role)


class UserService:
    """Use case: manage users (admin) and self-service profile photo."""

    def __init__(
        self,
        users: UserRepository,
        accounts: AuthAccountRepository,
        storage: PhotoStorage,
        *,
        tz: ZoneInfo,
    ):
        self._users = users
        self._accounts = accounts
        self._storage = storage
        self._tz = tz

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Pengguna tidak ditemukan")
        return user

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def list_interns(self) -> Sequence[User]:
        return [u for u in self._users.list_all() if u.role == Role.INTERN]

    def create_user(
        self,
        *,
        name: str,
        username: str,
        email: str,
        password: str,
        role: Role | str = Role.INTERN,
        division: Optional[str] = None,
    ) -> User:
        """Create the login account and the profile together.

        If the profile insert fails the login account is removed again.
        """

        name = require_non_empty(name, "Nama")
        username = require_non_empty(username, "Username")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = _parse_role(role)

        if self._users.get_by_username(username):
            raise ValidationError("Username sudah digunakan")
        if self._accounts.get_by_email(email):
            raise ValidationError("Email sudah terdaftar")

        user = User(
            user_id=str(uuid.uuid4()),
            name=name,
            username=username,
            email=email,
            role=role,
            division=_clean_optional(division),
        )

        self._accounts.create(
            AuthAccount(account_id=user.user_id, email=email, password_hash=generate_password_hash(password))
        )
        try:
            self._users.create(user)
        except DomainError:
            logger.warning("Profile insert failed for %s, rolling back login account", username)
            self._accounts.delete(user.user_id)
            raise

        logger.info("User created: %s (%s)", username, role.value)
        return user

    def update_user(
        self,
        *,
        user_id: str,
        name: str,
        username: str,
        role: Role | str,
        division: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        current = self.get_user(user_id)

        name = require_non_empty(name, "Nama")
        username = require_non_empty(username, "Username")
        role = _parse_role(role)
        email = _clean_optional(email) or current.email
        password = password if password and password.strip() else None
        if password is not None:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        other = self._users.get_by_username(username)
        if other and other.user_id != user_id:
            raise ValidationError("Username sudah digunakan")
        if email and email != current.email:
            holder = self._accounts.get_by_email(email)
            if holder and holder.account_id != user_id:
                raise ValidationError("Email sudah terdaftar")

        updated = replace(
            current,
            name=name,
            username=username,
            role=role,
            division=_clean_optional(division),
            email=email,
        )
        self._users.update(updated)

        email_changed = email != current.email
        if email_changed or password is not None:
            if email and not self._accounts.get_by_id(user_id):
                if password is None:
                    raise ValidationError("Password wajib diisi untuk membuat akun login baru")
                self._accounts.create(
                    AuthAccount(account_id=user_id, email=email, password_hash=generate_password_hash(password))
                )
            else:
                self._accounts.update(
                    user_id,
                    email=email if email_changed else None,
                    password_hash=generate_password_hash(password) if password is not None else None,
                )
            logger.info("Login credentials updated for %s", username)

        logger.info("User updated: %s", username)
        return updated

    def delete_user(self, *, actor_id: str, user_id: str) -> None:
        if actor_id == user_id:
            raise AuthorizationError("Tidak dapat menghapus akun sendiri")

        user = self.get_user(user_id)
        self._users.delete_by_id(user_id)
        self._accounts.delete(user_id)
        logger.info("User deleted: %s", user.username)

    def update_profile_photo(self, *, user_id: str, photo: str, now: datetime | None = None) -> User:
        user = self.get_user(user_id)
        now = now or now_local(self._tz)

        raw = decode_data_url(photo, field_name="Foto profil")
        data = normalise_image(raw, max_bytes=MAX_PROFILE_PHOTO_BYTES, field_name="Foto profil")
        url = self._storage.save(PROFILE_PHOTO_BUCKET, photo_key(user_id, now), data)

        self._users.set_profile_photo(user_id, url)
        return replace(user, profile_photo_url=url)
