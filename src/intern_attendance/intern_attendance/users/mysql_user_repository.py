from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "user_id, name, username, email, role, division, profile_photo_url"


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=row["user_id"],
        name=row["name"],
        username=row["username"],
        email=row.get("email"),
        role=Role(row["role"]),
        division=row.get("division"),
        profile_photo_url=row.get("profile_photo_url"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE username=%s", (username,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY name ASC")
            return [_row_to_user(r) for r in fetchall(cur)]

    def create(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(user_id, name, username, email, role, division, profile_photo_url)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.user_id,
                    user.name,
                    user.username,
                    user.email,
                    user.role.value,
                    user.division,
                    user.profile_photo_url,
                ),
            )

    def update(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, username=%s, email=%s, role=%s, division=%s
                WHERE user_id=%s
                """,
                (user.name, user.username, user.email, user.role.value, user.division, user.user_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: str) -> bool:
        # attendance_records / leave_requests go with ON DELETE CASCADE.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def set_profile_photo(self, user_id: str, photo_url: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET profile_photo_url=%s WHERE user_id=%s", (photo_url, user_id))
            return cur.rowcount > 0
