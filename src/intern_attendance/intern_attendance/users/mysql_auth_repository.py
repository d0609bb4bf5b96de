from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AuthAccount
from .repository import AuthAccountRepository


class MySQLAuthAccountRepository(AuthAccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, account_id: str) -> Optional[AuthAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT account_id, email, password_hash FROM auth_accounts WHERE account_id=%s",
                (account_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return AuthAccount(account_id=row["account_id"], email=row["email"], password_hash=row["password_hash"])

    def get_by_email(self, email: str) -> Optional[AuthAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT account_id, email, password_hash FROM auth_accounts WHERE email=%s",
                (email,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return AuthAccount(account_id=row["account_id"], email=row["email"], password_hash=row["password_hash"])

    def create(self, account: AuthAccount) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO auth_accounts(account_id, email, password_hash) VALUES(%s,%s,%s)",
                (account.account_id, account.email, account.password_hash),
            )

    def update(self, account_id: str, *, email: Optional[str] = None, password_hash: Optional[str] = None) -> bool:
        sets = []
        params: list[object] = []
        if email is not None:
            sets.append("email=%s")
            params.append(email)
        if password_hash is not None:
            sets.append("password_hash=%s")
            params.append(password_hash)
        if not sets:
            return False

        params.append(account_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE auth_accounts SET {', '.join(sets)} WHERE account_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, account_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM auth_accounts WHERE account_id=%s", (account_id,))
            return cur.rowcount > 0
