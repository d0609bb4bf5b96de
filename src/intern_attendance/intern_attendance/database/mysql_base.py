from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, StorageError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection + cursor for one unit of work.

    Commits on success, rolls back on any error. Driver errors surface as
    ConflictError (duplicate key) or StorageError so services never see
    mysql.connector types.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise StorageError(f"Tidak dapat terhubung ke database: {e.msg}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise ConflictError("Data yang sama sudah tercatat") from e
        raise StorageError(f"Penulisan data ditolak: {e.msg}") from e
    except mysql.connector.Error as e:
        conn.rollback()
        raise StorageError(f"Operasi database gagal: {e.msg}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholder list for ``IN (...)``; callers pass the values as params."""
    return ",".join(["%s"] * len(values))
