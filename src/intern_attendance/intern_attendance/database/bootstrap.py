from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig, db_config_from_dict

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # (email, password, username, name, role, division)
    ("admin@example.com", "password", "admin", "Administrator", "admin", None),
    ("intern@example.com", "password", "ahmad", "Ahmad Subarjo", "intern", "Umum"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured database name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.strip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter on ';' outside quotes, enough for schema.sql.
    buf: list[str] = []
    quote = None
    escape = False

    for ch in _strip_comments(sql):
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = db_config_from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = db_config_from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def ensure_demo_users(db_config: dict) -> None:
    """Create (or reset) the demo admin and intern accounts.

    Change these passwords outside local development.
    """

    target = db_config_from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        for email, password, username, name, role, division in DEMO_USERS:
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            user_id = existing["user_id"] if existing else str(uuid.uuid4())
            password_hash = generate_password_hash(password)

            cur.execute("DELETE FROM auth_accounts WHERE email=%s AND account_id<>%s", (email, user_id))
            cur.execute(
                """
                INSERT INTO auth_accounts(account_id, email, password_hash)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE email=VALUES(email), password_hash=VALUES(password_hash)
                """,
                (user_id, email, password_hash),
            )
            if existing:
                cur.execute(
                    "UPDATE users SET name=%s, email=%s, role=%s, division=%s WHERE user_id=%s",
                    (name, email, role, division, user_id),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users(user_id, name, username, email, role, division)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (user_id, name, username, email, role, division),
                )
            logger.info("Demo user ready: %s (%s)", username, role)
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config_from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
