"""Database setup: apply ``database/schema.sql`` and/or create the demo accounts.

    python scripts/manage_db.py init [--seed]
    python scripts/manage_db.py seed
    python scripts/manage_db.py tables

Demo accounts (admin + intern) share the password ``password``.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.intern_attendance.intern_attendance.database.bootstrap import (
    DEMO_USERS,
    apply_schema,
    ensure_demo_users,
    list_tables,
)

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"


def _target(db_config: dict) -> str:
    return f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"


def init(db_config: dict, *, seed: bool = False) -> list[str]:
    lines = []
    apply_schema(db_config, schema_path=SCHEMA_PATH)
    lines.append(f"OK: Applied schema.sql -> {_target(db_config)} (tables={len(list_tables(db_config))})")
    if seed:
        lines.extend(seed_users(db_config))
    return lines


def seed_users(db_config: dict) -> list[str]:
    ensure_demo_users(db_config)
    usernames = ", ".join(u[2] for u in DEMO_USERS)
    return [f"OK: Seeded demo users ({usernames}) -> {_target(db_config)}"]


def tables(db_config: dict) -> list[str]:
    names = list_tables(db_config)
    return [f"{_target(db_config)}: {', '.join(names) if names else '(no tables)'}"]


def main(argv: list[str] | None = None) -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)
    init_cmd = commands.add_parser("init", help="apply database/schema.sql (idempotent)")
    init_cmd.add_argument("--seed", action="store_true", help="also create the demo accounts")
    commands.add_parser("seed", help="create or reset the demo accounts")
    commands.add_parser("tables", help="list tables in the configured database")
    args = parser.parse_args(argv)

    if args.command == "init":
        lines = init(db_config, seed=args.seed)
    elif args.command == "seed":
        lines = seed_users(db_config)
    else:
        lines = tables(db_config)

    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
