# File: planboard/tools/migrate.py
# Python 3.11+
# Usage examples:
#   python -m planboard.tools.migrate status
#   python -m planboard.tools.migrate up
#   python -m planboard.tools.migrate verify --db /path/to/planboard.db
#
# Notes:
# - DB path defaults to env PLANBOARD_DB, then settings.json, then the XDG data dir
# - "up" opens the store, which creates/upgrades the schema and re-persists the file
# - "verify" checks tables, indexes, schema version and data invariants

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from planboard.repositories.db import Database
from planboard.repositories.migrations import EXPECTED_INDEXES, EXPECTED_TABLES, SCHEMA_VERSION, user_version
from planboard.services.integrity import check_invariants
from planboard.utils.config import resolve_db_path
from planboard.utils.logging_setup import get_logger, setup_logging

_log = get_logger("migrate")


def _read_only_version(db_path: Path) -> int:
    conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    try:
        return user_version(conn)
    finally:
        conn.close()


def cmd_status(db_path: Path) -> int:
    print(f"DB: {db_path}")
    if not db_path.exists():
        print("State: missing (run 'up' to create it)")
        return 0
    version = _read_only_version(db_path)
    print(f"Schema version: {version} (current: {SCHEMA_VERSION})")
    if version < SCHEMA_VERSION:
        print("Pending: upgrade required")
        return 0
    db = Database(db_path, migrate=False)
    try:
        for table in EXPECTED_TABLES:
            total = db.scalar(f"SELECT COUNT(*) FROM {table}")
            print(f"  {table}: {total}")
    finally:
        db.close()
    return 0


def cmd_up(db_path: Path) -> int:
    before = _read_only_version(db_path) if db_path.exists() else 0
    db = Database(db_path)
    try:
        after = user_version(db.conn)
    finally:
        db.close()
    if before < after:
        print(f"✓ Upgraded {db_path} from version {before} to {after}.")
    else:
        print(f"✓ No changes. {db_path} already at version {after}.")
    return 0


def cmd_verify(db_path: Path) -> int:
    if not db_path.exists():
        print(f"❌ Database not found: {db_path}")
        return 1
    db = Database(db_path, migrate=False)
    try:
        names = {r["name"] for r in db.all("SELECT name FROM sqlite_master WHERE type = 'table'")}
        missing = [t for t in EXPECTED_TABLES if t not in names]
        if missing:
            print("❌ Missing tables:", ", ".join(missing))
            return 2

        indexes = {r["name"] for r in db.all("SELECT name FROM sqlite_master WHERE type = 'index'")}
        idx_missing = [i for i in EXPECTED_INDEXES if i not in indexes]
        if idx_missing:
            print("❌ Missing indexes:", ", ".join(idx_missing))
            return 3

        version = user_version(db.conn)
        if version < SCHEMA_VERSION:
            print(f"❌ Schema version {version} is older than {SCHEMA_VERSION}")
            return 4

        problems = check_invariants(db)
        if problems:
            print(f"❌ {len(problems)} invariant violation(s):")
            for line in problems:
                print(f"  - {line}")
            return 5
    finally:
        db.close()

    print("✓ Verification passed.")
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="planboard-migrate", description="Schema and integrity tool for planboard databases")
    sub = p.add_subparsers(dest="cmd", required=True)
    for name, help_text in (
        ("status", "Show schema version and row counts"),
        ("up", "Create or upgrade the database in place"),
        ("verify", "Check structure and data invariants"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--db", type=Path, default=None, help="Path to the database file")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging()
    db_path = resolve_db_path(ns.db)
    _log.debug("migrate %s on %s", ns.cmd, db_path)
    if ns.cmd == "status":
        return cmd_status(db_path)
    if ns.cmd == "up":
        return cmd_up(db_path)
    if ns.cmd == "verify":
        return cmd_verify(db_path)
    raise SystemExit(1)


if __name__ == "__main__":
    raise SystemExit(main())
