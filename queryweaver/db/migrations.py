# queryweaver — composable, injection-safe SQL for Python
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Idempotent database migration runner.

Provides a simple, sequential migration system that tracks applied
migrations in a ``schema_version`` table.  Each migration is a Python
function that receives the DB-API connection and runs inside a transaction
together with its ``schema_version`` bookkeeping row.

Usage::

    from queryweaver.db import Migration, create_tables, run_migrations

    def _m001_create_users(conn):
        create_tables(conn, "CREATE TABLE IF NOT EXISTS users (...);")

    MIGRATIONS = [Migration(1, "create_users", _m001_create_users)]

    run_migrations(conn, MIGRATIONS)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from queryweaver.core import sql
from queryweaver.db.client import connect
from queryweaver.db.connection import is_sqlite
from queryweaver.db.operations import create_tables, fetch_all, first_column, table_exists

logger = logging.getLogger(__name__)

VERSION_TABLE = "schema_version"


@dataclass
class Migration:
    """A single database migration.

    Attributes:
        version: Sequential integer (1, 2, 3, ...). Must be unique.
        name: Short descriptive name (e.g. ``"initial_schema"``).
        up: Callable that takes a DB-API connection and applies the DDL.
    """

    version: int
    name: str
    up: Callable[[Any], None]


def _ensure_version_table(conn: Any) -> None:
    """Create the ``schema_version`` table if it does not exist."""
    if table_exists(conn, VERSION_TABLE):
        return

    if is_sqlite(conn):
        applied_at = "TEXT NOT NULL DEFAULT (datetime('now'))"
    else:
        applied_at = "TIMESTAMP NOT NULL DEFAULT NOW()"
    create_tables(
        conn,
        f"""\
CREATE TABLE {VERSION_TABLE} (
    version INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at {applied_at}
);
""",
    )
    logger.info("Created %s table", VERSION_TABLE)


def get_applied_versions(conn: Any) -> set[int]:
    """Return the set of migration version numbers already applied.

    Returns an empty set if the ``schema_version`` table does not exist.
    """
    if not table_exists(conn, VERSION_TABLE):
        return set()

    rows = fetch_all(conn, sql("SELECT version FROM schema_version"))
    return {first_column(r) for r in rows}


def run_migrations(conn: Any, migrations: list[Migration]) -> int:
    """Apply all pending migrations in version order.

    Args:
        conn: A DB-API connection in autocommit mode, so that each
            migration can run in its own explicit transaction.
        migrations: List of ``Migration`` objects.

    Returns:
        Number of migrations applied.
    """
    _ensure_version_table(conn)
    applied = get_applied_versions(conn)
    db = connect(conn)

    count = 0
    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.version in applied:
            continue

        logger.info(
            "Applying migration %d: %s", migration.version, migration.name
        )
        with db.transaction():
            migration.up(conn)
            db.insert(VERSION_TABLE, {"version": migration.version, "name": migration.name})
        count += 1

    if count:
        logger.info("Applied %d migration(s)", count)
    return count
