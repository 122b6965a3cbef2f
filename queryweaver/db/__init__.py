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

"""Thin database layer: DB-API connections driven by fragments.

Works with any DB-API 2.0 connection the caller opens in autocommit mode
(``sqlite3``, ``psycopg2``, ...).

Usage::

    from queryweaver.core import sql
    from queryweaver.db import connect, fetch_all

    conn = sqlite3.connect("data.db", isolation_level=None)
    rows = fetch_all(conn, sql("SELECT * FROM papers WHERE year = {}", 2024))

    db = connect(conn)
    with db.transaction():
        db.insert("papers", {"doi": "10.1101/x", "title": "A paper"})
"""

from queryweaver.db.client import DBAPIClient, connect
from queryweaver.db.connection import is_sqlite, paramstyle_of
from queryweaver.db.migrations import Migration, get_applied_versions, run_migrations
from queryweaver.db.operations import (
    compile_for,
    create_tables,
    execute,
    fetch_all,
    fetch_one,
    fetch_scalar,
    sqlite_statements,
    table_exists,
)

__all__ = [
    "is_sqlite",
    "paramstyle_of",
    "connect",
    "DBAPIClient",
    "compile_for",
    "execute",
    "fetch_one",
    "fetch_all",
    "fetch_scalar",
    "table_exists",
    "create_tables",
    "sqlite_statements",
    "Migration",
    "get_applied_versions",
    "run_migrations",
]
