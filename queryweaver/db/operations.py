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

"""Pure-function query helpers over DB-API connections.

All functions take a DB-API connection as their first argument.  The query
is either a fragment, which is compiled in the driver's paramstyle, or
plain SQL text plus parameters, which is passed through untouched::

    fetch_all(conn, sql("SELECT * FROM papers WHERE year = {}", 2024))
    fetch_all(conn, "SELECT * FROM papers WHERE year = ?", (2024,))
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from queryweaver.core import Fragment, sql, split_statements
from queryweaver.db.connection import is_sqlite, paramstyle_of

logger = logging.getLogger(__name__)

Params = Sequence[Any] | Mapping[str, Any]


def compile_for(conn: Any, query: Fragment | str, params: Params = ()) -> tuple[str, Params]:
    """Return ``(text, params)`` for *conn*'s driver."""
    if isinstance(query, Fragment):
        return query.compile(paramstyle_of(conn))
    return query, params


def execute(conn: Any, query: Fragment | str, params: Params = ()) -> Any:
    """Execute a single statement and return the cursor.

    Useful for INSERT / UPDATE / DELETE where you might need
    ``cursor.lastrowid`` or ``cursor.rowcount``.
    """
    text, params = compile_for(conn, query, params)
    cur = conn.cursor()
    cur.execute(text, params)
    return cur


def fetch_one(conn: Any, query: Fragment | str, params: Params = ()) -> Any:
    """Execute and return the first row, or ``None``."""
    return execute(conn, query, params).fetchone()


def fetch_all(conn: Any, query: Fragment | str, params: Params = ()) -> list[Any]:
    """Execute and return all rows."""
    return execute(conn, query, params).fetchall()


def first_column(row: Any) -> Any:
    """First column of a mapping, ``sqlite3.Row`` or tuple row."""
    if row is None:
        return None
    if isinstance(row, Mapping):
        return next(iter(row.values()), None)
    try:
        return row[0]
    except (IndexError, KeyError):
        return None


def fetch_scalar(conn: Any, query: Fragment | str, params: Params = ()) -> Any:
    """Execute and return the first column of the first row, or ``None``."""
    return first_column(fetch_one(conn, query, params))


def table_exists(conn: Any, name: str) -> bool:
    """Check whether a table exists (works on both SQLite and PostgreSQL)."""
    if is_sqlite(conn):
        query = sql("SELECT 1 FROM sqlite_master WHERE type='table' AND name={}", name)
    else:
        query = sql("SELECT 1 FROM information_schema.tables WHERE table_name={}", name)
    return fetch_one(conn, query) is not None


def sqlite_statements(script: str) -> list[str]:
    """Split a SQLite script into complete statements.

    Pieces cut at top-level semicolons are glued back together until
    ``sqlite3.complete_statement`` accepts them, which keeps the
    ``BEGIN ... END`` body of a ``CREATE TRIGGER`` in one statement.
    """
    statements: list[str] = []
    pending = ""
    for piece in split_statements(script):
        pending = f"{pending};\n{piece}" if pending else piece
        if sqlite3.complete_statement(pending + ";"):
            statements.append(pending)
            pending = ""
    if pending:
        statements.append(pending)
    return statements


def create_tables(conn: Any, schema_sql: str) -> None:
    """Execute a (possibly multi-statement) schema DDL string.

    For SQLite the script is split into statements that run one by one,
    since ``executescript()`` would commit an open transaction first.
    For PostgreSQL the script goes to the server in a single call.  Either
    way it stays inside whatever transaction is open on *conn*.
    """
    cur = conn.cursor()
    if is_sqlite(conn):
        statements = sqlite_statements(schema_sql)
        for statement in statements:
            cur.execute(statement)
        logger.debug("Executed %d schema statement(s)", len(statements))
    else:
        cur.execute(schema_sql)
        logger.debug("Executed schema script")
