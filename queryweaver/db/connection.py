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


"""Introspection of caller-owned DB-API connections.

Opening, configuring and closing connections is left to the caller.  For
the transaction helpers to work the connection must be in autocommit mode
(``sqlite3.connect(..., isolation_level=None)``, ``conn.autocommit = True``
for psycopg2), so that explicit ``BEGIN`` / ``COMMIT`` / ``ROLLBACK``
statements control transactions.
"""

from __future__ import annotations

import sys
from typing import Any


def is_sqlite(conn: Any) -> bool:
    """Return True if the connection is SQLite."""
    return "sqlite3" in type(conn).__module__


def paramstyle_of(conn: Any) -> str:
    """Return the PEP 249 ``paramstyle`` of the driver behind *conn*.

    Falls back to ``"qmark"`` when the driver module does not declare one.
    """
    root = type(conn).__module__.split(".")[0]
    return getattr(sys.modules.get(root), "paramstyle", "qmark")
