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

"""DB-API adapter for the query helpers.

:class:`DBAPIClient` implements the ``Queryable`` protocol on top of a
DB-API 2.0 connection, so a plain ``sqlite3`` or ``psycopg2`` connection can
be driven by :class:`~queryweaver.helper.QueryHelper`::

    db = connect(sqlite3.connect("data.db", isolation_level=None))
    with db.transaction():
        db.insert("papers", {"doi": "10.1101/x", "title": "A paper"})
    db.get_rows(sql("SELECT * FROM papers"))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from queryweaver.db.connection import paramstyle_of
from queryweaver.helper import QueryHelper, QueryResult

logger = logging.getLogger(__name__)


class DBAPIClient:
    """Execute rendered statements on a DB-API connection.

    Args:
        conn: An open DB-API 2.0 connection.
    """

    def __init__(self, conn: Any) -> None:
        self.conn = conn
        self.paramstyle = paramstyle_of(conn)

    def query(self, text: str, values: Sequence[Any] | Mapping[str, Any] = ()) -> QueryResult:
        cur = self.conn.cursor()
        try:
            cur.execute(text, values)
            rows = cur.fetchall() if cur.description is not None else []
            row_count = cur.rowcount if cur.rowcount >= 0 else len(rows)
        finally:
            cur.close()
        return QueryResult(rows=list(rows), row_count=row_count)


def connect(conn: Any, **options: Any) -> QueryHelper:
    """Wrap a DB-API connection in a :class:`QueryHelper`.

    Fragments are rendered in the driver's own paramstyle unless a
    ``paramstyle`` option says otherwise.
    """
    client = DBAPIClient(conn)
    options.setdefault("paramstyle", client.paramstyle)
    logger.debug("Query helper bound to %s (%s)", type(conn).__name__, options["paramstyle"])
    return QueryHelper(client, **options)
