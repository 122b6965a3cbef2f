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

"""Query execution helpers around any database client.

A client only needs ``query(text, values) -> QueryResult`` (or a coroutine
of that for :class:`AsyncQueryHelper`).  The helper renders fragments in the
configured paramstyle, calls optional hooks, and manages nested
transactions.  The wrapped client stays reachable as ``helper.client``.

Usage::

    from queryweaver.core import sql
    from queryweaver.helper import with_query_helper

    db = with_query_helper(client, on_error=report)
    n = db.get_one(sql("SELECT count(*) FROM papers WHERE year = {}", 2024))
"""

from queryweaver.helper.async_helper import AsyncQueryHelper, with_async_query_helper
from queryweaver.helper.query_helper import QueryHelper, with_query_helper
from queryweaver.helper.types import AsyncQueryable, QueryConfig, Queryable, QueryResult

__all__ = [
    "QueryHelper",
    "AsyncQueryHelper",
    "with_query_helper",
    "with_async_query_helper",
    "Queryable",
    "AsyncQueryable",
    "QueryConfig",
    "QueryResult",
]
