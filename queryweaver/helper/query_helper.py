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

"""Synchronous query helper.

Usage::

    db = QueryHelper(client)
    rows = db.get_rows(sql("SELECT * FROM papers {}", WHERE({"year": 2024})))

    with db.transaction():
        db.insert("papers", {"doi": "10.1101/x", "title": "A paper"})
        db.update("papers", {"title": "Retitled"}, {"doi": "10.1101/x"})
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from queryweaver.core import (
    FieldValues,
    Fragment,
    WhereArg,
    build_delete,
    build_insert,
    build_update,
)
from queryweaver.helper.base import QueryHelperBase, first_row, first_value
from queryweaver.helper.types import QueryResult, Queryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryHelper(QueryHelperBase):
    """Render fragments and run them through a :class:`Queryable` client."""

    def __init__(self, client: Queryable, **options: Any) -> None:
        super().__init__(client, **options)

    def query(
        self, query: Any, values: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> QueryResult:
        """Execute a fragment, a ``QueryConfig``, or plain text with values."""
        config = self.prepare(query, values)
        self._before(config)
        try:
            result = self._client.query(config.text, config.values)
        except Exception as exc:
            self._failed(config, exc)
            raise
        self._after(config, result)
        return result

    def get_rows(self, query: Any, values: Any = None) -> list[Any]:
        return self.query(query, values).rows

    def get_row(self, query: Any, values: Any = None) -> Any:
        """First row, or ``None``."""
        return first_row(self.query(query, values))

    def get_one(self, query: Any, values: Any = None) -> Any:
        """First column of the first row, or ``None``."""
        return first_value(self.query(query, values))

    def get_count(self, query: Any, values: Any = None) -> int:
        return self.query(query, values).row_count

    exec = get_count

    def insert(
        self,
        table: str,
        rows: FieldValues | Sequence[FieldValues],
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return self.query(build_insert(table, rows, appendix))

    def update(
        self,
        table: str,
        fields: FieldValues,
        where: WhereArg = None,
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return self.query(build_update(table, fields, where, appendix))

    def delete(
        self,
        table: str,
        where: WhereArg = None,
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return self.query(build_delete(table, where, appendix))

    @contextmanager
    def transaction(self) -> Generator[QueryHelper, None, None]:
        """Context manager that commits on success, rolls back on exception.

        Scopes nest: only the outermost one issues ``BEGIN`` and ``COMMIT``.
        An exception escaping the outermost scope issues ``ROLLBACK`` and
        is re-raised; so does a failing ``COMMIT``.
        """
        outermost = self._depth == 0
        if outermost:
            self.query("BEGIN")
            logger.debug("Transaction started")
        self._depth += 1
        try:
            yield self
        except Exception:
            if outermost:
                self.query("ROLLBACK")
                logger.debug("Transaction rolled back")
            raise
        else:
            if outermost:
                try:
                    self.query("COMMIT")
                except Exception:
                    try:
                        self.query("ROLLBACK")
                    except Exception:
                        logger.warning("ROLLBACK after failed COMMIT failed", exc_info=True)
                    raise
                logger.debug("Transaction committed")
        finally:
            self._depth -= 1

    def begin(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn(*args, **kwargs)`` inside :meth:`transaction`."""
        with self.transaction():
            return fn(*args, **kwargs)


def with_query_helper(client: Queryable, **options: Any) -> QueryHelper:
    """Wrap *client* in a :class:`QueryHelper`."""
    return QueryHelper(client, **options)
