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

"""Plumbing shared by the sync and async query helpers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from queryweaver.core import PARAMSTYLES, Fragment, InvalidArgumentError, sql
from queryweaver.helper.types import QueryConfig, QueryResult

logger = logging.getLogger(__name__)

BeforeQueryHook = Callable[[QueryConfig], None]
AfterQueryHook = Callable[[QueryConfig, QueryResult], None]
ErrorHook = Callable[[QueryConfig, Exception], None]


class QueryHelperBase:
    """Query preparation, hooks and result shaping.

    Args:
        client: The wrapped database client.
        paramstyle: Placeholder style used to render fragments
            (``"dollar"`` for ``$1``, or a PEP 249 paramstyle).
        before_query: Called with the :class:`QueryConfig` before execution.
        after_query: Called with the config and the :class:`QueryResult`.
        on_error: Called with the config and the exception raised by the
            client.  The exception is re-raised afterwards.
    """

    def __init__(
        self,
        client: Any,
        *,
        paramstyle: str = "dollar",
        before_query: BeforeQueryHook | None = None,
        after_query: AfterQueryHook | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        if paramstyle not in PARAMSTYLES:
            raise InvalidArgumentError(f"Unknown paramstyle: {paramstyle!r}")
        self._client = client
        self.paramstyle = paramstyle
        self.before_query = before_query
        self.after_query = after_query
        self.on_error = on_error
        self._depth = 0

    @property
    def client(self) -> Any:
        """The wrapped client, for anything the helper does not cover."""
        return self._client

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def prepare(
        self, query: Any, values: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> QueryConfig:
        """Turn a fragment, a :class:`QueryConfig` or plain text into a config.

        Plain text is passed through untouched together with *values*.
        """
        if isinstance(query, QueryConfig):
            return query
        if isinstance(query, Fragment):
            if values is not None:
                raise InvalidArgumentError("values cannot be combined with a fragment")
            text, params = query.compile(self.paramstyle)
            return QueryConfig(text, params)
        if isinstance(query, str):
            return QueryConfig(query, values if values is not None else [])
        if hasattr(query, "strings") and hasattr(query, "interpolations"):
            return self.prepare(sql(query))
        raise InvalidArgumentError(f"Cannot execute a {type(query).__name__}")

    def _before(self, config: QueryConfig) -> None:
        logger.debug("Executing: %s (%d params)", config.text, len(config.values))
        if self.before_query is not None:
            self.before_query(config)

    def _after(self, config: QueryConfig, result: QueryResult) -> None:
        if self.after_query is not None:
            self.after_query(config, result)

    def _failed(self, config: QueryConfig, exc: Exception) -> None:
        logger.debug("Query failed: %s", config.text, exc_info=exc)
        if self.on_error is not None:
            self.on_error(config, exc)


def first_row(result: QueryResult) -> Any:
    return result.rows[0] if result.rows else None


def first_value(result: QueryResult) -> Any:
    """First column of the first row, for mapping and sequence rows alike."""
    row = first_row(result)
    if row is None:
        return None
    if isinstance(row, Mapping):
        return next(iter(row.values()), None)
    # sqlite3.Row has keys() but is not a Mapping; index access is universal.
    try:
        return row[0]
    except (IndexError, KeyError):
        return None
