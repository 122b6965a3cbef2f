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

"""Coroutine flavour of :class:`~queryweaver.helper.QueryHelper`.

The transaction depth counter belongs to the helper instance.  Nested
scopes within one call chain are fine; overlapping transactions started by
concurrent tasks sharing one helper are not supported.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
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
from queryweaver.helper.types import AsyncQueryable, QueryResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncQueryHelper(QueryHelperBase):
    """Render fragments and await an :class:`AsyncQueryable` client."""

    def __init__(self, client: AsyncQueryable, **options: Any) -> None:
        super().__init__(client, **options)

    async def query(
        self, query: Any, values: Sequence[Any] | Mapping[str, Any] | None = None,
    ) -> QueryResult:
        config = self.prepare(query, values)
        self._before(config)
        try:
            result = await self._client.query(config.text, config.values)
        except Exception as exc:
            self._failed(config, exc)
            raise
        self._after(config, result)
        return result

    async def get_rows(self, query: Any, values: Any = None) -> list[Any]:
        return (await self.query(query, values)).rows

    async def get_row(self, query: Any, values: Any = None) -> Any:
        return first_row(await self.query(query, values))

    async def get_one(self, query: Any, values: Any = None) -> Any:
        return first_value(await self.query(query, values))

    async def get_count(self, query: Any, values: Any = None) -> int:
        return (await self.query(query, values)).row_count

    exec = get_count

    async def insert(
        self,
        table: str,
        rows: FieldValues | Sequence[FieldValues],
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return await self.query(build_insert(table, rows, appendix))

    async def update(
        self,
        table: str,
        fields: FieldValues,
        where: WhereArg = None,
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return await self.query(build_update(table, fields, where, appendix))

    async def delete(
        self,
        table: str,
        where: WhereArg = None,
        appendix: str | Fragment | None = None,
    ) -> QueryResult:
        return await self.query(build_delete(table, where, appendix))

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncQueryHelper, None]:
        """``async with`` counterpart of :meth:`QueryHelper.transaction`."""
        outermost = self._depth == 0
        if outermost:
            await self.query("BEGIN")
            logger.debug("Transaction started")
        self._depth += 1
        try:
            yield self
        except Exception:
            if outermost:
                await self.query("ROLLBACK")
                logger.debug("Transaction rolled back")
            raise
        else:
            if outermost:
                try:
                    await self.query("COMMIT")
                except Exception:
                    try:
                        await self.query("ROLLBACK")
                    except Exception:
                        logger.warning("ROLLBACK after failed COMMIT failed", exc_info=True)
                    raise
                logger.debug("Transaction committed")
        finally:
            self._depth -= 1

    async def begin(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any,
    ) -> T:
        """Await ``fn(*args, **kwargs)`` inside :meth:`transaction`."""
        async with self.transaction():
            return await fn(*args, **kwargs)


def with_async_query_helper(client: AsyncQueryable, **options: Any) -> AsyncQueryHelper:
    return AsyncQueryHelper(client, **options)
