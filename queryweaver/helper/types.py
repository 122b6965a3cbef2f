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

"""Data types shared by the query helpers and their clients."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class QueryResult:
    """Result of one executed statement.

    Attributes:
        rows: Returned rows (empty for statements without a result set).
        row_count: Number of rows returned or affected, as reported by the
            client.
    """

    rows: list[Any] = field(default_factory=list)
    row_count: int = 0


@dataclass(frozen=True)
class QueryConfig:
    """A rendered statement: placeholder text plus its parameters."""

    text: str
    values: Sequence[Any] | Mapping[str, Any] = ()


class Queryable(Protocol):
    """Anything that can execute rendered SQL."""

    def query(self, text: str, values: Sequence[Any] | Mapping[str, Any]) -> QueryResult:
        ...


class AsyncQueryable(Protocol):
    """Coroutine flavour of :class:`Queryable`."""

    async def query(
        self, text: str, values: Sequence[Any] | Mapping[str, Any],
    ) -> QueryResult:
        ...
