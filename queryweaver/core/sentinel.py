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

"""The ``UNSET`` marker for "no value at all".

``None`` renders as SQL ``NULL``.  ``UNSET`` is dropped: an interpolated
``UNSET`` produces nothing, and a mapping key bound to ``UNSET`` is left out
of WHERE clauses, INSERT column lists and UPDATE assignments.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class _Unset:
    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def without_unset(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *fields* without the keys bound to ``UNSET``."""
    return {k: v for k, v in fields.items() if v is not UNSET}


def strip_unset(value: Any) -> Any:
    """Recursively drop ``UNSET`` mapping values and list items."""
    if isinstance(value, Mapping):
        return {k: strip_unset(v) for k, v in value.items() if v is not UNSET}
    if isinstance(value, (list, tuple)):
        return [strip_unset(v) for v in value if v is not UNSET]
    return value
