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

"""Exceptions raised while composing SQL.

All of them are raised synchronously by the composition functions, before
anything is rendered.  Errors coming from a database client are never
wrapped: they reach the caller unchanged.
"""

from __future__ import annotations


class QueryWeaverError(Exception):
    """Base class for composition errors."""


class ShapeMismatchError(QueryWeaverError, ValueError):
    """Rows passed to a row builder differ in length or key set."""


class EmptyInputError(QueryWeaverError, ValueError):
    """A builder that needs at least one row or field received none."""


class InvalidArgumentError(QueryWeaverError, TypeError):
    """A composition function was called with an unusable argument."""
