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

"""Composable SQL fragments with context-aware placeholder rendering.

Usage::

    from queryweaver.core import sql, WHERE, OR, build_insert

    q = sql("SELECT * FROM papers {}", WHERE({"year": 2024}, OR({"oa": True, "pmc": None})))
    q.text()     # 'SELECT * FROM papers WHERE ((year = $1) AND (((oa = $2) OR (pmc IS NULL))))'
    q.values()   # [2024, True]
    str(q)       # "SELECT * FROM papers WHERE ((year = '2024') AND (((oa = true) OR (pmc IS NULL))))"
"""

from queryweaver.core.builders import (
    AND,
    LIMIT,
    OFFSET,
    OR,
    UNION,
    UNION_ALL,
    WHERE,
    WHERE_AND,
    WHERE_OR,
    FieldValues,
    WhereArg,
    and_,
    build_clauses,
    build_delete,
    build_insert,
    build_keys,
    build_update,
    build_values,
    or_,
    where,
    where_and,
    where_or,
)
from queryweaver.core.compose import (
    ident,
    json_template,
    json_value,
    raw,
    sequence,
    sql,
    template,
)
from queryweaver.core.errors import (
    EmptyInputError,
    InvalidArgumentError,
    QueryWeaverError,
    ShapeMismatchError,
)
from queryweaver.core.fragments import (
    PARAMSTYLES,
    Fragment,
    Fragments,
    Identifier,
    JsonFragments,
    RawText,
    RenderOptions,
    SewingPattern,
    Value,
    is_fragment,
    lift,
)
from queryweaver.core.quoting import pg_ident, pg_string, quote_ident, quote_literal
from queryweaver.core.scanner import ScanContext, scan, split_statements
from queryweaver.core.sentinel import UNSET

__all__ = [
    "sql",
    "template",
    "sequence",
    "raw",
    "ident",
    "json_value",
    "json_template",
    "AND",
    "OR",
    "WHERE",
    "WHERE_AND",
    "WHERE_OR",
    "and_",
    "or_",
    "where",
    "where_and",
    "where_or",
    "UNION",
    "UNION_ALL",
    "LIMIT",
    "OFFSET",
    "build_clauses",
    "build_keys",
    "build_values",
    "build_insert",
    "build_update",
    "build_delete",
    "FieldValues",
    "WhereArg",
    "Fragment",
    "Fragments",
    "JsonFragments",
    "RawText",
    "Value",
    "Identifier",
    "RenderOptions",
    "SewingPattern",
    "PARAMSTYLES",
    "is_fragment",
    "lift",
    "ScanContext",
    "scan",
    "split_statements",
    "quote_ident",
    "quote_literal",
    "pg_ident",
    "pg_string",
    "UNSET",
    "QueryWeaverError",
    "ShapeMismatchError",
    "EmptyInputError",
    "InvalidArgumentError",
]
