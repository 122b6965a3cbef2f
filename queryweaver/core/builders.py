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

"""Clause and statement builders.

Everything here only assembles fragment trees; rendering happens later in
whatever mode the caller picks.

Clause arguments (``WhereArg``) may be:

* a string: trusted SQL, injected verbatim,
* a fragment: spliced in,
* a mapping: one clause per key (``a = $1``, ``a IS NULL``,
  ``a = ANY ($1)``, or ``a <fragment>`` for custom operators),
* a list or tuple of the above,
* ``None``: ignored.

Usage::

    sql("SELECT * FROM foobar {}", WHERE({"a": 1, "c": None}, OR({"d": 5, "e": False})))
    # WHERE ((a = $1) AND (c IS NULL) AND (((d = $2) OR (e = $3))))

    build_insert("papers", {"doi": "10.1101/x", "title": "A paper"}, "RETURNING id")
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any, Union

from queryweaver.core.compose import ident, raw, sequence, sql
from queryweaver.core.errors import (
    EmptyInputError,
    InvalidArgumentError,
    ShapeMismatchError,
)
from queryweaver.core.fragments import Fragment, Fragments, RawText
from queryweaver.core.sentinel import UNSET, without_unset

WhereArg = Union[str, Fragment, Mapping[str, Any], Sequence["WhereArg"], None]
FieldValues = Mapping[str, Any]


def _field_clause(key: str, value: Any) -> Fragment:
    if isinstance(value, Fragment):
        return sql("{} {}", ident(key), value)
    if value is None:
        return sql("{} IS NULL", ident(key))
    if isinstance(value, (list, tuple)):
        return sql("{} = ANY ({})", ident(key), list(value))
    return sql("{} = {}", ident(key), value)


def build_clauses(*args: WhereArg) -> Fragments:
    """Flatten clause arguments into a composite, one child per clause."""
    clauses = Fragments()

    def parse(arg: WhereArg) -> None:
        if arg is None or arg is UNSET:
            return
        if isinstance(arg, str):
            clauses.push(RawText(arg))
        elif isinstance(arg, Fragment):
            clauses.push(arg)
        elif isinstance(arg, Mapping):
            for key, value in arg.items():
                if value is UNSET:
                    continue
                clauses.push(_field_clause(key, value))
        elif isinstance(arg, (list, tuple)):
            for item in arg:
                parse(item)
        else:
            raise InvalidArgumentError(
                f"Unsupported clause argument of type {type(arg).__name__}"
            )

    parse(list(args))
    return clauses


def AND(*args: WhereArg) -> Fragments:
    return build_clauses(*args).set_sewing_pattern("((", ") AND (", "))")


def OR(*args: WhereArg) -> Fragments:
    return build_clauses(*args).set_sewing_pattern("((", ") OR (", "))")


def WHERE(*args: WhereArg) -> Fragments:
    """``WHERE ((a) AND (b))``, or nothing at all when there are no clauses."""
    return build_clauses(*args).set_sewing_pattern("WHERE ((", ") AND (", "))")


def WHERE_OR(*args: WhereArg) -> Fragments:
    return build_clauses(*args).set_sewing_pattern("WHERE ((", ") OR (", "))")


def UNION(*parts: Any) -> Fragments:
    return raw(*parts).join(" UNION ")


def UNION_ALL(*parts: Any) -> Fragments:
    return raw(*parts).join(" UNION ALL ")


def _as_count(n: Any, caller: str) -> int | None:
    """Whole number from an int or numeric string; ``None`` if unparseable."""
    if n is None or n is UNSET:
        return None
    if isinstance(n, int):
        return n
    try:
        number = float(n)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    if not number.is_integer():
        raise InvalidArgumentError(f"{caller}: expected a whole number, got {n!r}")
    return int(number)


def LIMIT(limit: int | str | None) -> Fragments:
    """``LIMIT n`` for a positive *limit*, otherwise nothing.

    Values that do not parse as a number render nothing as well.
    """
    n = _as_count(limit, "LIMIT")
    return sql("LIMIT {}", n) if n is not None and n > 0 else sql()


def OFFSET(offset: int | str | None) -> Fragments:
    """``OFFSET n`` for a non-negative *offset*, otherwise nothing."""
    n = _as_count(offset, "OFFSET")
    return sql("OFFSET {}", n) if n is not None and n >= 0 else sql()


def _as_rows(rows: Any, caller: str) -> list[Any]:
    if isinstance(rows, Mapping):
        return [rows]
    if isinstance(rows, (list, tuple)):
        return list(rows)
    raise InvalidArgumentError(
        f"{caller}: expected a mapping or a list of rows, got {type(rows).__name__}"
    )


def build_keys(rows: FieldValues | Sequence[FieldValues]) -> Fragments:
    """Column list ``(a, b, c)`` from the keys of the first row.

    Keys bound to ``UNSET`` are ignored.  Every further row must have the
    same keys in the same order.
    """
    rows = _as_rows(rows, "build_keys")
    if not rows:
        raise EmptyInputError("build_keys: at least one row is required")
    if not all(isinstance(r, Mapping) for r in rows):
        raise InvalidArgumentError("build_keys: every row must be a mapping")

    keys = list(without_unset(rows[0]))
    for row in rows[1:]:
        if list(without_unset(row)) != keys:
            raise ShapeMismatchError("build_keys: all rows must have the same keys")

    return sequence(*(ident(k) for k in keys)).set_sewing_pattern("(", ", ", ")")


def build_values(rows: FieldValues | Sequence[Any]) -> Fragments:
    """``VALUES ($1, $2), ($3, $4)`` from mappings or sequences of values."""
    rows = _as_rows(rows, "build_values")
    if not rows:
        raise EmptyInputError("build_values: at least one row is required")

    table: list[list[Any]] = []
    for row in rows:
        if isinstance(row, Mapping):
            table.append(list(without_unset(row).values()))
        elif isinstance(row, (list, tuple)):
            table.append(list(row))
        else:
            raise InvalidArgumentError(
                f"build_values: unsupported row type {type(row).__name__}"
            )

    width = len(table[0])
    if any(len(row) != width for row in table):
        raise ShapeMismatchError("build_values: all rows must have the same length")

    tuples = sequence(*(sequence(*row).join(", ") for row in table))
    return sql("VALUES {}", tuples.set_sewing_pattern("(", "), (", ")"))


def _statement(*parts: Any) -> Fragments:
    # Empty parts (e.g. a WHERE without clauses) vanish with their separator.
    return Fragments(parts).join(" ")


def build_insert(
    table: str,
    rows: FieldValues | Sequence[FieldValues],
    appendix: str | Fragment | None = None,
) -> Fragments:
    """``INSERT INTO table (keys) VALUES (...)`` for one or many rows."""
    rows = _as_rows(rows, "build_insert")
    keys = build_keys(rows)
    values = build_values([list(without_unset(row).values()) for row in rows])
    return _statement(sql("INSERT INTO {} {} {}", ident(table), keys, values), appendix)


def build_update(
    table: str,
    fields: FieldValues,
    where: WhereArg = None,
    appendix: str | Fragment | None = None,
) -> Fragments:
    """``UPDATE table SET a = $1, ... WHERE ...``."""
    if not isinstance(fields, Mapping):
        raise InvalidArgumentError("build_update: fields must be a mapping")

    pairs = Fragments()
    for key, value in without_unset(fields).items():
        pairs.push(sql("{} = {}", ident(key), value))
    if not pairs.items:
        raise EmptyInputError("build_update: nothing to set")

    return _statement(
        sql("UPDATE {} SET {}", ident(table), pairs.join(", ")), WHERE(where), appendix,
    )


def build_delete(
    table: str,
    where: WhereArg = None,
    appendix: str | Fragment | None = None,
) -> Fragments:
    """``DELETE FROM table WHERE ...``."""
    return _statement(sql("DELETE FROM {}", ident(table)), WHERE(where), appendix)


# aliases
WHERE_AND = WHERE
and_ = AND
or_ = OR
where = WHERE
where_and = WHERE
where_or = WHERE_OR
