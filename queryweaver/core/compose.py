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

"""Interpolation: turning SQL text plus values into a fragment tree.

``sql()`` uses ``str.format`` field syntax to mark interpolation points::

    q = sql("SELECT * FROM foobar WHERE foo = {} AND bar = {bar}", 1, bar="Bar")
    q.text()    # 'SELECT * FROM foobar WHERE foo = $1 AND bar = $2'
    q.values()  # [1, 'Bar']
    q.embed()   # "SELECT * FROM foobar WHERE foo = '1' AND bar = 'Bar'"

Literal braces are written ``{{`` and ``}}``.  Interpolated fragments are
spliced into the tree, which is how statements are composed from smaller
pieces::

    sql("SELECT * FROM t {}", WHERE({"a": 1}))
"""

from __future__ import annotations

import string
from collections.abc import Sequence
from typing import Any

from queryweaver.core.errors import InvalidArgumentError
from queryweaver.core.fragments import (
    Fragments,
    Identifier,
    JsonFragments,
    RawText,
    lift,
    make_raw,
)

_formatter = string.Formatter()


def template(texts: Sequence[str], values: Sequence[Any]) -> Fragments:
    """Interleave N+1 text segments with N values.

    Text segments become raw SQL and values are lifted, so fragments among
    them are spliced in rather than bound.
    """
    return Fragments([_sew(texts, values)])


def _sew(texts: Sequence[str], values: Sequence[Any]) -> Fragments:
    if len(texts) != len(values) + 1:
        raise InvalidArgumentError(
            f"Expected {len(values) + 1} text segments for {len(values)} values, "
            f"got {len(texts)}"
        )
    inner = Fragments()
    inner.push(RawText(texts[0]))
    for text, value in zip(texts[1:], values):
        inner.push(lift(value), RawText(text))
    return inner


def _parse(query: str, args: tuple, kwargs: dict) -> tuple[list[str], list[Any]]:
    texts: list[str] = []
    values: list[Any] = []
    pending = ""
    auto_index = 0

    try:
        parsed = list(_formatter.parse(query))
    except ValueError as exc:
        raise InvalidArgumentError(f"Malformed query template: {exc}") from exc

    for literal, field_name, format_spec, conversion in parsed:
        pending += literal
        if field_name is None:
            continue
        if format_spec or conversion:
            raise InvalidArgumentError(
                f"Conversions and format specs are not supported: {{{field_name}}}"
            )
        if field_name == "":
            field_name = str(auto_index)
            auto_index += 1
        try:
            value, _ = _formatter.get_field(field_name, args, kwargs)
        except (IndexError, KeyError, AttributeError) as exc:
            raise InvalidArgumentError(f"No value for field {{{field_name}}}") from exc
        texts.append(pending)
        values.append(value)
        pending = ""

    texts.append(pending)
    return texts, values


def _is_template_string(obj: Any) -> bool:
    return hasattr(obj, "strings") and hasattr(obj, "interpolations")


def sql(query: Any = "", /, *args: Any, **kwargs: Any) -> Fragments:
    """Build a fragment tree from a query template and its values.

    *query* is SQL text with ``{}``, ``{0}`` or ``{name}`` fields, filled
    from *args* and *kwargs*.  Attribute and index lookups (``{row.id}``,
    ``{row[id]}``) work as in ``str.format``.  A Python template string
    (``t"..."``) is accepted as well.
    """
    if _is_template_string(query):
        return template(
            list(query.strings), [i.value for i in query.interpolations],
        )
    if not isinstance(query, str):
        raise InvalidArgumentError(
            f"sql() expects query text, got {type(query).__name__}"
        )
    texts, values = _parse(query, args, kwargs)
    return template(texts, values)


def sequence(*values: Any) -> Fragments:
    """Lift every value independently, without any glue.

    Usually followed by ``.join(", ")``, e.g. for an ``IN (...)`` list.
    """
    return Fragments([lift(v) for v in values])


def raw(*texts: Any) -> Fragments:
    """Inject trusted SQL text verbatim."""
    return Fragments([make_raw(t) for t in texts])


def ident(name: str) -> Identifier:
    """An identifier: ``ident("test.table")`` renders ``test."table"``."""
    return Identifier(name)


def json_value(*values: Any) -> Fragments:
    """Pass each value as a JSON document.

    ``json_value({"a": 1}).text()`` is ``$1`` with ``'{"a":1}'`` bound;
    embedded, it renders as the quoted JSON literal.
    """
    return Fragments([JsonFragments([lift(v)]) for v in values])


def json_template(query: str, /, *args: Any, **kwargs: Any) -> Fragments:
    """Assemble a JSON document from a template and pass it as one value.

    Interpolated values are JSON-encoded in place::

        json_template('{{"a": {}, "b": {}}}', obj, 10)
    """
    if not isinstance(query, str):
        raise InvalidArgumentError(
            f"json_template() expects template text, got {type(query).__name__}"
        )
    texts, values = _parse(query, args, kwargs)
    return Fragments([JsonFragments(_sew(texts, values).items)])
