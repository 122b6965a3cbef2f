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

"""Identifier and literal quoting (PostgreSQL conventions).

``pg_ident`` and ``pg_string`` are the default ``ident_fn`` / ``value_fn``
used by the embed render mode.  Both accept an optional scan context as
second argument so they can be passed wherever a render function is
expected.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from queryweaver.core.sentinel import strip_unset

_PLAIN_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# PostgreSQL reserved key words that cannot be used as bare column names.
RESERVED_WORDS = frozenset(
    """
    all analyse analyze and any array as asc asymmetric both case cast check
    collate column constraint create current_catalog current_date current_role
    current_time current_timestamp current_user default deferrable desc
    distinct do else end except false fetch for foreign from grant group
    having in initially intersect into lateral leading limit localtime
    localtimestamp not null offset on only or order placing primary
    references returning select session_user some symmetric table then to
    trailing true union unique user using variadic when where window with
    """.split()
)


def quote_ident(name: str) -> str:
    """Quote a single identifier part if it needs quoting.

    Plain names (letters, digits, underscores, not starting with a digit)
    that are not reserved words are returned as they are.
    """
    if _PLAIN_IDENT.fullmatch(name) and name.lower() not in RESERVED_WORDS:
        return name
    return '"' + name.replace('"', '""') + '"'


def quote_literal(text: str) -> str:
    """Quote *text* as a SQL string literal.

    Single quotes are doubled.  If the text contains a backslash the
    backslashes are doubled as well and the literal is written in the
    ``E'...'`` form, so the result is correct whatever the server's
    ``standard_conforming_strings`` setting.
    """
    quoted = "'" + text.replace("'", "''") + "'"
    if "\\" in text:
        return "E" + quoted.replace("\\", "\\\\")
    return quoted


def pg_ident(name: str, _ctx: Any = None) -> str:
    """Quote a possibly dotted name (``schema.table``) part by part."""
    return ".".join(quote_ident(part) for part in name.split("."))


def pg_string(value: Any, _ctx: Any = None) -> str:
    """Render *value* as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "ARRAY[" + ",".join(pg_string(v) for v in value) + "]"
    if isinstance(value, Mapping):
        return quote_literal(json_dumps(value))
    if isinstance(value, (datetime, date, time)):
        return quote_literal(value.isoformat())
    if isinstance(value, (bytes, bytearray, memoryview)):
        return quote_literal("\\x" + bytes(value).hex())
    return quote_literal(str(value))


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_dumps(value: Any) -> str:
    """Compact JSON encoding used for JSON values and mapping literals."""
    return json.dumps(
        strip_unset(value),
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )
