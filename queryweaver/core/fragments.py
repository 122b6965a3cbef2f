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

"""Fragment tree and the multi-mode rendering protocol.

A statement is a tree of :class:`Fragment` nodes: raw SQL text, values,
identifiers and composites.  The tree is rendered on demand; every render
method walks the whole tree with a fresh :class:`ScanContext`, so results
are never cached and the same tree may be rendered any number of times in
any mode.

Render modes:

=================  ==========================================
``text()``         ``$1``, ``$2``, ... placeholders
``values()``       the bound values, aligned with ``text()``
``embed()``        values inlined as SQL literals (debugging)
``sql()``          ``?`` placeholders
``statement()``    ``:1``, ``:2``, ... placeholders
``compile(style)`` ``(text, params)`` for a PEP 249 paramstyle
=================  ==========================================

Values whose interpolation point falls inside a comment, a string literal
or a dollar-quoted block of the surrounding raw text are suppressed in all
modes, so placeholder text and values always line up.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from queryweaver.core.errors import InvalidArgumentError
from queryweaver.core.quoting import json_dumps, pg_ident, pg_string
from queryweaver.core.scanner import ScanContext, scan
from queryweaver.core.sentinel import UNSET

RenderFn = Callable[[Any, "ScanContext | None"], str]

PARAMSTYLES = ("dollar", "qmark", "numeric", "named", "format", "pyformat")


@dataclass
class RenderOptions:
    """Mode selector for one render pass.

    Attributes:
        value_fn: Renders a value leaf.  Receives the value and the
            current scan context.
        ident_fn: Renders an identifier leaf.
        context: Scan context threaded through the pass, or ``None`` to
            render without lexical tracking.
        context_handler: Called with the context and every raw text leaf.
        text_fn: Optional transformation applied to raw text output.
    """

    value_fn: RenderFn = pg_string
    ident_fn: RenderFn = pg_ident
    context: ScanContext | None = None
    context_handler: Callable[[ScanContext, str], None] | None = None
    text_fn: Callable[[str], str] | None = None


class Fragment:
    """Base class of all renderable nodes."""

    def render(self, options: RenderOptions | None = None) -> str:
        raise NotImplementedError

    def _compile(
        self,
        emit: Callable[[Any], str],
        *,
        ident_fn: RenderFn = pg_ident,
        text_fn: Callable[[str], str] | None = None,
    ) -> str:
        def value_fn(value: Any, context: ScanContext | None) -> str:
            if context is not None and context.suppressed:
                return ""
            return emit(value)

        return self.render(
            RenderOptions(
                value_fn=value_fn,
                ident_fn=ident_fn,
                context=ScanContext(),
                context_handler=scan,
                text_fn=text_fn,
            )
        )

    def text(self, *, ident_fn: RenderFn = pg_ident) -> str:
        """Render with ``$1``, ``$2``, ... placeholders."""
        counter = _Counter()
        return self._compile(lambda _: f"${counter.next()}", ident_fn=ident_fn)

    def values(self) -> list[Any]:
        """Return the bound values in placeholder order."""
        collected: list[Any] = []

        def emit(value: Any) -> str:
            collected.append(value)
            return ""

        self._compile(emit)
        return collected

    def embed(
        self,
        *,
        literal_fn: Callable[[Any], str] | None = None,
        ident_fn: RenderFn = pg_ident,
    ) -> str:
        """Render with every value inlined as a SQL literal.

        Meant for logging and debugging.  *literal_fn* replaces the default
        literal formatting; the result may then differ from what the driver
        does with the bound values (dates, floats).
        """
        return self._compile(literal_fn or pg_string, ident_fn=ident_fn)

    def sql(self, *, ident_fn: RenderFn = pg_ident) -> str:
        """Render with ``?`` placeholders."""
        return self._compile(lambda _: "?", ident_fn=ident_fn)

    def statement(self, *, ident_fn: RenderFn = pg_ident) -> str:
        """Render with ``:1``, ``:2``, ... placeholders."""
        counter = _Counter()
        return self._compile(lambda _: f":{counter.next()}", ident_fn=ident_fn)

    def compile(
        self, paramstyle: str = "dollar", *, ident_fn: RenderFn = pg_ident,
    ) -> tuple[str, list[Any] | dict[str, Any]]:
        """Render text and parameters in a single pass.

        Args:
            paramstyle: ``"dollar"`` (``$1``), or one of the PEP 249 styles
                ``"qmark"``, ``"numeric"``, ``"named"``, ``"format"`` and
                ``"pyformat"``.  ``named`` returns the parameters as a
                ``{"p1": ...}`` dict; the ``%s`` styles double every ``%``
                of the raw text.

        Returns:
            ``(text, params)`` ready for ``cursor.execute``.
        """
        if paramstyle not in PARAMSTYLES:
            raise InvalidArgumentError(f"Unknown paramstyle: {paramstyle!r}")

        params: list[Any] = []

        def emit(value: Any) -> str:
            params.append(value)
            n = len(params)
            if paramstyle == "dollar":
                return f"${n}"
            if paramstyle == "qmark":
                return "?"
            if paramstyle == "numeric":
                return f":{n}"
            if paramstyle == "named":
                return f":p{n}"
            return "%s"

        text_fn = None
        if paramstyle in ("format", "pyformat"):
            text_fn = _escape_percent
            ident_fn = _percent_safe(ident_fn)

        text = self._compile(emit, ident_fn=ident_fn, text_fn=text_fn)
        if paramstyle == "named":
            return text, {f"p{i}": v for i, v in enumerate(params, start=1)}
        return text, params

    def __str__(self) -> str:
        return self.embed()


class _Counter:
    def __init__(self) -> None:
        self.n = 0

    def next(self) -> int:
        self.n += 1
        return self.n


def _escape_percent(text: str) -> str:
    return text.replace("%", "%%")


def _percent_safe(ident_fn: RenderFn) -> RenderFn:
    def wrapped(name: Any, context: ScanContext | None) -> str:
        return _escape_percent(ident_fn(name, context))

    return wrapped


class RawText(Fragment):
    """Literal SQL text.  Never escaped; feeds the scan context."""

    def __init__(self, text: Any) -> None:
        self._text = str(text)

    def render(self, options: RenderOptions | None = None) -> str:
        if options is None:
            return self._text
        if options.context is not None and options.context_handler is not None:
            options.context_handler(options.context, self._text)
        if options.text_fn is not None:
            return options.text_fn(self._text)
        return self._text

    def __repr__(self) -> str:
        return f"RawText({self._text!r})"


class Value(Fragment):
    """A value pending escaping."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def render(self, options: RenderOptions | None = None) -> str:
        options = options or RenderOptions()
        return options.value_fn(self.value, options.context)

    def __repr__(self) -> str:
        return f"Value({self.value!r})"


class Identifier(Fragment):
    """A possibly dotted identifier such as ``schema.table``."""

    def __init__(self, name: str) -> None:
        self.name = name

    def render(self, options: RenderOptions | None = None) -> str:
        options = options or RenderOptions()
        return options.ident_fn(self.name, options.context)

    def __repr__(self) -> str:
        return f"Identifier({self.name!r})"


@dataclass
class SewingPattern:
    """How a composite joins and wraps its children's output."""

    prefix: str = ""
    glue: str = ""
    suffix: str = ""
    empty: str = ""
    wrapper: Callable[[str, RenderOptions], str] | None = field(default=None, repr=False)


class Fragments(Fragment):
    """An ordered sequence of fragments rendered as one.

    Children that render to an empty string are skipped before joining.  If
    nothing is left the composite renders as the ``empty`` replacement,
    without prefix or suffix.
    """

    def __init__(
        self,
        items: Iterable[Any] = (),
        *,
        prefix: str = "",
        glue: str = "",
        suffix: str = "",
        empty: str = "",
        wrapper: Callable[[str, RenderOptions], str] | None = None,
    ) -> None:
        self._items: list[Fragment] = []
        self._pattern = SewingPattern(prefix, glue, suffix, empty, wrapper)
        self.push(*items)

    @property
    def items(self) -> tuple[Fragment, ...]:
        return tuple(self._items)

    @property
    def pattern(self) -> SewingPattern:
        return self._pattern

    def set_sewing_pattern(
        self, prefix: str = "", glue: str = "", suffix: str = "", empty: str = "",
    ) -> Fragments:
        self._pattern = replace(
            self._pattern, prefix=prefix, glue=glue, suffix=suffix, empty=empty,
        )
        return self

    def push(self, *items: Any) -> Fragments:
        """Append children.  Strings are added as raw SQL text."""
        for item in items:
            fragment = make_raw(item)
            if fragment is not None:
                self._items.append(fragment)
        return self

    append = push

    def join(self, glue: str = ", ") -> Fragments:
        self._pattern.glue = glue
        return self

    def prefix(self, prefix: str = " ") -> Fragments:
        self._pattern.prefix = prefix
        return self

    def suffix(self, suffix: str = " ") -> Fragments:
        self._pattern.suffix = suffix
        return self

    def empty(self, empty: str = "") -> Fragments:
        self._pattern.empty = empty
        return self

    def _sew(self, options: RenderOptions | None) -> str:
        rendered = [item.render(options) for item in self._items]
        return self._pattern.glue.join(r for r in rendered if r)

    def render(self, options: RenderOptions | None = None) -> str:
        body = self._sew(options)
        if not body:
            return self._pattern.empty
        if self._pattern.wrapper is not None:
            body = self._pattern.wrapper(body, options or RenderOptions())
        return self._pattern.prefix + body + self._pattern.suffix

    def __repr__(self) -> str:
        return f"Fragments({self._items!r}, {self._pattern!r})"


def _json_value_fn(value: Any, _ctx: ScanContext | None) -> str:
    return json_dumps(value)


class JsonFragments(Fragments):
    """A composite whose output is a JSON document passed on as one value.

    Children are rendered as JSON text: raw text as is, value leaves
    JSON-encoded.  The assembled document is then handed to the outer
    mode's value function, so it becomes a single bound parameter, or a
    single quoted literal when embedding.
    """

    def render(self, options: RenderOptions | None = None) -> str:
        options = options or RenderOptions()
        inner = RenderOptions(value_fn=_json_value_fn, ident_fn=options.ident_fn)
        body = self._sew(inner)
        if not body:
            return self._pattern.empty
        if options.value_fn is _json_value_fn:
            # nested inside another JSON document
            return self._pattern.prefix + body + self._pattern.suffix
        return self._pattern.prefix + options.value_fn(body, options.context) + self._pattern.suffix


def is_fragment(x: Any) -> bool:
    return isinstance(x, Fragment)


def lift(value: Any) -> Fragment | None:
    """Wrap a plain value in :class:`Value`; fragments pass through."""
    if value is UNSET:
        return None
    if isinstance(value, Fragment):
        return value
    return Value(value)


def make_raw(text: Any) -> Fragment | None:
    """Turn text (or a list of texts) into raw fragments."""
    if text is None or text is UNSET:
        return None
    if isinstance(text, Fragment):
        return text
    if isinstance(text, (list, tuple)):
        return Fragments(text)
    return RawText(text)
