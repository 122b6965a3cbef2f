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

"""Lexical context scanner for raw SQL text.

The scanner does not parse SQL.  It only tracks whether the current position
lies inside a comment, a quoted literal or a dollar-quoted block, so that an
interpolated value sitting in such a region is left out of the statement.

State is carried in a :class:`ScanContext` that survives between calls, which
lets one render pass feed the raw text pieces of a fragment tree one after
the other::

    ctx = ScanContext()
    scan(ctx, "SELECT '")
    ctx.suppressed        # True, we are inside a string literal
    scan(ctx, "' AS x")
    ctx.suppressed        # False
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Characters that can start a quoted or commented region in plain SQL.
_TRIGGER = re.compile(r"[-$E'/]")
_DOLLAR_TAG = re.compile(r"\$[A-Za-z]*\$")
_ESCAPED_QUOTE_STOP = re.compile(r"[\\']")
_BLOCK_COMMENT_STOP = re.compile(r"/\*|\*/")


@dataclass
class ScanContext:
    """Lexical state threaded through a single render pass.

    Attributes:
        in_line_comment: Inside ``-- ...`` up to the next newline.
        in_block_comment: Nesting depth of ``/* ... */`` comments.
        in_single_quote: Inside a standard ``'...'`` literal.
        in_escaped_single_quote: Inside an ``E'...'`` literal.
        dollar_quote_tag: The opening tag (e.g. ``"$fn$"``) of the current
            dollar-quoted block, or ``None``.
    """

    in_line_comment: bool = False
    in_block_comment: int = 0
    in_single_quote: bool = False
    in_escaped_single_quote: bool = False
    dollar_quote_tag: str | None = None

    @property
    def suppressed(self) -> bool:
        """True when a value at this position must not be substituted."""
        return bool(
            self.dollar_quote_tag
            or self.in_line_comment
            or self.in_block_comment
            or self.in_single_quote
            or self.in_escaped_single_quote
        )


def scan(ctx: ScanContext, text: str) -> None:
    """Consume *text* left to right, updating *ctx* in place."""
    pos = 0
    end = len(text)

    while pos < end:
        if ctx.dollar_quote_tag:
            found = text.find(ctx.dollar_quote_tag, pos)
            if found < 0:
                break
            pos = found + len(ctx.dollar_quote_tag)
            ctx.dollar_quote_tag = None

        elif ctx.in_escaped_single_quote:
            m = _ESCAPED_QUOTE_STOP.search(text, pos)
            if m is None:
                break
            pos = m.start()
            if text.startswith("''", pos):
                pos += 2
                continue
            if text.startswith("\\", pos):
                # backslash plus the character it escapes
                pos += 2
                continue
            pos += 1
            ctx.in_escaped_single_quote = False

        elif ctx.in_single_quote:
            found = text.find("'", pos)
            if found < 0:
                break
            if text.startswith("''", found):
                pos = found + 2
                continue
            pos = found + 1
            ctx.in_single_quote = False

        elif ctx.in_block_comment:
            m = _BLOCK_COMMENT_STOP.search(text, pos)
            if m is None:
                break
            pos = m.end()
            if m.group() == "/*":
                ctx.in_block_comment += 1
            else:
                ctx.in_block_comment -= 1

        elif ctx.in_line_comment:
            found = text.find("\n", pos)
            if found < 0:
                break
            pos = found + 1
            ctx.in_line_comment = False

        else:
            m = _TRIGGER.search(text, pos)
            if m is None:
                break
            pos = m.start()

            tag = _DOLLAR_TAG.match(text, pos)
            if tag is not None:
                ctx.dollar_quote_tag = tag.group()
                pos = tag.end()
            elif text.startswith("E'", pos) and not _continues_word(text, pos):
                ctx.in_escaped_single_quote = True
                pos += 2
            elif text.startswith("'", pos):
                ctx.in_single_quote = True
                pos += 1
            elif text.startswith("--", pos):
                ctx.in_line_comment = True
                pos += 2
            elif text.startswith("/*", pos):
                ctx.in_block_comment = 1
                pos += 2
            else:
                pos += 1


def _continues_word(text: str, pos: int) -> bool:
    """Return True if the character before *pos* is part of a word."""
    if pos == 0:
        return False
    prev = text[pos - 1]
    return prev.isalnum() or prev == "_"


def split_statements(script: str) -> list[str]:
    """Split a multi-statement SQL script at top-level semicolons.

    Semicolons inside literals, comments and dollar-quoted bodies do not
    split.  Empty statements are dropped and the rest are stripped.
    """
    ctx = ScanContext()
    statements: list[str] = []
    start = 0
    pos = 0

    for m in re.finditer(";", script):
        scan(ctx, script[pos:m.start()])
        pos = m.start()
        if ctx.suppressed:
            continue
        statement = script[start:m.start()].strip()
        if statement:
            statements.append(statement)
        start = m.end()

    tail = script[start:].strip()
    if tail:
        statements.append(tail)
    return statements
