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

"""SQL template files rendered into fragment trees.

Templates are Jinja2 files (usually ``.sql``) looked up in two places:

1. ``<user_dir>/papers_by_year.sql``: the user's customised version
2. ``<default_dir>/papers_by_year.sql``: the package-shipped default

Jinja2 statements (``{% if %}``, ``{% for %}``) shape the SQL text.  Every
``{{ expression }}`` output becomes an interpolation point instead of being
pasted as text: plain values are bound as parameters and fragments are
spliced in.  Given ``papers_by_year.sql``::

    SELECT * FROM papers
    {{ WHERE({"year": year}, filters) }}
    ORDER BY title {{ LIMIT(limit) }}

``engine.render("papers_by_year.sql", year=2024, filters=None, limit=10)``
returns a fragment whose ``text()`` holds ``year = $1`` and ``LIMIT $2``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, TemplateNotFound, pass_context

from queryweaver import core
from queryweaver.core import Fragments, template

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIXES = (".sql", ".j2", ".jinja2")

_VALUES_KEY = "_queryweaver_values"
_MARKER = re.compile("\x00(\\d+)\x00")

# Builders made available inside templates.
TEMPLATE_GLOBALS = {
    name: getattr(core, name)
    for name in (
        "sql", "raw", "ident", "sequence", "json_value", "json_template",
        "AND", "OR", "WHERE", "WHERE_OR", "UNION", "UNION_ALL", "LIMIT", "OFFSET",
        "UNSET",
    )
}


@pass_context
def _collect(context: Any, value: Any) -> str:
    """Jinja2 ``finalize`` hook: park the value and emit a marker.

    Output of macro calls and ``{% set %}`` blocks is already woven text
    whose values are parked; it is passed on unchanged.
    """
    values = context[_VALUES_KEY]
    if isinstance(value, str) and _MARKER.search(value):
        return value
    values.append(value)
    return f"\x00{len(values) - 1}\x00"


class _FallbackLoader(BaseLoader):
    """Jinja2 loader that checks user dir first, then default dir."""

    def __init__(
        self,
        user_dir: Path | None = None,
        default_dir: Path | None = None,
    ) -> None:
        self.user_dir = user_dir
        self.default_dir = default_dir

    def get_source(
        self, environment: Environment, template: str,
    ) -> tuple[str, str, Any]:
        for directory in (self.user_dir, self.default_dir):
            if directory is None:
                continue
            path = directory / template
            if path.is_file():
                source = path.read_text(encoding="utf-8")
                mtime = path.stat().st_mtime
                return source, str(path), lambda: path.stat().st_mtime == mtime
        raise TemplateNotFound(template)


class QueryTemplates:
    """Load SQL templates from disk and render them as fragments.

    Args:
        user_dir: User override directory (checked first).
        default_dir: Package default directory (fallback).
    """

    def __init__(
        self,
        user_dir: Path | None = None,
        default_dir: Path | None = None,
    ) -> None:
        self.user_dir = Path(user_dir).expanduser() if user_dir else None
        self.default_dir = Path(default_dir).expanduser() if default_dir else None
        self._env = Environment(
            loader=_FallbackLoader(self.user_dir, self.default_dir),
            keep_trailing_newline=True,
            autoescape=False,
            finalize=_collect,
        )
        self._env.globals.update(TEMPLATE_GLOBALS)

    def render(self, template_name: str, **variables: Any) -> Fragments:
        """Render a template file with the given variables.

        Raises ``jinja2.TemplateNotFound`` if the template does not
        exist in either directory.
        """
        return self._weave(self._env.get_template(template_name), variables)

    def render_string(self, source: str, **variables: Any) -> Fragments:
        """Render template *source* given inline rather than from a file."""
        return self._weave(self._env.from_string(source), variables)

    def _weave(self, tmpl: Any, variables: dict[str, Any]) -> Fragments:
        values: list[Any] = []
        text = tmpl.render(**variables, **{_VALUES_KEY: values})
        parts = _MARKER.split(text)
        return template(parts[0::2], [values[int(i)] for i in parts[1::2]])

    def has_template(self, template_name: str) -> bool:
        """Check whether a template exists in either directory."""
        try:
            self._env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False

    def install_defaults(self) -> None:
        """Copy all default templates to the user directory.

        Skips templates that already exist in the user directory.
        """
        if self.user_dir is None or self.default_dir is None:
            return
        if not self.default_dir.is_dir():
            return

        self.user_dir.mkdir(parents=True, exist_ok=True)
        for src in self.default_dir.iterdir():
            if src.is_file() and src.suffix in TEMPLATE_SUFFIXES:
                dest = self.user_dir / src.name
                if not dest.exists():
                    dest.write_text(src.read_text(encoding="utf-8"), encoding="utf-8")
                    logger.info("Installed default template: %s", dest)
