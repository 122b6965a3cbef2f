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

"""Jinja2 SQL templates that render to fragment trees.

Loads templates from user-configurable directories with fallback to
package-shipped defaults.  Jinja2 control flow shapes the statement, and
every ``{{ expression }}`` becomes a bound value or a spliced fragment,
never pasted text.

Usage::

    from queryweaver.templates import QueryTemplates

    templates = QueryTemplates(
        user_dir=Path("~/.myapp/queries"),
        default_dir=Path(__file__).parent / "queries",
    )
    query = templates.render("papers_by_year.sql", year=2024)
    rows = db.get_rows(query)
"""

from queryweaver.templates.engine import QueryTemplates

__all__ = ["QueryTemplates"]
