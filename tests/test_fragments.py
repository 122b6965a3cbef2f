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

"""Tests for fragment composition and the render modes."""

from __future__ import annotations

import json
from datetime import date

import pytest

from queryweaver.core import (
    UNSET,
    Fragments,
    InvalidArgumentError,
    RawText,
    Value,
    ident,
    json_template,
    json_value,
    raw,
    sequence,
    sql,
    template,
)


class TestRenderModes:
    def test_simple(self):
        foo, bar = 1, "Bar"
        query = sql("SELECT * FROM foobar WHERE foo = {} AND bar = {}", foo, bar)

        assert str(query) == "SELECT * FROM foobar WHERE foo = '1' AND bar = 'Bar'"
        assert query.embed() == "SELECT * FROM foobar WHERE foo = '1' AND bar = 'Bar'"
        assert query.text() == "SELECT * FROM foobar WHERE foo = $1 AND bar = $2"
        assert query.values() == [1, "Bar"]
        assert query.sql() == "SELECT * FROM foobar WHERE foo = ? AND bar = ?"
        assert query.statement() == "SELECT * FROM foobar WHERE foo = :1 AND bar = :2"

    def test_named_fields(self):
        query = sql("SELECT * FROM t WHERE a = {a} AND b = {b} OR a = {a}", a=1, b=2)
        assert query.text() == "SELECT * FROM t WHERE a = $1 AND b = $2 OR a = $3"
        assert query.values() == [1, 2, 1]

    def test_attribute_and_index_fields(self):
        class Row:
            id = 7

        query = sql("SELECT {row.id}, {d[k]}", row=Row(), d={"k": "v"})
        assert query.values() == [7, "v"]

    def test_literal_braces(self):
        query = sql("SELECT '{{}}'::jsonb, {}", 1)
        assert query.text() == "SELECT '{}'::jsonb, $1"

    def test_rendering_is_repeatable(self):
        query = sql("SELECT {}, '{}'", 1, 2)
        assert query.text() == query.text()
        assert query.values() == query.values() == [1]

    def test_placeholder_count_matches_values(self):
        query = sql("SELECT {} /* {} */, {} -- {}\n, '{}', {}", 1, 2, 3, 4, 5, 6)
        assert query.text().count("$") == len(query.values()) == 3

    def test_nested_fragment_splices(self):
        inner = sql("B {}", 1)
        assert sql("A {} C", inner).text() == "A B $1 C"
        assert sql("A {} C {}", inner, 2).values() == [1, 2]

    def test_none_is_null_and_unset_vanishes(self):
        query = sql("SELECT {}, {}", None, UNSET)
        assert query.embed() == "SELECT NULL, "
        assert query.values() == [None]

    def test_embed_literals(self):
        query = sql("SELECT {}, {}, {}, {}, {}", True, [1, "a"], {"k": 1}, "it's", date(2024, 1, 2))
        assert query.embed() == (
            "SELECT true, ARRAY['1','a'], '{\"k\":1}', 'it''s', '2024-01-02'"
        )

    def test_embed_custom_literal_fn(self):
        query = sql("SELECT {}", 5)
        assert query.embed(literal_fn=lambda v: f"<{v}>") == "SELECT <5>"

    def test_identifiers(self):
        query = sql("SELECT * FROM {}", ident("public.user"))
        assert query.text() == 'SELECT * FROM public."user"'

    def test_custom_ident_fn(self):
        query = sql("SELECT * FROM {}", ident("papers"))
        assert query.text(ident_fn=lambda name, _ctx: f"`{name}`") == "SELECT * FROM `papers`"


class TestSuppression:
    def test_value_inside_string_literal(self):
        query = sql("SELECT '{}' AS x, {}", "hidden", "shown")
        assert query.text() == "SELECT '' AS x, $1"
        assert query.values() == ["shown"]
        assert query.embed() == "SELECT '' AS x, 'shown'"

    def test_value_inside_block_comment(self):
        query = sql("SELECT /* {} */ {}", 1, 2)
        assert query.text() == "SELECT /*  */ $1"
        assert query.embed() == "SELECT /*  */ '2'"

    def test_nested_block_comment(self):
        query = sql("SELECT /* /* */ {} */ {}", 1, 2)
        assert query.text() == "SELECT /* /* */  */ $1"

    def test_dollar_quote(self):
        query = sql("SELECT $tag$ {} $other$ {} $tag$, {}", 1, 2, 3)
        assert query.text() == "SELECT $tag$  $other$  $tag$, $1"
        assert query.values() == [3]

    def test_comments_scenario(self):
        source = """SELECT * FROM (
    VALUES ('a')
         , ({v})
         /* /*
          *
          * -- nesting */
         , {v}
          *
          */
         , ($hoge$ $fuge$ $moge$ {v} ' $hoge$)
         -- , ({v})
         , ('-- {v} \\'), ({v})
         /* , ({v}) */
         , (E'''/*\\''), ({v})
         , ({v})
  ) tmp"""
        query = sql(source, v="test")

        emitted = iter(["$1", "", "", "", "", "$2", "", "$3", "$4"])
        expected = "".join(
            part if i == 0 else next(emitted) + part
            for i, part in enumerate(source.split("{v}"))
        )
        assert query.text() == expected
        assert query.values() == ["test"] * 4

    def test_identifier_is_not_suppressed(self):
        query = sql("-- {}\nSELECT 1", ident("x"))
        assert query.text() == "-- x\nSELECT 1"

    def test_format_paramstyle_escapes_percent(self):
        text, params = sql("SELECT * FROM t WHERE a LIKE 'x%' AND b = {}", 1).compile("format")
        assert text == "SELECT * FROM t WHERE a LIKE 'x%%' AND b = %s"
        assert params == [1]


class TestCompile:
    def test_styles(self):
        query = sql("SELECT {}, {}", 1, 2)
        assert query.compile() == ("SELECT $1, $2", [1, 2])
        assert query.compile("qmark") == ("SELECT ?, ?", [1, 2])
        assert query.compile("numeric") == ("SELECT :1, :2", [1, 2])
        assert query.compile("named") == ("SELECT :p1, :p2", {"p1": 1, "p2": 2})
        assert query.compile("pyformat") == ("SELECT %s, %s", [1, 2])

    def test_unknown_style(self):
        with pytest.raises(InvalidArgumentError):
            sql("SELECT 1").compile("bogus")


class TestComposite:
    def test_sequence_join(self):
        ids = sequence(1, 2, 3).join(", ")
        assert sql("SELECT * FROM t WHERE id IN ({})", ids).text() == (
            "SELECT * FROM t WHERE id IN ($1, $2, $3)"
        )

    def test_empty_composite_uses_replacement(self):
        frag = Fragments(prefix="(", suffix=")", empty="TRUE")
        assert frag.text() == "TRUE"
        frag.push(Value(1))
        assert frag.text() == "($1)"

    def test_builder_methods(self):
        frag = raw("a", "b").join(" + ").prefix("[").suffix("]")
        assert frag.text() == "[a + b]"
        frag.set_sewing_pattern("<", "|", ">")
        assert frag.text() == "<a|b>"

    def test_append_after_interpolation(self):
        query = sql("SELECT {}", 1).append("LIMIT 1").join(" ")
        assert query.text() == "SELECT $1 LIMIT 1"

    def test_push_skips_none(self):
        frag = Fragments().push("a", None, UNSET, RawText("b"))
        assert len(frag.items) == 2

    def test_template(self):
        query = template(["SELECT ", " + ", ""], [1, 2])
        assert query.text() == "SELECT $1 + $2"

    def test_template_shape_error(self):
        with pytest.raises(InvalidArgumentError):
            template(["SELECT ", ""], [1, 2])


class TestSqlArguments:
    def test_missing_field(self):
        with pytest.raises(InvalidArgumentError):
            sql("SELECT {missing}")

    def test_format_spec_rejected(self):
        with pytest.raises(InvalidArgumentError):
            sql("SELECT {:>10}", 1)

    def test_conversion_rejected(self):
        with pytest.raises(InvalidArgumentError):
            sql("SELECT {!r}", 1)

    def test_non_text_query(self):
        with pytest.raises(InvalidArgumentError):
            sql(42)


class TestJson:
    OBJ = {"b": "string", "c": [1, 2, "X"], "d": {"e": None, "f": UNSET}}

    def test_json_value_is_one_parameter(self):
        query = json_value(self.OBJ)
        assert query.text() == "$1"
        (payload,) = query.values()
        assert json.loads(payload) == {"b": "string", "c": [1, 2, "X"], "d": {"e": None}}

    def test_json_value_list(self):
        assert json_value([self.OBJ, {"x": 1}]).text() == "$1"
        assert json.loads(json_value([1, 2]).values()[0]) == [1, 2]

    def test_json_template(self):
        query = json_template('{{"a":"foo", "b": {}}}', [1, 2, 3])
        assert query.text() == "$1"
        assert json.loads(query.values()[0]) == {"a": "foo", "b": [1, 2, 3]}

    def test_json_inside_statement(self):
        query = sql(
            "SELECT * FROM jsonb_to_record({}) AS (a jsonb, b int)",
            json_template('{{ "a": {}, "b": {} }}', {"x": "it's"}, 10),
        )
        assert query.text() == "SELECT * FROM jsonb_to_record($1) AS (a jsonb, b int)"
        assert json.loads(query.values()[0]) == {"a": {"x": "it's"}, "b": 10}
        assert query.embed() == (
            "SELECT * FROM jsonb_to_record('{ \"a\": {\"x\":\"it''s\"}, \"b\": 10 }') "
            "AS (a jsonb, b int)"
        )

    def test_quote_in_json_does_not_leak_into_context(self):
        query = sql("SELECT {}, {}", json_value("it's"), 2)
        assert query.text() == "SELECT $1, $2"
