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

"""Tests for queryweaver.core.builders."""

from __future__ import annotations

import pytest

from queryweaver.core import (
    AND,
    LIMIT,
    OFFSET,
    OR,
    UNION_ALL,
    UNSET,
    WHERE,
    WHERE_OR,
    EmptyInputError,
    InvalidArgumentError,
    ShapeMismatchError,
    build_delete,
    build_insert,
    build_keys,
    build_update,
    build_values,
    sql,
)


class TestClauses:
    def test_where_and_or(self):
        a, b, c, d, e = 1, "string", None, 5, False
        query = sql("SELECT * FROM foobar {}", WHERE({"a": a, "b": b, "c": c}, OR({"d": d, "e": e})))
        assert str(query) == (
            "SELECT * FROM foobar WHERE ((a = '1') AND (b = 'string') AND (c IS NULL) "
            "AND (((d = '5') OR (e = false))))"
        )

    def test_where_mixed_arguments(self):
        a, d, f = 1, 5, [1, 2, 3, 4, 5]
        query = sql(
            "SELECT * FROM foobar {}",
            WHERE(
                {
                    "a": 10,
                    "b": "string",
                    "c": sql("IS UNKNOWN"),
                    "d": sql("BETWEEN {} AND {}", a, d),
                },
                "e IS NULL",
                sql("f = ANY ({})", f),
            ),
        )
        assert query.text() == (
            "SELECT * FROM foobar WHERE ((a = $1) AND (b = $2) AND (c IS UNKNOWN) "
            "AND (d BETWEEN $3 AND $4) AND (e IS NULL) AND (f = ANY ($5)))"
        )
        assert query.embed() == (
            "SELECT * FROM foobar WHERE ((a = '10') AND (b = 'string') AND (c IS UNKNOWN) "
            "AND (d BETWEEN '1' AND '5') AND (e IS NULL) "
            "AND (f = ANY (ARRAY['1','2','3','4','5'])))"
        )

    def test_mapping_list_value_uses_any(self):
        query = WHERE({"id": [1, 2]})
        assert query.text() == "WHERE ((id = ANY ($1)))"
        assert query.values() == [[1, 2]]

    def test_unset_keys_are_skipped(self):
        assert WHERE({"a": UNSET, "b": 2}).text() == "WHERE ((b = $1))"

    def test_empty_renders_nothing(self):
        assert WHERE().text() == ""
        assert WHERE(None, {}, []).text() == ""
        assert AND().text() == ""
        assert sql("SELECT * FROM t {}", WHERE({"a": UNSET})).text() == "SELECT * FROM t "

    def test_nested_lists(self):
        assert AND(["a = 1", ["b = 2"]], "c = 3").text() == "((a = 1) AND (b = 2) AND (c = 3))"

    def test_where_or(self):
        assert WHERE_OR({"a": 1}, {"b": 2}).text() == "WHERE ((a = $1) OR (b = $2))"

    def test_identifier_keys_are_quoted(self):
        assert WHERE({"order": 1}).text() == 'WHERE (("order" = $1))'

    def test_rejects_unsupported_argument(self):
        with pytest.raises(InvalidArgumentError):
            WHERE(42)


class TestKeysAndValues:
    OBJ = {"a": 1, "b": 2, "c": "3"}

    def test_keys(self):
        assert build_keys(self.OBJ).text() == "(a, b, c)"
        assert build_keys([self.OBJ, self.OBJ]).text() == "(a, b, c)"

    def test_values(self):
        assert build_values(self.OBJ).text() == "VALUES ($1, $2, $3)"
        assert build_values(self.OBJ).values() == [1, 2, "3"]
        assert build_values([self.OBJ, self.OBJ]).embed() == (
            "VALUES ('1', '2', '3'), ('1', '2', '3')"
        )

    def test_values_from_sequences(self):
        assert build_values([[1, 2], (3, 4)]).text() == "VALUES ($1, $2), ($3, $4)"

    def test_keys_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            build_keys([{"a": 1, "b": 2}, {"b": 2, "a": 1}])

    def test_values_length_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            build_values([[1, 2], [3]])

    def test_values_empty(self):
        with pytest.raises(EmptyInputError):
            build_values([])

    def test_keys_empty(self):
        with pytest.raises(EmptyInputError):
            build_keys([])

    def test_invalid_rows(self):
        with pytest.raises(InvalidArgumentError):
            build_values("abc")
        with pytest.raises(InvalidArgumentError):
            build_keys([[1, 2]])


class TestStatements:
    def test_insert(self):
        assert build_insert("t", {"a": 1, "b": 2}).embed() == "INSERT INTO t (a, b) VALUES ('1', '2')"

    def test_insert_with_appendix(self):
        query = build_insert("tableName", {"a": 1, "b": 2, "c": 3}, "RETURNING *")
        assert query.embed() == (
            "INSERT INTO tableName (a, b, c) VALUES ('1', '2', '3') RETURNING *"
        )

    def test_insert_skips_unset(self):
        query = build_insert("test", {"a": UNSET, "b": 10, "c": "20"})
        assert query.text() == "INSERT INTO test (b, c) VALUES ($1, $2)"
        assert query.embed() == "INSERT INTO test (b, c) VALUES ('10', '20')"

    def test_bulk_insert(self):
        query = build_insert("t", [{"a": 1, "b": 2}, {"a": 3, "b": 4}])
        assert query.text() == "INSERT INTO t (a, b) VALUES ($1, $2), ($3, $4)"

    def test_bulk_insert_mismatch(self):
        with pytest.raises(ShapeMismatchError):
            build_insert("t", [{"a": 1}, {"b": 2}])

    def test_update(self):
        query = build_update("t", {"a": 1, "b": UNSET, "c": None}, {"id": 5}, "RETURNING id")
        assert query.text() == "UPDATE t SET a = $1, c = $2 WHERE ((id = $3)) RETURNING id"
        assert query.values() == [1, None, 5]

    def test_update_without_where(self):
        assert build_update("t", {"a": 1}).text() == "UPDATE t SET a = $1"

    def test_update_nothing_to_set(self):
        with pytest.raises(EmptyInputError):
            build_update("t", {"a": UNSET})

    def test_delete(self):
        assert build_delete("s.t", {"id": 1}).text() == "DELETE FROM s.t WHERE ((id = $1))"
        assert build_delete("t").text() == "DELETE FROM t"


class TestMisc:
    def test_limit_offset(self):
        assert LIMIT(10).text() == "LIMIT $1"
        assert LIMIT("5").values() == [5]
        assert LIMIT(0).text() == ""
        assert LIMIT(None).text() == ""
        assert OFFSET(0).text() == "OFFSET $1"
        assert OFFSET(-1).text() == ""

    def test_limit_offset_unparseable(self):
        assert LIMIT("abc").text() == ""
        assert OFFSET("abc").text() == ""
        assert LIMIT(float("nan")).text() == ""
        assert LIMIT(UNSET).text() == ""
        assert LIMIT("3.0").values() == [3]

    def test_limit_offset_fractional(self):
        with pytest.raises(InvalidArgumentError):
            LIMIT(2.5)
        with pytest.raises(InvalidArgumentError):
            OFFSET("1.5")

    def test_union_all(self):
        query = UNION_ALL(sql("SELECT {}", 1), sql("SELECT {}", 2))
        assert query.text() == "SELECT $1 UNION ALL SELECT $2"
