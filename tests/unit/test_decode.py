"""Tests for result decoding."""

from __future__ import annotations

from neptune_graphql.runtime.ast import Projection, ScalarProjection, Traversal
from neptune_graphql.runtime.decode import decode, decode_rows, untype

COMPANY = Projection(type_name="Company", fields=(ScalarProjection("name", "name"),))


def _person(many: bool) -> Projection:
    return Projection(
        type_name="Person",
        fields=(
            ScalarProjection("id", None),
            ScalarProjection("name", "name"),
            ScalarProjection("tags", "tags", is_list=True),
            Traversal(key="employer", hop="", many=many, projection=COMPANY),
        ),
        typename_keys=("__typename",),
    )


class TestDecode:
    def test_plain_values(self) -> None:
        raw = {"id": "p1", "name": "Ann", "tags": ["a"], "employer": {"name": "Acme"}}
        assert decode(_person(False), raw) == {
            "__typename": "Person",
            "id": "p1",
            "name": "Ann",
            "tags": ["a"],
            "employer": {"name": "Acme"},
        }

    def test_absent_relationships(self) -> None:
        raw = {"id": "p1", "name": None, "tags": None, "employer": None}
        assert decode(_person(False), raw)["employer"] is None
        assert decode(_person(True), raw)["employer"] == []

    def test_folded_values(self) -> None:
        raw = {"id": "p1", "name": ["Ann"], "tags": ["a", "b"], "employer": [{"name": ["Acme"]}]}
        decoded = decode(_person(False), raw, folded=True)
        assert decoded["name"] == "Ann"
        assert decoded["tags"] == ["a", "b"]
        assert decoded["employer"] == {"name": "Acme"}

    def test_folded_missing(self) -> None:
        raw = {"id": "p1", "name": [], "tags": [], "employer": []}
        decoded = decode(_person(False), raw, folded=True)
        assert decoded["name"] is None
        assert decoded["employer"] is None

    def test_none(self) -> None:
        assert decode(COMPANY, None) is None


class TestUntype:
    def test_graphson_map(self) -> None:
        value = {
            "@type": "g:Map",
            "@value": ["id", "p1", "age", {"@type": "g:Int32", "@value": 30}],
        }
        assert untype(value) == {"id": "p1", "age": 30}

    def test_nested_lists(self) -> None:
        assert untype([{"@type": "g:List", "@value": [1, 2]}]) == [[1, 2]]


class TestDecodeRows:
    def test_single_column_rows(self) -> None:
        assert decode_rows([{"total": 3}, {"a": 1, "b": 2}]) == [3, {"a": 1, "b": 2}]
