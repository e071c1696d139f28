"""Tests for the AppSync resolver runtime."""

from __future__ import annotations

from typing import Any

import pytest

from neptune_graphql.runtime import NodeNotFoundError, ResolverRuntime
from neptune_graphql.runtime.errors import BadRequestError


def _event(
    field: str, arguments: dict[str, Any] | None = None, selection: str = "{ id }", parent="Query"
) -> dict[str, Any]:
    return {
        "arguments": arguments or {},
        "info": {
            "parentTypeName": parent,
            "fieldName": field,
            "selectionSetGraphQL": selection,
            "variables": {},
        },
    }


@pytest.fixture
def make_runtime(resolver_tables: dict[str, Any], fake_executor_cls):
    def factory(*responses: list[Any], language: str = "opencypher"):
        executor = fake_executor_cls(*responses)
        return ResolverRuntime(resolver_tables, language, executor), executor

    return factory


class TestQueries:
    def test_get(self, make_runtime) -> None:
        runtime, executor = make_runtime(
            [{"result": {"id": "p1", "name": "Ann", "worksAt": {"name": "Acme"}}}]
        )
        result = runtime.handle(
            _event("person", {"id": "p1"}, "{ id name worksAt { name } }")
        )
        assert result == {"id": "p1", "name": "Ann", "worksAt": {"name": "Acme"}}

        language, query = executor.calls[0]
        assert language == "opencypher"
        assert "head([(n0)-[:`WORKS_AT`]->(n1:`company`) | {name: n1.name}])" in query.text
        assert query.parameters["p0"] == "p1"

    def test_get_missing_is_null(self, make_runtime) -> None:
        runtime, _ = make_runtime([])
        assert runtime.handle(_event("person", {"id": "nope"})) is None

    def test_list(self, make_runtime) -> None:
        runtime, executor = make_runtime([{"result": {"id": "p1"}}, {"result": {"id": "p2"}}])
        result = runtime.handle(_event("persons", {"options": {"limit": 2}}))
        assert result == [{"id": "p1"}, {"id": "p2"}]
        assert "LIMIT $p0" in executor.calls[0][1].text

    def test_gremlin_results_are_unfolded(self, make_runtime, resolver_tables) -> None:
        person = resolver_tables["types"]["Person"]["fields"]
        person["worksAt"]["hop"] = "out('WORKS_AT').hasLabel('company')"
        runtime, executor = make_runtime(
            [{"name": ["Ann"], "worksAt": [{"name": ["Acme"]}]}], language="gremlin"
        )
        result = runtime.handle(_event("person", {"id": "p1"}, "{ name worksAt { name } }"))
        assert result == {"name": "Ann", "worksAt": {"name": "Acme"}}
        assert executor.calls[0][0] == "gremlin"

    def test_statement(self, make_runtime) -> None:
        runtime, executor = make_runtime([{"total": 42}])
        assert runtime.handle(_event("countPersons")) == 42
        assert executor.calls[0][1].text == "MATCH (p:person) RETURN count(p) AS total"


class TestMutations:
    def test_update_missing_node(self, make_runtime) -> None:
        runtime, _ = make_runtime([])
        with pytest.raises(NodeNotFoundError) as exc_info:
            runtime.handle(
                _event("updatePerson", {"id": "p1", "input": {"name": "B"}}, parent="Mutation")
            )
        assert exc_info.value.node_id == "p1"

    def test_delete(self, make_runtime) -> None:
        runtime, _ = make_runtime([{"deleted": 1}])
        assert runtime.handle(_event("deletePerson", {"id": "p1"}, parent="Mutation")) is True

    def test_delete_missing(self, make_runtime) -> None:
        runtime, _ = make_runtime([{"deleted": 0}])
        with pytest.raises(NodeNotFoundError):
            runtime.handle(_event("deletePerson", {"id": "p1"}, parent="Mutation"))

    def test_delete_returning_node(self, make_runtime) -> None:
        runtime, executor = make_runtime([{"result": {"name": "Ann"}}], [{"deleted": 1}])
        result = runtime.handle(
            _event("removePerson", {"id": "p1"}, "{ name }", parent="Mutation")
        )
        assert result == {"name": "Ann"}
        assert len(executor.calls) == 2
        assert "DETACH DELETE" in executor.calls[1][1].text


class TestBatch:
    def test_items_answered_independently(self, make_runtime) -> None:
        runtime, _ = make_runtime([{"result": {"id": "p1"}}], [{"deleted": 0}])
        results = runtime.handle(
            [
                _event("person", {"id": "p1"}),
                _event("deletePerson", {"id": "p2"}, parent="Mutation"),
                _event("nope"),
            ]
        )
        assert results[0] == {"data": {"id": "p1"}}
        assert results[1]["data"] is None
        assert results[1]["errorType"] == "NodeNotFound"
        assert results[2]["errorType"] == "BadRequest"

    def test_single_event_errors_propagate(self, make_runtime) -> None:
        runtime, _ = make_runtime()
        with pytest.raises(BadRequestError):
            runtime.handle(_event("nope"))
