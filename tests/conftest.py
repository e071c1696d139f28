"""Shared pytest fixtures for neptune-graphql tests."""

from __future__ import annotations

from typing import Any

import pytest

from neptune_graphql.core import infer, validate
from neptune_graphql.core.ir import SchemaModel
from neptune_graphql.runtime.ast import CompiledQuery


@pytest.fixture
def graph_document() -> dict[str, Any]:
    """Person works at Company; each person has at most one employer."""
    return {
        "nodes": {
            "Person": {"properties": [{"name": "name", "type": "String"}], "count": 120},
            "Company": {"properties": [{"name": "name", "type": "String"}], "count": 8},
        },
        "edges": {
            "WORKS_AT": {
                "fromLabel": "Person",
                "toLabel": "Company",
                "direction": "OUT",
                "count": 110,
                "maxOutDegree": 1,
                "maxInDegree": 40,
                "inverseName": "employees",
            }
        },
    }


@pytest.fixture
def inferred_model(graph_document: dict[str, Any]) -> SchemaModel:
    return infer(graph_document, generate_mutations=True)


@pytest.fixture
def validated_model(inferred_model: SchemaModel) -> SchemaModel:
    model, _ = validate(inferred_model)
    return model


@pytest.fixture
def airline_sdl() -> str:
    """Hand-written source schema using every graph-mapping directive."""
    return '''type Airport @alias(property: "airport") {
  id: ID! @id
  code: String
  city: String @alias(property: "city_name")
  routes(filter: AirportFilter, options: PageOptions): [Airport] @relationship(edgeType: "route", direction: OUT, cardinality: MANY)
  country: Country @relationship(edgeType: "contains", direction: IN, cardinality: ONE)
}

type Country @alias(property: "country") {
  id: ID! @id
  name: String
}

input AirportFilter {
  code: StringFilter
}

input StringFilter {
  eq: String
}

input PageOptions {
  limit: Int
  offset: Int
  after: ID
}

type Query {
  airport(id: ID!): Airport
  airports(filter: AirportFilter, options: PageOptions): [Airport]
  airportByCode(code: String): Airport
  topRoutes(limit: Int): [Airport] @graphQuery(statement: "MATCH (a:airport) RETURN a LIMIT $limit")
}
'''


@pytest.fixture
def resolver_tables() -> dict[str, Any]:
    """Translation tables as embedded in a generated openCypher resolver."""
    return {
        "types": {
            "Person": {
                "label": "person",
                "fields": {
                    "id": {"kind": "id"},
                    "name": {"kind": "scalar", "property": "full_name", "list": False},
                    "tags": {"kind": "scalar", "property": "tags", "list": True},
                    "worksAt": {
                        "kind": "relationship",
                        "target": "Company",
                        "many": False,
                        "hop": "({src})-[:`WORKS_AT`]->({dst}:`company`)",
                    },
                },
            },
            "Company": {
                "label": "company",
                "fields": {
                    "id": {"kind": "id"},
                    "name": {"kind": "scalar", "property": "name", "list": False},
                    "employees": {
                        "kind": "relationship",
                        "target": "Person",
                        "many": True,
                        "hop": "({src})<-[:`WORKS_AT`]-({dst}:`person`)",
                    },
                },
            },
        },
        "operations": {
            "Query.person": {"action": "get", "type": "Person", "id": "id"},
            "Query.persons": {
                "action": "list",
                "type": "Person",
                "filter": "filter",
                "options": "options",
            },
            "Query.personByName": {
                "action": "find",
                "type": "Person",
                "many": False,
                "match": {"name": "name"},
                "options": None,
            },
            "Mutation.createPerson": {"action": "create", "type": "Person", "input": "input"},
            "Mutation.updatePerson": {
                "action": "update",
                "type": "Person",
                "id": "id",
                "input": "input",
            },
            "Mutation.deletePerson": {
                "action": "delete",
                "type": "Person",
                "id": "id",
                "returns_node": False,
            },
            "Mutation.removePerson": {
                "action": "delete",
                "type": "Person",
                "id": "id",
                "returns_node": True,
            },
            "Query.countPersons": {
                "action": "statement",
                "statement": "MATCH (p:person) RETURN count(p) AS total",
                "type": "Int",
                "many": False,
            },
        },
    }


class FakeExecutor:
    """Records executed queries and answers them from a queue of row lists."""

    def __init__(self, *responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[tuple[str, CompiledQuery]] = []

    def execute(self, language: str, query: CompiledQuery) -> list[Any]:
        self.calls.append((language, query))
        if not self.responses:
            return []
        return self.responses.pop(0)


@pytest.fixture
def fake_executor_cls() -> type[FakeExecutor]:
    return FakeExecutor
