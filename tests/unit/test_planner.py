"""Tests for request planning (arguments and selections to query trees)."""

from __future__ import annotations

from typing import Any

import pytest

from neptune_graphql.runtime.ast import (
    CreateNode,
    DeleteNode,
    MatchQuery,
    Pagination,
    Predicate,
    RawStatement,
    ScalarProjection,
    Traversal,
    UpdateNode,
)
from neptune_graphql.runtime.errors import BadRequestError
from neptune_graphql.runtime.operators import FilterOperator
from neptune_graphql.runtime.planner import PageSettings, QueryPlanner
from neptune_graphql.runtime.selection import SelectedField, from_graphql


@pytest.fixture
def planner(resolver_tables: dict[str, Any]) -> QueryPlanner:
    return QueryPlanner(resolver_tables, PageSettings(default_size=20, max_size=50))


class TestProjection:
    def test_scalars_and_relationships(self, planner: QueryPlanner) -> None:
        projection = planner.projection(
            "Person", from_graphql("{ id name tags worksAt { name } __typename }")
        )
        id_field, name, tags, works_at = projection.fields
        assert id_field == ScalarProjection("id", None)
        assert name == ScalarProjection("name", "full_name")
        assert tags.is_list
        assert isinstance(works_at, Traversal)
        assert not works_at.many
        assert works_at.pagination == Pagination()
        assert works_at.projection.fields == (ScalarProjection("name", "name"),)
        assert projection.typename_keys == ("__typename",)

    def test_many_relationship_arguments(self, planner: QueryPlanner) -> None:
        projection = planner.projection(
            "Company",
            from_graphql(
                '{ employees(filter: {name: {startsWith: "A"}}, options: {limit: 500}) { id } }'
            ),
        )
        employees = projection.fields[0]
        assert employees.many
        assert employees.predicates == (Predicate("full_name", FilterOperator.STARTS_WITH, "A"),)
        # Capped at the maximum page size
        assert employees.pagination.limit == 50

    def test_unknown_field(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError, match="Unknown field 'Person.salary'"):
            planner.projection("Person", [SelectedField("salary")])


class TestArguments:
    def test_predicates(self, planner: QueryPlanner) -> None:
        predicates = planner.predicates(
            "Person", {"id": {"in": ["1", "2"]}, "name": {"eq": "Ann", "ne": None}}
        )
        assert predicates == (
            Predicate(None, FilterOperator.IN, ["1", "2"]),
            Predicate("full_name", FilterOperator.EQ, "Ann"),
        )

    def test_bare_value_means_equality(self, planner: QueryPlanner) -> None:
        assert planner.predicates("Person", {"name": "Ann"}) == (
            Predicate("full_name", FilterOperator.EQ, "Ann"),
        )

    def test_unknown_operator(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError, match="Unknown filter operator"):
            planner.predicates("Person", {"name": {"like": "A%"}})

    def test_relationship_filter_rejected(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError):
            planner.predicates("Person", {"worksAt": {"eq": "c1"}})

    def test_pagination_defaults(self, planner: QueryPlanner) -> None:
        assert planner.pagination(None) == Pagination(limit=20)
        assert planner.pagination({"limit": 5, "offset": 10, "after": "p3"}) == Pagination(
            limit=5, offset=10, after="p3"
        )

    def test_negative_pagination(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError):
            planner.pagination({"offset": -1})


class TestPlan:
    def test_get(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan("Query.person", {"id": "p1"}, from_graphql("{ name }"))
        assert isinstance(node, MatchQuery)
        assert node.label == "person"
        assert node.single
        assert node.predicates == (Predicate(None, FilterOperator.EQ, "p1"),)

    def test_get_requires_id(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError, match="Argument 'id' is required"):
            planner.plan("Query.person", {}, [])

    def test_list(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan(
            "Query.persons",
            {"filter": {"name": {"eq": "Ann"}}, "options": {"limit": 2}},
            from_graphql("{ id }"),
        )
        assert not node.single
        assert node.pagination == Pagination(limit=2)
        assert node.predicates == (Predicate("full_name", FilterOperator.EQ, "Ann"),)

    def test_find(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan("Query.personByName", {"name": "Ann"}, from_graphql("{ id }"))
        assert node.single
        assert node.pagination == Pagination()
        assert node.predicates == (Predicate("full_name", FilterOperator.EQ, "Ann"),)

    def test_create_generates_id(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan(
            "Mutation.createPerson", {"input": {"name": "Ann"}}, from_graphql("{ id }")
        )
        assert isinstance(node, CreateNode)
        assert node.node_id
        assert node.properties == {"full_name": "Ann"}

    def test_create_keeps_given_id(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan("Mutation.createPerson", {"input": {"id": "p9"}}, [])
        assert node.node_id == "p9"

    def test_create_rejects_relationship(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError):
            planner.plan("Mutation.createPerson", {"input": {"worksAt": "c1"}}, [])

    def test_update(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan(
            "Mutation.updatePerson", {"id": "p1", "input": {"name": None}}, from_graphql("{ id }")
        )
        assert isinstance(node, UpdateNode)
        assert node.properties == {"full_name": None}

    def test_delete(self, planner: QueryPlanner) -> None:
        assert planner.plan("Mutation.deletePerson", {"id": "p1"}, []) == [
            DeleteNode("person", "p1")
        ]

    def test_delete_returning_node_fetches_first(self, planner: QueryPlanner) -> None:
        fetch, delete = planner.plan(
            "Mutation.removePerson", {"id": "p1"}, from_graphql("{ name }")
        )
        assert isinstance(fetch, MatchQuery) and fetch.single
        assert delete == DeleteNode("person", "p1")

    def test_statement(self, planner: QueryPlanner) -> None:
        (node,) = planner.plan("Query.countPersons", {"x": 1}, [])
        assert node == RawStatement("MATCH (p:person) RETURN count(p) AS total", {"x": 1})

    def test_unknown_operation(self, planner: QueryPlanner) -> None:
        with pytest.raises(BadRequestError, match="No resolver for field 'Query.nope'"):
            planner.plan("Query.nope", {}, [])
