"""
Request planning: GraphQL arguments and selections -> query tree.

The planner reads the translation tables embedded in a generated resolver
module. Their shape:

    {
      "types": {
        "Person": {
          "label": "Person",
          "fields": {
            "id": {"kind": "id"},
            "name": {"kind": "scalar", "property": "name", "list": False},
            "worksAt": {"kind": "relationship", "target": "Company",
                        "many": False, "hop": "<dialect hop template>"},
          },
        },
      },
      "operations": {
        "Query.person": {"action": "get", "type": "Person", "id": "id"},
        "Query.persons": {"action": "list", "type": "Person",
                          "filter": "filter", "options": "options"},
        "Query.personByName": {"action": "find", "type": "Person", "many": False,
                               "match": {"name": "name"}, "options": None},
        "Mutation.createPerson": {"action": "create", "type": "Person", "input": "input"},
        "Mutation.updatePerson": {"action": "update", "type": "Person",
                                  "id": "id", "input": "input"},
        "Mutation.deletePerson": {"action": "delete", "type": "Person",
                                  "id": "id", "returns_node": False},
        "Query.topRoutes": {"action": "statement", "statement": "MATCH ...",
                            "type": "Route", "many": True},
      },
    }
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from .ast import (
    CreateNode,
    DeleteNode,
    MatchQuery,
    Pagination,
    Predicate,
    Projection,
    RawStatement,
    ScalarProjection,
    Traversal,
    UpdateNode,
)
from .errors import BadRequestError
from .operators import FilterOperator, parse_operator
from .selection import SelectedField

logger = logging.getLogger(__name__)

TYPENAME_FIELD = "__typename"

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class PageSettings:
    default_size: int = DEFAULT_PAGE_SIZE
    max_size: int = MAX_PAGE_SIZE


class QueryPlanner:
    """Builds query trees for one generated schema."""

    def __init__(self, schema: dict[str, Any], pages: PageSettings | None = None):
        self.types: dict[str, Any] = schema["types"]
        self.operations: dict[str, Any] = schema["operations"]
        self.pages = pages or PageSettings()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def operation(self, key: str) -> dict[str, Any]:
        try:
            return self.operations[key]
        except KeyError:
            raise BadRequestError(f"No resolver for field '{key}'") from None

    def type_spec(self, type_name: str) -> dict[str, Any]:
        try:
            return self.types[type_name]
        except KeyError:
            raise BadRequestError(f"Unknown type '{type_name}'") from None

    def field_spec(self, type_name: str, field_name: str) -> dict[str, Any]:
        spec = self.type_spec(type_name)["fields"].get(field_name)
        if spec is None:
            raise BadRequestError(f"Unknown field '{type_name}.{field_name}'")
        return spec

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def predicates(
        self, type_name: str, filter_value: dict[str, Any] | None
    ) -> tuple[Predicate, ...]:
        """Map a ``<Type>Filter`` argument to predicates."""
        if not filter_value:
            return ()
        predicates = []
        for field_name, conditions in filter_value.items():
            spec = self.field_spec(type_name, field_name)
            if spec["kind"] == "relationship":
                raise BadRequestError(f"Cannot filter on relationship '{type_name}.{field_name}'")
            prop = None if spec["kind"] == "id" else spec["property"]
            if not isinstance(conditions, dict):
                conditions = {FilterOperator.EQ.value: conditions}
            for op_name, value in conditions.items():
                if value is None:
                    continue
                try:
                    operator = parse_operator(op_name)
                except ValueError as e:
                    raise BadRequestError(str(e)) from e
                predicates.append(Predicate(prop, operator, value))
        return tuple(predicates)

    def pagination(self, options: dict[str, Any] | None) -> Pagination:
        """Map a ``PageOptions`` argument, applying the default page size."""
        options = options or {}
        limit = options.get("limit")
        offset = options.get("offset")
        if limit is None:
            limit = self.pages.default_size
        if limit < 0 or (offset is not None and offset < 0):
            raise BadRequestError("limit and offset must not be negative")
        return Pagination(
            limit=min(limit, self.pages.max_size),
            offset=offset or None,
            after=options.get("after"),
        )

    def properties(self, type_name: str, values: dict[str, Any]) -> tuple[str | None, dict]:
        """Split an input object into (id, {graph property: value})."""
        node_id = None
        properties: dict[str, Any] = {}
        for field_name, value in (values or {}).items():
            spec = self.field_spec(type_name, field_name)
            if spec["kind"] == "id":
                node_id = value
            elif spec["kind"] == "scalar":
                properties[spec["property"]] = value
            else:
                raise BadRequestError(f"Cannot set relationship '{type_name}.{field_name}'")
        return node_id, properties

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------

    def projection(self, type_name: str, selection: list[SelectedField]) -> Projection:
        fields: list[ScalarProjection | Traversal] = []
        typename_keys: list[str] = []
        for selected in selection:
            if selected.name == TYPENAME_FIELD:
                typename_keys.append(selected.key)
                continue
            spec = self.field_spec(type_name, selected.name)
            kind = spec["kind"]
            if kind == "id":
                fields.append(ScalarProjection(selected.key, None))
            elif kind == "scalar":
                fields.append(
                    ScalarProjection(selected.key, spec["property"], spec.get("list", False))
                )
            else:
                many = spec["many"]
                args = selected.arguments
                fields.append(
                    Traversal(
                        key=selected.key,
                        hop=spec["hop"],
                        many=many,
                        projection=self.projection(spec["target"], selected.children),
                        predicates=self.predicates(spec["target"], args.get("filter"))
                        if many
                        else (),
                        pagination=self.pagination(args.get("options")) if many else Pagination(),
                    )
                )
        return Projection(type_name, tuple(fields), tuple(typename_keys))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def plan(
        self, key: str, arguments: dict[str, Any], selection: list[SelectedField]
    ) -> list[Any]:
        """
        Plan one operation.

        Returns:
            Query nodes to run in order. A delete that returns the deleted
            node is planned as a fetch followed by the delete.
        """
        op = self.operation(key)
        action = op["action"]

        if action == "statement":
            return [RawStatement(op["statement"], dict(arguments))]

        type_name = op["type"]
        label = self.type_spec(type_name)["label"]

        if action == "get":
            node_id = _required(arguments, op["id"], key)
            return [
                MatchQuery(
                    label=label,
                    predicates=(Predicate(None, FilterOperator.EQ, node_id),),
                    projection=self.projection(type_name, selection),
                    single=True,
                )
            ]

        if action == "list":
            return [
                MatchQuery(
                    label=label,
                    predicates=self.predicates(type_name, arguments.get(op["filter"])),
                    projection=self.projection(type_name, selection),
                    pagination=self.pagination(arguments.get(op["options"])),
                )
            ]

        if action == "find":
            predicates = []
            for arg_name, field_name in op["match"].items():
                if arguments.get(arg_name) is None:
                    continue
                spec = self.field_spec(type_name, field_name)
                prop = None if spec["kind"] == "id" else spec["property"]
                predicates.append(Predicate(prop, FilterOperator.EQ, arguments[arg_name]))
            return [
                MatchQuery(
                    label=label,
                    predicates=tuple(predicates),
                    projection=self.projection(type_name, selection),
                    pagination=self.pagination(arguments.get(op.get("options") or ""))
                    if op["many"]
                    else Pagination(),
                    single=not op["many"],
                )
            ]

        if action == "create":
            node_id, properties = self.properties(type_name, arguments.get(op["input"]))
            if node_id is None:
                node_id = str(uuid.uuid4())
                logger.debug(f"Generated id {node_id} for new {type_name}")
            return [
                CreateNode(label, node_id, properties, self.projection(type_name, selection))
            ]

        if action == "update":
            node_id = _required(arguments, op["id"], key)
            _, properties = self.properties(type_name, arguments.get(op["input"]))
            return [UpdateNode(label, node_id, properties, self.projection(type_name, selection))]

        if action == "delete":
            node_id = _required(arguments, op["id"], key)
            nodes: list[Any] = []
            if op.get("returns_node"):
                nodes.append(
                    MatchQuery(
                        label=label,
                        predicates=(Predicate(None, FilterOperator.EQ, node_id),),
                        projection=self.projection(type_name, selection),
                        single=True,
                    )
                )
            nodes.append(DeleteNode(label, node_id))
            return nodes

        raise BadRequestError(f"Unknown resolver action '{action}' for '{key}'")


def _required(arguments: dict[str, Any], name: str, key: str) -> Any:
    value = arguments.get(name)
    if value is None:
        raise BadRequestError(f"Argument '{name}' is required by '{key}'")
    return value
