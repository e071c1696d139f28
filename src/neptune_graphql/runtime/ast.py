"""
Query-language-agnostic query tree.

The planner builds these nodes from a GraphQL request; a dialect renders
them to openCypher or Gremlin text only at the end. Hop templates are
compiled per relationship field when the resolver module is generated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .operators import FilterOperator


@dataclass(frozen=True)
class Predicate:
    """
    One filter condition.

    Attributes:
        property: Graph property name, or None for the element id
        operator: Comparison to apply
        value: Value compared against (a list for in/notIn)
    """

    property: str | None
    operator: FilterOperator
    value: Any

    @property
    def is_id(self) -> bool:
        return self.property is None


@dataclass(frozen=True)
class Pagination:
    """
    Offset/limit or keyset pagination.

    ``after`` is a keyset cursor: only elements whose id sorts after it
    are returned.
    """

    limit: int | None = None
    offset: int | None = None
    after: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.limit is None and self.offset is None and self.after is None


@dataclass(frozen=True)
class ScalarProjection:
    """A scalar field to fetch. ``property`` None means the element id."""

    key: str
    property: str | None
    is_list: bool = False


@dataclass(frozen=True)
class Traversal:
    """
    A relationship field to fetch as an extra hop.

    Attributes:
        key: Response key
        hop: Dialect hop template compiled at generation time
        many: True for MANY cardinality (list result), False for ONE
        projection: What to fetch from the target nodes
        predicates: Filters on the target nodes (MANY only)
        pagination: Page of targets (MANY only)
    """

    key: str
    hop: str
    many: bool
    projection: Projection
    predicates: tuple[Predicate, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)


@dataclass(frozen=True)
class Projection:
    """The shape fetched for one node: scalars and nested traversals."""

    type_name: str
    fields: tuple[ScalarProjection | Traversal, ...]
    typename_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class MatchQuery:
    """Find nodes of one label, filter, page and project them."""

    label: str
    predicates: tuple[Predicate, ...]
    projection: Projection
    pagination: Pagination = field(default_factory=Pagination)
    single: bool = False


@dataclass(frozen=True)
class CreateNode:
    label: str
    node_id: str
    properties: dict[str, Any]
    projection: Projection


@dataclass(frozen=True)
class UpdateNode:
    label: str
    node_id: str
    properties: dict[str, Any]
    projection: Projection


@dataclass(frozen=True)
class DeleteNode:
    """Delete one node with its edges; renders to a statement returning a count."""

    label: str
    node_id: str


@dataclass(frozen=True)
class RawStatement:
    """A custom statement used verbatim, with named parameters."""

    statement: str
    parameters: dict[str, Any]


QueryNode = Union[MatchQuery, CreateNode, UpdateNode, DeleteNode, RawStatement]


@dataclass(frozen=True)
class CompiledQuery:
    """Rendered query text plus bound parameters (openCypher only)."""

    text: str
    parameters: dict[str, Any] = field(default_factory=dict)
