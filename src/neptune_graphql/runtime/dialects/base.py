"""
Dialect contract shared by openCypher and Gremlin.

A dialect turns the query tree from ``runtime.ast`` into query text, and
tells the generator which (direction, cardinality) hops it can translate.
Everything above this layer (argument mapping, selection planning,
decoding) is written once for both languages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..ast import (
    CompiledQuery,
    CreateNode,
    DeleteNode,
    MatchQuery,
    QueryNode,
    RawStatement,
    UpdateNode,
)

DIRECTIONS = ("OUT", "IN", "BOTH")
CARDINALITIES = ("ONE", "MANY")


class QueryDialect(ABC):
    """Base class for query language renderers."""

    name: str = ""

    # (direction, cardinality) pairs the dialect can translate
    supported_hops: frozenset[tuple[str, str]] = frozenset()

    # True when projected values arrive wrapped in single-element lists
    folded_values: bool = False

    def supports(self, direction: str, cardinality: str) -> bool:
        return (direction, cardinality) in self.supported_hops

    @abstractmethod
    def hop_template(self, edge_label: str, direction: str, target_label: str) -> str:
        """Compile the edge pattern for one relationship field."""

    def render(self, node: QueryNode) -> CompiledQuery:
        """Render any query node."""
        if isinstance(node, MatchQuery):
            return self.render_match(node)
        if isinstance(node, CreateNode):
            return self.render_create(node)
        if isinstance(node, UpdateNode):
            return self.render_update(node)
        if isinstance(node, DeleteNode):
            return self.render_delete(node)
        if isinstance(node, RawStatement):
            return self.render_statement(node)
        raise TypeError(f"Unknown query node: {type(node).__name__}")

    @abstractmethod
    def render_match(self, node: MatchQuery) -> CompiledQuery: ...

    @abstractmethod
    def render_create(self, node: CreateNode) -> CompiledQuery: ...

    @abstractmethod
    def render_update(self, node: UpdateNode) -> CompiledQuery: ...

    @abstractmethod
    def render_delete(self, node: DeleteNode) -> CompiledQuery: ...

    @abstractmethod
    def render_statement(self, node: RawStatement) -> CompiledQuery: ...

    def result_values(self, rows: list[Any]) -> list[Any]:
        """Strip transport wrapping from projected rows."""
        return list(rows)

    @abstractmethod
    def deleted_count(self, rows: list[Any]) -> int:
        """Number of nodes a rendered DeleteNode removed."""
