"""
Gremlin dialect.

Neptune accepts Gremlin as Groovy-style strings without bindings, so
values are rendered as escaped literals. Nodes are shaped with
project()/by(); every by() folds its values so a missing property or an
absent hop yields an empty list rather than an error:

    g.V().hasLabel('Person').has('name', startingWith('A'))
      .project('id', 'worksAt')
      .by(T.id)
      .by(out('WORKS_AT').hasLabel('Company').project('name').by(values('name').fold()).fold())
"""

from __future__ import annotations

import math
import re
from typing import Any

from ..ast import (
    CompiledQuery,
    CreateNode,
    DeleteNode,
    MatchQuery,
    Pagination,
    Predicate,
    Projection,
    RawStatement,
    ScalarProjection,
    UpdateNode,
)
from ..operators import OPERATOR_GREMLIN
from .base import QueryDialect

_PARAMETER = re.compile(r"\$([_A-Za-z][_0-9A-Za-z]*)")

# Serializer asked of Neptune so results come back as plain JSON
SERIALIZER = "application/vnd.gremlin-v3.0+json;types=false"


def literal(value: Any) -> str:
    """Render a Python value as a Gremlin literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Cannot render {value} as a Gremlin literal")
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(literal(v) for v in value) + "]"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("$", "\\$")
        return f"'{escaped}'"
    raise ValueError(f"Cannot render {type(value).__name__} as a Gremlin literal")


def _predicate(predicate: Predicate) -> str:
    condition = OPERATOR_GREMLIN[predicate.operator].format(value=literal(predicate.value))
    if predicate.is_id:
        return f"hasId({condition})"
    return f"has({literal(predicate.property)}, {condition})"


def _page(pagination: Pagination, single: bool = False) -> str:
    steps = []
    if pagination.after is not None:
        steps.append(f"hasId(gt({literal(pagination.after)}))")
    if not pagination.is_empty:
        steps.append("order().by(T.id)")
    start = pagination.offset or 0
    if single:
        steps.append(f"range({start}, {start + 1})")
    elif pagination.limit is not None:
        steps.append(f"range({start}, {start + pagination.limit})")
    elif start:
        steps.append(f"range({start}, -1)")
    return "".join(f".{step}" for step in steps)


def _projection(projection: Projection) -> str:
    fields = projection.fields
    if not fields:
        return "project('__id').by(T.id)"
    keys = ", ".join(literal(f.key) for f in fields)
    modulators = []
    for field in fields:
        if isinstance(field, ScalarProjection):
            if field.property is None:
                modulators.append("by(T.id)")
            else:
                modulators.append(f"by(values({literal(field.property)}).fold())")
        else:
            steps = field.hop
            if field.many:
                steps += "".join(f".{_predicate(p)}" for p in field.predicates)
                steps += _page(field.pagination)
            else:
                steps += ".limit(1)"
            modulators.append(f"by({steps}.{_projection(field.projection)}.fold())")
    return f"project({keys})" + "".join(f".{m}" for m in modulators)


def _property_steps(properties: dict[str, Any], replace: bool) -> str:
    steps = []
    for prop, value in properties.items():
        key = literal(prop)
        if replace and (value is None or isinstance(value, (list, tuple))):
            steps.append(f"sideEffect(properties({key}).drop())")
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            steps.extend(f"property(set, {key}, {literal(v)})" for v in value)
        else:
            steps.append(f"property(single, {key}, {literal(value)})")
    return "".join(f".{step}" for step in steps)


class GremlinDialect(QueryDialect):
    """Renders query trees as Gremlin strings."""

    name = "gremlin"
    # No undirected hops: both() is not translated
    supported_hops = frozenset(
        {("OUT", "ONE"), ("OUT", "MANY"), ("IN", "ONE"), ("IN", "MANY")}
    )
    folded_values = True

    def hop_template(self, edge_label: str, direction: str, target_label: str) -> str:
        step = "in" if direction == "IN" else "out"
        return f"{step}({literal(edge_label)}).hasLabel({literal(target_label)})"

    def _vertex(self, label: str, node_id: str) -> str:
        return f"g.V({literal(node_id)}).hasLabel({literal(label)})"

    def render_match(self, node: MatchQuery) -> CompiledQuery:
        text = f"g.V().hasLabel({literal(node.label)})"
        text += "".join(f".{_predicate(p)}" for p in node.predicates)
        text += _page(node.pagination, node.single)
        text += f".{_projection(node.projection)}"
        return CompiledQuery(text)

    def render_create(self, node: CreateNode) -> CompiledQuery:
        text = f"g.addV({literal(node.label)}).property(T.id, {literal(node.node_id)})"
        text += _property_steps(node.properties, replace=False)
        text += f".{_projection(node.projection)}"
        return CompiledQuery(text)

    def render_update(self, node: UpdateNode) -> CompiledQuery:
        text = self._vertex(node.label, node.node_id)
        text += _property_steps(node.properties, replace=True)
        text += f".{_projection(node.projection)}"
        return CompiledQuery(text)

    def render_delete(self, node: DeleteNode) -> CompiledQuery:
        return CompiledQuery(f"{self._vertex(node.label, node.node_id)}.sideEffect(drop()).count()")

    def render_statement(self, node: RawStatement) -> CompiledQuery:
        def substitute(match: re.Match) -> str:
            name = match.group(1)
            if name in node.parameters:
                return literal(node.parameters[name])
            return match.group(0)

        return CompiledQuery(_PARAMETER.sub(substitute, node.statement))

    def deleted_count(self, rows: list[Any]) -> int:
        if not rows:
            return 0
        return int(rows[0])
