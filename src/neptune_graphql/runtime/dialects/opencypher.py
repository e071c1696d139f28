"""
openCypher dialect.

Values are always bound as parameters ($p0, $p1, ...). Single-valued hops
become pattern comprehensions inside the returned map. List hops become
CALL subqueries that order their targets by id before paging, so offset,
limit and ``after`` select the same page as in Gremlin:

    MATCH (n0:`Company`)
    WITH n0 ORDER BY ID(n0) LIMIT $p0
    CALL {
    WITH n0
    MATCH (n0)<-[:`WORKS_AT`]-(n1:`Person`)
    WITH n1 ORDER BY ID(n1) LIMIT $p1
    RETURN collect({name: n1.name}) AS n1_list
    }
    RETURN {id: ID(n0), employees: n1_list} AS result

A single-valued hop whose targets have list hops of their own is also
rendered as a subquery, since a pattern comprehension cannot contain one.
"""

from __future__ import annotations

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
    Traversal,
    UpdateNode,
)
from ..operators import OPERATOR_CYPHER
from .base import CARDINALITIES, DIRECTIONS, QueryDialect

_SIMPLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

RESULT_COLUMN = "result"
DELETED_COLUMN = "deleted"
ID_PROPERTY = "`~id`"


def quote(name: str) -> str:
    """Backtick-quote a label, relationship type or property name."""
    return "`" + name.replace("`", "``") + "`"


def identifier(name: str) -> str:
    return name if _SIMPLE_NAME.match(name) else quote(name)


def _has_list_hop(projection: Projection) -> bool:
    return any(
        isinstance(field, Traversal) and (field.many or _has_list_hop(field.projection))
        for field in projection.fields
    )


class _StatementBuilder:
    """Collects parameters and variable names while one statement is rendered."""

    def __init__(self):
        self.parameters: dict[str, Any] = {}
        self._variables = 0

    def param(self, value: Any) -> str:
        name = f"p{len(self.parameters)}"
        self.parameters[name] = value
        return f"${name}"

    def var(self) -> str:
        name = f"n{self._variables}"
        self._variables += 1
        return name

    def conditions(
        self, var: str, predicates: tuple[Predicate, ...], after: str | None = None
    ) -> list[str]:
        rendered = []
        for predicate in predicates:
            ref = f"ID({var})" if predicate.is_id else f"{var}.{identifier(predicate.property)}"
            template = OPERATOR_CYPHER[predicate.operator]
            rendered.append(template.format(prop=ref, value=self.param(predicate.value)))
        if after is not None:
            rendered.append(f"ID({var}) > {self.param(after)}")
        return rendered

    def projection(self, var: str, projection: Projection, calls: list[str]) -> str:
        """Render the map for ``var``, appending any CALL subqueries it needs to ``calls``."""
        entries = []
        for field in projection.fields:
            if isinstance(field, ScalarProjection):
                if field.property is None:
                    value = f"ID({var})"
                else:
                    value = f"{var}.{identifier(field.property)}"
            else:
                target = self.var()
                pattern = field.hop.replace("{src}", var).replace("{dst}", target)
                if field.many or _has_list_hop(field.projection):
                    value = f"{target}_list"
                    calls.append(self.subquery(var, target, pattern, field, value))
                else:
                    where = self.conditions(target, field.predicates)
                    where_text = f" WHERE {' AND '.join(where)}" if where else ""
                    inner = self.projection(target, field.projection, calls)
                    value = f"head([{pattern}{where_text} | {inner}])"
            entries.append(f"{identifier(field.key)}: {value}")
        return "{" + ", ".join(entries) + "}"

    def subquery(
        self, var: str, target: str, pattern: str, field: Traversal, alias: str
    ) -> str:
        lines = ["CALL {", f"WITH {var}", f"MATCH {pattern}"]
        where = self.conditions(
            target, field.predicates, field.pagination.after if field.many else None
        )
        if where:
            lines.append("WHERE " + " AND ".join(where))
        lines.append(self.page(target, field.pagination, single=not field.many))
        nested: list[str] = []
        inner = self.projection(target, field.projection, nested)
        lines.extend(nested)
        collected = f"collect({inner})" if field.many else f"head(collect({inner}))"
        lines.append(f"RETURN {collected} AS {alias}")
        lines.append("}")
        return "\n".join(lines)

    def page(self, var: str, pagination: Pagination, single: bool) -> str:
        clause = f"WITH {var}"
        if not pagination.is_empty:
            clause += f" ORDER BY ID({var})"
        if pagination.offset:
            clause += f" SKIP {self.param(pagination.offset)}"
        if single:
            clause += " LIMIT 1"
        elif pagination.limit is not None:
            clause += f" LIMIT {self.param(pagination.limit)}"
        return clause

    def returning(self, var: str, projection: Projection) -> list[str]:
        calls: list[str] = []
        rendered = self.projection(var, projection, calls)
        return [*calls, f"RETURN {rendered} AS {RESULT_COLUMN}"]


class OpenCypherDialect(QueryDialect):
    """Renders query trees as parameterised openCypher."""

    name = "opencypher"
    supported_hops = frozenset((d, c) for d in DIRECTIONS for c in CARDINALITIES)

    def hop_template(self, edge_label: str, direction: str, target_label: str) -> str:
        edge = f"[:{quote(edge_label)}]"
        target = f"({{dst}}:{quote(target_label)})"
        if direction == "IN":
            return f"({{src}})<-{edge}-{target}"
        if direction == "BOTH":
            return f"({{src}})-{edge}-{target}"
        return f"({{src}})-{edge}->{target}"

    def render_match(self, node: MatchQuery) -> CompiledQuery:
        builder = _StatementBuilder()
        var = builder.var()
        lines = [f"MATCH ({var}:{quote(node.label)})"]
        conditions = builder.conditions(var, node.predicates, node.pagination.after)
        if conditions:
            lines.append("WHERE " + " AND ".join(conditions))
        lines.append(builder.page(var, node.pagination, node.single))
        lines.extend(builder.returning(var, node.projection))
        return CompiledQuery("\n".join(lines), builder.parameters)

    def render_create(self, node: CreateNode) -> CompiledQuery:
        builder = _StatementBuilder()
        var = builder.var()
        assignments = [f"{ID_PROPERTY}: {builder.param(node.node_id)}"]
        for prop, value in node.properties.items():
            if value is not None:
                assignments.append(f"{identifier(prop)}: {builder.param(value)}")
        lines = [
            f"CREATE ({var}:{quote(node.label)} {{{', '.join(assignments)}}})",
            f"WITH {var}",
            *builder.returning(var, node.projection),
        ]
        return CompiledQuery("\n".join(lines), builder.parameters)

    def render_update(self, node: UpdateNode) -> CompiledQuery:
        builder = _StatementBuilder()
        var = builder.var()
        lines = [
            f"MATCH ({var}:{quote(node.label)})",
            f"WHERE ID({var}) = {builder.param(node.node_id)}",
        ]
        if node.properties:
            # Assigning null removes the property
            assignments = [
                f"{var}.{identifier(prop)} = {builder.param(value)}"
                for prop, value in node.properties.items()
            ]
            lines.append("SET " + ", ".join(assignments))
        lines.append(f"WITH {var}")
        lines.extend(builder.returning(var, node.projection))
        return CompiledQuery("\n".join(lines), builder.parameters)

    def render_delete(self, node: DeleteNode) -> CompiledQuery:
        builder = _StatementBuilder()
        var = builder.var()
        lines = [
            f"MATCH ({var}:{quote(node.label)})",
            f"WHERE ID({var}) = {builder.param(node.node_id)}",
            f"DETACH DELETE {var}",
            f"RETURN count(*) AS {DELETED_COLUMN}",
        ]
        return CompiledQuery("\n".join(lines), builder.parameters)

    def render_statement(self, node: RawStatement) -> CompiledQuery:
        return CompiledQuery(node.statement, dict(node.parameters))

    def result_values(self, rows: list[Any]) -> list[Any]:
        return [
            row[RESULT_COLUMN] if isinstance(row, dict) and RESULT_COLUMN in row else row
            for row in rows
        ]

    def deleted_count(self, rows: list[Any]) -> int:
        if not rows:
            return 0
        return int(rows[0].get(DELETED_COLUMN, 0))
