"""
Decode raw query results into the GraphQL response shape.

An absent relationship decodes to null (ONE) or an empty list (MANY),
never an error.
"""

from __future__ import annotations

from typing import Any

from .ast import Projection, ScalarProjection


def untype(value: Any) -> Any:
    """Strip GraphSON type wrappers ({"@type": ..., "@value": ...})."""
    if isinstance(value, dict):
        if "@type" in value and "@value" in value:
            type_name, inner = value["@type"], value["@value"]
            if type_name == "g:Map":
                items = [untype(v) for v in inner]
                return {str(items[i]): items[i + 1] for i in range(0, len(items), 2)}
            return untype(inner)
        return {k: untype(v) for k, v in value.items()}
    if isinstance(value, list):
        return [untype(v) for v in value]
    return value


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def decode(projection: Projection, raw: Any, folded: bool = False) -> dict[str, Any] | None:
    """
    Decode one projected node.

    Args:
        projection: The projection the query was rendered from
        raw: One result value (a map keyed by response key)
        folded: True when values arrive as folded lists (Gremlin)
    """
    if raw is None:
        return None
    result: dict[str, Any] = {key: projection.type_name for key in projection.typename_keys}
    for field in projection.fields:
        value = raw.get(field.key)
        if isinstance(field, ScalarProjection):
            if folded and field.property is not None and not field.is_list:
                value = _first(value)
            result[field.key] = value
        elif field.many:
            result[field.key] = [decode(field.projection, item, folded) for item in value or []]
        else:
            if folded:
                value = _first(value)
            result[field.key] = decode(field.projection, value, folded)
    return result


def decode_rows(rows: list[Any]) -> list[Any]:
    """Decode rows of a custom statement: single-column rows become their value."""
    values = []
    for row in rows:
        if isinstance(row, dict) and len(row) == 1:
            values.append(next(iter(row.values())))
        else:
            values.append(row)
    return values
