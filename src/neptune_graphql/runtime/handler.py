"""
AppSync Lambda resolver runtime.

A generated resolver module builds one ResolverRuntime from its embedded
translation tables and forwards every Lambda event to ``handle``. Events
are either a single resolver invocation or, for batched resolvers, a list
of invocations answered item by item.
"""

from __future__ import annotations

import logging
from typing import Any

from .ast import DeleteNode, MatchQuery, RawStatement, UpdateNode
from .clients import Executor
from .decode import decode, decode_rows
from .dialects import get_dialect
from .errors import NodeNotFoundError, ResolverError
from .planner import PageSettings, QueryPlanner
from .selection import from_event

logger = logging.getLogger(__name__)


class ResolverRuntime:
    """Resolves AppSync events against Neptune for one generated schema."""

    def __init__(
        self,
        schema: dict[str, Any],
        language: str,
        executor: Executor,
        pages: PageSettings | None = None,
    ):
        self.dialect = get_dialect(language)
        self.planner = QueryPlanner(schema, pages)
        self.executor = executor

    def handle(self, event: dict[str, Any] | list[dict[str, Any]]) -> Any:
        """Entry point for a Lambda invocation."""
        if isinstance(event, list):
            return [self._batch_item(item) for item in event]
        return self.handle_one(event)

    def handle_one(self, event: dict[str, Any]) -> Any:
        info = event.get("info") or {}
        key = f"{info.get('parentTypeName')}.{info.get('fieldName')}"
        return self.resolve(key, event.get("arguments") or {}, from_event(info))

    def _batch_item(self, event: dict[str, Any]) -> dict[str, Any]:
        try:
            return {"data": self.handle_one(event)}
        except ResolverError as e:
            logger.warning(f"Batch item failed: {e.message}")
            return {"data": None, "errorMessage": e.message, "errorType": e.error_type}

    def resolve(self, key: str, arguments: dict[str, Any], selection: list) -> Any:
        """
        Resolve one operation.

        Args:
            key: ``<Root type>.<field>``, e.g. ``Query.persons``
            arguments: GraphQL argument values
            selection: Requested fields

        Raises:
            BadRequestError: If the event does not map onto the schema
            NodeNotFoundError: If an update or delete matches nothing
            QueryExecutionError: If Neptune rejects a query
        """
        op = self.planner.operation(key)
        result: Any = None
        for node in self.planner.plan(key, arguments, selection):
            query = self.dialect.render(node)
            logger.debug(f"{key} -> {self.dialect.name}: {query.text}")
            rows = self.executor.execute(self.dialect.name, query)

            if isinstance(node, DeleteNode):
                if self.dialect.deleted_count(rows) == 0:
                    raise NodeNotFoundError(op["type"], node.node_id)
                if not op.get("returns_node"):
                    result = True
            elif isinstance(node, RawStatement):
                values = decode_rows(rows)
                if op.get("many"):
                    result = values
                else:
                    result = values[0] if values else None
            else:
                values = [
                    decode(node.projection, value, self.dialect.folded_values)
                    for value in self.dialect.result_values(rows)
                ]
                if isinstance(node, MatchQuery) and not node.single:
                    result = values
                else:
                    result = values[0] if values else None
                    if result is None and isinstance(node, UpdateNode):
                        raise NodeNotFoundError(op["type"], node.node_id)
        return result
