"""
Errors raised by generated resolvers at request time.
"""

from __future__ import annotations


class ResolverError(Exception):
    """Base exception for request-time resolver errors."""

    error_type = "ResolverError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NodeNotFoundError(ResolverError):
    """Raised when an update or delete targets an identifier that matches nothing."""

    error_type = "NodeNotFound"

    def __init__(self, type_name: str, node_id: str):
        self.type_name = type_name
        self.node_id = node_id
        super().__init__(f"{type_name} '{node_id}' not found")


class QueryExecutionError(ResolverError):
    """Raised when the database rejects a query or the transport fails."""

    error_type = "QueryExecutionError"

    def __init__(self, message: str, query: str | None = None):
        self.query = query
        super().__init__(message)


class BadRequestError(ResolverError):
    """Raised for events the resolver cannot map (unknown field, bad filter)."""

    error_type = "BadRequest"
