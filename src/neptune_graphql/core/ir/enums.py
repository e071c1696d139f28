"""
Enumerations shared across the schema IR.

These are the tagged-union discriminators for types, fields and operations,
plus the graph-mapping vocabulary used by relationship fields.
"""

from __future__ import annotations

from enum import Enum


class TypeKind(str, Enum):
    """Kinds of named GraphQL types held in the model."""

    OBJECT = "OBJECT"
    ENUM = "ENUM"
    SCALAR = "SCALAR"
    INPUT = "INPUT"  # input objects used by filter and mutation arguments


class FieldKind(str, Enum):
    """How a field is resolved against the graph."""

    SCALAR = "SCALAR"  # read from a stored property
    RELATIONSHIP = "RELATIONSHIP"  # resolved by traversing an edge


class Cardinality(str, Enum):
    """How many targets a relationship field may resolve to."""

    ONE = "ONE"
    MANY = "MANY"


class EdgeDirection(str, Enum):
    """Edge direction, seen from the type that declares the field."""

    OUT = "OUT"
    IN = "IN"
    BOTH = "BOTH"


class OperationKind(str, Enum):
    """Root operation type an operation belongs to."""

    QUERY = "QUERY"
    MUTATION = "MUTATION"


class QueryLanguage(str, Enum):
    """Graph query languages the resolver generator can target."""

    OPENCYPHER = "opencypher"
    GREMLIN = "gremlin"


class ExecutionClient(str, Enum):
    """Transport the generated resolver uses to reach the database."""

    SDK = "sdk"
    HTTP = "http"


# GraphQL built-in scalars
BUILTIN_SCALARS = frozenset({"String", "Int", "Float", "Boolean", "ID"})
