"""
Schema intermediate representation (IR).

Every pass reads or writes these types: inference and the SDL parser
produce a SchemaModel, the change engine and validator edit it in place,
and the SDL writer and resolver generator read it.
"""

from .enums import (
    BUILTIN_SCALARS,
    Cardinality,
    EdgeDirection,
    ExecutionClient,
    FieldKind,
    OperationKind,
    QueryLanguage,
    TypeKind,
)
from .fields import (
    ArgumentDefinition,
    DirectiveSpec,
    FieldDefinition,
    RelationshipSpec,
    TypeRef,
)
from .graphdb import (
    EdgeLabelSpec,
    GraphSchema,
    NodeLabelSpec,
    PropertySpec,
)
from .operations import OperationDefinition
from .schema import SchemaModel
from .types import EnumValueDefinition, TypeDefinition

__all__ = [
    "BUILTIN_SCALARS",
    "ArgumentDefinition",
    "Cardinality",
    "DirectiveSpec",
    "EdgeDirection",
    "EdgeLabelSpec",
    "EnumValueDefinition",
    "ExecutionClient",
    "FieldDefinition",
    "FieldKind",
    "GraphSchema",
    "NodeLabelSpec",
    "OperationDefinition",
    "OperationKind",
    "PropertySpec",
    "QueryLanguage",
    "RelationshipSpec",
    "SchemaModel",
    "TypeDefinition",
    "TypeKind",
    "TypeRef",
]
