"""
The schema model: root of the IR tree.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..errors import DuplicateNameError, NotARelationshipError, UnknownTypeError
from .enums import OperationKind, TypeKind
from .fields import FieldDefinition, TypeRef
from .operations import OperationDefinition
from .types import TypeDefinition

# Metadata keys written by the SDL codec for round-trip preservation
META_QUERY_TYPE = "query_type"
META_MUTATION_TYPE = "mutation_type"
META_SCHEMA_DEFINITION = "schema_definition"
META_QUERY_DIRECTIVES = "query_directives"
META_MUTATION_DIRECTIVES = "mutation_directives"
META_QUERY_DESCRIPTION = "query_description"
META_MUTATION_DESCRIPTION = "mutation_description"
META_EXTRA_DEFINITIONS = "extra_definitions"


class SchemaModel(BaseModel):
    """
    A complete GraphQL-over-graph API definition.

    Insertion never checks cross references, so types may be referenced
    before they are added. The validator checks references later.
    """

    types: list[TypeDefinition] = Field(default_factory=list)
    queries: list[OperationDefinition] = Field(default_factory=list)
    mutations: list[OperationDefinition] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def get_type(self, name: str) -> TypeDefinition | None:
        """Get type by name."""
        for type_def in self.types:
            if type_def.name == name:
                return type_def
        return None

    def has_type(self, name: str) -> bool:
        return self.get_type(name) is not None

    def add_type(self, type_def: TypeDefinition) -> TypeDefinition:
        """
        Add a type.

        Raises:
            DuplicateNameError: If a type with the same name exists
        """
        if self.has_type(type_def.name):
            raise DuplicateNameError(f"Type '{type_def.name}' is already defined")
        self.types.append(type_def)
        return type_def

    def remove_type(self, name: str) -> TypeDefinition | None:
        """Remove and return a type, or None if absent."""
        for i, type_def in enumerate(self.types):
            if type_def.name == name:
                return self.types.pop(i)
        return None

    def rename_type(self, old_name: str, new_name: str) -> TypeDefinition:
        """
        Rename a type and rewrite every reference to it.

        Object types keep their graph label, so the rename only changes
        the GraphQL surface.

        Raises:
            UnknownTypeError: If the type does not exist
            DuplicateNameError: If the new name is taken
        """
        type_def = self.get_type(old_name)
        if type_def is None:
            raise UnknownTypeError(f"Type '{old_name}' is not defined")
        if old_name == new_name:
            return type_def
        if self.has_type(new_name):
            raise DuplicateNameError(f"Type '{new_name}' is already defined")

        if type_def.kind == TypeKind.OBJECT and type_def.label is None:
            type_def.label = old_name
        type_def.name = new_name

        def _retarget(ref: TypeRef) -> TypeRef:
            if ref.name == old_name:
                return ref.model_copy(update={"name": new_name})
            return ref

        for other in self.types:
            for field in other.fields:
                field.type = _retarget(field.type)
                for arg in field.arguments:
                    arg.type = _retarget(arg.type)
        for op in self.operations:
            op.return_type = _retarget(op.return_type)
            for arg in op.arguments:
                arg.type = _retarget(arg.type)
        return type_def

    @property
    def object_types(self) -> list[TypeDefinition]:
        return [t for t in self.types if t.kind == TypeKind.OBJECT]

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def get_field(self, type_name: str, field_name: str) -> FieldDefinition | None:
        """Get a field of a type, or None if the type or field is absent."""
        type_def = self.get_type(type_name)
        if type_def is None:
            return None
        return type_def.get_field(field_name)

    def add_field(self, type_name: str, field: FieldDefinition) -> FieldDefinition:
        """
        Add a field to an existing type.

        Raises:
            UnknownTypeError: If the type does not exist
            DuplicateNameError: If the field name is taken
        """
        type_def = self.get_type(type_name)
        if type_def is None:
            raise UnknownTypeError(f"Type '{type_name}' is not defined")
        return type_def.add_field(field)

    def resolve_relationship(self, type_name: str, field_name: str) -> TypeDefinition:
        """
        Return the target type of a relationship field.

        Raises:
            UnknownTypeError: If the declaring type, the field, or the
                target type does not exist
            NotARelationshipError: If the field is not a relationship
        """
        field = self.get_field(type_name, field_name)
        if field is None:
            raise UnknownTypeError(f"Field '{type_name}.{field_name}' is not defined")
        target_name = field.target_type
        if target_name is None:
            raise NotARelationshipError(
                f"Field '{type_name}.{field_name}' is not a relationship"
            )
        target = self.get_type(target_name)
        if target is None:
            raise UnknownTypeError(
                f"Relationship '{type_name}.{field_name}' targets unknown type '{target_name}'"
            )
        return target

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @property
    def operations(self) -> list[OperationDefinition]:
        """All operations, queries first."""
        return [*self.queries, *self.mutations]

    def _operations_of(self, kind: OperationKind) -> list[OperationDefinition]:
        return self.queries if kind == OperationKind.QUERY else self.mutations

    def get_operation(
        self, name: str, kind: OperationKind | None = None
    ) -> OperationDefinition | None:
        """Get operation by name, optionally restricted to one root type."""
        candidates = self._operations_of(kind) if kind else self.operations
        for op in candidates:
            if op.name == name:
                return op
        return None

    def add_operation(self, op: OperationDefinition) -> OperationDefinition:
        """
        Add a Query or Mutation field.

        Raises:
            DuplicateNameError: If the root type already has that name
        """
        if self.get_operation(op.name, op.kind) is not None:
            raise DuplicateNameError(
                f"{op.kind.value.title()} operation '{op.name}' is already defined"
            )
        self._operations_of(op.kind).append(op)
        return op

    def remove_operation(self, name: str, kind: OperationKind) -> OperationDefinition | None:
        """Remove and return an operation, or None if absent."""
        ops = self._operations_of(kind)
        for i, op in enumerate(ops):
            if op.name == name:
                return ops.pop(i)
        return None

    # ------------------------------------------------------------------
    # Root type names
    # ------------------------------------------------------------------

    @property
    def query_type_name(self) -> str:
        return str(self.metadata.get(META_QUERY_TYPE, "Query"))

    @property
    def mutation_type_name(self) -> str:
        return str(self.metadata.get(META_MUTATION_TYPE, "Mutation"))

    def root_kind(self, type_name: str) -> OperationKind | None:
        """Return the operation kind if ``type_name`` names a root type."""
        if type_name == self.query_type_name:
            return OperationKind.QUERY
        if type_name == self.mutation_type_name:
            return OperationKind.MUTATION
        return None
