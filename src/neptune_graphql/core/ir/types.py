"""
Named type definitions for the schema IR.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..errors import DuplicateNameError
from .enums import TypeKind
from .fields import DirectiveSpec, FieldDefinition


class EnumValueDefinition(BaseModel):
    """A single value of an enum type."""

    name: str
    description: str | None = None
    directives: list[DirectiveSpec] = Field(default_factory=list)


class TypeDefinition(BaseModel):
    """
    A named type: object, input object, enum or custom scalar.

    Attributes:
        name: GraphQL type name
        kind: OBJECT, INPUT, ENUM or SCALAR
        fields: Ordered fields (OBJECT and INPUT)
        enum_values: Ordered values (ENUM)
        label: Graph node label when it differs from the name (@alias)
        directives: Unrecognised directives, kept verbatim
        directive_issues: Invalid @alias arguments, see FieldDefinition
    """

    name: str
    kind: TypeKind = TypeKind.OBJECT
    fields: list[FieldDefinition] = Field(default_factory=list)
    enum_values: list[EnumValueDefinition] = Field(default_factory=list)
    label: str | None = None
    interfaces: list[str] = Field(default_factory=list)
    description: str | None = None
    directives: list[DirectiveSpec] = Field(default_factory=list)
    directive_issues: dict[str, str] = Field(default_factory=dict)

    @property
    def graph_label(self) -> str:
        """Graph node label backing this type."""
        return self.label or self.name

    @property
    def identifier(self) -> FieldDefinition | None:
        """The identifier field, if exactly one is marked."""
        ids = self.identifier_fields
        return ids[0] if len(ids) == 1 else None

    @property
    def identifier_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if f.is_identifier]

    @property
    def scalar_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if not f.is_relationship]

    @property
    def relationship_fields(self) -> list[FieldDefinition]:
        return [f for f in self.fields if f.is_relationship]

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def add_field(self, field: FieldDefinition, position: int | None = None) -> FieldDefinition:
        """
        Add a field, optionally at a given position.

        Raises:
            DuplicateNameError: If the type already has a field with that name
        """
        if self.get_field(field.name) is not None:
            raise DuplicateNameError(f"Type '{self.name}' already has a field '{field.name}'")
        if position is None:
            self.fields.append(field)
        else:
            self.fields.insert(position, field)
        return field

    def remove_field(self, name: str) -> FieldDefinition | None:
        """Remove and return a field, or None if absent."""
        for i, field in enumerate(self.fields):
            if field.name == name:
                return self.fields.pop(i)
        return None
