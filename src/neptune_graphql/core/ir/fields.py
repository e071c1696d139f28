"""
Field-level definitions for the schema IR.

This module contains type references, directives, relationship mappings,
arguments and fields.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .enums import Cardinality, EdgeDirection, FieldKind


class TypeRef(BaseModel):
    """
    A reference to a named type with nullability and list wrapping.

    Examples:
        - String: TypeRef(name="String")
        - ID!: TypeRef(name="ID", nullable=False)
        - [Person]: TypeRef(name="Person", is_list=True)
        - [Person!]!: TypeRef(name="Person", nullable=False, is_list=True, item_nullable=False)
    """

    name: str
    nullable: bool = True
    is_list: bool = False
    item_nullable: bool = True  # only meaningful for lists

    model_config = ConfigDict(frozen=True)

    def render(self) -> str:
        """Render the reference as SDL type syntax."""
        text = self.name
        if self.is_list:
            if not self.item_nullable:
                text += "!"
            text = f"[{text}]"
        if not self.nullable:
            text += "!"
        return text

    def __str__(self) -> str:
        return self.render()


class DirectiveSpec(BaseModel):
    """
    A directive the codec does not interpret, kept verbatim.

    Attributes:
        name: Directive name without the @
        source: Directive as written, e.g. '@deprecated(reason: "old")'
    """

    name: str
    source: str

    model_config = ConfigDict(frozen=True)


class RelationshipSpec(BaseModel):
    """
    Graph mapping of a relationship field (@relationship).

    Missing arguments are None until the validator fills in defaults.
    """

    edge_label: str | None = None
    direction: EdgeDirection | None = None
    cardinality: Cardinality | None = None


class ArgumentDefinition(BaseModel):
    """
    An argument of a field or operation.

    Attributes:
        name: Argument name
        type: Argument type reference
        default: Default value literal as written in SDL
    """

    name: str
    type: TypeRef
    default: str | None = None
    description: str | None = None
    directives: list[DirectiveSpec] = Field(default_factory=list)


class FieldDefinition(BaseModel):
    """
    A field of an object or input type.

    Attributes:
        name: GraphQL field name
        type: Field type reference
        kind: SCALAR (stored property) or RELATIONSHIP (edge traversal)
        relationship: Edge mapping, set for relationship fields
        is_identifier: True for the field mapped to the graph element id
        property_name: Graph property name when it differs from the field name
        arguments: Filter/pagination argument descriptors
        default: Default value literal (input fields)
        directive_issues: Recognised directive arguments that had an invalid
            value, keyed "directive.argument", holding the literal as written
    """

    name: str
    type: TypeRef
    kind: FieldKind = FieldKind.SCALAR
    relationship: RelationshipSpec | None = None
    is_identifier: bool = False
    property_name: str | None = None
    arguments: list[ArgumentDefinition] = Field(default_factory=list)
    default: str | None = None
    description: str | None = None
    directives: list[DirectiveSpec] = Field(default_factory=list)
    directive_issues: dict[str, str] = Field(default_factory=dict)

    @property
    def nullable(self) -> bool:
        return self.type.nullable

    @property
    def is_list(self) -> bool:
        return self.type.is_list

    @property
    def is_relationship(self) -> bool:
        return self.kind == FieldKind.RELATIONSHIP

    @property
    def target_type(self) -> str | None:
        """Name of the type a relationship field points at."""
        return self.type.name if self.is_relationship else None

    @property
    def graph_property(self) -> str:
        """Name of the graph property backing this field."""
        return self.property_name or self.name

    def get_argument(self, name: str) -> ArgumentDefinition | None:
        """Get argument by name."""
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None
