"""
SDL parser: GraphQL SDL text -> SchemaModel.

Tokenising and grammar are handled by graphql-core. This module walks the
resulting document and maps it onto the IR:

- object, input, enum and scalar definitions become TypeDefinitions
- fields of the Query and Mutation root types become OperationDefinitions
- graph-mapping directives are interpreted, other directives kept verbatim
- schema blocks, interfaces, unions, extensions and foreign directive
  definitions are kept verbatim in the model metadata
"""

from __future__ import annotations

import logging

from graphql import GraphQLSyntaxError, print_ast
from graphql import parse as parse_document
from graphql import parse_type as parse_type_node
from graphql.language import (
    DirectiveDefinitionNode,
    DirectiveNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    ExecutableDefinitionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    Node,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    TypeNode,
    get_location,
)

from ..errors import DuplicateNameError, SchemaSyntaxError, make_syntax_error
from ..ir import (
    ArgumentDefinition,
    DirectiveSpec,
    EnumValueDefinition,
    FieldDefinition,
    FieldKind,
    OperationDefinition,
    OperationKind,
    SchemaModel,
    TypeDefinition,
    TypeKind,
    TypeRef,
)
from ..ir.schema import (
    META_EXTRA_DEFINITIONS,
    META_MUTATION_DESCRIPTION,
    META_MUTATION_DIRECTIVES,
    META_MUTATION_TYPE,
    META_QUERY_DESCRIPTION,
    META_QUERY_DIRECTIVES,
    META_QUERY_TYPE,
    META_SCHEMA_DEFINITION,
)
from .directives import (
    ALIAS_DIRECTIVE,
    GRAPH_DIRECTIVES,
    GRAPH_QUERY_DIRECTIVE,
    ID_DIRECTIVE,
    RELATIONSHIP_DIRECTIVE,
    issue_key,
    read_relationship,
    read_string_argument,
)

logger = logging.getLogger(__name__)

SNIPPET_TYPE = "ChangeSnippet"


class _DocumentReader:
    """Maps one parsed graphql-core document onto a SchemaModel."""

    def __init__(
        self,
        text: str,
        source: str | None = None,
        line_offset: int = 0,
        user_text: str | None = None,
    ):
        self.text = text
        self.source = source
        self.line_offset = line_offset
        self.user_text = text if user_text is None else user_text

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def error_at(self, message: str, node: Node | None) -> SchemaSyntaxError:
        line, column = 1, 1
        if node is not None and node.loc is not None:
            location = get_location(node.loc.source, node.loc.start)
            line, column = location.line, location.column
        return self.error(message, line, column)

    def error(self, message: str, line: int, column: int) -> SchemaSyntaxError:
        line = max(1, line - self.line_offset)
        return make_syntax_error(message, line, column, text=self.user_text, source=self.source)

    def parse(self) -> DocumentNode:
        try:
            return parse_document(self.text)
        except GraphQLSyntaxError as e:
            line, column = (e.locations[0].line, e.locations[0].column) if e.locations else (1, 1)
            raise self.error(e.message, line, column) from e

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    def type_ref(self, node: TypeNode) -> TypeRef:
        nullable = True
        if isinstance(node, NonNullTypeNode):
            nullable = False
            node = node.type
        if isinstance(node, ListTypeNode):
            inner = node.type
            item_nullable = True
            if isinstance(inner, NonNullTypeNode):
                item_nullable = False
                inner = inner.type
            if not isinstance(inner, NamedTypeNode):
                raise self.error_at("Nested list types are not supported", inner)
            return TypeRef(
                name=inner.name.value,
                nullable=nullable,
                is_list=True,
                item_nullable=item_nullable,
            )
        assert isinstance(node, NamedTypeNode)
        return TypeRef(name=node.name.value, nullable=nullable)

    @staticmethod
    def opaque(node: DirectiveNode) -> DirectiveSpec:
        return DirectiveSpec(name=node.name.value, source=print_ast(node))

    @staticmethod
    def description(node) -> str | None:
        return node.description.value if node.description is not None else None

    @staticmethod
    def directive_arguments(node: DirectiveNode) -> dict:
        return {arg.name.value: arg.value for arg in node.arguments or ()}

    def argument(self, node: InputValueDefinitionNode) -> ArgumentDefinition:
        return ArgumentDefinition(
            name=node.name.value,
            type=self.type_ref(node.type),
            default=print_ast(node.default_value) if node.default_value is not None else None,
            description=self.description(node),
            directives=[self.opaque(d) for d in node.directives or ()],
        )

    def field(self, node: FieldDefinitionNode | InputValueDefinitionNode) -> FieldDefinition:
        """Build a field, interpreting @id, @alias and @relationship."""
        field = FieldDefinition(
            name=node.name.value,
            type=self.type_ref(node.type),
            description=self.description(node),
        )
        if isinstance(node, FieldDefinitionNode):
            field.arguments = [self.argument(arg) for arg in node.arguments or ()]
        elif node.default_value is not None:
            field.default = print_ast(node.default_value)

        for directive in node.directives or ():
            name = directive.name.value
            arguments = self.directive_arguments(directive)
            if name == ID_DIRECTIVE:
                field.is_identifier = True
                for arg_name, value in arguments.items():
                    field.directive_issues[issue_key(ID_DIRECTIVE, arg_name)] = print_ast(value)
            elif name == ALIAS_DIRECTIVE:
                field.property_name, issues = read_string_argument(
                    ALIAS_DIRECTIVE, "property", arguments
                )
                field.directive_issues.update(issues)
            elif name == RELATIONSHIP_DIRECTIVE:
                field.kind = FieldKind.RELATIONSHIP
                field.relationship, issues = read_relationship(arguments)
                field.directive_issues.update(issues)
            else:
                field.directives.append(self.opaque(directive))
        return field

    def operation(self, node: FieldDefinitionNode, kind: OperationKind) -> OperationDefinition:
        """Build a root operation, interpreting @graphQuery."""
        op = OperationDefinition(
            name=node.name.value,
            kind=kind,
            arguments=[self.argument(arg) for arg in node.arguments or ()],
            return_type=self.type_ref(node.type),
            description=self.description(node),
        )
        for directive in node.directives or ():
            if directive.name.value == GRAPH_QUERY_DIRECTIVE:
                op.graph_query, issues = read_string_argument(
                    GRAPH_QUERY_DIRECTIVE, "statement", self.directive_arguments(directive)
                )
                op.directive_issues.update(issues)
            else:
                op.directives.append(self.opaque(directive))
        return op

    def type_definition(self, node) -> TypeDefinition:
        """Build an object, input, enum or scalar type."""
        type_def = TypeDefinition(name=node.name.value, description=self.description(node))

        for directive in node.directives or ():
            if directive.name.value == ALIAS_DIRECTIVE:
                type_def.label, issues = read_string_argument(
                    ALIAS_DIRECTIVE, "property", self.directive_arguments(directive)
                )
                type_def.directive_issues.update(issues)
            else:
                type_def.directives.append(self.opaque(directive))

        if isinstance(node, ObjectTypeDefinitionNode):
            type_def.kind = TypeKind.OBJECT
            type_def.interfaces = [i.name.value for i in node.interfaces or ()]
            type_def.fields = [self.field(f) for f in node.fields or ()]
        elif isinstance(node, InputObjectTypeDefinitionNode):
            type_def.kind = TypeKind.INPUT
            type_def.fields = [self.field(f) for f in node.fields or ()]
        elif isinstance(node, EnumTypeDefinitionNode):
            type_def.kind = TypeKind.ENUM
            type_def.enum_values = [
                EnumValueDefinition(
                    name=v.name.value,
                    description=self.description(v),
                    directives=[self.opaque(d) for d in v.directives or ()],
                )
                for v in node.values or ()
            ]
        else:
            type_def.kind = TypeKind.SCALAR
        return type_def

    # ------------------------------------------------------------------
    # Whole documents
    # ------------------------------------------------------------------

    def schema_model(self, document: DocumentNode) -> SchemaModel:
        model = SchemaModel()
        query_type, mutation_type = "Query", "Mutation"

        for definition in document.definitions:
            if isinstance(definition, SchemaDefinitionNode):
                model.metadata[META_SCHEMA_DEFINITION] = print_ast(definition)
                for op_type in definition.operation_types:
                    if op_type.operation == OperationType.QUERY:
                        query_type = op_type.type.name.value
                        model.metadata[META_QUERY_TYPE] = query_type
                    elif op_type.operation == OperationType.MUTATION:
                        mutation_type = op_type.type.name.value
                        model.metadata[META_MUTATION_TYPE] = mutation_type

        roots = {
            query_type: (OperationKind.QUERY, META_QUERY_DIRECTIVES, META_QUERY_DESCRIPTION),
            mutation_type: (
                OperationKind.MUTATION,
                META_MUTATION_DIRECTIVES,
                META_MUTATION_DESCRIPTION,
            ),
        }
        seen_roots: set[str] = set()
        extras: list[str] = []

        for definition in document.definitions:
            if isinstance(definition, ExecutableDefinitionNode):
                raise self.error_at(
                    "Executable definitions are not allowed in a schema document", definition
                )
            if isinstance(definition, SchemaDefinitionNode):
                continue

            if isinstance(definition, ObjectTypeDefinitionNode) and (
                definition.name.value in roots
            ):
                name = definition.name.value
                if name in seen_roots:
                    raise DuplicateNameError(f"Type '{name}' is already defined")
                seen_roots.add(name)
                kind, directives_key, description_key = roots[name]
                if definition.directives:
                    model.metadata[directives_key] = [
                        print_ast(d) for d in definition.directives
                    ]
                if definition.description is not None:
                    model.metadata[description_key] = definition.description.value
                for field_node in definition.fields or ():
                    operations = model.queries if kind == OperationKind.QUERY else model.mutations
                    operations.append(self.operation(field_node, kind))
                continue

            if isinstance(
                definition,
                (
                    ObjectTypeDefinitionNode,
                    InputObjectTypeDefinitionNode,
                    EnumTypeDefinitionNode,
                    ScalarTypeDefinitionNode,
                ),
            ):
                model.add_type(self.type_definition(definition))
            elif isinstance(definition, DirectiveDefinitionNode) and (
                definition.name.value in GRAPH_DIRECTIVES
            ):
                logger.debug(f"Dropping definition of graph directive @{definition.name.value}")
            else:
                extras.append(print_ast(definition))

        if extras:
            model.metadata[META_EXTRA_DEFINITIONS] = extras
        return model


def parse(sdl_text: str, source: str | None = None) -> SchemaModel:
    """
    Parse GraphQL SDL into a SchemaModel.

    Args:
        sdl_text: SDL text, optionally carrying graph-mapping directives
        source: Optional input name used in error locations

    Returns:
        The parsed model, unvalidated

    Raises:
        SchemaSyntaxError: If the text is not valid SDL
        DuplicateNameError: If a type is defined twice
    """
    reader = _DocumentReader(sdl_text, source)
    model = reader.schema_model(reader.parse())
    logger.info(
        f"Parsed SDL: {len(model.types)} types, {len(model.queries)} queries, "
        f"{len(model.mutations)} mutations"
    )
    return model


def parse_type_ref(text: str, source: str | None = None) -> TypeRef:
    """Parse an SDL type reference such as ``[Person!]!``."""
    reader = _DocumentReader(text, source)
    try:
        node = parse_type_node(text)
    except GraphQLSyntaxError as e:
        line, column = (e.locations[0].line, e.locations[0].column) if e.locations else (1, 1)
        raise reader.error(e.message, line, column) from e
    return reader.type_ref(node)


def _single_field_node(
    text: str, source: str | None
) -> tuple[_DocumentReader, FieldDefinitionNode]:
    # Wrap the field in a throwaway type; error lines are shifted back by one
    wrapped = f"type {SNIPPET_TYPE} {{\n{text}\n}}"
    reader = _DocumentReader(wrapped, source, line_offset=1, user_text=text)
    document = reader.parse()
    node = document.definitions[0]
    fields = (node.fields or ()) if isinstance(node, ObjectTypeDefinitionNode) else ()
    if len(document.definitions) != 1 or len(fields) != 1:
        raise reader.error("Expected exactly one field definition", 2, 1)
    return reader, fields[0]


def parse_field_definition(text: str, source: str | None = None) -> FieldDefinition:
    """Parse a single SDL field definition, e.g. ``age: Int @alias(property: "AGE")``."""
    reader, node = _single_field_node(text, source)
    return reader.field(node)


def parse_operation_definition(
    text: str, kind: OperationKind, source: str | None = None
) -> OperationDefinition:
    """Parse a single Query or Mutation field definition."""
    reader, node = _single_field_node(text, source)
    return reader.operation(node, kind)


def parse_type_definition(text: str, source: str | None = None) -> TypeDefinition:
    """
    Parse a single type definition.

    Raises:
        SchemaSyntaxError: If the text is invalid or does not hold exactly
            one object, input, enum or scalar definition
    """
    reader = _DocumentReader(text, source)
    document = reader.parse()
    definitions = document.definitions
    supported = (
        ObjectTypeDefinitionNode,
        InputObjectTypeDefinitionNode,
        EnumTypeDefinitionNode,
        ScalarTypeDefinitionNode,
    )
    if len(definitions) != 1 or not isinstance(definitions[0], supported):
        node = definitions[1] if len(definitions) > 1 else definitions[0]
        raise reader.error_at("Expected exactly one type definition", node)
    return reader.type_definition(definitions[0])
