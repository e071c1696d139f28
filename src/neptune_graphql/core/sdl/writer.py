"""
SDL writer: SchemaModel -> GraphQL SDL text.

Two forms are produced from the same model:

- client schema (include_directives=False): graph-mapping directives are
  stripped, leaving the contract API clients see
- source schema (include_directives=True): graph-mapping directives are
  re-emitted exactly, so parse(serialize(model, True)) == model

Output order follows insertion order: schema block, types, Query, Mutation,
then any definitions the model keeps verbatim.
"""

from __future__ import annotations

import logging

from graphql import print_ast
from graphql.language import StringValueNode

from ..ir import (
    ArgumentDefinition,
    DirectiveSpec,
    FieldDefinition,
    OperationDefinition,
    RelationshipSpec,
    SchemaModel,
    TypeDefinition,
    TypeKind,
)
from ..ir.schema import (
    META_EXTRA_DEFINITIONS,
    META_MUTATION_DESCRIPTION,
    META_MUTATION_DIRECTIVES,
    META_QUERY_DESCRIPTION,
    META_QUERY_DIRECTIVES,
    META_SCHEMA_DEFINITION,
)
from .directives import (
    ALIAS_DIRECTIVE,
    GRAPH_DIRECTIVES,
    GRAPH_QUERY_DIRECTIVE,
    ID_DIRECTIVE,
    RELATIONSHIP_DIRECTIVE,
    has_issues_for,
    render_flag_directive,
    render_relationship,
    render_string_directive,
    string_literal,
)

logger = logging.getLogger(__name__)

INDENT = "  "

_TYPE_KEYWORDS = {
    TypeKind.OBJECT: "type",
    TypeKind.INPUT: "input",
    TypeKind.ENUM: "enum",
    TypeKind.SCALAR: "scalar",
}


def _description(text: str | None, indent: str = "") -> list[str]:
    if text is None:
        return []
    if "\n" in text:
        block = print_ast(StringValueNode(value=text, block=True))
        return [indent + line if line else line for line in block.split("\n")]
    return [indent + string_literal(text)]


class SDLWriter:
    """Renders one SchemaModel in client or source form."""

    def __init__(self, include_directives: bool = False):
        self.include_directives = include_directives

    # ------------------------------------------------------------------
    # Directives
    # ------------------------------------------------------------------

    def _opaque(self, directives: list[DirectiveSpec]) -> list[str]:
        # A graph directive kept opaque (e.g. @id on an operation) is still
        # graph metadata and must not leak into the client schema
        return [
            d.source
            for d in directives
            if self.include_directives or d.name not in GRAPH_DIRECTIVES
        ]

    def _field_directives(self, field: FieldDefinition) -> list[str]:
        rendered: list[str] = []
        if self.include_directives:
            issues = field.directive_issues
            if field.is_identifier or has_issues_for(ID_DIRECTIVE, issues):
                rendered.append(render_flag_directive(ID_DIRECTIVE, issues))
            alias = render_string_directive(
                ALIAS_DIRECTIVE, "property", field.property_name, issues
            )
            if alias:
                rendered.append(alias)
            if field.is_relationship or has_issues_for(RELATIONSHIP_DIRECTIVE, issues):
                rendered.append(
                    render_relationship(field.relationship or RelationshipSpec(), issues)
                )
        rendered.extend(self._opaque(field.directives))
        return rendered

    def _operation_directives(self, op: OperationDefinition) -> list[str]:
        rendered: list[str] = []
        if self.include_directives:
            statement = render_string_directive(
                GRAPH_QUERY_DIRECTIVE, "statement", op.graph_query, op.directive_issues
            )
            if statement:
                rendered.append(statement)
        rendered.extend(self._opaque(op.directives))
        return rendered

    def _type_directives(self, type_def: TypeDefinition) -> list[str]:
        rendered: list[str] = []
        if self.include_directives:
            alias = render_string_directive(
                ALIAS_DIRECTIVE, "property", type_def.label, type_def.directive_issues
            )
            if alias:
                rendered.append(alias)
        rendered.extend(self._opaque(type_def.directives))
        return rendered

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _argument(self, arg: ArgumentDefinition) -> str:
        parts = []
        if arg.description is not None:
            parts.append(string_literal(arg.description))
        text = f"{arg.name}: {arg.type.render()}"
        if arg.default is not None:
            text += f" = {arg.default}"
        parts.append(text)
        parts.extend(self._opaque(arg.directives))
        return " ".join(parts)

    def _arguments(self, arguments: list[ArgumentDefinition]) -> str:
        if not arguments:
            return ""
        return "(" + ", ".join(self._argument(a) for a in arguments) + ")"

    def _member(self, name: str, arguments, type_text: str, default, directives) -> str:
        line = f"{name}{self._arguments(arguments)}: {type_text}"
        if default is not None:
            line += f" = {default}"
        if directives:
            line += " " + " ".join(directives)
        return line

    def _field_lines(self, field: FieldDefinition) -> list[str]:
        lines = _description(field.description, INDENT)
        lines.append(
            INDENT
            + self._member(
                field.name,
                field.arguments,
                field.type.render(),
                field.default,
                self._field_directives(field),
            )
        )
        return lines

    def _operation_lines(self, op: OperationDefinition) -> list[str]:
        lines = _description(op.description, INDENT)
        lines.append(
            INDENT
            + self._member(
                op.name, op.arguments, op.return_type.render(), None, self._operation_directives(op)
            )
        )
        return lines

    @staticmethod
    def _block(header: str, body: list[str]) -> str:
        if not body:
            return header
        return "\n".join([header + " {", *body, "}"])

    def type_definition(self, type_def: TypeDefinition) -> str:
        header = f"{_TYPE_KEYWORDS[type_def.kind]} {type_def.name}"
        if type_def.interfaces:
            header += " implements " + " & ".join(type_def.interfaces)
        directives = self._type_directives(type_def)
        if directives:
            header += " " + " ".join(directives)

        body: list[str] = []
        if type_def.kind == TypeKind.ENUM:
            for value in type_def.enum_values:
                body.extend(_description(value.description, INDENT))
                body.append(" ".join([INDENT + value.name, *self._opaque(value.directives)]))
        elif type_def.kind in (TypeKind.OBJECT, TypeKind.INPUT):
            for field in type_def.fields:
                body.extend(self._field_lines(field))

        lines = _description(type_def.description)
        lines.append(self._block(header, body))
        return "\n".join(lines)

    def root_type(
        self,
        name: str,
        operations: list[OperationDefinition],
        directives: list[str],
        description: str | None,
    ) -> str | None:
        if not operations and not directives and description is None:
            return None
        header = f"type {name}"
        if directives:
            header += " " + " ".join(directives)
        body: list[str] = []
        for op in operations:
            body.extend(self._operation_lines(op))
        lines = _description(description)
        lines.append(self._block(header, body))
        return "\n".join(lines)

    def schema(self, model: SchemaModel) -> str:
        metadata = model.metadata
        blocks: list[str] = []
        if META_SCHEMA_DEFINITION in metadata:
            blocks.append(metadata[META_SCHEMA_DEFINITION])
        blocks.extend(self.type_definition(t) for t in model.types)

        query_directives = list(metadata.get(META_QUERY_DIRECTIVES, []))
        mutation_directives = list(metadata.get(META_MUTATION_DIRECTIVES, []))
        for block in (
            self.root_type(
                model.query_type_name,
                model.queries,
                query_directives,
                metadata.get(META_QUERY_DESCRIPTION),
            ),
            self.root_type(
                model.mutation_type_name,
                model.mutations,
                mutation_directives,
                metadata.get(META_MUTATION_DESCRIPTION),
            ),
        ):
            if block is not None:
                blocks.append(block)

        blocks.extend(metadata.get(META_EXTRA_DEFINITIONS, []))
        return "\n\n".join(blocks) + "\n"


def serialize(model: SchemaModel, include_directives: bool = False) -> str:
    """
    Render a SchemaModel as SDL.

    Args:
        model: Model to render
        include_directives: True for the source schema (graph-mapping
            directives kept), False for the client schema

    Returns:
        SDL text ending with a newline
    """
    text = SDLWriter(include_directives).schema(model)
    logger.debug(
        f"Serialized {len(model.types)} types "
        f"({'source' if include_directives else 'client'} schema, {len(text)} chars)"
    )
    return text
