"""Tests for the schema validator / normalizer."""

from __future__ import annotations

import pytest

from neptune_graphql.core import DiagnosticCode, Severity, parse, serialize, validate
from neptune_graphql.core.errors import (
    DuplicateFieldError,
    DuplicateNameError,
    SchemaValidationError,
    UnresolvedReferenceError,
)
from neptune_graphql.core.ir import (
    ArgumentDefinition,
    Cardinality,
    EdgeDirection,
    FieldDefinition,
    FieldKind,
    OperationDefinition,
    OperationKind,
    SchemaModel,
    TypeDefinition,
    TypeKind,
    TypeRef,
)


def _codes(diagnostics) -> list[DiagnosticCode]:
    return [d.code for d in diagnostics]


# =============================================================================
# Fatal defects
# =============================================================================


class TestFatal:
    def test_unresolved_relationship_target(self) -> None:
        model = parse("type Person {\n  id: ID! @id\n  worksAt: Company @relationship\n}\n")
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            validate(model)
        assert exc_info.value.diagnostic.code == DiagnosticCode.UNRESOLVED_REFERENCE
        assert exc_info.value.diagnostic.severity == Severity.FATAL
        assert exc_info.value.diagnostic.path == "Person.worksAt"

    def test_unresolved_argument_type(self) -> None:
        model = parse("type Query {\n  people(filter: PersonFilter): String\n}\n")
        with pytest.raises(UnresolvedReferenceError):
            validate(model)

    def test_duplicate_field(self) -> None:
        model = SchemaModel(
            types=[
                TypeDefinition(
                    name="Person",
                    fields=[
                        FieldDefinition(name="name", type=TypeRef(name="String")),
                        FieldDefinition(name="name", type=TypeRef(name="String")),
                    ],
                )
            ]
        )
        with pytest.raises(DuplicateFieldError) as exc_info:
            validate(model)
        assert exc_info.value.diagnostic.code == DiagnosticCode.DUPLICATE_FIELD

    def test_duplicate_type(self) -> None:
        model = SchemaModel(types=[TypeDefinition(name="A"), TypeDefinition(name="A")])
        with pytest.raises(DuplicateNameError):
            validate(model)

    def test_duplicate_operation(self) -> None:
        ping = OperationDefinition(
            name="ping", kind=OperationKind.QUERY, return_type=TypeRef(name="String")
        )
        model = SchemaModel(queries=[ping, ping.model_copy()])
        with pytest.raises(DuplicateNameError):
            validate(model)

    def test_multiple_identifiers(self) -> None:
        model = parse("type Person {\n  id: ID! @id\n  code: String @id\n}\n")
        with pytest.raises(SchemaValidationError) as exc_info:
            validate(model)
        assert exc_info.value.diagnostic.code == DiagnosticCode.MULTIPLE_IDENTIFIERS

    def test_extra_definitions_resolve(self) -> None:
        model = parse(
            "interface Node {\n  id: ID!\n}\n\n"
            "type Person {\n  id: ID! @id\n  friend: Node\n}\n"
        )
        _, warnings = validate(model)
        assert warnings == []


# =============================================================================
# Repairs
# =============================================================================


class TestRepairs:
    def test_missing_identifier_synthesised(self) -> None:
        model = parse("type Person {\n  name: String\n}\n")
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.MISSING_IDENTIFIER]
        person = model.get_type("Person")
        assert person.fields[0].name == "id"
        assert person.fields[0].type.render() == "ID!"
        assert person.fields[0].is_identifier

    def test_conventional_identifier_marked_silently(self) -> None:
        model, warnings = validate(parse("type Person {\n  id: ID\n  name: String\n}\n"))
        assert warnings == []
        assert model.get_field("Person", "id").is_identifier

    def test_reserved_field_id_renamed(self) -> None:
        model = parse("type Person {\n  key: ID! @id\n  id: String\n}\n")
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.RESERVED_NAME]
        renamed = model.get_field("Person", "id_")
        assert renamed is not None
        assert renamed.property_name == "id"

    def test_builtin_scalar_name_renamed(self) -> None:
        model = parse(
            "type String {\n  id: ID! @id\n}\n\n"
            "type Person {\n  id: ID! @id\n  s: String @relationship\n}\n"
        )
        model, warnings = validate(model)
        assert DiagnosticCode.RESERVED_NAME in _codes(warnings)
        renamed = model.get_type("String_")
        assert renamed is not None
        assert renamed.label == "String"
        assert model.get_field("Person", "s").type.name == "String_"

    def test_page_options_collision(self) -> None:
        model = parse(
            "type PageOptions {\n  id: ID! @id\n}\n\n"
            "type Query {\n  things(options: PageOptions): [PageOptions_]\n}\n"
            "type PageOptions_ {\n  id: ID! @id\n}\n"
        )
        model, warnings = validate(model)
        assert DiagnosticCode.RESERVED_NAME in _codes(warnings)
        page = model.get_type("PageOptions")
        assert page is not None and page.kind == TypeKind.INPUT
        assert model.get_type("PageOptions__") is not None

    def test_directive_argument_repaired(self) -> None:
        model = parse(
            "type A {\n  id: ID! @id\n  b: B @relationship(direction: SIDEWAYS)\n}\n"
            "type B {\n  id: ID! @id\n}\n"
        )
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH]
        field = model.get_field("A", "b")
        assert field.directive_issues == {}
        assert field.relationship.direction == EdgeDirection.OUT

    def test_cardinality_contradicting_list(self) -> None:
        model = parse(
            "type A {\n  id: ID! @id\n  bs: [B] @relationship(cardinality: ONE)\n}\n"
            "type B {\n  id: ID! @id\n}\n"
        )
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH]
        assert model.get_field("A", "bs").relationship.cardinality == Cardinality.MANY

    def test_relationship_on_scalar_removed(self) -> None:
        model = parse("type A {\n  id: ID! @id\n  name: String @relationship\n}\n")
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH]
        assert model.get_field("A", "name").kind == FieldKind.SCALAR

    def test_implicit_relationship(self) -> None:
        model = parse(
            "type A {\n  id: ID! @id\n  b: B\n}\n"
            "type B {\n  id: ID! @id\n}\n"
        )
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.IMPLICIT_RELATIONSHIP]
        field = model.get_field("A", "b")
        assert field.kind == FieldKind.RELATIONSHIP
        assert field.relationship.edge_label == "b"
        assert field.relationship.direction == EdgeDirection.OUT
        assert field.relationship.cardinality == Cardinality.ONE

    def test_omitted_relationship_arguments_filled_silently(self) -> None:
        model = parse(
            "type A {\n  id: ID! @id\n  bs: [B] @relationship\n}\n"
            "type B {\n  id: ID! @id\n}\n"
        )
        model, warnings = validate(model)
        assert warnings == []
        assert model.get_field("A", "bs").relationship.cardinality == Cardinality.MANY

    def test_type_named_like_root_renamed(self) -> None:
        identifier = FieldDefinition(
            name="id", type=TypeRef(name="ID", nullable=False), is_identifier=True
        )
        model = SchemaModel(
            types=[TypeDefinition(name="Query", kind=TypeKind.OBJECT, fields=[identifier])],
            queries=[
                OperationDefinition(
                    name="query",
                    kind=OperationKind.QUERY,
                    arguments=[
                        ArgumentDefinition(name="id", type=TypeRef(name="ID", nullable=False))
                    ],
                    return_type=TypeRef(name="Query"),
                )
            ],
        )
        model, warnings = validate(model)
        assert _codes(warnings) == [DiagnosticCode.RESERVED_NAME]
        renamed = model.get_type("Query_")
        assert renamed.label == "Query"
        assert model.queries[0].return_type.name == "Query_"
        assert parse(serialize(model, include_directives=True)) == model
        assert validate(model)[1] == []


# =============================================================================
# Strict mode and fixed point
# =============================================================================


class TestStrictAndIdempotence:
    @pytest.mark.parametrize(
        "sdl, code",
        [
            ("type Person {\n  name: String\n}\n", DiagnosticCode.MISSING_IDENTIFIER),
            (
                "type A {\n  id: ID! @id\n  b: B\n}\ntype B {\n  id: ID! @id\n}\n",
                DiagnosticCode.IMPLICIT_RELATIONSHIP,
            ),
            (
                "type Person {\n  key: ID! @id\n  id: String\n}\n",
                DiagnosticCode.RESERVED_NAME,
            ),
        ],
    )
    def test_strict_escalates(self, sdl: str, code: DiagnosticCode) -> None:
        with pytest.raises(SchemaValidationError) as exc_info:
            validate(parse(sdl), strict=True)
        assert exc_info.value.diagnostic.code == code
        assert exc_info.value.diagnostic.severity == Severity.FATAL

    def test_inferred_model_is_clean(self, inferred_model: SchemaModel) -> None:
        _, warnings = validate(inferred_model, strict=True)
        assert warnings == []

    def test_second_run_adds_no_warnings(self) -> None:
        model = parse(
            "type String {\n  id: ID! @id\n}\n\n"
            "type A {\n  key: ID\n  id: String\n  b: B\n"
            "  bs: [B] @relationship(cardinality: ONE, direction: SIDEWAYS)\n}\n"
            "type B {\n  name: String\n}\n"
        )
        model, first = validate(model)
        assert first
        model, second = validate(model)
        assert second == []

    def test_returns_same_model(self, inferred_model: SchemaModel) -> None:
        model, _ = validate(inferred_model)
        assert model is inferred_model
