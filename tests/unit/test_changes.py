"""Tests for declarative schema changes."""

from __future__ import annotations

import json

import pytest

from neptune_graphql.core import apply_changes, parse, parse_change_script, serialize
from neptune_graphql.core.changes import AddField, RenameType
from neptune_graphql.core.errors import (
    ChangeTargetNotFoundError,
    DuplicateNameError,
    SchemaSyntaxError,
)
from neptune_graphql.core.ir import Cardinality, EdgeDirection, FieldKind, SchemaModel


@pytest.fixture
def airline(airline_sdl: str) -> SchemaModel:
    return parse(airline_sdl)


# =============================================================================
# Individual actions
# =============================================================================


class TestActions:
    def test_add_type(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [
                {
                    "action": "addType",
                    "definition": "type Region {\n  id: ID! @id\n  name: String\n}",
                }
            ],
        )
        region = airline.get_type("Region")
        assert [f.name for f in region.fields] == ["id", "name"]

    def test_remove_type(self, airline: SchemaModel) -> None:
        apply_changes(airline, [{"action": "removeType", "path": "Country"}])
        assert airline.get_type("Country") is None
        # The dangling reference is left for the validator
        assert airline.get_field("Airport", "country").type.name == "Country"

    def test_rename_type(self, airline: SchemaModel) -> None:
        apply_changes(airline, [{"action": "renameType", "path": "Airport", "name": "Station"}])
        station = airline.get_type("Station")
        assert station.label == "airport"
        assert station.get_field("routes").type.name == "Station"
        assert airline.get_operation("airports").return_type.name == "Station"

    def test_add_field(self, airline: SchemaModel) -> None:
        apply_changes(
            airline, [{"action": "addField", "path": "Airport", "definition": "elevation: Int"}]
        )
        assert airline.get_field("Airport", "elevation").type.render() == "Int"

    def test_add_operation(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [{"action": "addField", "path": "Query", "definition": "country(id: ID!): Country"}],
        )
        op = airline.get_operation("country")
        assert op is not None
        assert [a.name for a in op.arguments] == ["id"]

    def test_remove_field_and_operation(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [
                {"action": "removeField", "path": "Airport.city"},
                {"action": "removeField", "path": "Query.topRoutes"},
            ],
        )
        assert airline.get_field("Airport", "city") is None
        assert airline.get_operation("topRoutes") is None

    def test_rename_field_keeps_property(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [
                {"action": "renameField", "path": "Airport.code", "name": "iata"},
                {"action": "renameField", "path": "Airport.city", "name": "town"},
            ],
        )
        assert airline.get_field("Airport", "iata").property_name == "code"
        assert airline.get_field("Airport", "town").property_name == "city_name"

    def test_rename_field_keeps_edge(self, airline: SchemaModel) -> None:
        apply_changes(airline, [{"action": "renameField", "path": "Airport.routes", "name": "to"}])
        assert airline.get_field("Airport", "to").relationship.edge_label == "route"

    def test_rename_field_to_existing(self, airline: SchemaModel) -> None:
        with pytest.raises(DuplicateNameError):
            apply_changes(
                airline, [{"action": "renameField", "path": "Airport.code", "name": "city"}]
            )

    def test_rename_operation(self, airline: SchemaModel) -> None:
        apply_changes(
            airline, [{"action": "renameField", "path": "Query.airport", "name": "getAirport"}]
        )
        assert airline.get_operation("getAirport") is not None
        assert airline.get_operation("airport") is None

    def test_change_field_type(self, airline: SchemaModel) -> None:
        apply_changes(
            airline, [{"action": "changeFieldType", "path": "Airport.country", "type": "[Country]"}]
        )
        country = airline.get_field("Airport", "country")
        assert country.type.is_list
        assert country.relationship.cardinality == Cardinality.MANY

    def test_set_relationship(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [
                {"action": "addField", "path": "Country", "definition": "hub: Airport"},
                {
                    "action": "setRelationship",
                    "path": "Country.hub",
                    "edgeType": "hub_of",
                    "direction": "IN",
                },
            ],
        )
        hub = airline.get_field("Country", "hub")
        assert hub.kind == FieldKind.RELATIONSHIP
        assert hub.relationship.edge_label == "hub_of"
        assert hub.relationship.direction == EdgeDirection.IN
        assert "@relationship(edgeType: \"hub_of\", direction: IN)" in serialize(airline)

    def test_change_objects_accepted(self, airline: SchemaModel) -> None:
        apply_changes(
            airline,
            [
                RenameType(action="renameType", path="Country", name="Nation"),
                AddField(action="addField", path="Nation", definition="code: String"),
            ],
        )
        assert airline.get_field("Nation", "code") is not None


# =============================================================================
# Scripts
# =============================================================================


class TestScripts:
    def test_parse_text(self) -> None:
        changes = parse_change_script(
            json.dumps([{"action": "renameType", "path": "A", "name": "B"}])
        )
        assert isinstance(changes[0], RenameType)

    def test_json_error_location(self) -> None:
        text = '[\n  {"action": "removeType", "path": "A"},\n  {"action" "x"}\n]'
        with pytest.raises(SchemaSyntaxError) as exc_info:
            parse_change_script(text)
        assert exc_info.value.line == 3
        assert exc_info.value.column == 13

    def test_unknown_action(self) -> None:
        with pytest.raises(SchemaSyntaxError):
            parse_change_script('[{"action": "dropEverything"}]')

    def test_unexpected_key(self) -> None:
        with pytest.raises(SchemaSyntaxError):
            parse_change_script('[{"action": "removeType", "path": "A", "force": true}]')

    def test_definition_syntax_error(self, airline: SchemaModel) -> None:
        with pytest.raises(SchemaSyntaxError):
            apply_changes(
                airline, [{"action": "addField", "path": "Airport", "definition": "x Int"}]
            )


class TestAppliedPrefix:
    def test_failure_keeps_earlier_operations(self, airline: SchemaModel) -> None:
        script = [
            {"action": "renameType", "path": "Airport", "name": "Station"},
            {"action": "addField", "path": "Station", "definition": "elevation: Int"},
            {"action": "removeField", "path": "Station.missing"},
            {"action": "removeType", "path": "Country"},
        ]
        expected = apply_changes(airline.model_copy(deep=True), script[:2])
        with pytest.raises(ChangeTargetNotFoundError) as exc_info:
            apply_changes(airline, script)

        assert exc_info.value.index == 2
        assert exc_info.value.path == "Station.missing"
        assert airline == expected
        # Nothing after the failing operation ran
        assert airline.get_type("Country") is not None

    def test_missing_type(self, airline: SchemaModel) -> None:
        with pytest.raises(ChangeTargetNotFoundError) as exc_info:
            apply_changes(airline, [{"action": "renameType", "path": "Nope", "name": "Other"}])
        assert exc_info.value.index == 0

    def test_bad_path(self, airline: SchemaModel) -> None:
        with pytest.raises(ChangeTargetNotFoundError):
            apply_changes(airline, [{"action": "removeField", "path": "Airport"}])

    def test_empty_script(self, airline: SchemaModel) -> None:
        before = airline.model_copy(deep=True)
        assert apply_changes(airline, "[]") == before
