"""Tests for resolver generation."""

from __future__ import annotations

from typing import Any

import pytest

from neptune_graphql import __version__
from neptune_graphql.codegen import (
    ResolverGenerator,
    TableCompiler,
    all_variants,
    generate,
    generate_variants,
    reachable_types,
    variant_key,
)
from neptune_graphql.config import GeneratorConfig
from neptune_graphql.core import apply_changes, parse, validate
from neptune_graphql.core.errors import UnsupportedOperationError
from neptune_graphql.core.ir import ExecutionClient, QueryLanguage, SchemaModel
from neptune_graphql.runtime.dialects import GremlinDialect, OpenCypherDialect

SOCIAL_SDL = """type Person {
  id: ID! @id
  name: String
  friends: [Person] @relationship(edgeType: "KNOWS", direction: BOTH, cardinality: MANY)
}

type Query {
  person(id: ID!): Person
}
"""


def _load(source: str) -> dict[str, Any]:
    namespace: dict[str, Any] = {}
    exec(compile(source, "resolver.py", "exec"), namespace)
    return namespace


def _validated(sdl: str) -> SchemaModel:
    model, _ = validate(parse(sdl))
    return model


# =============================================================================
# Tables
# =============================================================================


class TestTables:
    def test_reachable_types(self, validated_model: SchemaModel) -> None:
        names = [t.name for t in reachable_types(validated_model)]
        assert names == ["Person", "Company"]

    def test_unreachable_types_not_compiled(self) -> None:
        model = _validated(
            "type Person {\n  id: ID! @id\n}\n\ntype Orphan {\n  id: ID! @id\n}\n\n"
            "type Query {\n  person(id: ID!): Person\n}\n"
        )
        tables = TableCompiler(model, OpenCypherDialect()).compile()
        assert list(tables["types"]) == ["Person"]

    def test_inferred_operations(self, validated_model: SchemaModel) -> None:
        operations = TableCompiler(validated_model, OpenCypherDialect()).compile()["operations"]
        assert operations["Query.person"] == {"action": "get", "type": "Person", "id": "id"}
        assert operations["Query.persons"] == {
            "action": "list",
            "type": "Person",
            "filter": "filter",
            "options": "options",
        }
        assert operations["Mutation.createPerson"] == {
            "action": "create",
            "type": "Person",
            "input": "input",
        }
        assert operations["Mutation.updatePerson"]["action"] == "update"
        assert operations["Mutation.deletePerson"] == {
            "action": "delete",
            "type": "Person",
            "id": "id",
            "returns_node": False,
        }

    def test_source_schema_operations(self, airline_sdl: str) -> None:
        tables = TableCompiler(_validated(airline_sdl), OpenCypherDialect()).compile()
        operations = tables["operations"]
        assert operations["Query.airportByCode"] == {
            "action": "find",
            "type": "Airport",
            "many": False,
            "match": {"code": "code"},
            "options": None,
        }
        assert operations["Query.topRoutes"]["action"] == "statement"
        airport = tables["types"]["Airport"]
        assert airport["label"] == "airport"
        assert airport["fields"]["city"] == {
            "kind": "scalar",
            "property": "city_name",
            "list": False,
        }
        assert airport["fields"]["country"]["hop"] == (
            "({src})<-[:`contains`]-({dst}:`country`)"
        )

    def test_relationship_fields(self, validated_model: SchemaModel) -> None:
        person = TableCompiler(validated_model, GremlinDialect()).compile()["types"]["Person"]
        assert person["fields"]["worksAt"] == {
            "kind": "relationship",
            "target": "Company",
            "many": False,
            "hop": "out('WORKS_AT').hasLabel('Company')",
        }

    def test_both_direction_unsupported_in_gremlin(self) -> None:
        model = _validated(SOCIAL_SDL)
        with pytest.raises(UnsupportedOperationError, match="Person.friends"):
            TableCompiler(model, GremlinDialect()).compile()
        tables = TableCompiler(model, OpenCypherDialect()).compile()
        assert tables["types"]["Person"]["fields"]["friends"]["many"]

    def test_unclassifiable_operation(self) -> None:
        model = _validated(
            "type Person {\n  id: ID! @id\n  name: String\n}\n\n"
            "type Query {\n  search(term: String): [Person]\n}\n"
        )
        with pytest.raises(UnsupportedOperationError, match="@graphQuery"):
            TableCompiler(model, OpenCypherDialect()).compile()

    def test_delete_after_type_rename(self, inferred_model: SchemaModel) -> None:
        apply_changes(
            inferred_model, [{"action": "renameType", "path": "Person", "name": "Human"}]
        )
        model, _ = validate(inferred_model)
        operations = TableCompiler(model, OpenCypherDialect()).compile()["operations"]
        assert operations["Mutation.deletePerson"] == {
            "action": "delete",
            "type": "Human",
            "id": "id",
            "returns_node": False,
        }
        for query_language, client in all_variants():
            assert "def lambda_handler" in generate(model, query_language, client)


# =============================================================================
# Modules
# =============================================================================


class TestGenerate:
    def test_module_header_and_constants(self, validated_model: SchemaModel) -> None:
        config = GeneratorConfig(default_page_size=25, log_level="DEBUG")
        source = generate(validated_model, "opencypher", "http", config)
        assert f"Generated by neptune-graphql {__version__} - DO NOT EDIT." in source
        namespace = _load(source)
        assert namespace["QUERY_LANGUAGE"] == "opencypher"
        assert namespace["EXECUTION_CLIENT"] == "http"
        assert namespace["LOG_LEVEL"] == "DEBUG"
        assert namespace["PAGES"].default_size == 25
        assert callable(namespace["lambda_handler"])

    def test_generation_reads_no_files(
        self, validated_model: SchemaModel, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def refuse(*args, **kwargs):
            raise AssertionError("generate() touched the filesystem")

        monkeypatch.setattr("pathlib.Path.read_text", refuse)
        monkeypatch.setattr("builtins.open", refuse)
        assert generate(validated_model, "gremlin", "sdk")

    def test_generated_module_resolves(
        self, validated_model: SchemaModel, fake_executor_cls
    ) -> None:
        namespace = _load(generate(validated_model, QueryLanguage.OPENCYPHER, ExecutionClient.SDK))
        executor = fake_executor_cls(
            [{"result": {"name": "Ann", "worksAt": {"name": "Acme"}}}],
            [{"result": {"name": "Acme", "employees": [{"name": "Ann"}]}}],
        )
        runtime = namespace["build_runtime"](executor)

        person = runtime.handle(
            {
                "arguments": {"id": "p1"},
                "info": {
                    "parentTypeName": "Query",
                    "fieldName": "person",
                    "selectionSetGraphQL": "{ name worksAt { name } }",
                },
            }
        )
        assert person == {"name": "Ann", "worksAt": {"name": "Acme"}}
        assert "head([(n0)-[:`WORKS_AT`]->(n1:`Company`)" in executor.calls[0][1].text

        company = runtime.handle(
            {
                "arguments": {"id": "c1"},
                "info": {
                    "parentTypeName": "Query",
                    "fieldName": "company",
                    "selectionSetGraphQL": "{ name employees(options: {limit: 5}) { name } }",
                },
            }
        )
        assert company == {"name": "Acme", "employees": [{"name": "Ann"}]}
        text = executor.calls[1][1].text
        assert (
            "MATCH (n0)<-[:`WORKS_AT`]-(n1:`Person`)\n"
            "WITH n1 ORDER BY ID(n1) LIMIT $p1\n"
            "RETURN collect({name: n1.name}) AS n1_list"
        ) in text

    def test_deterministic(self, validated_model: SchemaModel) -> None:
        assert generate(validated_model, "gremlin", "sdk") == generate(
            validated_model, "gremlin", "sdk"
        )

    def test_unknown_language(self, validated_model: SchemaModel) -> None:
        with pytest.raises(ValueError):
            generate(validated_model, "sparql", "sdk")

    def test_model_is_not_modified(self, validated_model: SchemaModel) -> None:
        before = validated_model.model_copy(deep=True)
        ResolverGenerator(validated_model).generate("opencypher", "sdk")
        assert validated_model == before


class TestVariants:
    def test_all_variants(self) -> None:
        keys = [variant_key(language, client) for language, client in all_variants()]
        assert keys == ["opencypher-sdk", "opencypher-http", "gremlin-sdk", "gremlin-http"]

    def test_failed_variant_does_not_affect_others(self) -> None:
        result = generate_variants(_validated(SOCIAL_SDL))
        assert not result.success
        assert sorted(result.modules) == ["opencypher-http", "opencypher-sdk"]
        assert sorted(result.errors) == ["gremlin-http", "gremlin-sdk"]
        assert "BOTH" in result.errors["gremlin-sdk"]

    def test_selected_pairs(self, validated_model: SchemaModel) -> None:
        result = generate_variants(validated_model, [("gremlin", "http")])
        assert result.success
        assert list(result.modules) == ["gremlin-http"]
