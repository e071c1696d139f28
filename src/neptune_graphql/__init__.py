"""
neptune-graphql: a GraphQL schema compiler for Amazon Neptune property graphs.

Infers a GraphQL schema from a graph schema (or reads one from SDL), lets
scripted changes steer it, validates and repairs it, and generates AppSync
Lambda resolvers that translate GraphQL requests into openCypher or
Gremlin.

Public names load lazily, so importing ``neptune_graphql.runtime`` from a
generated resolver does not pull in the compiler.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

from ._version import __version__

if TYPE_CHECKING:
    from .codegen import GeneratorResult, generate, generate_variants
    from .config import GeneratorConfig, load_config, load_config_text
    from .core import (
        Diagnostic,
        DiagnosticCode,
        Severity,
        apply_changes,
        infer,
        parse,
        parse_change_script,
        serialize,
        validate,
    )
    from .core.errors import (
        ChangeTargetNotFoundError,
        DuplicateFieldError,
        DuplicateNameError,
        EmptySchemaError,
        NeptuneGraphQLError,
        SchemaSyntaxError,
        SchemaValidationError,
        UnknownTypeError,
        UnresolvedReferenceError,
        UnsupportedOperationError,
    )
    from .core.ir import ExecutionClient, QueryLanguage, SchemaModel
    from .pipeline import BuildArtifacts, build_artifacts

# Public name -> module that defines it
_EXPORTS = {
    "GeneratorResult": ".codegen",
    "generate": ".codegen",
    "generate_variants": ".codegen",
    "GeneratorConfig": ".config",
    "load_config": ".config",
    "load_config_text": ".config",
    "Diagnostic": ".core",
    "DiagnosticCode": ".core",
    "Severity": ".core",
    "apply_changes": ".core",
    "infer": ".core",
    "parse": ".core",
    "parse_change_script": ".core",
    "serialize": ".core",
    "validate": ".core",
    "ChangeTargetNotFoundError": ".core.errors",
    "DuplicateFieldError": ".core.errors",
    "DuplicateNameError": ".core.errors",
    "EmptySchemaError": ".core.errors",
    "NeptuneGraphQLError": ".core.errors",
    "SchemaSyntaxError": ".core.errors",
    "SchemaValidationError": ".core.errors",
    "UnknownTypeError": ".core.errors",
    "UnresolvedReferenceError": ".core.errors",
    "UnsupportedOperationError": ".core.errors",
    "ExecutionClient": ".core.ir",
    "QueryLanguage": ".core.ir",
    "SchemaModel": ".core.ir",
    "BuildArtifacts": ".pipeline",
    "build_artifacts": ".pipeline",
}

__all__ = ["__version__", *sorted(_EXPORTS)]


def __getattr__(name: str) -> Any:
    module = _EXPORTS.get(name)
    if module is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module, __name__), name)
