"""
End-to-end compile of in-memory inputs into every artifact.

Sequence: graph schema (inference) or SDL (parse) → optional change
script → validation → client SDL, source SDL and resolver modules. Reading
inputs from disk or from a live database, and writing the artifacts out,
are left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .codegen import generate_variants
from .config import GeneratorConfig
from .core import Diagnostic, apply_changes, infer, parse, serialize, validate
from .core.ir import ExecutionClient, GraphSchema, QueryLanguage, SchemaModel

logger = logging.getLogger(__name__)


@dataclass
class BuildArtifacts:
    """
    Everything one compile run produces.

    Attributes:
        model: The validated schema model
        client_sdl: SDL without graph-mapping directives
        source_sdl: SDL with graph-mapping directives
        resolvers: Resolver module source per variant key (``opencypher-sdk``, ...)
        resolver_errors: Failure message per variant that could not be generated
        diagnostics: Validator WARNINGs
    """

    model: SchemaModel
    client_sdl: str
    source_sdl: str
    resolvers: dict[str, str] = field(default_factory=dict)
    resolver_errors: dict[str, str] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def build_artifacts(
    graph_schema: GraphSchema | dict[str, Any] | None = None,
    sdl: str | None = None,
    changes: str | list | None = None,
    config: GeneratorConfig | None = None,
    pairs: Iterable[tuple[QueryLanguage | str, ExecutionClient | str]] | None = None,
) -> BuildArtifacts:
    """
    Compile a graph schema or SDL text into all artifacts.

    Args:
        graph_schema: Raw graph schema document (mutually exclusive with sdl)
        sdl: SDL text with graph-mapping directives
        changes: Change script (JSON text or list of change objects)
        config: Generator options; ``strict`` and ``generate_mutations`` apply here
        pairs: Variants to generate; defaults to the configured pair

    Raises:
        ValueError: Unless exactly one of graph_schema and sdl is given
        NeptuneGraphQLError: On any fatal error before resolver generation
    """
    if (graph_schema is None) == (sdl is None):
        raise ValueError("Pass exactly one of graph_schema and sdl")
    config = config or GeneratorConfig()

    if graph_schema is not None:
        model = infer(graph_schema, generate_mutations=config.generate_mutations)
    else:
        model = parse(sdl)

    if changes:
        model = apply_changes(model, changes)

    model, diagnostics = validate(model, strict=config.strict)

    if pairs is None:
        pairs = [(config.query_language, config.client)]
    generated = generate_variants(model, pairs, config)

    logger.info(
        f"Built {len(generated.modules)} resolver(s) for {len(model.types)} types "
        f"with {len(diagnostics)} warning(s)"
    )
    return BuildArtifacts(
        model=model,
        client_sdl=serialize(model, include_directives=False),
        source_sdl=serialize(model, include_directives=True),
        resolvers=generated.modules,
        resolver_errors=generated.errors,
        diagnostics=diagnostics,
    )
