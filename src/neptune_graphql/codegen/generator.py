"""
Resolver generator: the compiler back end.

Turns a validated SchemaModel into the source text of an AppSync Lambda
resolver for one (query language, execution client) pair. Everything
decidable at generation time is compiled into the module's tables; the
request-time work is done by ``neptune_graphql.runtime``.
"""

from __future__ import annotations

import logging
import pprint
from collections.abc import Iterable
from dataclasses import dataclass, field

from .._version import __version__
from ..config import GeneratorConfig
from ..core.errors import UnsupportedOperationError
from ..core.ir import ExecutionClient, QueryLanguage, SchemaModel
from ..runtime.dialects import get_dialect
from .tables import TableCompiler
from .templates import MODULE_TEMPLATE

logger = logging.getLogger(__name__)


def variant_key(query_language: QueryLanguage, client: ExecutionClient) -> str:
    """Key of one generated variant, e.g. ``opencypher-sdk``."""
    return f"{query_language.value}-{client.value}"


@dataclass
class GeneratorResult:
    """
    Result of generating several resolver variants.

    Attributes:
        modules: Generated module source per variant key
        errors: Failure message per variant key that could not be generated
    """

    modules: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """Whether every requested variant was generated."""
        return len(self.errors) == 0

    def add_module(self, key: str, source: str) -> None:
        self.modules[key] = source

    def add_error(self, key: str, message: str) -> None:
        self.errors[key] = message


class ResolverGenerator:
    """
    Generates resolver modules from one model.

    The model is only read, so one generator can produce every variant.
    """

    def __init__(self, model: SchemaModel, config: GeneratorConfig | None = None):
        self.model = model
        self.config = config or GeneratorConfig()

    def tables(self, query_language: QueryLanguage | str) -> dict:
        """
        Compile the translation tables for a query language.

        Raises:
            UnsupportedOperationError: If an operation or a reachable
                relationship has no translation in that language
        """
        dialect = get_dialect(QueryLanguage(query_language).value)
        return TableCompiler(self.model, dialect).compile()

    def generate(
        self, query_language: QueryLanguage | str, client: ExecutionClient | str
    ) -> str:
        query_language = QueryLanguage(query_language)
        client = ExecutionClient(client)
        tables = self.tables(query_language)
        source = MODULE_TEMPLATE.format(
            language=query_language.value,
            client=client.value,
            version=__version__,
            log_level=self.config.log_level,
            default_page_size=self.config.default_page_size,
            max_page_size=self.config.max_page_size,
            schema=pprint.pformat(tables, indent=1, width=96, sort_dicts=False),
        )
        logger.info(
            f"Generated {variant_key(query_language, client)} resolver: "
            f"{len(tables['operations'])} operations, {len(tables['types'])} types"
        )
        return source


def generate(
    model: SchemaModel,
    query_language: QueryLanguage | str,
    client: ExecutionClient | str,
    config: GeneratorConfig | None = None,
) -> str:
    """
    Generate the resolver module source for one (query language, client) pair.

    Args:
        model: Validated schema model
        query_language: ``opencypher`` or ``gremlin``
        client: ``sdk`` or ``http``
        config: Page sizes and log level baked into the module

    Returns:
        Python source text of the resolver module

    Raises:
        UnsupportedOperationError: If the model uses something the query
            language cannot translate
    """
    return ResolverGenerator(model, config).generate(query_language, client)


def all_variants() -> list[tuple[QueryLanguage, ExecutionClient]]:
    return [(language, client) for language in QueryLanguage for client in ExecutionClient]


def generate_variants(
    model: SchemaModel,
    pairs: Iterable[tuple[QueryLanguage | str, ExecutionClient | str]] | None = None,
    config: GeneratorConfig | None = None,
) -> GeneratorResult:
    """
    Generate several variants independently.

    A variant that raises UnsupportedOperationError is recorded in
    ``errors`` and does not affect the others.
    """
    generator = ResolverGenerator(model, config)
    result = GeneratorResult()
    for language, client in pairs if pairs is not None else all_variants():
        language, client = QueryLanguage(language), ExecutionClient(client)
        key = variant_key(language, client)
        try:
            result.add_module(key, generator.generate(language, client))
        except UnsupportedOperationError as e:
            logger.warning(f"Skipped {key} resolver: {e.message}")
            result.add_error(key, e.message)
    return result
