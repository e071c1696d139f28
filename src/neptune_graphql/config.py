"""
Generator configuration.

Settings can be given directly, as a mapping, or as TOML text, either at
the top level or nested under ``[tool.neptune-graphql]``:

    [tool.neptune-graphql]
    query_language = "gremlin"
    client = "http"
    default_page_size = 50

Runtime connection settings (endpoint, IAM auth, region) are not part of
this file; generated resolvers read them from the environment, see
``neptune_graphql.runtime.clients.get_neptune_config``.
"""

from __future__ import annotations

import tomllib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .core.errors import SchemaSyntaxError
from .core.ir import ExecutionClient, QueryLanguage
from .runtime.planner import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

TOOL_SECTION = "neptune-graphql"


class GeneratorConfig(BaseModel):
    """
    Options for one compile run.

    Attributes:
        query_language: Default query language for generated resolvers
        client: Default execution client for generated resolvers
        strict: Escalate validator repairs to fatal errors
        generate_mutations: Add create/update/delete mutations on inference
        default_page_size: Page size when a list request gives no limit
        max_page_size: Upper bound applied to requested limits
        log_level: Log level of the generated resolver
    """

    query_language: QueryLanguage = QueryLanguage.OPENCYPHER
    client: ExecutionClient = ExecutionClient.SDK
    strict: bool = False
    generate_mutations: bool = True
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_page_sizes(self) -> GeneratorConfig:
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) exceeds "
                f"max_page_size ({self.max_page_size})"
            )
        return self


def load_config(data: dict[str, Any] | None = None) -> GeneratorConfig:
    """
    Build a config from a mapping.

    Accepts the settings at the top level, or a pyproject-style document
    with them under ``tool.neptune-graphql``.

    Raises:
        pydantic.ValidationError: If a setting is unknown or invalid
    """
    data = dict(data or {})
    tool = data.get("tool")
    if isinstance(tool, dict) and TOOL_SECTION in tool:
        data = dict(tool[TOOL_SECTION])
    return GeneratorConfig.model_validate(data)


def load_config_text(text: str) -> GeneratorConfig:
    """
    Build a config from TOML text.

    Raises:
        SchemaSyntaxError: If the text is not valid TOML or holds invalid settings
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise SchemaSyntaxError(f"Invalid configuration: {e}") from e
    try:
        return load_config(data)
    except ValidationError as e:
        raise SchemaSyntaxError(f"Invalid configuration: {e}") from e
