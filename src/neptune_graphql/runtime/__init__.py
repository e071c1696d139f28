"""
Request-time support for generated resolver modules.

Generated modules import only this package at request time. Importing it
loads neither the schema compiler nor the code generator.
"""

from .clients import (
    HttpExecutor,
    NeptuneConfig,
    SdkExecutor,
    create_executor,
    get_neptune_config,
)
from .dialects import GremlinDialect, OpenCypherDialect, get_dialect
from .errors import BadRequestError, NodeNotFoundError, QueryExecutionError, ResolverError
from .handler import ResolverRuntime
from .logging import setup_logging
from .planner import PageSettings, QueryPlanner

__all__ = [
    "BadRequestError",
    "GremlinDialect",
    "HttpExecutor",
    "NeptuneConfig",
    "NodeNotFoundError",
    "OpenCypherDialect",
    "PageSettings",
    "QueryExecutionError",
    "QueryPlanner",
    "ResolverError",
    "ResolverRuntime",
    "SdkExecutor",
    "create_executor",
    "get_neptune_config",
    "setup_logging",
]
