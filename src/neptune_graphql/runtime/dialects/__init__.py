"""
Query language dialects.
"""

from .base import QueryDialect
from .gremlin import GremlinDialect
from .opencypher import OpenCypherDialect

DIALECTS: dict[str, type[QueryDialect]] = {
    OpenCypherDialect.name: OpenCypherDialect,
    GremlinDialect.name: GremlinDialect,
}


def get_dialect(language: str) -> QueryDialect:
    """
    Get a dialect instance by query language name.

    Raises:
        ValueError: If the language is unknown
    """
    try:
        return DIALECTS[language.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown query language '{language}'. Available: {', '.join(DIALECTS)}"
        ) from None


__all__ = ["DIALECTS", "GremlinDialect", "OpenCypherDialect", "QueryDialect", "get_dialect"]
