"""
Resolver generation for AppSync Lambda resolvers backed by Neptune.
"""

from .generator import (
    GeneratorResult,
    ResolverGenerator,
    all_variants,
    generate,
    generate_variants,
    variant_key,
)
from .tables import TableCompiler, reachable_types

__all__ = [
    "GeneratorResult",
    "ResolverGenerator",
    "TableCompiler",
    "all_variants",
    "generate",
    "generate_variants",
    "reachable_types",
    "variant_key",
]
