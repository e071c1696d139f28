"""
SDL codec: GraphQL SDL text <-> SchemaModel.
"""

from .directives import GRAPH_DIRECTIVES
from .parser import (
    parse,
    parse_field_definition,
    parse_operation_definition,
    parse_type_definition,
    parse_type_ref,
)
from .writer import SDLWriter, serialize

__all__ = [
    "GRAPH_DIRECTIVES",
    "SDLWriter",
    "parse",
    "parse_field_definition",
    "parse_operation_definition",
    "parse_type_definition",
    "parse_type_ref",
    "serialize",
]
