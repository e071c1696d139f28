"""
Naming conventions for generated types and operations.

Inference produces names with these helpers, the validator protects them
from collisions, and the resolver generator uses them to recognise what an
operation does.
"""

from __future__ import annotations

from ..runtime.operators import SCALAR_OPERATORS
from .ir import FieldDefinition, TypeDefinition, TypeKind, TypeRef
from .naming import camel_case, pluralize, sanitize_name

PAGE_OPTIONS_TYPE = "PageOptions"
INPUT_SUFFIX = "Input"
FILTER_SUFFIX = "Filter"

ID_FIELD = "id"
FILTER_ARGUMENT = "filter"
OPTIONS_ARGUMENT = "options"
INPUT_ARGUMENT = "input"

CREATE_PREFIX = "create"
UPDATE_PREFIX = "update"
DELETE_PREFIX = "delete"

# Operator input type per scalar, e.g. String -> StringFilter
SCALAR_FILTER_TYPES: dict[str, str] = {
    scalar: f"{scalar}{FILTER_SUFFIX}" for scalar in SCALAR_OPERATORS
}


def type_name_for_label(label: str) -> str:
    """GraphQL type name for a node label (airport -> Airport)."""
    name = sanitize_name(label)
    if name[0] != "_":
        name = name[0].upper() + name[1:]
    return name


def input_type_name(type_name: str) -> str:
    return f"{type_name}{INPUT_SUFFIX}"


def filter_type_name(type_name: str) -> str:
    return f"{type_name}{FILTER_SUFFIX}"


def get_operation_name(type_name: str) -> str:
    """Query field fetching one node by id (Person -> person)."""
    return camel_case(type_name)


def list_operation_name(type_name: str) -> str:
    """Query field listing nodes (Company -> companies)."""
    return pluralize(camel_case(type_name))


def mutation_name(prefix: str, type_name: str) -> str:
    return f"{prefix}{type_name}"


def page_options_type() -> TypeDefinition:
    """The pagination input: limit/offset, or a keyset cursor in ``after``."""
    return TypeDefinition(
        name=PAGE_OPTIONS_TYPE,
        kind=TypeKind.INPUT,
        fields=[
            FieldDefinition(name="limit", type=TypeRef(name="Int")),
            FieldDefinition(name="offset", type=TypeRef(name="Int")),
            FieldDefinition(name="after", type=TypeRef(name="ID")),
        ],
    )
