"""
Filter operators shared by every query language.

A GraphQL filter argument such as

    {"name": {"startsWith": "A"}, "age": {"gte": 18, "lt": 65}}

is split into (property, operator, value) predicates. Each operator has one
openCypher template and one Gremlin predicate; the dialects only fill in the
property reference and the value.
"""

from __future__ import annotations

from enum import Enum


class FilterOperator(str, Enum):
    """Supported filter operators (GraphQL input field names)."""

    EQ = "eq"  # Equal
    NE = "ne"  # Not equal
    GT = "gt"  # Greater than
    GTE = "gte"  # Greater than or equal
    LT = "lt"  # Less than
    LTE = "lte"  # Less than or equal
    IN = "in"  # In list
    NOT_IN = "notIn"  # Not in list
    CONTAINS = "contains"  # Contains substring
    STARTS_WITH = "startsWith"  # Starts with
    ENDS_WITH = "endsWith"  # Ends with


# Operator mapping to openCypher, {prop} is the property reference and
# {value} the parameter placeholder
OPERATOR_CYPHER: dict[FilterOperator, str] = {
    FilterOperator.EQ: "{prop} = {value}",
    FilterOperator.NE: "{prop} <> {value}",
    FilterOperator.GT: "{prop} > {value}",
    FilterOperator.GTE: "{prop} >= {value}",
    FilterOperator.LT: "{prop} < {value}",
    FilterOperator.LTE: "{prop} <= {value}",
    FilterOperator.IN: "{prop} IN {value}",
    FilterOperator.NOT_IN: "NOT {prop} IN {value}",
    FilterOperator.CONTAINS: "{prop} CONTAINS {value}",
    FilterOperator.STARTS_WITH: "{prop} STARTS WITH {value}",
    FilterOperator.ENDS_WITH: "{prop} ENDS WITH {value}",
}

# Operator mapping to Gremlin predicates (P / TextP), {value} is a literal
OPERATOR_GREMLIN: dict[FilterOperator, str] = {
    FilterOperator.EQ: "eq({value})",
    FilterOperator.NE: "neq({value})",
    FilterOperator.GT: "gt({value})",
    FilterOperator.GTE: "gte({value})",
    FilterOperator.LT: "lt({value})",
    FilterOperator.LTE: "lte({value})",
    FilterOperator.IN: "within({value})",
    FilterOperator.NOT_IN: "without({value})",
    FilterOperator.CONTAINS: "containing({value})",
    FilterOperator.STARTS_WITH: "startingWith({value})",
    FilterOperator.ENDS_WITH: "endingWith({value})",
}

LIST_OPERATORS = frozenset({FilterOperator.IN, FilterOperator.NOT_IN})

# Operators offered per GraphQL scalar, in the order the filter inputs list them
SCALAR_OPERATORS: dict[str, tuple[FilterOperator, ...]] = {
    "String": (
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.GT,
        FilterOperator.GTE,
        FilterOperator.LT,
        FilterOperator.LTE,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
        FilterOperator.CONTAINS,
        FilterOperator.STARTS_WITH,
        FilterOperator.ENDS_WITH,
    ),
    "Int": (
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.GT,
        FilterOperator.GTE,
        FilterOperator.LT,
        FilterOperator.LTE,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
    ),
    "Float": (
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.GT,
        FilterOperator.GTE,
        FilterOperator.LT,
        FilterOperator.LTE,
        FilterOperator.IN,
        FilterOperator.NOT_IN,
    ),
    "Boolean": (FilterOperator.EQ, FilterOperator.NE),
    "ID": (FilterOperator.EQ, FilterOperator.NE, FilterOperator.IN, FilterOperator.NOT_IN),
}


def parse_operator(name: str) -> FilterOperator:
    """
    Look up an operator by its GraphQL name.

    Raises:
        ValueError: If the name is not a known operator
    """
    try:
        return FilterOperator(name)
    except ValueError:
        raise ValueError(f"Unknown filter operator '{name}'") from None
