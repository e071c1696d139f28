"""
Graph-mapping directives understood by the SDL codec.

    @id                                             identifier field
    @alias(property: "label_or_property")           graph label / property name
    @relationship(edgeType: "WORKS_AT",
                  direction: OUT | IN | BOTH,
                  cardinality: ONE | MANY)          relationship field
    @graphQuery(statement: "MATCH ...")             custom operation statement

Any other directive is kept verbatim and never interpreted. Argument values
of the wrong type are not rejected here: they are recorded as directive
issues (literal as written) so the validator can report and repair them.
"""

from __future__ import annotations

from graphql import print_ast
from graphql.language import EnumValueNode, StringValueNode, ValueNode

from ..ir import Cardinality, EdgeDirection, RelationshipSpec

ID_DIRECTIVE = "id"
ALIAS_DIRECTIVE = "alias"
RELATIONSHIP_DIRECTIVE = "relationship"
GRAPH_QUERY_DIRECTIVE = "graphQuery"

GRAPH_DIRECTIVES = frozenset(
    {ID_DIRECTIVE, ALIAS_DIRECTIVE, RELATIONSHIP_DIRECTIVE, GRAPH_QUERY_DIRECTIVE}
)

# Argument names, in the order the writer emits them
RELATIONSHIP_ARGUMENTS = ("edgeType", "direction", "cardinality")
ALIAS_ARGUMENTS = ("property",)
GRAPH_QUERY_ARGUMENTS = ("statement",)


def issue_key(directive: str, argument: str) -> str:
    return f"{directive}.{argument}"


def string_literal(value: str) -> str:
    """Render a Python string as a GraphQL string literal."""
    return print_ast(StringValueNode(value=value))


def _as_string(node: ValueNode) -> str | None:
    if isinstance(node, StringValueNode) and node.value:
        return node.value
    return None


def _as_member(node: ValueNode, enum_type: type[EdgeDirection] | type[Cardinality]):
    if isinstance(node, (EnumValueNode, StringValueNode)):
        candidate = node.value.upper()
        if candidate in enum_type.__members__:
            return enum_type[candidate]
    return None


def read_relationship(
    arguments: dict[str, ValueNode],
) -> tuple[RelationshipSpec, dict[str, str]]:
    """Interpret @relationship arguments, collecting invalid ones."""
    spec = RelationshipSpec()
    issues: dict[str, str] = {}
    for name, node in arguments.items():
        if name == "edgeType":
            spec.edge_label = _as_string(node)
            valid = spec.edge_label is not None
        elif name == "direction":
            spec.direction = _as_member(node, EdgeDirection)
            valid = spec.direction is not None
        elif name == "cardinality":
            spec.cardinality = _as_member(node, Cardinality)
            valid = spec.cardinality is not None
        else:
            valid = False
        if not valid:
            issues[issue_key(RELATIONSHIP_DIRECTIVE, name)] = print_ast(node)
    return spec, issues


def read_string_argument(
    directive: str, argument: str, arguments: dict[str, ValueNode]
) -> tuple[str | None, dict[str, str]]:
    """Interpret a directive taking one string argument (@alias, @graphQuery)."""
    value: str | None = None
    issues: dict[str, str] = {}
    for name, node in arguments.items():
        text = _as_string(node) if name == argument else None
        if text is None:
            issues[issue_key(directive, name)] = print_ast(node)
        else:
            value = text
    return value, issues


def _render(directive: str, pairs: list[str]) -> str:
    if not pairs:
        return f"@{directive}"
    return f"@{directive}({', '.join(pairs)})"


def _issue_pairs(directive: str, known: tuple[str, ...], issues: dict[str, str]) -> list[str]:
    prefix = f"{directive}."
    return [
        f"{key[len(prefix):]}: {raw}"
        for key, raw in issues.items()
        if key.startswith(prefix) and key[len(prefix) :] not in known
    ]


def render_relationship(spec: RelationshipSpec, issues: dict[str, str]) -> str:
    """Render @relationship, re-emitting invalid arguments as written."""
    pairs: list[str] = []
    values = {
        "edgeType": string_literal(spec.edge_label) if spec.edge_label is not None else None,
        "direction": spec.direction.value if spec.direction is not None else None,
        "cardinality": spec.cardinality.value if spec.cardinality is not None else None,
    }
    for name in RELATIONSHIP_ARGUMENTS:
        raw = issues.get(issue_key(RELATIONSHIP_DIRECTIVE, name))
        if raw is not None:
            pairs.append(f"{name}: {raw}")
        elif values[name] is not None:
            pairs.append(f"{name}: {values[name]}")
    pairs.extend(_issue_pairs(RELATIONSHIP_DIRECTIVE, RELATIONSHIP_ARGUMENTS, issues))
    return _render(RELATIONSHIP_DIRECTIVE, pairs)


def render_string_directive(
    directive: str, argument: str, value: str | None, issues: dict[str, str]
) -> str | None:
    """Render @alias / @graphQuery, or None when there is nothing to emit."""
    pairs: list[str] = []
    raw = issues.get(issue_key(directive, argument))
    if raw is not None:
        pairs.append(f"{argument}: {raw}")
    elif value is not None:
        pairs.append(f"{argument}: {string_literal(value)}")
    pairs.extend(_issue_pairs(directive, (argument,), issues))
    if not pairs:
        return None
    return _render(directive, pairs)


def has_issues_for(directive: str, issues: dict[str, str]) -> bool:
    prefix = f"{directive}."
    return any(key.startswith(prefix) for key in issues)


def render_flag_directive(directive: str, issues: dict[str, str]) -> str:
    """Render an argument-less directive such as @id, keeping stray arguments."""
    return _render(directive, _issue_pairs(directive, (), issues))
