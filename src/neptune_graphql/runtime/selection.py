"""
Selection sets from AppSync events.

AppSync passes the requested fields in two forms: ``selectionSetGraphQL``
(GraphQL text, including nested field arguments) and ``selectionSetList``
(slash-separated paths). The text form is preferred because it carries
arguments and aliases; it is parsed with graphql-core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from graphql import GraphQLSyntaxError, parse, value_from_ast_untyped
from graphql.language import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
)

from .errors import BadRequestError


@dataclass
class SelectedField:
    """
    One requested field.

    Attributes:
        name: Schema field name
        alias: Response key when aliased
        arguments: Argument values with variables substituted
        children: Requested sub-fields (relationship fields only)
    """

    name: str
    alias: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)
    children: list[SelectedField] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.alias or self.name


def from_graphql(text: str, variables: dict[str, Any] | None = None) -> list[SelectedField]:
    """Parse ``selectionSetGraphQL`` text."""
    try:
        document = parse(text)
    except GraphQLSyntaxError as e:
        raise BadRequestError(f"Invalid selection set: {e.message}") from e

    fragments = {
        d.name.value: d for d in document.definitions if isinstance(d, FragmentDefinitionNode)
    }
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            return _fields(definition.selection_set, fragments, variables or {})
    return []


def _fields(
    selection_set: SelectionSetNode | None,
    fragments: dict[str, FragmentDefinitionNode],
    variables: dict[str, Any],
) -> list[SelectedField]:
    if selection_set is None:
        return []
    selected: list[SelectedField] = []
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            selected.append(
                SelectedField(
                    name=selection.name.value,
                    alias=selection.alias.value if selection.alias else None,
                    arguments={
                        arg.name.value: value_from_ast_untyped(arg.value, variables)
                        for arg in selection.arguments or ()
                    },
                    children=_fields(selection.selection_set, fragments, variables),
                )
            )
        elif isinstance(selection, InlineFragmentNode):
            selected.extend(_fields(selection.selection_set, fragments, variables))
        elif isinstance(selection, FragmentSpreadNode):
            fragment = fragments.get(selection.name.value)
            if fragment is not None:
                selected.extend(_fields(fragment.selection_set, fragments, variables))
    return _merge(selected)


def _merge(selected: list[SelectedField]) -> list[SelectedField]:
    """Merge repeated response keys, as GraphQL field merging does."""
    merged: dict[str, SelectedField] = {}
    for item in selected:
        existing = merged.get(item.key)
        if existing is None:
            merged[item.key] = item
        else:
            existing.children = _merge(existing.children + item.children)
    return list(merged.values())


def from_paths(paths: list[str]) -> list[SelectedField]:
    """Build a selection from ``selectionSetList`` paths like ``worksAt/name``."""
    root: list[SelectedField] = []
    for path in paths:
        level = root
        for name in path.split("/"):
            match = next((f for f in level if f.name == name), None)
            if match is None:
                match = SelectedField(name=name)
                level.append(match)
            level = match.children
    return root


def from_event(info: dict[str, Any]) -> list[SelectedField]:
    """Selection for an AppSync ``info`` block."""
    text = info.get("selectionSetGraphQL")
    if text:
        return from_graphql(text, info.get("variables"))
    return from_paths(info.get("selectionSetList") or [])
