"""
Declarative schema changes.

A change script is a JSON array of operations applied in order:

    [
      {"action": "renameType", "path": "Airport", "name": "Station"},
      {"action": "addField", "path": "Station", "definition": "elevation: Int"},
      {"action": "setRelationship", "path": "Station.routes", "cardinality": "MANY"}
    ]

Scripts have applied-prefix semantics: when operation k fails, operations
before k stay applied and nothing after k runs.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import (
    ChangeTargetNotFoundError,
    DuplicateNameError,
    SchemaSyntaxError,
    make_syntax_error,
)
from .ir import (
    Cardinality,
    EdgeDirection,
    FieldDefinition,
    FieldKind,
    OperationDefinition,
    RelationshipSpec,
    SchemaModel,
    TypeDefinition,
)
from .sdl import (
    parse_field_definition,
    parse_operation_definition,
    parse_type_definition,
    parse_type_ref,
)

logger = logging.getLogger(__name__)

SCRIPT_SOURCE = "change script"


# =============================================================================
# Target lookup
# =============================================================================


def _split_path(path: str) -> tuple[str, str]:
    type_name, sep, member = path.partition(".")
    if not sep or not type_name or not member:
        raise ChangeTargetNotFoundError(f"Path '{path}' must have the form 'Type.field'", path=path)
    return type_name, member


def _require_type(model: SchemaModel, name: str) -> TypeDefinition:
    type_def = model.get_type(name)
    if type_def is None:
        raise ChangeTargetNotFoundError(f"Type '{name}' not found", path=name)
    return type_def


def _require_member(model: SchemaModel, path: str) -> FieldDefinition | OperationDefinition:
    """Resolve 'Type.field' to a field, or 'Query.op' to an operation."""
    type_name, member = _split_path(path)
    kind = model.root_kind(type_name)
    if kind is not None:
        op = model.get_operation(member, kind)
        if op is None:
            raise ChangeTargetNotFoundError(f"Operation '{path}' not found", path=path)
        return op
    field = _require_type(model, type_name).get_field(member)
    if field is None:
        raise ChangeTargetNotFoundError(f"Field '{path}' not found", path=path)
    return field


def _require_field(model: SchemaModel, path: str) -> FieldDefinition:
    member = _require_member(model, path)
    if not isinstance(member, FieldDefinition):
        raise ChangeTargetNotFoundError(f"'{path}' is an operation, not a type field", path=path)
    return member


# =============================================================================
# Operations
# =============================================================================


class _Change(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def apply(self, model: SchemaModel) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def describe(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class AddType(_Change):
    """Add a type given as SDL."""

    action: Literal["addType"]
    definition: str

    def apply(self, model: SchemaModel) -> None:
        model.add_type(parse_type_definition(self.definition, source=SCRIPT_SOURCE))


class RemoveType(_Change):
    """Remove a type. References to it are left for the validator to report."""

    action: Literal["removeType"]
    path: str

    def apply(self, model: SchemaModel) -> None:
        if model.remove_type(self.path) is None:
            raise ChangeTargetNotFoundError(f"Type '{self.path}' not found", path=self.path)


class RenameType(_Change):
    """Rename a type; references follow and the graph label stays."""

    action: Literal["renameType"]
    path: str
    name: str

    def apply(self, model: SchemaModel) -> None:
        _require_type(model, self.path)
        model.rename_type(self.path, self.name)


class AddField(_Change):
    """Add a field to a type, or an operation when the path is a root type."""

    action: Literal["addField"]
    path: str
    definition: str

    def apply(self, model: SchemaModel) -> None:
        kind = model.root_kind(self.path)
        if kind is not None:
            model.add_operation(
                parse_operation_definition(self.definition, kind, source=SCRIPT_SOURCE)
            )
            return
        type_def = _require_type(model, self.path)
        type_def.add_field(parse_field_definition(self.definition, source=SCRIPT_SOURCE))


class RemoveField(_Change):
    """Remove a field or operation."""

    action: Literal["removeField"]
    path: str

    def apply(self, model: SchemaModel) -> None:
        member = _require_member(model, self.path)
        type_name, name = _split_path(self.path)
        if isinstance(member, OperationDefinition):
            model.remove_operation(name, member.kind)
        else:
            _require_type(model, type_name).remove_field(name)


class RenameField(_Change):
    """Rename a field or operation; a field keeps its graph property or edge."""

    action: Literal["renameField"]
    path: str
    name: str

    def apply(self, model: SchemaModel) -> None:
        member = _require_member(model, self.path)
        type_name, old_name = _split_path(self.path)
        if old_name == self.name:
            return

        if isinstance(member, OperationDefinition):
            if model.get_operation(self.name, member.kind) is not None:
                raise DuplicateNameError(f"Operation '{type_name}.{self.name}' already exists")
            member.name = self.name
            return

        type_def = _require_type(model, type_name)
        if type_def.get_field(self.name) is not None:
            raise DuplicateNameError(f"Type '{type_name}' already has a field '{self.name}'")
        if member.is_relationship:
            relationship = member.relationship or RelationshipSpec()
            if relationship.edge_label is None:
                relationship.edge_label = old_name
            member.relationship = relationship
        elif not member.is_identifier and member.property_name is None:
            member.property_name = old_name
        member.name = self.name


class ChangeFieldType(_Change):
    """Change the type of a field, or the return type of an operation."""

    action: Literal["changeFieldType"]
    path: str
    type: str

    def apply(self, model: SchemaModel) -> None:
        member = _require_member(model, self.path)
        ref = parse_type_ref(self.type, source=SCRIPT_SOURCE)
        if isinstance(member, OperationDefinition):
            member.return_type = ref
            return
        member.type = ref
        if member.relationship is not None and member.relationship.cardinality is not None:
            member.relationship.cardinality = Cardinality.MANY if ref.is_list else Cardinality.ONE


class SetRelationship(_Change):
    """Turn a field into a relationship, or edit its edge mapping."""

    action: Literal["setRelationship"]
    path: str
    edge_type: str | None = Field(default=None, alias="edgeType")
    direction: EdgeDirection | None = None
    cardinality: Cardinality | None = None

    def apply(self, model: SchemaModel) -> None:
        field = _require_field(model, self.path)
        relationship = field.relationship or RelationshipSpec()
        if self.edge_type is not None:
            relationship.edge_label = self.edge_type
        if self.direction is not None:
            relationship.direction = self.direction
        if self.cardinality is not None:
            relationship.cardinality = self.cardinality
        field.kind = FieldKind.RELATIONSHIP
        field.relationship = relationship


Change = Annotated[
    Union[
        AddType,
        RemoveType,
        RenameType,
        AddField,
        RemoveField,
        RenameField,
        ChangeFieldType,
        SetRelationship,
    ],
    Field(discriminator="action"),
]

_SCRIPT_ADAPTER: TypeAdapter[list[Change]] = TypeAdapter(list[Change])


# =============================================================================
# Scripts
# =============================================================================


def parse_change_script(text: str) -> list[Change]:
    """
    Parse a JSON change script.

    Raises:
        SchemaSyntaxError: If the JSON is malformed, an action is unknown,
            or an operation has missing or unexpected keys
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise make_syntax_error(e.msg, e.lineno, e.colno, text, SCRIPT_SOURCE) from e
    return load_change_script(data)


def load_change_script(data: Any) -> list[Change]:
    """Validate already-decoded change operations."""
    try:
        return _SCRIPT_ADAPTER.validate_python(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise SchemaSyntaxError(f"Invalid change script at {location}: {first['msg']}") from e


def apply_changes(model: SchemaModel, script: str | list[Any]) -> SchemaModel:
    """
    Apply a change script to a model in place.

    Args:
        model: Model to edit
        script: JSON text, decoded operations, or parsed Change objects

    Returns:
        The same model

    Raises:
        ChangeTargetNotFoundError: If an operation names a missing target;
            ``index`` holds its position and earlier operations stay applied
    """
    if isinstance(script, str):
        changes = parse_change_script(script)
    elif all(isinstance(item, _Change) for item in script):
        changes = list(script)
    else:
        changes = load_change_script(script)

    for index, change in enumerate(changes):
        try:
            change.apply(model)
        except ChangeTargetNotFoundError as e:
            e.index = index
            logger.error(f"Change #{index} failed, {index} applied: {e.message}")
            raise
        logger.debug(f"Applied change #{index}: {change.describe()}")

    logger.info(f"Applied {len(changes)} schema changes")
    return model
