"""
Translation tables embedded in generated resolver modules.

Compiles a validated SchemaModel into the plain-data tables the runtime
planner reads (see ``neptune_graphql.runtime.planner``):

- one entry per object type reachable from a root operation, with every
  field classified as id, scalar or relationship
- one compiled hop template per reachable relationship field
- one entry per Query/Mutation operation saying which resolver action
  serves it
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.conventions import (
    DELETE_PREFIX,
    FILTER_ARGUMENT,
    PAGE_OPTIONS_TYPE,
    filter_type_name,
    type_name_for_label,
)
from ..core.errors import UnsupportedOperationError
from ..core.ir import (
    ArgumentDefinition,
    Cardinality,
    EdgeDirection,
    FieldDefinition,
    OperationDefinition,
    OperationKind,
    SchemaModel,
    TypeDefinition,
    TypeKind,
)
from ..runtime.dialects import QueryDialect

logger = logging.getLogger(__name__)


def reachable_types(model: SchemaModel) -> list[TypeDefinition]:
    """Object types reachable from root operations through relationship fields."""
    pending = [op.return_type.name for op in model.operations]
    seen: set[str] = set()
    while pending:
        name = pending.pop()
        type_def = model.get_type(name)
        if name in seen or type_def is None or type_def.kind != TypeKind.OBJECT:
            continue
        seen.add(name)
        pending.extend(f.type.name for f in type_def.relationship_fields)
    return [t for t in model.types if t.name in seen]


class TableCompiler:
    """Builds the translation tables for one query language."""

    def __init__(self, model: SchemaModel, dialect: QueryDialect):
        self.model = model
        self.dialect = dialect

    def compile(self) -> dict[str, Any]:
        types = {t.name: self.type_table(t) for t in reachable_types(self.model)}
        operations = {}
        for op in self.model.operations:
            root = (
                self.model.query_type_name
                if op.kind == OperationKind.QUERY
                else self.model.mutation_type_name
            )
            operations[f"{root}.{op.name}"] = self.operation_table(op)
        logger.debug(
            f"Compiled {len(types)} types and {len(operations)} operations "
            f"for {self.dialect.name}"
        )
        return {"types": types, "operations": operations}

    # ------------------------------------------------------------------
    # Types and fields
    # ------------------------------------------------------------------

    def type_table(self, type_def: TypeDefinition) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for field in type_def.fields:
            if field.is_identifier:
                fields[field.name] = {"kind": "id"}
            elif field.is_relationship:
                fields[field.name] = self.relationship_table(type_def, field)
            else:
                fields[field.name] = {
                    "kind": "scalar",
                    "property": field.graph_property,
                    "list": field.is_list,
                }
        return {"label": type_def.graph_label, "fields": fields}

    def relationship_table(
        self, type_def: TypeDefinition, field: FieldDefinition
    ) -> dict[str, Any]:
        """
        Compile one relationship field into a hop.

        Raises:
            UnsupportedOperationError: If the dialect has no translation for
                the field's direction and cardinality
            UnknownTypeError: If the target type is missing
        """
        target = self.model.resolve_relationship(type_def.name, field.name)
        rel = field.relationship
        direction = (rel.direction if rel and rel.direction else EdgeDirection.OUT).value
        if rel and rel.cardinality:
            cardinality = rel.cardinality
        else:
            cardinality = Cardinality.MANY if field.is_list else Cardinality.ONE
        if not self.dialect.supports(direction, cardinality.value):
            raise UnsupportedOperationError(
                f"{self.dialect.name} cannot translate relationship "
                f"'{type_def.name}.{field.name}' ({direction}, {cardinality.value})"
            )
        edge_label = (rel.edge_label if rel else None) or field.name
        return {
            "kind": "relationship",
            "target": target.name,
            "many": cardinality == Cardinality.MANY,
            "hop": self.dialect.hop_template(edge_label, direction, target.graph_label),
        }

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operation_table(self, op: OperationDefinition) -> dict[str, Any]:
        """
        Classify an operation by the resolver action that serves it.

        Raises:
            UnsupportedOperationError: If the operation fits no resolver
                convention and carries no @graphQuery statement
        """
        if op.graph_query:
            return {
                "action": "statement",
                "statement": op.graph_query,
                "type": op.return_type.name,
                "many": op.return_type.is_list,
            }
        if op.kind == OperationKind.MUTATION:
            table = self._mutation_table(op)
        else:
            table = self._query_table(op)
        if table is None:
            raise UnsupportedOperationError(
                f"Operation '{op.name}' fits no resolver convention; "
                f"add @graphQuery(statement: ...) to resolve it with a custom statement"
            )
        return table

    def _object(self, name: str) -> TypeDefinition | None:
        type_def = self.model.get_type(name)
        if type_def is None or type_def.kind != TypeKind.OBJECT:
            return None
        return type_def

    def _is_id_argument(self, arg: ArgumentDefinition) -> bool:
        return arg.type.name == "ID" and not arg.type.is_list

    def _is_filter_argument(self, arg: ArgumentDefinition, target: TypeDefinition) -> bool:
        """``<Type>Filter`` arguments, or an input argument named ``filter``."""
        if arg.type.is_list:
            return False
        if arg.type.name == filter_type_name(target.name):
            return True
        arg_type = self.model.get_type(arg.type.name)
        return (
            arg.name == FILTER_ARGUMENT and arg_type is not None and arg_type.kind == TypeKind.INPUT
        )

    def _query_table(self, op: OperationDefinition) -> dict[str, Any] | None:
        target = self._object(op.return_type.name)
        if target is None:
            return None
        args = op.arguments
        many = op.return_type.is_list

        if not many and len(args) == 1 and self._is_id_argument(args[0]):
            return {"action": "get", "type": target.name, "id": args[0].name}

        filter_arg = next((a for a in args if self._is_filter_argument(a, target)), None)
        options_arg = next((a for a in args if a.type.name == PAGE_OPTIONS_TYPE), None)
        rest = [a for a in args if a is not filter_arg and a is not options_arg]

        if many and not rest:
            return {
                "action": "list",
                "type": target.name,
                "filter": filter_arg.name if filter_arg else None,
                "options": options_arg.name if options_arg else None,
            }

        # Arguments named after fields of the returned type act as equality matches
        if filter_arg is None and rest:
            match = {}
            for arg in rest:
                field = target.get_field(arg.name)
                if field is None or field.is_relationship or field.type.name != arg.type.name:
                    return None
                match[arg.name] = field.name
            return {
                "action": "find",
                "type": target.name,
                "many": many,
                "match": match,
                "options": options_arg.name if options_arg and many else None,
            }
        return None

    def _input_argument(self, op: OperationDefinition, target: TypeDefinition) -> str | None:
        """Name of the single input-object argument whose fields all exist on ``target``."""
        inputs = []
        for arg in op.arguments:
            arg_type = self.model.get_type(arg.type.name)
            if arg_type is not None and arg_type.kind == TypeKind.INPUT:
                inputs.append((arg, arg_type))
        if len(inputs) != 1:
            return None
        arg, arg_type = inputs[0]
        for field in arg_type.fields:
            target_field = target.get_field(field.name)
            if target_field is None or target_field.is_relationship:
                return None
        return arg.name

    def _delete_target(self, suffix: str) -> TypeDefinition | None:
        """Object type named by a ``delete<Type>`` mutation, also after the type was renamed."""
        target = self._object(suffix)
        if target is not None:
            return target
        # Renamed types keep their graph label, which still yields the old name
        matches = [
            t for t in self.model.object_types if type_name_for_label(t.graph_label) == suffix
        ]
        return matches[0] if len(matches) == 1 else None

    def _mutation_table(self, op: OperationDefinition) -> dict[str, Any] | None:
        id_args = [a for a in op.arguments if self._is_id_argument(a)]

        if op.name.startswith(DELETE_PREFIX):
            returned = self._object(op.return_type.name)
            target = returned or self._delete_target(op.name[len(DELETE_PREFIX):])
            if target is None or len(id_args) != 1 or len(op.arguments) != 1:
                return None
            return {
                "action": "delete",
                "type": target.name,
                "id": id_args[0].name,
                "returns_node": returned is not None,
            }

        target = self._object(op.return_type.name)
        if target is None or op.return_type.is_list:
            return None
        input_arg = self._input_argument(op, target)
        if input_arg is None:
            return None
        if len(id_args) == 1 and len(op.arguments) == 2:
            return {
                "action": "update",
                "type": target.name,
                "id": id_args[0].name,
                "input": input_arg,
            }
        if not id_args and len(op.arguments) == 1:
            return {"action": "create", "type": target.name, "input": input_arg}
        return None
