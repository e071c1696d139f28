"""
Graph-schema inference: raw graph schema -> SchemaModel.

One OBJECT type per node label, one scalar field per property, and one
relationship field per (node label, incident edge label, direction). The
generated API surface (filter and input types, Query and Mutation fields)
follows the conventions in ``core.conventions``.
"""

from __future__ import annotations

import logging

from ..runtime.operators import LIST_OPERATORS, SCALAR_OPERATORS
from .conventions import (
    CREATE_PREFIX,
    DELETE_PREFIX,
    FILTER_ARGUMENT,
    ID_FIELD,
    INPUT_ARGUMENT,
    OPTIONS_ARGUMENT,
    PAGE_OPTIONS_TYPE,
    SCALAR_FILTER_TYPES,
    UPDATE_PREFIX,
    filter_type_name,
    get_operation_name,
    input_type_name,
    list_operation_name,
    mutation_name,
    page_options_type,
    type_name_for_label,
)
from .errors import DuplicateNameError, EmptySchemaError
from .ir import (
    BUILTIN_SCALARS,
    ArgumentDefinition,
    Cardinality,
    EdgeDirection,
    EdgeLabelSpec,
    FieldDefinition,
    FieldKind,
    GraphSchema,
    OperationDefinition,
    OperationKind,
    PropertySpec,
    RelationshipSpec,
    SchemaModel,
    TypeDefinition,
    TypeKind,
    TypeRef,
)
from .naming import camel_case, pascal_case, pluralize, sanitize_name

logger = logging.getLogger(__name__)

# Graph property type -> GraphQL scalar (keys lower-case)
PROPERTY_TYPE_MAP: dict[str, str] = {
    "string": "String",
    "integer": "Int",
    "int": "Int",
    "long": "Int",
    "short": "Int",
    "byte": "Int",
    "float": "Float",
    "double": "Float",
    "decimal": "Float",
    "boolean": "Boolean",
    "bool": "Boolean",
}


def graphql_scalar(property_type: str) -> str:
    """Map a graph property type to a GraphQL scalar, defaulting to String."""
    return PROPERTY_TYPE_MAP.get(property_type.lower(), "String")


class _RelationshipCandidate:
    """A relationship field waiting for its final name."""

    def __init__(
        self,
        owner: str,
        name: str,
        target: str,
        edge: EdgeLabelSpec,
        direction: EdgeDirection,
        cardinality: Cardinality,
    ):
        self.owner = owner
        self.name = name
        self.target = target
        self.edge = edge
        self.direction = direction
        self.cardinality = cardinality


class SchemaInferrer:
    """
    Builds a SchemaModel from a GraphSchema.

    Usage:
        model = SchemaInferrer(graph_schema).infer()
    """

    def __init__(self, graph_schema: GraphSchema, generate_mutations: bool = True):
        self.graph_schema = graph_schema
        self.generate_mutations = generate_mutations
        self.model = SchemaModel()
        self.type_names: dict[str, str] = {}  # node label -> type name
        self.used_filters: list[str] = []

    def infer(self) -> SchemaModel:
        """
        Run inference.

        Raises:
            EmptySchemaError: If the graph schema declares no node labels
            DuplicateNameError: If two labels map to the same type name
        """
        if not self.graph_schema.nodes:
            raise EmptySchemaError("Graph schema declares no node labels")

        self._assign_type_names()
        for label, node in self.graph_schema.nodes.items():
            self._add_node_type(label, node.properties)

        self._add_relationships()

        object_types = list(self.model.types)
        for type_def in object_types:
            self._add_input_types(type_def)
        self._add_operator_inputs()
        self._add_page_options()

        for type_def in object_types:
            self._add_operations(type_def)

        logger.info(
            f"Inferred {len(object_types)} types, {len(self.model.queries)} queries, "
            f"{len(self.model.mutations)} mutations from "
            f"{len(self.graph_schema.edges)} edge labels"
        )
        return self.model

    # ------------------------------------------------------------------
    # Object types
    # ------------------------------------------------------------------

    def _reserved_type_names(self, base_names: set[str]) -> set[str]:
        reserved = {
            *BUILTIN_SCALARS,
            *SCALAR_FILTER_TYPES.values(),
            PAGE_OPTIONS_TYPE,
            self.model.query_type_name,
            self.model.mutation_type_name,
        }
        for base in base_names:
            reserved.update((input_type_name(base), filter_type_name(base)))
        return reserved

    def _assign_type_names(self) -> None:
        """Pick a type name per node label, clear of root, scalar and generated names."""
        bases: dict[str, str] = {}
        for label in self.graph_schema.nodes:
            name = type_name_for_label(label)
            if name in bases.values():
                raise DuplicateNameError(
                    f"Node label '{label}' maps to type '{name}', which is already defined"
                )
            bases[label] = name

        base_names = set(bases.values())
        reserved = self._reserved_type_names(base_names)
        taken: set[str] = set()

        def clashes(name: str, base: str) -> bool:
            if name in reserved or name in taken:
                return True
            if name == base:
                return False
            generated = {name, input_type_name(name), filter_type_name(name)}
            return bool(generated & (base_names | taken))

        for label, base in bases.items():
            name = base
            while clashes(name, base):
                name += "_"
            if name != base:
                logger.warning(
                    f"Node label '{label}' maps to reserved type name '{base}'; "
                    f"using '{name}'"
                )
            taken.update((name, input_type_name(name), filter_type_name(name)))
            self.type_names[label] = name

    def _add_node_type(self, label: str, properties: list[PropertySpec]) -> None:
        name = self.type_names[label]
        type_def = TypeDefinition(
            name=name,
            kind=TypeKind.OBJECT,
            label=label if label != name else None,
        )
        type_def.add_field(
            FieldDefinition(
                name=ID_FIELD,
                type=TypeRef(name="ID", nullable=False),
                is_identifier=True,
            )
        )
        for prop in properties:
            type_def.add_field(self._property_field(type_def, prop))

        self.model.add_type(type_def)
        logger.debug(f"Type {name} <- node label {label} ({len(properties)} properties)")

    @staticmethod
    def _property_field(type_def: TypeDefinition, prop: PropertySpec) -> FieldDefinition:
        name = sanitize_name(prop.name)
        # "id" is reserved for the element identifier
        if name == ID_FIELD:
            name = f"{ID_FIELD}_"
        while type_def.get_field(name) is not None:
            name += "_"
        scalar = graphql_scalar(prop.type)
        return FieldDefinition(
            name=name,
            type=TypeRef(name=scalar, is_list=prop.multivalued),
            property_name=prop.name if prop.name != name else None,
        )

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    @staticmethod
    def _cardinality(max_degree: int | None) -> Cardinality:
        return Cardinality.ONE if max_degree is not None and max_degree <= 1 else Cardinality.MANY

    def _candidates(self) -> list[_RelationshipCandidate]:
        candidates = []
        for edge in self.graph_schema.edges:
            source = self.type_names.get(edge.source)
            target = self.type_names.get(edge.target)
            if source is None or target is None:
                logger.warning(
                    f"Skipping edge label {edge.label}: "
                    f"{edge.source} -> {edge.target} references an unknown node label"
                )
                continue

            candidates.append(
                _RelationshipCandidate(
                    owner=source,
                    name=camel_case(edge.label),
                    target=target,
                    edge=edge,
                    direction=EdgeDirection.OUT,
                    cardinality=self._cardinality(edge.targets_per_source),
                )
            )

            incoming = self._cardinality(edge.sources_per_target)
            if edge.inverse_name:
                inverse = sanitize_name(edge.inverse_name)
            elif incoming == Cardinality.MANY:
                inverse = pluralize(camel_case(source))
            else:
                inverse = camel_case(source)
            candidates.append(
                _RelationshipCandidate(
                    owner=target,
                    name=inverse,
                    target=source,
                    edge=edge,
                    direction=EdgeDirection.IN,
                    cardinality=incoming,
                )
            )
        return candidates

    def _add_relationships(self) -> None:
        candidates = self._candidates()

        # Colliding derived names on one type all get the edge label appended
        counts: dict[tuple[str, str], int] = {}
        for candidate in candidates:
            key = (candidate.owner, candidate.name)
            counts[key] = counts.get(key, 0) + 1

        for candidate in candidates:
            owner = self.model.get_type(candidate.owner)
            assert owner is not None
            name = candidate.name
            if counts[(candidate.owner, name)] > 1 or owner.get_field(name) is not None:
                name = f"{name}{pascal_case(candidate.edge.label)}"
            while owner.get_field(name) is not None:
                name += "_"
            if name != candidate.name:
                logger.debug(f"Relationship {candidate.owner}.{candidate.name} renamed to {name}")

            many = candidate.cardinality == Cardinality.MANY
            arguments = []
            if many:
                arguments = [
                    ArgumentDefinition(
                        name=FILTER_ARGUMENT,
                        type=TypeRef(name=filter_type_name(candidate.target)),
                    ),
                    ArgumentDefinition(name=OPTIONS_ARGUMENT, type=TypeRef(name=PAGE_OPTIONS_TYPE)),
                ]
            owner.add_field(
                FieldDefinition(
                    name=name,
                    type=TypeRef(name=candidate.target, is_list=many),
                    kind=FieldKind.RELATIONSHIP,
                    relationship=RelationshipSpec(
                        edge_label=candidate.edge.label,
                        direction=candidate.direction,
                        cardinality=candidate.cardinality,
                    ),
                    arguments=arguments,
                )
            )

    # ------------------------------------------------------------------
    # Input types
    # ------------------------------------------------------------------

    def _add_input_types(self, type_def: TypeDefinition) -> None:
        input_fields = []
        filter_fields = []
        for field in type_def.scalar_fields:
            input_fields.append(
                FieldDefinition(
                    name=field.name,
                    type=TypeRef(name=field.type.name, is_list=field.is_list),
                )
            )
            filter_name = SCALAR_FILTER_TYPES.get(field.type.name, SCALAR_FILTER_TYPES["String"])
            if filter_name not in self.used_filters:
                self.used_filters.append(filter_name)
            filter_fields.append(FieldDefinition(name=field.name, type=TypeRef(name=filter_name)))

        self.model.add_type(
            TypeDefinition(
                name=input_type_name(type_def.name), kind=TypeKind.INPUT, fields=input_fields
            )
        )
        self.model.add_type(
            TypeDefinition(
                name=filter_type_name(type_def.name), kind=TypeKind.INPUT, fields=filter_fields
            )
        )

    def _add_operator_inputs(self) -> None:
        for scalar, filter_name in SCALAR_FILTER_TYPES.items():
            if filter_name not in self.used_filters:
                continue
            fields = []
            for operator in SCALAR_OPERATORS[scalar]:
                if operator in LIST_OPERATORS:
                    ref = TypeRef(name=scalar, is_list=True, item_nullable=False)
                else:
                    ref = TypeRef(name=scalar)
                fields.append(FieldDefinition(name=operator.value, type=ref))
            self.model.add_type(
                TypeDefinition(name=filter_name, kind=TypeKind.INPUT, fields=fields)
            )

    def _add_page_options(self) -> None:
        self.model.add_type(page_options_type())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _add_operations(self, type_def: TypeDefinition) -> None:
        name = type_def.name

        def id_arg() -> ArgumentDefinition:
            return ArgumentDefinition(name=ID_FIELD, type=TypeRef(name="ID", nullable=False))

        def input_arg() -> ArgumentDefinition:
            return ArgumentDefinition(
                name=INPUT_ARGUMENT, type=TypeRef(name=input_type_name(name), nullable=False)
            )

        self.model.add_operation(
            OperationDefinition(
                name=get_operation_name(name),
                kind=OperationKind.QUERY,
                arguments=[id_arg()],
                return_type=TypeRef(name=name),
            )
        )
        self.model.add_operation(
            OperationDefinition(
                name=list_operation_name(name),
                kind=OperationKind.QUERY,
                arguments=[
                    ArgumentDefinition(
                        name=FILTER_ARGUMENT, type=TypeRef(name=filter_type_name(name))
                    ),
                    ArgumentDefinition(name=OPTIONS_ARGUMENT, type=TypeRef(name=PAGE_OPTIONS_TYPE)),
                ],
                return_type=TypeRef(name=name, is_list=True),
            )
        )

        if not self.generate_mutations:
            return
        self.model.add_operation(
            OperationDefinition(
                name=mutation_name(CREATE_PREFIX, name),
                kind=OperationKind.MUTATION,
                arguments=[input_arg()],
                return_type=TypeRef(name=name),
            )
        )
        self.model.add_operation(
            OperationDefinition(
                name=mutation_name(UPDATE_PREFIX, name),
                kind=OperationKind.MUTATION,
                arguments=[id_arg(), input_arg()],
                return_type=TypeRef(name=name),
            )
        )
        self.model.add_operation(
            OperationDefinition(
                name=mutation_name(DELETE_PREFIX, name),
                kind=OperationKind.MUTATION,
                arguments=[id_arg()],
                return_type=TypeRef(name="Boolean"),
            )
        )


def infer(graph_schema: GraphSchema | dict, generate_mutations: bool = True) -> SchemaModel:
    """
    Infer a SchemaModel from a raw graph schema.

    Args:
        graph_schema: GraphSchema, or a raw document accepted by
            GraphSchema.from_document
        generate_mutations: Also generate create/update/delete mutations

    Returns:
        A model ready for validation
    """
    if isinstance(graph_schema, dict):
        graph_schema = GraphSchema.from_document(graph_schema)
    return SchemaInferrer(graph_schema, generate_mutations).infer()
