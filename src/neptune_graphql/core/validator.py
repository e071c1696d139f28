"""
Semantic validation and normalization for a SchemaModel.

Checks run in a fixed order so that fatal structural defects are reported
before anything is repaired:

1. duplicate type, operation and field names (fatal)
2. unresolved type references (fatal)
3. reserved-name collisions (repaired by suffixing)
4. identifier fields (missing: synthesised; several: fatal)
5. graph-mapping directive arguments (repaired to defaults)
6. object-typed fields without @relationship (repaired)

Repairs produce WARNING diagnostics. In strict mode every repair becomes a
FATAL instead. Running the validator on its own output adds no WARNINGs.
"""

from __future__ import annotations

import logging
import re

from .conventions import ID_FIELD, PAGE_OPTIONS_TYPE, page_options_type
from .diagnostics import Diagnostic, DiagnosticCode, Severity
from .errors import (
    DuplicateFieldError,
    DuplicateNameError,
    SchemaValidationError,
    UnresolvedReferenceError,
)
from .ir import (
    BUILTIN_SCALARS,
    Cardinality,
    EdgeDirection,
    FieldDefinition,
    FieldKind,
    OperationDefinition,
    OperationKind,
    RelationshipSpec,
    SchemaModel,
    TypeDefinition,
    TypeKind,
    TypeRef,
)
from .ir.schema import META_EXTRA_DEFINITIONS

logger = logging.getLogger(__name__)

# Names declared by definitions the model keeps verbatim (interfaces, unions, ...)
_EXTRA_NAME = re.compile(r"^\s*(?:interface|union|type|input|enum|scalar)\s+([_A-Za-z]\w*)")


class SchemaValidator:
    """
    Validates and repairs one SchemaModel in place.

    Usage:
        model, diagnostics = SchemaValidator(model, strict=False).run()
    """

    def __init__(self, model: SchemaModel, strict: bool = False):
        self.model = model
        self.strict = strict
        self.diagnostics: list[Diagnostic] = []

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _fatal(
        self,
        code: DiagnosticCode,
        message: str,
        path: str,
        error_cls: type[SchemaValidationError] = SchemaValidationError,
    ) -> SchemaValidationError:
        diagnostic = Diagnostic(severity=Severity.FATAL, code=code, message=message, path=path)
        self.diagnostics.append(diagnostic)
        logger.error(str(diagnostic))
        return error_cls(message, diagnostic=diagnostic)

    def _repair(self, code: DiagnosticCode, message: str, path: str) -> None:
        """Record a repair, or raise when strict."""
        if self.strict:
            raise self._fatal(code, message, path)
        diagnostic = Diagnostic(severity=Severity.WARNING, code=code, message=message, path=path)
        self.diagnostics.append(diagnostic)
        logger.warning(str(diagnostic))

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> tuple[SchemaModel, list[Diagnostic]]:
        self.check_duplicates()
        self.check_references()
        self.check_reserved_names()
        self.check_identifiers()
        self.check_directive_arguments()
        self.check_implicit_relationships()
        self.fill_relationship_defaults()

        warnings = [d for d in self.diagnostics if d.severity == Severity.WARNING]
        logger.info(
            f"Validated {len(self.model.types)} types "
            f"({'strict' if self.strict else 'non-strict'}): {len(warnings)} repairs"
        )
        return self.model, warnings

    # ------------------------------------------------------------------
    # 1. Duplicates
    # ------------------------------------------------------------------

    def check_duplicates(self) -> None:
        seen: set[str] = set()
        for type_def in self.model.types:
            if type_def.name in seen:
                message = f"Type '{type_def.name}' is defined more than once"
                self._fatal(DiagnosticCode.DUPLICATE_NAME, message, type_def.name)
                raise DuplicateNameError(message)
            seen.add(type_def.name)

        for root, operations in (
            (self.model.query_type_name, self.model.queries),
            (self.model.mutation_type_name, self.model.mutations),
        ):
            names: set[str] = set()
            for op in operations:
                if op.name in names:
                    message = f"Operation '{root}.{op.name}' is defined more than once"
                    self._fatal(DiagnosticCode.DUPLICATE_NAME, message, f"{root}.{op.name}")
                    raise DuplicateNameError(message)
                names.add(op.name)

        for type_def in self.model.types:
            names = set()
            for field in type_def.fields:
                if field.name in names:
                    raise self._fatal(
                        DiagnosticCode.DUPLICATE_FIELD,
                        f"Type '{type_def.name}' declares field '{field.name}' more than once",
                        f"{type_def.name}.{field.name}",
                        DuplicateFieldError,
                    )
                names.add(field.name)

    # ------------------------------------------------------------------
    # 2. References
    # ------------------------------------------------------------------

    def _known_type_names(self) -> set[str]:
        names = set(BUILTIN_SCALARS)
        names.update(t.name for t in self.model.types)
        for definition in self.model.metadata.get(META_EXTRA_DEFINITIONS, []):
            match = _EXTRA_NAME.match(definition)
            if match:
                names.add(match.group(1))
        return names

    def _check_ref(self, ref: TypeRef, path: str, known: set[str]) -> None:
        if ref.name not in known:
            raise self._fatal(
                DiagnosticCode.UNRESOLVED_REFERENCE,
                f"'{path}' refers to unknown type '{ref.name}'",
                path,
                UnresolvedReferenceError,
            )

    def check_references(self) -> None:
        known = self._known_type_names()
        for type_def in self.model.types:
            for field in type_def.fields:
                path = f"{type_def.name}.{field.name}"
                self._check_ref(field.type, path, known)
                for arg in field.arguments:
                    self._check_ref(arg.type, f"{path}({arg.name})", known)

        for op in self.model.operations:
            path = _operation_path(self.model, op)
            self._check_ref(op.return_type, path, known)
            for arg in op.arguments:
                self._check_ref(arg.type, f"{path}({arg.name})", known)

    # ------------------------------------------------------------------
    # 3. Reserved names
    # ------------------------------------------------------------------

    def _free_type_name(self, name: str) -> str:
        while self.model.has_type(name):
            name += "_"
        return name

    @staticmethod
    def _free_field_name(type_def: TypeDefinition, name: str) -> str:
        while type_def.get_field(name) is not None:
            name += "_"
        return name

    def _rename_reserved_type(
        self, type_def: TypeDefinition, reason: str, every_reference: bool = False
    ) -> None:
        old_name = type_def.name
        new_name = self._free_type_name(f"{old_name}_")
        self._repair(
            DiagnosticCode.RESERVED_NAME,
            f"Type '{old_name}' {reason}; renamed to '{new_name}'",
            old_name,
        )
        if type_def.kind == TypeKind.OBJECT and type_def.label is None:
            type_def.label = old_name
        type_def.name = new_name

        def _retarget(ref: TypeRef) -> TypeRef:
            if ref.name == old_name:
                return ref.model_copy(update={"name": new_name})
            return ref

        # A root type name can only have meant this type. For scalar names,
        # only relationship fields can have meant it.
        for other in self.model.types:
            for field in other.fields:
                if every_reference or field.is_relationship:
                    field.type = _retarget(field.type)
                if every_reference:
                    for arg in field.arguments:
                        arg.type = _retarget(arg.type)
        if every_reference:
            for op in self.model.operations:
                op.return_type = _retarget(op.return_type)
                for arg in op.arguments:
                    arg.type = _retarget(arg.type)

    def check_reserved_names(self) -> None:
        for type_def in list(self.model.types):
            if type_def.name in BUILTIN_SCALARS:
                self._rename_reserved_type(type_def, "shadows a built-in scalar")
            elif self.model.root_kind(type_def.name) is not None:
                self._rename_reserved_type(
                    type_def, "collides with a root operation type", every_reference=True
                )
            elif type_def.name == PAGE_OPTIONS_TYPE and type_def.kind != TypeKind.INPUT:
                self._rename_reserved_type(type_def, "must be the pagination input type")
                if self._page_options_referenced():
                    self.model.add_type(page_options_type())

        for type_def in self.model.object_types:
            field = type_def.get_field(ID_FIELD)
            if field is None or field.is_identifier:
                continue
            if _is_conventional_identifier(field) and not type_def.identifier_fields:
                continue  # marked as the identifier in check_identifiers
            new_name = self._free_field_name(type_def, f"{ID_FIELD}_")
            self._repair(
                DiagnosticCode.RESERVED_NAME,
                f"Field '{ID_FIELD}' is reserved for the identifier; renamed to '{new_name}'",
                f"{type_def.name}.{ID_FIELD}",
            )
            if field.property_name is None:
                field.property_name = field.name
            field.name = new_name

    def _page_options_referenced(self) -> bool:
        for type_def in self.model.types:
            for field in type_def.fields:
                if any(a.type.name == PAGE_OPTIONS_TYPE for a in field.arguments):
                    return True
        return any(
            a.type.name == PAGE_OPTIONS_TYPE for op in self.model.operations for a in op.arguments
        )

    # ------------------------------------------------------------------
    # 4. Identifiers
    # ------------------------------------------------------------------

    def check_identifiers(self) -> None:
        for type_def in self.model.object_types:
            identifiers = type_def.identifier_fields
            if len(identifiers) > 1:
                names = ", ".join(f.name for f in identifiers)
                raise self._fatal(
                    DiagnosticCode.MULTIPLE_IDENTIFIERS,
                    f"Type '{type_def.name}' has more than one identifier field: {names}",
                    type_def.name,
                )
            if identifiers:
                continue

            field = type_def.get_field(ID_FIELD)
            if field is not None and _is_conventional_identifier(field):
                field.is_identifier = True
                logger.debug(f"{type_def.name}.{ID_FIELD} marked as identifier")
                continue

            self._repair(
                DiagnosticCode.MISSING_IDENTIFIER,
                f"Type '{type_def.name}' has no identifier field; added '{ID_FIELD}: ID!'",
                type_def.name,
            )
            type_def.add_field(
                FieldDefinition(
                    name=ID_FIELD, type=TypeRef(name="ID", nullable=False), is_identifier=True
                ),
                position=0,
            )

    # ------------------------------------------------------------------
    # 5. Directive arguments
    # ------------------------------------------------------------------

    def _repair_issues(self, issues: dict[str, str], path: str) -> None:
        for key, literal in list(issues.items()):
            self._repair(
                DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH,
                f"Invalid directive argument @{key.replace('.', '(', 1)}: {literal})",
                path,
            )
            del issues[key]

    def check_directive_arguments(self) -> None:
        object_names = {t.name for t in self.model.object_types}

        for type_def in self.model.types:
            self._repair_issues(type_def.directive_issues, type_def.name)
            for field in type_def.fields:
                path = f"{type_def.name}.{field.name}"
                self._repair_issues(field.directive_issues, path)
                if not field.is_relationship:
                    continue

                if field.type.name not in object_names:
                    self._repair(
                        DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH,
                        f"@relationship on a field of non-object type '{field.type.name}' removed",
                        path,
                    )
                    field.kind = FieldKind.SCALAR
                    field.relationship = None
                    continue

                spec = field.relationship
                expected = Cardinality.MANY if field.is_list else Cardinality.ONE
                if spec is not None and spec.cardinality not in (None, expected):
                    self._repair(
                        DiagnosticCode.DIRECTIVE_ARGUMENT_MISMATCH,
                        f"Cardinality {spec.cardinality.value} contradicts field type "
                        f"'{field.type}'; set to {expected.value}",
                        path,
                    )
                    spec.cardinality = expected

        for op in self.model.operations:
            self._repair_issues(op.directive_issues, _operation_path(self.model, op))

    # ------------------------------------------------------------------
    # 6. Relationships
    # ------------------------------------------------------------------

    def check_implicit_relationships(self) -> None:
        object_names = {t.name for t in self.model.object_types}
        for type_def in self.model.object_types:
            for field in type_def.fields:
                if field.is_relationship or field.type.name not in object_names:
                    continue
                self._repair(
                    DiagnosticCode.IMPLICIT_RELATIONSHIP,
                    f"Field of object type '{field.type.name}' has no @relationship; "
                    f"mapped to edge '{field.name}'",
                    f"{type_def.name}.{field.name}",
                )
                field.kind = FieldKind.RELATIONSHIP
                field.relationship = RelationshipSpec()

    def fill_relationship_defaults(self) -> None:
        """Fill in omitted @relationship arguments."""
        for type_def in self.model.object_types:
            for field in type_def.relationship_fields:
                spec = field.relationship or RelationshipSpec()
                if spec.edge_label is None:
                    spec.edge_label = field.name
                if spec.direction is None:
                    spec.direction = EdgeDirection.OUT
                if spec.cardinality is None:
                    spec.cardinality = Cardinality.MANY if field.is_list else Cardinality.ONE
                field.relationship = spec


def _operation_path(model: SchemaModel, op: OperationDefinition) -> str:
    root = model.query_type_name if op.kind == OperationKind.QUERY else model.mutation_type_name
    return f"{root}.{op.name}"


def _is_conventional_identifier(field: FieldDefinition) -> bool:
    return field.name == ID_FIELD and field.type.name == "ID" and not field.is_list


def validate(model: SchemaModel, strict: bool = False) -> tuple[SchemaModel, list[Diagnostic]]:
    """
    Validate and normalize a model in place.

    Args:
        model: Model to check
        strict: Treat every repairable issue as fatal

    Returns:
        Tuple of (model, WARNING diagnostics for the repairs made)

    Raises:
        SchemaValidationError: On a FATAL issue (or any issue when strict)
        DuplicateNameError: If two types or operations share a name
    """
    return SchemaValidator(model, strict).run()
