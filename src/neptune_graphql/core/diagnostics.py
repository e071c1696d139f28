"""
Diagnostics reported by the schema validator.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """Diagnostic severity."""

    WARNING = "WARNING"  # repaired automatically, pass continues
    FATAL = "FATAL"  # pass aborted with an exception


class DiagnosticCode(str, Enum):
    """Stable identifiers for every issue the validator knows about."""

    DUPLICATE_NAME = "DUPLICATE_NAME"
    DUPLICATE_FIELD = "DUPLICATE_FIELD"
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"
    MISSING_IDENTIFIER = "MISSING_IDENTIFIER"
    MULTIPLE_IDENTIFIERS = "MULTIPLE_IDENTIFIERS"
    RESERVED_NAME = "RESERVED_NAME"
    DIRECTIVE_ARGUMENT_MISMATCH = "DIRECTIVE_ARGUMENT_MISMATCH"
    IMPLICIT_RELATIONSHIP = "IMPLICIT_RELATIONSHIP"


class Diagnostic(BaseModel):
    """
    A single validator finding.

    Attributes:
        severity: WARNING (repaired) or FATAL (raised)
        code: Stable issue identifier
        message: Human-readable description
        path: Location in the model, e.g. "Person.worksAt"
    """

    severity: Severity
    code: DiagnosticCode
    message: str
    path: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.code.value} at {self.path}: {self.message}"
