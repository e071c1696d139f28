"""
Schema compiler core: IR, SDL codec, inference, validation and changes.
"""

from .changes import apply_changes, parse_change_script
from .diagnostics import Diagnostic, DiagnosticCode, Severity
from .inference import infer
from .sdl import parse, serialize
from .validator import validate

__all__ = [
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "apply_changes",
    "infer",
    "parse",
    "parse_change_script",
    "serialize",
    "validate",
]
