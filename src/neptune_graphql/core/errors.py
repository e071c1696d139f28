"""
Error types for schema parsing, inference, validation, changes and generation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .diagnostics import Diagnostic


class NeptuneGraphQLError(Exception):
    """Base exception for all neptune-graphql errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class SchemaSyntaxError(NeptuneGraphQLError):
    """
    Raised when SDL text or a change script cannot be parsed.

    Examples:
    - Unbalanced braces in SDL
    - Unexpected tokens
    - Malformed JSON in a change script
    - Unknown change action
    """

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None

    @property
    def column(self) -> int | None:
        return self.context.column if self.context else None


class UnknownTypeError(NeptuneGraphQLError):
    """Raised when a relationship points at a type that is not in the model."""

    pass


class NotARelationshipError(NeptuneGraphQLError):
    """Raised when a relationship is requested from a scalar field."""

    pass


class DuplicateNameError(NeptuneGraphQLError):
    """
    Raised when a name is inserted twice into the same scope.

    Examples:
    - Two types with the same name
    - Two Query fields with the same name
    - Adding a field that already exists on a type
    """

    pass


class EmptySchemaError(NeptuneGraphQLError):
    """Raised when a graph schema declares no node labels."""

    pass


class SchemaValidationError(NeptuneGraphQLError):
    """
    Raised when validation finds a FATAL issue.

    Carries the diagnostic that caused the failure.
    """

    def __init__(
        self,
        message: str,
        diagnostic: Diagnostic | None = None,
        context: ErrorContext | None = None,
    ):
        self.diagnostic = diagnostic
        super().__init__(message, context)


class DuplicateFieldError(SchemaValidationError):
    """Raised when a type declares the same field name twice."""

    pass


class UnresolvedReferenceError(SchemaValidationError):
    """Raised when a field, argument or operation refers to a missing type."""

    pass


class ChangeTargetNotFoundError(NeptuneGraphQLError):
    """
    Raised when a change operation names a type or field that does not exist.

    Operations before the failing one stay applied.
    """

    def __init__(self, message: str, index: int | None = None, path: str | None = None):
        self.index = index
        self.path = path
        super().__init__(message)


class UnsupportedOperationError(NeptuneGraphQLError):
    """
    Raised when resolver generation meets something the chosen query
    language cannot translate.

    Examples:
    - A BOTH-direction relationship when generating Gremlin
    - A Query field that fits no resolver convention and has no @graphQuery
    """

    pass


@dataclass
class ErrorContext:
    """
    Source location for an error.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source text around the error
        source: Optional name of the input (e.g. "change script")
    """

    line: int
    column: int
    snippet: str | None = None
    source: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "schema.graphql:10:5"
        """
        location = f"{self.source or '<sdl>'}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet shows up to 2 lines before the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def snippet_around(text: str, line: int, before: int = 2, after: int = 2) -> str:
    """Return the lines of ``text`` around a 1-indexed line number."""
    lines = text.split("\n")
    start = max(1, line - before)
    end = min(len(lines), line + after)
    return "\n".join(lines[start - 1 : end])


def make_syntax_error(
    message: str,
    line: int,
    column: int,
    text: str | None = None,
    source: str | None = None,
) -> SchemaSyntaxError:
    """
    Helper to create a SchemaSyntaxError with context.

    Args:
        message: Error description
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        text: Optional full source text, used to build a snippet
        source: Optional input name

    Returns:
        SchemaSyntaxError with context attached
    """
    snippet = snippet_around(text, line, after=0) if text else None
    context = ErrorContext(line=line, column=column, snippet=snippet, source=source)
    return SchemaSyntaxError(message, context)
