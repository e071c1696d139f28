"""
Root operation definitions (Query and Mutation fields).
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .enums import OperationKind
from .fields import ArgumentDefinition, DirectiveSpec, TypeRef


class OperationDefinition(BaseModel):
    """
    A field of the Query or Mutation root type.

    Attributes:
        name: Operation name
        kind: QUERY or MUTATION
        arguments: Ordered arguments
        return_type: Result type reference
        graph_query: Custom statement from @graphQuery, used verbatim by the
            generated resolver
        directives: Unrecognised directives, kept verbatim
        directive_issues: Invalid @graphQuery arguments
    """

    name: str
    kind: OperationKind
    arguments: list[ArgumentDefinition] = Field(default_factory=list)
    return_type: TypeRef
    graph_query: str | None = None
    description: str | None = None
    directives: list[DirectiveSpec] = Field(default_factory=list)
    directive_issues: dict[str, str] = Field(default_factory=dict)

    def get_argument(self, name: str) -> ArgumentDefinition | None:
        """Get argument by name."""
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None
