"""
Name conversion helpers shared by inference, validation and generation.
"""

from __future__ import annotations

import re

_INVALID_NAME_CHARS = re.compile(r"[^_0-9A-Za-z]")
_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")
_VALID_NAME = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


def is_valid_name(name: str) -> bool:
    """Check that a string is a legal GraphQL name."""
    return bool(_VALID_NAME.match(name))


def sanitize_name(raw: str) -> str:
    """Replace characters GraphQL names cannot hold, keeping the rest as is."""
    name = _INVALID_NAME_CHARS.sub("_", raw)
    if not name:
        return "_"
    if name[0].isdigit():
        name = "_" + name
    return name


def pascal_case(raw: str) -> str:
    """
    Convert a label to PascalCase.

    Examples:
        - WORKS_AT -> WorksAt
        - airport -> Airport
        - continentCode -> ContinentCode
    """
    words = [w for w in _WORD_SPLIT.split(raw) if w]
    parts = []
    for word in words:
        if word.isupper():
            word = word.lower()
        parts.append(word[0].upper() + word[1:])
    result = "".join(parts)
    return sanitize_name(result) if result else sanitize_name(raw)


def camel_case(raw: str) -> str:
    """Convert a label to camelCase (WORKS_AT -> worksAt)."""
    name = pascal_case(raw)
    if name.startswith("_"):
        return name
    return name[0].lower() + name[1:]


def pluralize(word: str) -> str:
    """Naive English plural, good enough for generated field names."""
    lower = word.lower()
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"
