"""
Name normalization.

Every schema, model, enum variant and operation name goes through
normalize() before it is compared, looked up or emitted.
"""

from __future__ import annotations

import re

# Anything that is not a letter or digit separates words
_SEPARATOR_PATTERN = re.compile(r"[^0-9A-Za-z]+")

_PATH_PARAM_PATTERN = re.compile(r"^\{(.+)\}$")


def normalize(name: str) -> str:
    """Convert a name to its canonical word-cased identifier.

    "user-name", "user_name" and "UserName" all become "UserName".
    Only the first letter of each word is changed, so the function is
    idempotent.
    """
    words = [w for w in _SEPARATOR_PATTERN.split(name) if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def description_lines(text: str | None) -> tuple[str, ...]:
    """Split a description into trimmed lines, dropping leading/trailing blank lines."""
    if not text:
        return ()
    lines = [line.strip() for line in text.splitlines()]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return tuple(lines)


def operation_name(method: str, path: str, operation_id: str | None = None) -> str:
    """Build an operation name from its operationId, or from method and path.

    Examples:
        GET /pets           -> GetPets
        GET /pets/{petId}   -> GetPetsByPetId
    """
    if operation_id:
        return normalize(operation_id)

    parts = [method]
    for segment in path.split("/"):
        if not segment:
            continue
        match = _PATH_PARAM_PATTERN.match(segment)
        if match:
            parts.extend(["by", match.group(1)])
        else:
            parts.append(segment)
    return normalize("_".join(parts))


def enum_variant_name(value: object, index: int) -> str:
    """Name an enum member after its value."""
    if isinstance(value, bool):
        return normalize(str(value).lower())
    if isinstance(value, int):
        return f"Value{value}" if value >= 0 else f"ValueMinus{abs(value)}"
    name = normalize(str(value))
    if not name:
        return f"Value{index}"
    if name[0].isdigit():
        return f"Value{name}"
    return name
