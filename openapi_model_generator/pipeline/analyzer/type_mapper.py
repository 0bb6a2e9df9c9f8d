"""
Type mapper: (primitive kind, format) -> TypeRef.

Object schemas with declared properties are not mapped here; the
synthesizer turns them into structs.
"""

from __future__ import annotations

from collections.abc import Mapping

from ..schema_ast.nodes import ObjectNode
from .ir_nodes import UNTYPED, PrimitiveKind, TypeRef


class ObjectShape:
    """Classification of an object node."""

    STRUCT = "struct"  # declared properties
    MAP = "map"  # only additionalProperties
    EMPTY = "empty"  # neither


class TypeMapper:
    """Maps schema primitives to target types."""

    # (kind, format) -> primitive; a None format is the per-kind default
    TYPE_MAP: dict[tuple[str, str | None], PrimitiveKind] = {
        ("string", None): PrimitiveKind.TEXT,
        ("string", "uuid"): PrimitiveKind.UNIQUE_ID,
        ("string", "date-time"): PrimitiveKind.TIMESTAMP,
        ("string", "date"): PrimitiveKind.DATE,
        ("integer", None): PrimitiveKind.INTEGER64,
        ("number", None): PrimitiveKind.FLOAT64,
        ("boolean", None): PrimitiveKind.BOOLEAN,
    }

    def __init__(self, format_overrides: Mapping[str, str] | None = None):
        """
        Initialize the mapper.

        Args:
            format_overrides: Format hint -> literal target type, checked first
        """
        self.format_overrides = dict(format_overrides or {})

    def map_primitive(self, kind: str | None, format: str | None = None) -> TypeRef:
        """
        Map a primitive kind and optional format to a TypeRef.

        Unknown kinds map to the untyped fallback; unknown formats fall
        back to the kind's default.
        """
        if format and format in self.format_overrides:
            return TypeRef.custom(self.format_overrides[format])

        if kind is None:
            return UNTYPED

        fmt = format.lower() if format else None
        primitive = self.TYPE_MAP.get((kind, fmt)) or self.TYPE_MAP.get((kind, None))
        if primitive is None:
            return UNTYPED
        return TypeRef.primitive(primitive)

    def map_enum_value_type(self, value_type: str) -> PrimitiveKind:
        """Underlying primitive of an enum."""
        return PrimitiveKind.INTEGER64 if value_type == "integer" else PrimitiveKind.TEXT

    @staticmethod
    def object_shape(node: ObjectNode) -> str:
        """Classify an object node as struct, map or empty."""
        if node.has_properties:
            return ObjectShape.STRUCT
        if node.additional_properties is not None:
            return ObjectShape.MAP
        return ObjectShape.EMPTY
