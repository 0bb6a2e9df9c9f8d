"""
AST (Abstract Syntax Tree) node definitions for OpenAPI schemas.

These nodes represent the parsed structure of an OpenAPI 3.0 document
before any reference resolution or language-specific processing.
Nodes are immutable once the registry has been built.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class SchemaNode:
    """Base class for all AST nodes."""

    # Original source location in the document (for error messages)
    source_path: str = ""

    description: str | None = None
    title: str | None = None

    # None means "not stated", which lets a $ref site inherit the target's flag
    nullable: bool | None = None

    # Raw x-* extensions
    extensions: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_nullable(self) -> bool:
        return bool(self.nullable)


@dataclass(frozen=True)
class RefNode(SchemaNode):
    """Represents a $ref (unresolved reference)."""

    ref_path: str = ""  # e.g. "#/components/schemas/Pet"


@dataclass(frozen=True)
class PrimitiveNode(SchemaNode):
    """Represents a string, integer, number or boolean."""

    type_name: str = ""
    format: str | None = None


@dataclass(frozen=True)
class EnumNode(SchemaNode):
    """Represents an enum constant list."""

    values: tuple[Any, ...] = ()
    value_type: str = "string"  # "string", "integer", "number" or "boolean"


@dataclass(frozen=True)
class ArrayNode(SchemaNode):
    """Represents an array type."""

    items: SchemaNode | None = None


@dataclass(frozen=True)
class PropertyDef:
    """Represents a property in an object."""

    name: str = ""
    schema: SchemaNode | None = None
    is_required: bool = False


@dataclass(frozen=True)
class ObjectNode(SchemaNode):
    """Represents an object type with properties."""

    properties: tuple[PropertyDef, ...] = ()
    required: tuple[str, ...] = ()

    # None when absent, True for free-form values, or the value schema
    additional_properties: bool | SchemaNode | None = None

    @property
    def has_properties(self) -> bool:
        return bool(self.properties)


@dataclass(frozen=True)
class AllOfNode(SchemaNode):
    """Represents an allOf composition."""

    fragments: tuple[SchemaNode, ...] = ()


@dataclass(frozen=True)
class UnionNode(SchemaNode):
    """Represents a oneOf or anyOf union."""

    variants: tuple[SchemaNode, ...] = ()
    keyword: str = "oneOf"  # "oneOf" or "anyOf"


@dataclass(frozen=True)
class UntypedNode(SchemaNode):
    """A fragment without usable type information."""


@dataclass(frozen=True)
class RequestBodyDef:
    """A request body: media type -> schema."""

    source_path: str = ""
    content: Mapping[str, SchemaNode] = field(default_factory=dict)
    required: bool = False
    description: str | None = None

    def primary_content(self) -> tuple[str, SchemaNode] | None:
        return _primary_content(self.content)


@dataclass(frozen=True)
class ResponseDef:
    """A response: media type -> schema."""

    source_path: str = ""
    content: Mapping[str, SchemaNode] = field(default_factory=dict)
    description: str | None = None

    def primary_content(self) -> tuple[str, SchemaNode] | None:
        return _primary_content(self.content)


@dataclass(frozen=True)
class OperationDef:
    """A path operation with its request body and responses."""

    method: str = ""
    path: str = ""
    operation_id: str | None = None
    request_body: RequestBodyDef | RefNode | None = None
    responses: Mapping[str, ResponseDef | RefNode] = field(default_factory=dict)


@dataclass(frozen=True)
class SchemaRegistry:
    """Read-only view of every schema-bearing section of a document."""

    schemas: Mapping[str, SchemaNode] = field(default_factory=dict)
    request_bodies: Mapping[str, RequestBodyDef | RefNode] = field(default_factory=dict)
    responses: Mapping[str, ResponseDef | RefNode] = field(default_factory=dict)
    operations: tuple[OperationDef, ...] = ()

    @classmethod
    def build(
        cls,
        schemas: dict[str, SchemaNode],
        request_bodies: dict[str, RequestBodyDef | RefNode],
        responses: dict[str, ResponseDef | RefNode],
        operations: list[OperationDef],
    ) -> SchemaRegistry:
        return cls(
            schemas=MappingProxyType(dict(schemas)),
            request_bodies=MappingProxyType(dict(request_bodies)),
            responses=MappingProxyType(dict(responses)),
            operations=tuple(operations),
        )


def _primary_content(content: Mapping[str, SchemaNode]) -> tuple[str, SchemaNode] | None:
    """Prefer application/json, otherwise the first media type with a schema."""
    if JSON_MEDIA_TYPE in content:
        return JSON_MEDIA_TYPE, content[JSON_MEDIA_TYPE]
    for media_type, schema in content.items():
        return media_type, schema
    return None
