"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions, the registry and the OpenAPI parser.
"""

from __future__ import annotations

from .nodes import (
    AllOfNode,
    ArrayNode,
    EnumNode,
    ObjectNode,
    OperationDef,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    RequestBodyDef,
    ResponseDef,
    SchemaNode,
    SchemaRegistry,
    UnionNode,
    UntypedNode,
)
from .parser import SchemaParser

__all__ = [
    "SchemaNode",
    "RefNode",
    "PrimitiveNode",
    "EnumNode",
    "ArrayNode",
    "PropertyDef",
    "ObjectNode",
    "AllOfNode",
    "UnionNode",
    "UntypedNode",
    "RequestBodyDef",
    "ResponseDef",
    "OperationDef",
    "SchemaRegistry",
    "SchemaParser",
]
