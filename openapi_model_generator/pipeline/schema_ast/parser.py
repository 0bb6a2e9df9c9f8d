"""
OpenAPI parser that builds the schema AST and registry.

Phase 1 of the pipeline: turn the decoded document into SchemaNode trees
without resolving references or doing language-specific processing.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import InvalidSchemaShapeError
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

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class SchemaParser:
    """Parses an OpenAPI document into a SchemaRegistry."""

    # Primitive type names
    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean"}

    def parse(self, document: dict[str, Any]) -> SchemaRegistry:
        """
        Parse an OpenAPI document.

        Args:
            document: The decoded OpenAPI document

        Returns:
            SchemaRegistry with schemas, request bodies, responses and operations
        """
        components = document.get("components") or {}

        schemas = {}
        for name, raw in (components.get("schemas") or {}).items():
            schemas[name] = self.parse_schema(raw, f"#/components/schemas/{name}")

        request_bodies = {}
        for name, raw in (components.get("requestBodies") or {}).items():
            request_bodies[name] = self._parse_request_body(raw, f"#/components/requestBodies/{name}")

        responses = {}
        for name, raw in (components.get("responses") or {}).items():
            responses[name] = self._parse_response(raw, f"#/components/responses/{name}")

        operations = []
        for path, path_item in (document.get("paths") or {}).items():
            if not isinstance(path_item, dict) or "$ref" in path_item:
                logger.debug("Skipping path item %s", path)
                continue
            for method, raw_operation in path_item.items():
                if method not in HTTP_METHODS or not isinstance(raw_operation, dict):
                    continue
                operations.append(self._parse_operation(method, path, raw_operation))

        logger.debug(
            "Parsed %d schemas, %d request bodies, %d responses, %d operations",
            len(schemas),
            len(request_bodies),
            len(responses),
            len(operations),
        )
        return SchemaRegistry.build(schemas, request_bodies, responses, operations)

    def parse_schema(self, schema: Any, path: str) -> SchemaNode:
        """
        Parse a schema fragment recursively.

        Args:
            schema: The raw schema (normally a dict)
            path: Current path in the document (for error messages)

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            raise InvalidSchemaShapeError(f"Expected a schema object, got {type(schema).__name__}", path)

        common = self._extract_common(schema, path)

        # Handle $ref
        if "$ref" in schema:
            return RefNode(ref_path=schema["$ref"], **common)

        # Handle allOf
        if "allOf" in schema:
            return self._parse_allof_node(schema, path, common)

        # Handle oneOf/anyOf
        if "oneOf" in schema or "anyOf" in schema:
            return self._parse_union_node(schema, path, common)

        # Handle enum (takes priority over the declared type)
        if "enum" in schema:
            return self._parse_enum_node(schema, common)

        type_value = schema.get("type")

        if type_value == "array":
            items = schema.get("items")
            return ArrayNode(
                items=self.parse_schema(items, f"{path}/items") if items is not None else None,
                **common,
            )

        if type_value == "object" or "properties" in schema or "additionalProperties" in schema:
            return self._parse_object_node(schema, path, common)

        if type_value in self.PRIMITIVE_TYPES:
            return PrimitiveNode(type_name=type_value, format=schema.get("format"), **common)

        # Fallback: no usable type information
        return UntypedNode(**common)

    def _extract_common(self, schema: dict[str, Any], path: str) -> dict[str, Any]:
        """Extract metadata shared by every node kind."""
        nullable = schema.get("nullable")
        return {
            "source_path": path,
            "description": schema.get("description"),
            "title": schema.get("title"),
            "nullable": bool(nullable) if nullable is not None else None,
            "extensions": {k: v for k, v in schema.items() if k.startswith("x-")},
        }

    def _parse_allof_node(self, schema: dict[str, Any], path: str, common: dict[str, Any]) -> AllOfNode:
        """Parse an allOf node. Sibling properties become a trailing fragment."""
        fragments = [self.parse_schema(fragment, f"{path}/allOf/{i}") for i, fragment in enumerate(schema["allOf"])]

        if "properties" in schema or "required" in schema:
            sibling = {k: schema[k] for k in ("properties", "required", "additionalProperties") if k in schema}
            fragments.append(self._parse_object_node(sibling, path, {"source_path": path}))

        return AllOfNode(fragments=tuple(fragments), **common)

    def _parse_union_node(self, schema: dict[str, Any], path: str, common: dict[str, Any]) -> UnionNode:
        """Parse a oneOf or anyOf union node."""
        keyword = "oneOf" if "oneOf" in schema else "anyOf"
        variants = tuple(self.parse_schema(variant, f"{path}/{keyword}/{i}") for i, variant in enumerate(schema[keyword]))
        return UnionNode(variants=variants, keyword=keyword, **common)

    def _parse_enum_node(self, schema: dict[str, Any], common: dict[str, Any]) -> EnumNode:
        """Parse an enum node. Null members are dropped."""
        values = tuple(v for v in schema["enum"] if v is not None)
        value_type = schema.get("type") or (self._infer_type(values[0]) if values else "string")
        return EnumNode(values=values, value_type=value_type, **common)

    def _parse_object_node(self, schema: dict[str, Any], path: str, common: dict[str, Any]) -> ObjectNode:
        """Parse an object type node."""
        required = tuple(schema.get("required") or ())

        properties = []
        for prop_name, prop_schema in (schema.get("properties") or {}).items():
            properties.append(
                PropertyDef(
                    name=prop_name,
                    schema=self.parse_schema(prop_schema, f"{path}/properties/{prop_name}"),
                    is_required=prop_name in required,
                )
            )

        additional: bool | SchemaNode | None = None
        raw_additional = schema.get("additionalProperties")
        if raw_additional is True or raw_additional == {}:
            additional = True
        elif isinstance(raw_additional, dict):
            additional = self.parse_schema(raw_additional, f"{path}/additionalProperties")

        return ObjectNode(
            properties=tuple(properties),
            required=required,
            additional_properties=additional,
            **common,
        )

    def _parse_content(self, raw: dict[str, Any], path: str) -> dict[str, SchemaNode]:
        """Parse a content map, keeping media types that carry a schema."""
        content = {}
        for media_type, media in (raw.get("content") or {}).items():
            if isinstance(media, dict) and media.get("schema") is not None:
                content[media_type] = self.parse_schema(media["schema"], f"{path}/content/{media_type}/schema")
        return content

    def _parse_request_body(self, raw: dict[str, Any], path: str) -> RequestBodyDef | RefNode:
        if "$ref" in raw:
            return RefNode(ref_path=raw["$ref"], source_path=path)
        return RequestBodyDef(
            source_path=path,
            content=self._parse_content(raw, path),
            required=bool(raw.get("required", False)),
            description=raw.get("description"),
        )

    def _parse_response(self, raw: dict[str, Any], path: str) -> ResponseDef | RefNode:
        if "$ref" in raw:
            return RefNode(ref_path=raw["$ref"], source_path=path)
        return ResponseDef(
            source_path=path,
            content=self._parse_content(raw, path),
            description=raw.get("description"),
        )

    def _parse_operation(self, method: str, path: str, raw: dict[str, Any]) -> OperationDef:
        """Parse one path operation."""
        op_path = f"#/paths/{path}/{method}"

        request_body = None
        if isinstance(raw.get("requestBody"), dict):
            request_body = self._parse_request_body(raw["requestBody"], f"{op_path}/requestBody")

        responses = {}
        for status, raw_response in (raw.get("responses") or {}).items():
            if isinstance(raw_response, dict):
                responses[str(status)] = self._parse_response(raw_response, f"{op_path}/responses/{status}")

        return OperationDef(
            method=method,
            path=path,
            operation_id=raw.get("operationId"),
            request_body=request_body,
            responses=responses,
        )

    def _infer_type(self, value: Any) -> str:
        """Infer the schema type from a Python value."""
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, float):
            return "number"
        return "string"
