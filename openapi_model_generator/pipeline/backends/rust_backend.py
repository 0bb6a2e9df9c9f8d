"""
Rust code generation backend.

Generates serde-annotated Rust types from the canonical model set.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ..analyzer.ir_nodes import (
    EmptyStruct,
    EnumModel,
    Field,
    PrimitiveKind,
    RequestBinding,
    ResolvedModel,
    ResponseBinding,
    Struct,
    SynthesisResult,
    TypeAlias,
    TypeKind,
    TypeRef,
    UnionMode,
    UnionModel,
)
from ..errors import NameCollisionError
from .base import CodeBackend

logger = logging.getLogger(__name__)

RUST_RESERVED_KEYWORDS = frozenset(
    [
        "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else", "enum",
        "extern", "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod",
        "move", "mut", "pub", "ref", "return", "self", "Self", "static", "struct", "super",
        "trait", "true", "type", "unsafe", "use", "where", "while", "abstract", "become",
        "box", "do", "final", "macro", "override", "priv", "try", "typeof", "unsized",
        "virtual", "yield",
    ]
)  # fmt: skip

# Keywords that cannot be written as raw identifiers
_NON_RAW_KEYWORDS = frozenset(["crate", "self", "Self", "super"])

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_IDENT = re.compile(r"[^0-9A-Za-z]+")


def snake_case(name: str) -> str:
    """Convert a property name to a snake_case identifier."""
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _NON_IDENT.sub("_", text).strip("_").lower()
    if not text:
        return "field"
    if text[0].isdigit():
        return f"_{text}"
    return text


def escape_field_name(name: str) -> str:
    """Rust field identifier for a snake_case name."""
    if name in _NON_RAW_KEYWORDS:
        return f"{name}_"
    if name in RUST_RESERVED_KEYWORDS:
        return f"r#{name}"
    return name


def escape_type_name(name: str) -> str:
    """Rust type or variant identifier for a normalized name."""
    if name in RUST_RESERVED_KEYWORDS:
        return f"{name}Value"
    return name


def rust_string(value: str) -> str:
    """Rust string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class RustBackend(CodeBackend):
    """Rust code generation backend."""

    TEMPLATE_LANG = "rust"
    FILE_EXTENSION = "rs"
    TEMPLATE_NAMES = ("prefix", "struct", "enum", "union", "alias", "request", "response", "mod")

    TYPE_MAP = {
        PrimitiveKind.TEXT: "String",
        PrimitiveKind.UNIQUE_ID: "Uuid",
        PrimitiveKind.TIMESTAMP: "DateTime<Utc>",
        PrimitiveKind.DATE: "NaiveDate",
        PrimitiveKind.INTEGER64: "i64",
        PrimitiveKind.FLOAT64: "f64",
        PrimitiveKind.BOOLEAN: "bool",
    }

    UNTYPED_TYPE = "serde_json::Value"

    UNION_DOCS = {
        UnionMode.EXCLUSIVE: "Exactly one variant matches (oneOf).",
        UnionMode.INCLUSIVE: "Several variants may match (anyOf); the first matching variant is used.",
    }

    def generate(self, result: SynthesisResult, generation_comment: str = "") -> str:
        """Generate the models file."""
        parts = [
            self.render(
                "prefix",
                generation_comment=generation_comment,
                imports=self._imports(result),
            )
        ]

        for model in result.models:
            parts.append(self._render_model(model))

        for request in result.requests:
            parts.append(self.render("request", **self._request_context(request)))

        for response in result.responses:
            parts.append(self.render("response", **self._response_context(response)))

        logger.debug("Rendered %d models", len(result.models))
        return "\n".join(parts)

    def generate_module(self, models_file_name: str, generation_comment: str = "") -> str:
        """Generate the module file declaring the models module."""
        module = models_file_name[: -len(".rs")] if models_file_name.endswith(".rs") else models_file_name
        return self.render("mod", generation_comment=generation_comment, module=module)

    def translate_type(self, type_ref: TypeRef, boxed: bool = False) -> str:
        """Translate IR type to Rust type string."""
        if type_ref.kind is TypeKind.PRIMITIVE:
            return self.TYPE_MAP[type_ref.primitive_kind]

        if type_ref.kind is TypeKind.NAMED:
            name = escape_type_name(type_ref.name)
            return f"Box<{name}>" if boxed else name

        if type_ref.kind is TypeKind.LIST:
            return f"Vec<{self.translate_type(type_ref.item)}>"

        if type_ref.kind is TypeKind.MAP:
            return f"HashMap<String, {self.translate_type(type_ref.item)}>"

        if type_ref.kind is TypeKind.CUSTOM:
            return type_ref.name

        return self.UNTYPED_TYPE

    def _imports(self, result: SynthesisResult) -> list[str]:
        """Use declarations for the types actually referenced."""
        imports = []
        if result.uses("Map"):
            imports.append("use std::collections::HashMap;")
            imports.append("")

        chrono = [
            name
            for name, used in (
                ("DateTime", result.uses(PrimitiveKind.TIMESTAMP)),
                ("NaiveDate", result.uses(PrimitiveKind.DATE)),
                ("Utc", result.uses(PrimitiveKind.TIMESTAMP)),
            )
            if used
        ]
        if len(chrono) == 1:
            imports.append(f"use chrono::{chrono[0]};")
        elif chrono:
            imports.append(f"use chrono::{{{', '.join(chrono)}}};")

        imports.append("use serde::{Deserialize, Serialize};")
        if any(isinstance(m, EnumModel) and m.value_type is PrimitiveKind.INTEGER64 for m in result.models):
            imports.append("use serde_repr::{Deserialize_repr, Serialize_repr};")

        if result.uses(PrimitiveKind.UNIQUE_ID):
            imports.append("use uuid::Uuid;")
        return imports

    def _render_model(self, model: ResolvedModel) -> str:
        context = self._model_context(model)

        if isinstance(model, (Struct, EmptyStruct)):
            fields = model.fields if isinstance(model, Struct) else ()
            return self.render("struct", fields=self._struct_fields(model.name, fields), **context)

        if isinstance(model, EnumModel):
            return self.render("enum", **self._enum_context(model, context))

        if isinstance(model, UnionModel):
            return self.render("union", **self._union_context(model, context))

        if isinstance(model, TypeAlias):
            return self.render("alias", target=self.translate_type(model.target), **context)

        raise TypeError(f"Unsupported model type: {type(model).__name__}")

    def _model_context(self, model: ResolvedModel) -> dict[str, Any]:
        return {
            "name": escape_type_name(model.name),
            "doc": list(model.description) or [model.name],
            "derives": list(self.config.derives),
            "attributes": list(model.attributes),
        }

    def _struct_fields(self, owner: str, fields: tuple[Field, ...]) -> list[dict[str, Any]]:
        """Field contexts of a struct; distinct source names must stay distinct identifiers."""
        contexts = []
        sources: dict[str, str] = {}
        for field in fields:
            context = self._field_context(field)
            ident = context["ident"]
            if ident in sources:
                raise NameCollisionError(f"{owner}.{ident}", [sources[ident], field.name], owner)
            sources[ident] = field.name
            contexts.append(context)
        return contexts

    def _field_context(self, field: Field) -> dict[str, Any]:
        """
        Prepare the template context for a field.

        Args:
            field: The field definition

        Returns:
            Dictionary of template variables
        """
        ident = escape_field_name(snake_case(field.name))
        serde = []
        if field.flatten:
            serde.append("flatten")
        elif ident.removeprefix("r#") != field.name:
            serde.append(f"rename = {rust_string(field.name)}")
        if field.optional and not field.flatten:
            serde.append("default")
            serde.append('skip_serializing_if = "Option::is_none"')

        type_str = self.translate_type(field.type_ref, boxed=field.boxed)
        if field.optional and not field.flatten:
            type_str = f"Option<{type_str}>"

        return {
            "ident": ident,
            "type": type_str,
            "doc": list(field.description),
            "serde": ", ".join(serde),
            "attributes": list(field.attributes),
        }

    def _enum_context(self, model: EnumModel, context: dict[str, Any]) -> dict[str, Any]:
        integer = model.value_type is PrimitiveKind.INTEGER64
        derives = context["derives"]
        if integer:
            # Integer enums serialize as their discriminant
            derives = [{"Serialize": "Serialize_repr", "Deserialize": "Deserialize_repr"}.get(d, d) for d in derives]
        for extra in ("PartialEq", "Eq"):
            if extra not in derives:
                derives = [*derives, extra]

        variants = []
        for variant in model.variants:
            name = escape_type_name(variant.name)
            if integer:
                variants.append({"name": name, "discriminant": int(variant.value), "rename": None})
            else:
                value = str(variant.value)
                variants.append({"name": name, "discriminant": None, "rename": rust_string(value) if value != name else None})

        return {**context, "derives": derives, "repr": "i64" if integer else None, "variants": variants}

    def _union_context(self, model: UnionModel, context: dict[str, Any]) -> dict[str, Any]:
        doc = list(model.description) or [model.name]
        return {
            **context,
            "doc": [*doc, "", self.UNION_DOCS[model.mode]],
            "variants": [
                {"name": escape_type_name(v.tag), "type": self.translate_type(v.type_ref, boxed=v.boxed)}
                for v in model.variants
            ],
        }

    def _request_context(self, request: RequestBinding) -> dict[str, Any]:
        body = self.translate_type(request.body)
        return {
            "name": escape_type_name(request.name),
            "doc": [request.name],
            "derives": list(self.config.derives),
            "content_type": rust_string(request.content_type),
            "body": body if request.required else f"Option<{body}>",
        }

    def _response_context(self, response: ResponseBinding) -> dict[str, Any]:
        return {
            "name": escape_type_name(response.type_name),
            "doc": list(response.description) or [response.type_name],
            "derives": list(self.config.derives),
            "content_type": rust_string(response.content_type),
            "body": self.translate_type(response.body),
        }
