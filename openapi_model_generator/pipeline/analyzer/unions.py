"""
Union synthesizer for oneOf / anyOf.

Referenced variants are tagged with the referenced schema's normalized
name; inline variants get positional tags (Variant1, Variant2, ...).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import InvalidSchemaShapeError, NameCollisionError
from ..schema_ast.nodes import EnumNode, RefNode, SchemaNode, UnionNode
from .ir_nodes import EnumModel, EnumVariant, PrimitiveKind, TypeRef, UnionMode, UnionModel, UnionVariant
from .naming import description_lines, enum_variant_name

if TYPE_CHECKING:
    from .synthesizer import ModelSynthesizer

_MODES = {
    "oneOf": UnionMode.EXCLUSIVE,
    "anyOf": UnionMode.INCLUSIVE,
}


class UnionSynthesizer:
    """Turns oneOf/anyOf nodes into tagged unions."""

    def __init__(self, synthesizer: ModelSynthesizer):
        self.synthesizer = synthesizer
        self.resolver = synthesizer.resolver

    def synthesize(self, name: str, node: UnionNode, schema_name: str | None = None) -> UnionModel | EnumModel:
        """
        Synthesize a union.

        Args:
            name: Normalized name of the union model
            node: The oneOf/anyOf node
            schema_name: Name of the schema being synthesized (for error messages)

        Returns:
            UnionModel, or EnumModel when every variant is a plain enum

        Raises:
            InvalidSchemaShapeError: If the union has no variants
        """
        if not node.variants:
            raise InvalidSchemaShapeError(f"{node.keyword} has no variants ({node.source_path})", schema_name)

        description = description_lines(node.description)
        attributes = self.synthesizer.interceptor.attributes(node)

        collapsed = self._collapse_enums(name, node, schema_name)
        if collapsed is not None:
            return EnumModel(
                name=name,
                description=description,
                attributes=attributes,
                variants=collapsed[0],
                value_type=collapsed[1],
            )

        variants: list[UnionVariant] = []
        tags: set[str] = set()

        for index, variant in enumerate(node.variants, start=1):
            if isinstance(variant, RefNode) and self.synthesizer.interceptor.type_override(variant) is None:
                resolved = self.resolver.resolve_schema(variant, schema_name)
                tag = resolved.target_name
                type_ref = TypeRef.named(resolved.target_name)
                # The same schema listed twice is one variant
                if any(v.tag == tag and v.type_ref == type_ref for v in variants):
                    continue
            else:
                tag = f"Variant{index}"
                type_ref = self.synthesizer.resolve_type(variant, name, tag, schema_name)

            tag = self._unique(tag, tags)
            tags.add(tag)
            variants.append(UnionVariant(tag=tag, type_ref=type_ref))

        return UnionModel(
            name=name,
            description=description,
            attributes=attributes,
            variants=tuple(variants),
            mode=_MODES[node.keyword],
        )

    def _collapse_enums(
        self,
        name: str,
        node: UnionNode,
        schema_name: str | None,
    ) -> tuple[tuple[EnumVariant, ...], PrimitiveKind] | None:
        """Collect the values of a union made only of string/integer enums."""
        members: dict[str, str | int] = {}
        value_types = set()

        for variant in node.variants:
            target: SchemaNode = variant
            seen = set()
            # Look through aliases
            while isinstance(target, RefNode) and target.ref_path not in seen:
                seen.add(target.ref_path)
                target = self.resolver.resolve_schema(target, schema_name).target
            if not isinstance(target, EnumNode) or target.value_type not in ("string", "integer"):
                return None
            value_types.add(target.value_type)
            for index, value in enumerate(target.values):
                member = enum_variant_name(value, index)
                if member in members and members[member] != value:
                    raise NameCollisionError(f"{name}.{member}", [repr(members[member]), repr(value)], schema_name)
                members[member] = value

        if not members:
            return None

        value_type = PrimitiveKind.INTEGER64 if value_types == {"integer"} else PrimitiveKind.TEXT
        variants = tuple(EnumVariant(name=member, value=members[member]) for member in sorted(members))
        return variants, value_type

    @staticmethod
    def _unique(tag: str, taken: set[str]) -> str:
        """Suffix a tag with a counter until it is unique."""
        if tag not in taken:
            return tag
        counter = 2
        while f"{tag}{counter}" in taken:
            counter += 1
        return f"{tag}{counter}"
