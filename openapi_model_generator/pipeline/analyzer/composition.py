"""
Composition merger for allOf.

Walks the fragments in document order and merges their properties into
a single struct. Required sets are unioned; when two fragments declare
the same field, the more concrete type wins and equally concrete types
resolve last-write-wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from ..errors import UnsupportedCompositionError
from ..schema_ast.nodes import (
    AllOfNode,
    ObjectNode,
    RefNode,
    SchemaNode,
    UnionNode,
    UntypedNode,
)
from .ir_nodes import EmptyStruct, Field, Struct
from .naming import description_lines, normalize

if TYPE_CHECKING:
    from .synthesizer import ModelSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class _MergeEntry:
    """A field collected from one fragment."""

    field: Field
    nullable: bool
    fragment: str  # source path of the contributing fragment


class CompositionMerger:
    """Merges allOf fragments into one struct."""

    def __init__(self, synthesizer: ModelSynthesizer):
        self.synthesizer = synthesizer
        self.resolver = synthesizer.resolver

    def merge(self, name: str, node: AllOfNode, schema_name: str | None = None) -> Struct | EmptyStruct:
        """
        Merge allOf fragments.

        Args:
            name: Normalized name of the merged model
            node: The allOf node
            schema_name: Name of the schema being synthesized (for error messages)

        Returns:
            Struct with the merged fields, or EmptyStruct if no fragment contributes any
        """
        entries: dict[str, _MergeEntry] = {}
        required: set[str] = set()

        for fragment in node.fragments:
            self._collect(fragment, name, entries, required, schema_name)

        description = description_lines(node.description)
        attributes = self.synthesizer.interceptor.attributes(node)

        if not entries:
            return EmptyStruct(name=name, description=description, attributes=attributes)

        fields = []
        for key, entry in entries.items():
            optional = key not in required or entry.nullable
            fields.append(replace(entry.field, optional=optional))

        logger.debug("Merged %d fragments into %s (%d fields)", len(node.fragments), name, len(fields))
        return Struct(name=name, description=description, attributes=attributes, fields=tuple(fields))

    def _collect(
        self,
        fragment: SchemaNode,
        owner: str,
        entries: dict[str, _MergeEntry],
        required: set[str],
        schema_name: str | None,
    ) -> None:
        """Collect fields and required names from one fragment."""
        # Referenced fragment: merge the target's fields under its own name
        if isinstance(fragment, RefNode):
            resolved = self.resolver.resolve_schema(fragment, schema_name)
            with self.resolver.entering(resolved.source_name, schema_name):
                self._collect(resolved.target, resolved.target_name, entries, required, schema_name)
            return

        # Nested allOf flattens into the same merge
        if isinstance(fragment, AllOfNode):
            for nested in fragment.fragments:
                self._collect(nested, owner, entries, required, schema_name)
            return

        if isinstance(fragment, ObjectNode):
            for prop in fragment.properties:
                field, nullable = self.synthesizer.build_field(prop, owner, schema_name)
                self._put(entries, normalize(prop.name), _MergeEntry(field, nullable, fragment.source_path), schema_name)

            if fragment.additional_properties is not None:
                extra = self.synthesizer.additional_properties_field(fragment, owner, schema_name)
                self._put(entries, normalize(extra.name), _MergeEntry(extra, False, fragment.source_path), schema_name)

            required.update(normalize(r) for r in fragment.required)
            return

        # Description-only or nullable-only fragments contribute nothing
        if isinstance(fragment, UntypedNode):
            return

        if isinstance(fragment, UnionNode):
            raise UnsupportedCompositionError(f"{fragment.keyword} inside allOf cannot be merged ({fragment.source_path})", schema_name)

        raise UnsupportedCompositionError(
            f"allOf fragment of kind {type(fragment).__name__} cannot be merged ({fragment.source_path})",
            schema_name,
        )

    def _put(self, entries: dict[str, _MergeEntry], key: str, entry: _MergeEntry, schema_name: str | None) -> None:
        """Apply the conflict policy for a field seen in more than one fragment."""
        existing = entries.get(key)
        if existing is None:
            entries[key] = entry
            return

        old_type = existing.field.type_ref
        new_type = entry.field.type_ref

        # Concrete beats untyped, whatever the order
        if old_type.is_concrete and not new_type.is_concrete:
            return
        if new_type.is_concrete and not old_type.is_concrete:
            entries[key] = entry
            return

        if old_type.is_concrete and old_type != new_type:
            raise UnsupportedCompositionError(
                f"Field '{entry.field.name}' has conflicting types {_describe(old_type)} ({existing.fragment}) and {_describe(new_type)} ({entry.fragment})",
                schema_name,
            )

        # Equally concrete: last write wins, first-seen position is kept
        entries[key] = entry


def _describe(type_ref) -> str:
    if type_ref.item is not None:
        return f"{type_ref.name}({_describe(type_ref.item)})"
    return type_ref.name or type_ref.kind.value
