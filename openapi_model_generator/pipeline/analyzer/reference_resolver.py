"""
Reference resolver for $ref resolution.

Resolves `#/components/...` pointers against the registry and keeps the
active resolution stack used to detect cycles.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from ..errors import CyclicReferenceError, InvalidSchemaShapeError, UnresolvedReferenceError
from ..schema_ast.nodes import RefNode, RequestBodyDef, ResponseDef, SchemaNode, SchemaRegistry
from .naming import normalize

COMPONENTS_PREFIX = "#/components/"

SCHEMAS = "schemas"
REQUEST_BODIES = "requestBodies"
RESPONSES = "responses"


@dataclass
class ResolvedRef:
    """A resolved $ref."""

    ref_path: str = ""
    section: str = SCHEMAS
    source_name: str = ""  # Key in the registry section
    target_name: str = ""  # Normalized model name
    target: SchemaNode | RequestBodyDef | ResponseDef | None = None

    # Caller's values when stated, otherwise the target's
    nullable: bool = False
    description: str | None = None
    extensions: Mapping[str, Any] = field(default_factory=dict)


class ReferenceResolver:
    """Resolves $ref to registry entries."""

    def __init__(self, registry: SchemaRegistry):
        """
        Initialize the resolver.

        Args:
            registry: The read-only schema registry
        """
        self.registry = registry
        self._stack: list[str] = []

    @staticmethod
    def split_ref(ref_path: str) -> tuple[str, str] | None:
        """Split "#/components/<section>/<name>" into (section, name)."""
        if not ref_path.startswith(COMPONENTS_PREFIX):
            return None
        parts = ref_path[len(COMPONENTS_PREFIX) :].split("/")
        if len(parts) != 2 or not parts[1]:
            return None
        section, name = parts
        # JSON pointer unescaping
        return section, name.replace("~1", "/").replace("~0", "~")

    def resolve(self, ref_path: str, caller: SchemaNode | None = None, schema_name: str | None = None) -> ResolvedRef:
        """
        Resolve a $ref pointer.

        Args:
            ref_path: The pointer, restricted to #/components/...
            caller: The node holding the $ref, whose own nullable/description/extensions win
            schema_name: Name of the schema being synthesized (for error messages)

        Returns:
            ResolvedRef with target information

        Raises:
            UnresolvedReferenceError: If the pointer does not resolve inside the registry
        """
        split = self.split_ref(ref_path)
        if split is None:
            raise UnresolvedReferenceError(ref_path, schema_name)
        section, name = split

        sections: dict[str, Mapping[str, Any]] = {
            SCHEMAS: self.registry.schemas,
            REQUEST_BODIES: self.registry.request_bodies,
            RESPONSES: self.registry.responses,
        }
        entries = sections.get(section)
        if entries is None or name not in entries:
            raise UnresolvedReferenceError(ref_path, schema_name)

        target = entries[name]
        resolved = ResolvedRef(
            ref_path=ref_path,
            section=section,
            source_name=name,
            target_name=normalize(name),
            target=target,
        )

        if isinstance(target, SchemaNode):
            target_nullable = self._effective_nullable(target, schema_name)
            resolved.nullable = caller.nullable if caller is not None and caller.nullable is not None else target_nullable
            resolved.description = (caller.description if caller is not None else None) or target.description
            resolved.extensions = {**target.extensions, **(caller.extensions if caller is not None else {})}
        else:
            resolved.description = target.description if not isinstance(target, RefNode) else None

        return resolved

    def resolve_schema(self, ref_node: RefNode, schema_name: str | None = None) -> ResolvedRef:
        """Resolve a $ref that must designate a schema."""
        resolved = self.resolve(ref_node.ref_path, ref_node, schema_name)
        if resolved.section != SCHEMAS:
            raise InvalidSchemaShapeError(f"'{ref_node.ref_path}' does not designate a schema", schema_name)
        return resolved

    def follow(self, ref_node: RefNode, schema_name: str | None = None) -> tuple[ResolvedRef, SchemaNode]:
        """
        Follow a chain of schema aliases ($ref to a schema that is itself a $ref).

        Returns:
            The first resolved reference and the first non-reference node

        Raises:
            CyclicReferenceError: If the chain revisits a name on the active stack
        """
        first = self.resolve_schema(ref_node, schema_name)
        node: SchemaNode = first.target
        entered = []
        try:
            current = first
            while True:
                self.push(current.source_name, schema_name)
                entered.append(current.source_name)
                if not isinstance(node, RefNode):
                    return first, node
                current = self.resolve_schema(node, schema_name)
                node = current.target
        finally:
            for _ in entered:
                self._stack.pop()

    @contextmanager
    def entering(self, name: str, schema_name: str | None = None) -> Iterator[None]:
        """Keep a name on the active resolution stack for the duration of a block."""
        self.push(name, schema_name)
        try:
            yield
        finally:
            self._stack.pop()

    def push(self, name: str, schema_name: str | None = None) -> None:
        if name in self._stack:
            chain = self._stack[self._stack.index(name) :] + [name]
            raise CyclicReferenceError(chain, schema_name or name)
        self._stack.append(name)

    @property
    def active(self) -> tuple[str, ...]:
        return tuple(self._stack)

    def _effective_nullable(self, node: SchemaNode, schema_name: str | None) -> bool:
        """Nullable flag of a node, looking through alias chains."""
        seen = set()
        while isinstance(node, RefNode) and node.nullable is None:
            split = self.split_ref(node.ref_path)
            if split is None or split[1] in seen or split[1] not in self.registry.schemas:
                return False
            seen.add(split[1])
            node = self.registry.schemas[split[1]]
        return node.is_nullable
