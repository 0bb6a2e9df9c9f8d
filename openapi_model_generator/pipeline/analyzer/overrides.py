"""
Custom override interceptor.

Consulted before any other resolution step: an override-type extension
short-circuits synthesis to a literal target type, and an attribute-list
extension attaches opaque attribute lines to whatever is produced.
"""

from __future__ import annotations

import logging

from ..schema_ast.nodes import SchemaNode

logger = logging.getLogger(__name__)


class OverrideInterceptor:
    """Reads the override-type and attribute-list vendor extensions."""

    def __init__(self, type_extension: str = "x-rust-type", attrs_extension: str = "x-rust-attrs"):
        self.type_extension = type_extension
        self.attrs_extension = attrs_extension

    def type_override(self, node: SchemaNode | None) -> str | None:
        """Literal target type requested by the node, if any."""
        if node is None:
            return None
        value = node.extensions.get(self.type_extension)
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            logger.warning("%s should be a non-empty string at %s, got: %r", self.type_extension, node.source_path, value)
            return None
        return value.strip()

    def attributes(self, node: SchemaNode | None) -> tuple[str, ...]:
        """Extra attributes in given order; malformed values are ignored."""
        if node is None:
            return ()
        value = node.extensions.get(self.attrs_extension)
        if value is None:
            return ()
        if not isinstance(value, list):
            logger.warning("%s should be an array of strings at %s, got: %r", self.attrs_extension, node.source_path, value)
            return ()
        return tuple(v for v in value if isinstance(v, str))
