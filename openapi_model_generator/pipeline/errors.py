"""
Error taxonomy for model synthesis.

Synthesis is fail-fast: the first error aborts the run and is surfaced
with the offending schema name and its kind.
"""

from __future__ import annotations


class ModelSynthesisError(Exception):
    """Base exception for all synthesis errors."""

    kind = "ModelSynthesisError"

    def __init__(self, message: str, schema_name: str | None = None) -> None:
        self.schema_name = schema_name
        self.message = message
        full_message = message if not schema_name else f"[{schema_name}] {message}"
        super().__init__(full_message)


class UnresolvedReferenceError(ModelSynthesisError):
    """Raised when a $ref does not point inside the registry."""

    kind = "UnresolvedReference"

    def __init__(self, ref_path: str, schema_name: str | None = None) -> None:
        self.ref_path = ref_path
        super().__init__(f"Unresolved reference '{ref_path}'", schema_name)


class CyclicReferenceError(ModelSynthesisError):
    """Raised when resolution revisits a name already on the active stack."""

    kind = "CyclicReference"

    def __init__(self, chain: list[str], schema_name: str | None = None) -> None:
        self.chain = list(chain)
        super().__init__(f"Cyclic reference: {' -> '.join(self.chain)}", schema_name)


class UnsupportedCompositionError(ModelSynthesisError):
    """Raised for composition patterns that cannot be merged."""

    kind = "UnsupportedCompositionPattern"


class InvalidSchemaShapeError(ModelSynthesisError):
    """Raised when a node lacks required structural information."""

    kind = "InvalidSchemaShape"


class NameCollisionError(ModelSynthesisError):
    """Raised when distinct sources normalize to one identifier with different shapes."""

    kind = "NameCollision"

    def __init__(self, name: str, sources: list[str], schema_name: str | None = None) -> None:
        self.name = name
        self.sources = list(sources)
        super().__init__(f"Name '{name}' is produced by incompatible sources: {', '.join(self.sources)}", schema_name)


class DocumentLoadError(Exception):
    """Raised when the input document cannot be read or decoded."""


class OutputValidationError(Exception):
    """Raised when generated code fails validation before it is written."""
