"""
IR (Intermediate Representation) node definitions.

These nodes represent the canonical model set: every reference is
resolved, every composition merged, and every type determined. The
emitter consumes them without looking back at the source document.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum


class PrimitiveKind(str, Enum):
    """Target primitive types."""

    TEXT = "Text"
    UNIQUE_ID = "UniqueId"
    TIMESTAMP = "Timestamp"
    DATE = "Date"
    INTEGER64 = "Integer64"
    FLOAT64 = "Float64"
    BOOLEAN = "Boolean"


class TypeKind(Enum):
    """Kind of type in the IR."""

    PRIMITIVE = "primitive"  # Text, Integer64, ...
    NAMED = "named"  # A model in the model set
    LIST = "list"  # List(T)
    MAP = "map"  # Map(T), string keys
    CUSTOM = "custom"  # Literal target type from an override
    UNTYPED = "untyped"  # No type information


@dataclass(frozen=True)
class TypeRef:
    """A resolved type reference.

    Optionality is not part of a TypeRef; it lives on the field.
    """

    kind: TypeKind = TypeKind.UNTYPED

    # Primitive kind value, model name or custom literal
    name: str = ""

    # Element type for LIST, value type for MAP
    item: TypeRef | None = None

    @classmethod
    def primitive(cls, kind: PrimitiveKind) -> TypeRef:
        return cls(kind=TypeKind.PRIMITIVE, name=kind.value)

    @classmethod
    def named(cls, name: str) -> TypeRef:
        return cls(kind=TypeKind.NAMED, name=name)

    @classmethod
    def list_of(cls, item: TypeRef) -> TypeRef:
        return cls(kind=TypeKind.LIST, name="List", item=item)

    @classmethod
    def map_of(cls, value: TypeRef) -> TypeRef:
        return cls(kind=TypeKind.MAP, name="Map", item=value)

    @classmethod
    def custom(cls, literal: str) -> TypeRef:
        return cls(kind=TypeKind.CUSTOM, name=literal)

    @property
    def is_concrete(self) -> bool:
        """False only for the untyped fallback."""
        return self.kind is not TypeKind.UNTYPED

    @property
    def primitive_kind(self) -> PrimitiveKind | None:
        return PrimitiveKind(self.name) if self.kind is TypeKind.PRIMITIVE else None

    def walk(self) -> Iterator[TypeRef]:
        """Yield this type and every nested type."""
        yield self
        if self.item is not None:
            yield from self.item.walk()

    def identifiers(self) -> set[str]:
        """Target-type identifiers this type depends on."""
        result = set()
        for ref in self.walk():
            if ref.kind is TypeKind.UNTYPED:
                result.add("Untyped")
            else:
                result.add(ref.name)
        return result


UNTYPED = TypeRef()


class UnionMode(str, Enum):
    """Disambiguation mode of a union."""

    EXCLUSIVE = "exclusive"  # oneOf
    INCLUSIVE = "inclusive"  # anyOf


@dataclass(frozen=True)
class Field:
    """A field of a struct."""

    name: str = ""  # Source property name
    type_ref: TypeRef = UNTYPED
    optional: bool = False
    description: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()

    # Holds additionalProperties next to declared properties
    flatten: bool = False

    # Owner is reachable again through this field
    boxed: bool = False


@dataclass(frozen=True)
class EnumVariant:
    """An enum member: normalized name and source value."""

    name: str = ""
    value: str | int = ""


@dataclass(frozen=True)
class UnionVariant:
    """A tagged variant of a union."""

    tag: str = ""
    type_ref: TypeRef = UNTYPED
    boxed: bool = False


@dataclass(frozen=True)
class ResolvedModel:
    """Base of every canonical model."""

    name: str = ""
    description: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()

    def type_refs(self) -> Iterator[TypeRef]:
        """Types referenced directly by this model."""
        return iter(())


@dataclass(frozen=True)
class Struct(ResolvedModel):
    """A struct with an ordered field list. Field names are unique."""

    fields: tuple[Field, ...] = ()

    def type_refs(self) -> Iterator[TypeRef]:
        return (f.type_ref for f in self.fields)

    def get_field(self, name: str) -> Field | None:
        return next((f for f in self.fields if f.name == name), None)


@dataclass(frozen=True)
class EmptyStruct(ResolvedModel):
    """A struct without fields."""


@dataclass(frozen=True)
class EnumModel(ResolvedModel):
    """An enum over string or integer constants."""

    variants: tuple[EnumVariant, ...] = ()
    value_type: PrimitiveKind = PrimitiveKind.TEXT

    @property
    def variant_names(self) -> list[str]:
        return [v.name for v in self.variants]


@dataclass(frozen=True)
class UnionModel(ResolvedModel):
    """A union of tagged variants. Tags are unique."""

    variants: tuple[UnionVariant, ...] = ()
    mode: UnionMode = UnionMode.EXCLUSIVE

    def type_refs(self) -> Iterator[TypeRef]:
        return (v.type_ref for v in self.variants)

    @property
    def tags(self) -> list[str]:
        return [v.tag for v in self.variants]


@dataclass(frozen=True)
class TypeAlias(ResolvedModel):
    """An alias to another type; overrides alias a CUSTOM literal."""

    target: TypeRef = UNTYPED

    def type_refs(self) -> Iterator[TypeRef]:
        return iter((self.target,))

    @property
    def literal(self) -> str | None:
        return self.target.name if self.target.kind is TypeKind.CUSTOM else None


@dataclass(frozen=True)
class RequestBinding:
    """Request body wrapper for one operation."""

    name: str = ""
    content_type: str = ""
    body: TypeRef = UNTYPED
    required: bool = False


@dataclass(frozen=True)
class ResponseBinding:
    """Response body wrapper for one operation and status."""

    name: str = ""
    status: str = ""
    content_type: str = ""
    body: TypeRef = UNTYPED
    description: tuple[str, ...] = ()

    @property
    def type_name(self) -> str:
        return f"{self.name}{self.status}"


@dataclass(frozen=True)
class SynthesisResult:
    """The complete canonical model set handed to the emitter."""

    models: tuple[ResolvedModel, ...] = ()
    requests: tuple[RequestBinding, ...] = ()
    responses: tuple[ResponseBinding, ...] = ()

    # Model or binding name -> target-type identifiers it references
    dependencies: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def get(self, name: str) -> ResolvedModel | None:
        return next((m for m in self.models if m.name == name), None)

    @property
    def names(self) -> list[str]:
        return [m.name for m in self.models]

    def uses(self, identifier: str | PrimitiveKind) -> bool:
        """Whether any model or binding references the identifier."""
        key = identifier.value if isinstance(identifier, PrimitiveKind) else identifier
        return any(key in deps for deps in self.dependencies.values())
