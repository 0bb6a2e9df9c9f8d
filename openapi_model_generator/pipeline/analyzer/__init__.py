"""
Analyzer module.

Contains type mapping, reference resolution, composition merging,
union synthesis and the model synthesis driver.
"""

from __future__ import annotations

from .composition import CompositionMerger
from .ir_nodes import (
    UNTYPED,
    EmptyStruct,
    EnumModel,
    EnumVariant,
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
    UnionVariant,
)
from .naming import normalize, operation_name
from .overrides import OverrideInterceptor
from .reference_resolver import ReferenceResolver, ResolvedRef
from .synthesizer import ModelSynthesizer
from .type_mapper import TypeMapper
from .unions import UnionSynthesizer

__all__ = [
    "PrimitiveKind",
    "TypeKind",
    "TypeRef",
    "UNTYPED",
    "UnionMode",
    "Field",
    "EnumVariant",
    "UnionVariant",
    "ResolvedModel",
    "Struct",
    "EmptyStruct",
    "EnumModel",
    "UnionModel",
    "TypeAlias",
    "RequestBinding",
    "ResponseBinding",
    "SynthesisResult",
    "normalize",
    "operation_name",
    "TypeMapper",
    "OverrideInterceptor",
    "ReferenceResolver",
    "ResolvedRef",
    "CompositionMerger",
    "UnionSynthesizer",
    "ModelSynthesizer",
]
