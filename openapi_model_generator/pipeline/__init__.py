"""
Pipeline - OpenAPI document to Rust models.

Multi-phase architecture:

1. Phase 1 (Parser): Parse the OpenAPI document into a schema registry
2. Phase 2 (Analyzer): Resolve references, merge compositions, synthesize
   unions and build the canonical model set
3. Phase 3 (Backend): Render the model set through Jinja2 templates
4. Phase 4 (Formatter): Optional post-processing with rustfmt
5. Phase 5 (Writer): Validate and write files atomically
"""

from __future__ import annotations

from .config import CodeGeneratorConfig, FormatterConfig, OutputConfig, OutputMode
from .errors import (
    CyclicReferenceError,
    DocumentLoadError,
    InvalidSchemaShapeError,
    ModelSynthesisError,
    NameCollisionError,
    OutputValidationError,
    UnresolvedReferenceError,
    UnsupportedCompositionError,
)
from .generator import PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "ModelSynthesisError",
    "UnresolvedReferenceError",
    "CyclicReferenceError",
    "UnsupportedCompositionError",
    "InvalidSchemaShapeError",
    "NameCollisionError",
    "DocumentLoadError",
    "OutputValidationError",
    "AtomicWriter",
]
