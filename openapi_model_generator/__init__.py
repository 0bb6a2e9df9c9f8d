"""OpenAPI Model Generator

A Python package for generating strongly-typed Rust models from
OpenAPI 3.0 documents. Resolves references, merges compositions and
synthesizes unions into a canonical model set before emission.
"""

import logging

__version__ = "0.3.0"

from .loader import load_document  # noqa: E402
from .pipeline import (  # noqa: E402
    AtomicWriter,
    CodeGeneratorConfig,
    FormatterConfig,
    ModelSynthesisError,
    OutputConfig,
    OutputMode,
    PipelineGenerator,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "ModelSynthesisError",
    "AtomicWriter",
    "load_document",
]
