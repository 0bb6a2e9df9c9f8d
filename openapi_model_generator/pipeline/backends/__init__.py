"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import CodeBackend
from .rust_backend import RustBackend

__all__ = [
    "CodeBackend",
    "RustBackend",
]
