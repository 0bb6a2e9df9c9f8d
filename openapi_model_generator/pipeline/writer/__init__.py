"""
Output writer.

Validates generated code and writes it atomically.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter, validate_rust

__all__ = [
    "AtomicWriter",
    "validate_rust",
]
