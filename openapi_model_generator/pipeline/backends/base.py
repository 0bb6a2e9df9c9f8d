"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.ir_nodes import SynthesisResult, TypeRef
from ..config import CodeGeneratorConfig


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # One template per model kind, plus the file prefix
    TEMPLATE_NAMES: tuple[str, ...] = ("prefix",)

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["doc"] = self._doc_line

        self.templates = {name: self.jinja_env.get_template(f"{name}.{self.FILE_EXTENSION}.jinja2") for name in self.TEMPLATE_NAMES}

    def render(self, template_name: str, **context) -> str:
        return self.templates[template_name].render(**context)

    @abstractmethod
    def generate(self, result: SynthesisResult, generation_comment: str = "") -> str:
        """
        Generate code from the canonical model set.

        Args:
            result: The synthesized models and bindings
            generation_comment: Optional header comment

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def translate_type(self, type_ref: TypeRef, boxed: bool = False) -> str:
        """
        Translate an IR type to a language-specific type string.

        Args:
            type_ref: The type reference
            boxed: Whether the position needs heap indirection

        Returns:
            Language-specific type string
        """

    def _doc_line(self, line: str) -> str:
        """Doc comment line; blank lines keep the bare marker."""
        return f"/// {line}" if line else "///"
