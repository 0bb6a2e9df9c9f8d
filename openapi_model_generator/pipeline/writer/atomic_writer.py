"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import logging
import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import OutputValidationError

logger = logging.getLogger(__name__)

# Line comments and string literals are skipped when counting braces
_COMMENT_OR_STRING = re.compile(r'//[^\n]*|"(?:\\.|[^"\\])*"')


def validate_rust(content: str) -> None:
    """Structural checks on generated Rust code.

    Args:
        content: Rust code to validate

    Raises:
        OutputValidationError: If validation fails
    """
    code = _COMMENT_OR_STRING.sub("", content)

    open_braces = code.count("{")
    close_braces = code.count("}")
    if open_braces != close_braces:
        raise OutputValidationError(f"Generated Rust code has unbalanced braces: {open_braces} open, {close_braces} close")

    if re.search(r"\bpub (struct|enum|type) ", code) and "use serde::" not in code:
        raise OutputValidationError("Generated Rust code is missing the serde import")


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    An interrupted write never leaves the target file incomplete.
    """

    def __init__(self, validate: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate: Optional validation function for generated code
        """
        self._validate = validate or validate_rust

    def write(self, path: Path, content: str, validate: bool = True, atomic: bool = True) -> None:
        """Write content to file.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing
            atomic: Whether to go through a temporary file

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        if validate:
            self._validate(content)

        path.parent.mkdir(parents=True, exist_ok=True)

        if not atomic:
            path.write_text(content, encoding="utf-8")
            logger.info("Wrote %s", path)
            return

        # Same directory keeps the rename on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("Wrote %s", path)

    def write_if_not_exists(self, path: Path, content: str, validate: bool = True, atomic: bool = True) -> None:
        """Write content only if the file doesn't exist.

        Raises:
            FileExistsError: If the file already exists
            OutputValidationError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")

        self.write(path, content, validate, atomic)
