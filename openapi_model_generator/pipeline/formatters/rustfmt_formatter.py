"""
rustfmt formatter for generated Rust code.
"""

from __future__ import annotations

import logging
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class RustfmtFormatter(Formatter):
    """Formatter piping code through rustfmt."""

    def __init__(self, executable: str = "rustfmt"):
        self.executable = executable
        self._available: bool | None = None

    def is_available(self) -> bool:
        """Check if rustfmt is installed."""
        if self._available is None:
            try:
                result = subprocess.run(
                    [self.executable, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=5,
                )
                self._available = result.returncode == 0
            except (subprocess.SubprocessError, FileNotFoundError):
                self._available = False
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Rust code using rustfmt.

        rustfmt reads from stdin and writes to stdout when given no file.
        """
        if not self.is_available():
            logger.warning("%s not found, leaving output unformatted", self.executable)
            return code

        cmd = [self.executable, "--emit", "stdout", "--quiet"]
        if config.edition:
            cmd.extend(["--edition", config.edition])

        try:
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except subprocess.SubprocessError as e:
            logger.warning("rustfmt failed: %s", e)
            return code

        if result.returncode != 0:
            logger.warning("rustfmt exited with %d: %s", result.returncode, result.stderr.strip())
            return code
        return result.stdout
