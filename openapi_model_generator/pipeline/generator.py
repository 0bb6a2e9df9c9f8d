"""
Pipeline generator.

Ties the phases together: parse the document into a registry, synthesize
the canonical model set, render it, optionally format it and write it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .. import __version__
from .analyzer import ModelSynthesizer, SynthesisResult
from .backends import RustBackend
from .config import CodeGeneratorConfig, OutputMode
from .formatters import RustfmtFormatter
from .schema_ast import SchemaParser, SchemaRegistry
from .writer import AtomicWriter

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """
    Generates Rust models from an OpenAPI document.

    Example:
        generator = PipelineGenerator(document)
        files = generator.generate()
        generator.write(Path("generated"))
    """

    def __init__(
        self,
        document: dict[str, Any],
        config: CodeGeneratorConfig | None = None,
        command_line: str | None = None,
    ):
        """
        Initialize the generator.

        Args:
            document: The decoded OpenAPI document
            config: Code generation configuration
            command_line: Command line recorded in the generation comment
        """
        self.document = document
        self.config = config or CodeGeneratorConfig()
        self.command_line = command_line or "openapi_model_generator"
        self.backend = RustBackend(self.config)
        self._registry: SchemaRegistry | None = None
        self._result: SynthesisResult | None = None

    @property
    def registry(self) -> SchemaRegistry:
        if self._registry is None:
            self._registry = SchemaParser().parse(self.document)
        return self._registry

    def synthesize(self) -> SynthesisResult:
        """Run model synthesis; the result is cached."""
        if self._result is None:
            self._result = ModelSynthesizer(self.config).synthesize(self.registry)
        return self._result

    def generation_comment(self) -> str:
        if not self.config.add_generation_comment:
            return ""
        return f"// Generated by openapi_model_generator v{__version__} : {self.command_line}"

    def generate(self) -> dict[str, str]:
        """
        Generate the output files.

        Returns:
            File name -> content, for the models file and the module file
        """
        comment = self.generation_comment()
        models = self.backend.generate(self.synthesize(), comment)
        module = self.backend.generate_module(self.config.models_file_name, comment)

        if self.config.formatter.enabled:
            formatter = RustfmtFormatter()
            models = formatter.format(models, self.config.formatter)
            module = formatter.format(module, self.config.formatter)

        return {
            self.config.models_file_name: models,
            self.config.module_file_name: module,
        }

    def write(self, output_dir: Path) -> list[Path]:
        """
        Generate and write the output files.

        Args:
            output_dir: Directory receiving the files, created when missing

        Returns:
            Paths of the written files

        Raises:
            NotADirectoryError: If output_dir exists and is not a directory
            FileExistsError: In error mode, if an output file already exists
            OutputValidationError: If generated code fails validation
        """
        output_dir = Path(output_dir)
        if output_dir.exists() and not output_dir.is_dir():
            raise NotADirectoryError(f"Output path is not a directory: {output_dir}")

        files = self.generate()
        output = self.config.output
        writer = AtomicWriter()

        # Refuse before writing anything
        if output.mode == OutputMode.ERROR_IF_EXISTS:
            for name in files:
                if (output_dir / name).exists():
                    raise FileExistsError(f"Output file already exists: {output_dir / name}. Use force mode to overwrite.")

        written = []
        for name, content in files.items():
            path = output_dir / name
            if output.mode == OutputMode.ERROR_IF_EXISTS:
                writer.write_if_not_exists(path, content, output.validate_before_write, output.atomic_write)
            else:
                writer.write(path, content, output.validate_before_write, output.atomic_write)
            written.append(path)
        return written
