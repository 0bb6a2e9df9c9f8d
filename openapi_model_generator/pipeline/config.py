"""
Configuration for the model generator pipeline.

Groups synthesis options, formatter options and output handling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when an output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to validate code before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for the optional rustfmt pass."""

    # Whether formatting is enabled
    enabled: bool = False

    # Rust edition passed to rustfmt
    edition: str = "2021"


@dataclass
class CodeGeneratorConfig:
    """Configuration options for model synthesis and emission."""

    # Vendor extension holding a literal target type
    type_extension: str = "x-rust-type"

    # Vendor extension holding extra attribute lines
    attrs_extension: str = "x-rust-attrs"

    # Schemas to skip (source names or normalized names)
    ignore_schemas: list[str] = field(default_factory=list)

    # Format hint -> literal target type (e.g. {"semver": "semver::Version"})
    format_overrides: dict[str, str] = field(default_factory=dict)

    # Whether to synthesize request/response bindings from paths
    include_operations: bool = True

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Output file names
    models_file_name: str = "models.rs"
    module_file_name: str = "mod.rs"

    # Derives applied to every generated type
    derives: list[str] = field(default_factory=lambda: ["Debug", "Clone", "Serialize", "Deserialize"])

    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "type_extension": self.type_extension,
            "attrs_extension": self.attrs_extension,
            "ignore_schemas": self.ignore_schemas,
            "format_overrides": self.format_overrides,
            "include_operations": self.include_operations,
            "add_generation_comment": self.add_generation_comment,
            "models_file_name": self.models_file_name,
            "module_file_name": self.module_file_name,
            "derives": self.derives,
            "formatter": {
                "enabled": self.formatter.enabled,
                "edition": self.formatter.edition,
            },
            "output": {
                "mode": self.output.mode.value,
                "validate_before_write": self.output.validate_before_write,
                "atomic_write": self.output.atomic_write,
            },
        }
