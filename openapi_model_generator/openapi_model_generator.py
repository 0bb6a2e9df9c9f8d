import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .loader import load_document
from .pipeline import CodeGeneratorConfig, OutputMode, PipelineGenerator
from .pipeline.errors import DocumentLoadError, ModelSynthesisError, OutputValidationError


@click.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="OpenAPI document (YAML or JSON)")
@click.option("--output", "-o", "output_dir", default="./generated", type=click.Path(file_okay=True, resolve_path=True), help="Output directory")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, dir_okay=False, resolve_path=True), help="JSON configuration file")
@click.option("--force", is_flag=True, default=False, help="Overwrite existing output files")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def openapi_model_generator(input_path, output_dir, config, force, verbose):
    """Generate Rust models from an OpenAPI 3.0 document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        with open(config) as f:
            try:
                config = CodeGeneratorConfig.from_dict(json.load(f))
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                raise click.ClickException(f"Invalid configuration file {config}: {e}") from e
    else:
        config = CodeGeneratorConfig()

    if force:
        config.output.mode = OutputMode.FORCE

    try:
        document = load_document(input_path)
        generator = PipelineGenerator(document, config, reconstruct_command_line(openapi_model_generator))
        written = generator.write(Path(output_dir))
    except ModelSynthesisError as e:
        raise click.ClickException(f"{e.kind}: {e}") from e
    except (DocumentLoadError, OutputValidationError, FileExistsError, NotADirectoryError) as e:
        raise click.ClickException(str(e)) from e

    for path in written:
        click.echo(f"Generated {path}")
