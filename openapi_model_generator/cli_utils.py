"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

PROGRAM_NAME = "openapi_model_generator"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Flags and options left at their default are omitted; paths are shown
    by file name only.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM_NAME

    cli_args = ctx.params
    if not cli_args:
        return PROGRAM_NAME

    parts = [PROGRAM_NAME]
    for param in click_command.params:
        if not isinstance(param, click.Option) or param.name not in cli_args:
            continue

        value = cli_args[param.name]
        if not value or value == param.default:
            continue

        flag = param.opts[0] if param.opts else f"--{param.name}"
        if param.is_flag:
            parts.append(flag)
            continue

        if isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            formatted = path_obj.name if path_obj.exists() else str(value)
        else:
            formatted = str(value)
        parts.extend([flag, formatted])

    return " ".join(parts)
