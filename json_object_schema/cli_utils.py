"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

COMMAND_NAME = "json_object_schema"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        # No active context, return basic command
        return COMMAND_NAME

    cmd_parts = [COMMAND_NAME]
    if ctx.info_name and ctx.parent is not None:
        cmd_parts.append(ctx.info_name)

    cli_args = ctx.params
    arguments = []  # For positional arguments
    options = []  # For optional arguments

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if not value:
            continue

        # Format value (convert file paths to just filenames for cleaner display)
        if isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            formatted_value = path_obj.name if path_obj.exists() else str(value)
        else:
            formatted_value = str(value)

        if isinstance(param, click.Argument):
            arguments.append(formatted_value)

        elif isinstance(param, click.Option):
            if hasattr(param, "default") and value == param.default:
                continue
            flag = param.opts[0] if param.opts else f"--{param_name}"
            options.append(flag if getattr(param, "is_flag", False) else f"{flag} {formatted_value}")

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(cmd_parts)
