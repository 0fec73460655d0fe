"""
CLI utilities: command line reconstruction for generated artifact headers.
"""

from pathlib import Path

import click

PROGRAM_NAME = "modelgen"


def _format_value(value) -> str:
    # File paths are shown by name only, the absolute path is machine specific
    if isinstance(value, (str, Path)):
        path_obj = Path(str(value))
        return path_obj.name if path_obj.exists() else str(value)
    return str(value)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the command line of the current invocation from the Click context.

    Options left at their default are omitted; flags are emitted without a value.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string, or the bare program name outside a Click context
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM_NAME

    cli_args = ctx.params
    cmd_parts = [PROGRAM_NAME]
    arguments = []
    options = []

    for param in click_command.params:
        value = cli_args.get(param.name)
        if value is None or value is False:
            continue

        if isinstance(param, click.Argument):
            arguments.append(_format_value(value))
        elif isinstance(param, click.Option):
            if value == param.default:
                continue
            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, _format_value(value)])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)
    return " ".join(cmd_parts)
