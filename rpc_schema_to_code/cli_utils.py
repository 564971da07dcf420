"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

PROGRAM = "rpc_schema_to_code"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the command line from the current Click context.

    Used for the generation comment of generated files. Paths are shown by
    file name only so the comment does not depend on the machine.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
    except RuntimeError:
        return PROGRAM

    cli_args = ctx.params
    arguments = []
    options = []
    for param in click_command.params:
        value = cli_args.get(param.name)
        if value is None or value is False or value == ():
            continue

        if isinstance(param, click.Argument):
            arguments.append(Path(str(value)).name)
            continue

        if not isinstance(param, click.Option) or value == param.default:
            continue
        flag = param.opts[0] if param.opts else f"--{param.name}"
        if param.is_flag:
            options.append(flag)
        elif isinstance(value, (str, Path)) and Path(str(value)).exists():
            options.extend([flag, Path(str(value)).name])
        else:
            options.extend([flag, str(value)])

    return " ".join([PROGRAM, *arguments, *options])
