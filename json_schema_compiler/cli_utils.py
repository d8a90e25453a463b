"""
CLI utilities for command line reconstruction.
"""

from collections.abc import Sequence
from pathlib import Path

PROGRAM = "json-schema-compiler"


def reconstruct_command_line(arguments: Sequence[str]) -> str:
    """
    Reconstruct the command line of a run for generated file headers.

    Existing file paths are shortened to their file names so that the header
    does not depend on where the compiler was run from.

    Args:
        arguments: The raw command line arguments, without the program name

    Returns:
        Reconstructed command line string
    """
    cmd_parts = [PROGRAM]

    for argument in arguments:
        if argument.startswith("-") or "://" in argument:
            cmd_parts.append(argument)
            continue
        path_obj = Path(argument)
        cmd_parts.append(path_obj.name if path_obj.is_file() else argument)

    return " ".join(cmd_parts)
