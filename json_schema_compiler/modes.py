"""
Operation modes of the command line driver.
"""

from __future__ import annotations

from enum import Enum

import click

from . import messages


class Mode(Enum):
    """Selects which branch of the pipeline runs and what gets written."""

    # normal mode. compile the code
    CODE = "code"

    # dump the signature of the generated code
    SIGNATURE = "signature"

    # dump the loaded schema documents
    FOREST = "forest"

    # same as CODE but don't write any source code
    DRYRUN = "dryrun"

    # same as CODE but pack all the outputs into a zip archive
    ZIP = "zip"

    # print the content-model grammars and their transition graphs
    GBIND = "gbind"

    @classmethod
    def resolve(cls, token: str) -> Mode | None:
        """Resolve a command line token to a mode.

        The token matches a mode when it is a case-insensitive prefix of the
        mode name and is longer than two characters. Modes are tried in
        declaration order.

        Returns:
            The matching mode, or None if nothing matches
        """
        candidate = token.lower()
        if len(candidate) <= 2:
            return None
        for mode in cls:
            if mode.name.lower().startswith(candidate):
                return mode
        return None


class ModeType(click.ParamType):
    """Click parameter type that parses ``--mode`` operands with ``Mode.resolve``."""

    name = "mode"

    def convert(self, value, param, ctx):
        if isinstance(value, Mode):
            return value
        mode = Mode.resolve(value)
        if mode is None:
            self.fail(messages.format(messages.UNRECOGNIZED_MODE, value), param, ctx)
        return mode

    def get_metavar(self, param, *args, **kwargs) -> str:
        return "[" + "|".join(mode.value for mode in Mode) + "]"
