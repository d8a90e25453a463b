"""
Compiler extensions.

A plugin contributes a command line flag (``--x-<name>``) plus optional
parameters of its own, and once activated it runs against the outline after
the classes have been generated and before anything is written.

Plugins are discovered through the ``json_schema_compiler.plugins``
entry-point group, or loaded from the plugin search path with
``--plugin-path DIR --plugin module:Class``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from .error_receiver import ErrorReceiver
    from .generator.outline import Outline
    from .options import Options

PLUGIN_GROUP = "json_schema_compiler.plugins"


class Plugin(ABC):
    """Base class for compiler extensions."""

    # Name of the activating flag, without the leading dashes (e.g. "x-frozen")
    option_name: str = ""

    def get_usage(self) -> str:
        """One-line usage shown on the help screen."""
        return f"  --{self.option_name}"

    def params(self) -> list[click.Parameter]:
        """Extra command line parameters understood by this plugin."""
        return []

    def configure(self, params: dict[str, Any]) -> None:
        """Receive the parsed values of ``params()``, keyed by parameter name."""

    @abstractmethod
    def run(self, outline: Outline, options: Options, receiver: ErrorReceiver) -> bool:
        """Run the plugin against the generated outline.

        Returns:
            False if the plugin failed; the failure must have been reported
            to ``receiver``
        """


class FrozenClassesPlugin(Plugin):
    """Makes every generated class immutable.

    Python classes become ``@dataclass(frozen=True)`` and C# classes become
    ``sealed``.
    """

    option_name = "x-frozen"

    def get_usage(self) -> str:
        return "  --x-frozen          :  generate immutable (frozen / sealed) classes"

    def run(self, outline: Outline, options: Options, receiver: ErrorReceiver) -> bool:
        for class_outline in outline.classes:
            class_outline.frozen = True
        return True
