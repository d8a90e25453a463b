"""JSON Schema Compiler

Compiles JSON Schema documents into Python dataclasses or C# classes.
Supports several output modes (source tree, zip archive, dry run, schema
and signature dumps), compiler plugins, and embedding through
``driver.run`` with a custom listener.
"""

__version__ = "1.0.0"

from .config import GeneratorConfig
from .diagnostics import CompilerListener, ConsoleListener, Diagnostic, Severity
from .driver import DriverOptions, run, run_with_streams
from .modes import Mode
from .plugin import Plugin

__all__ = [
    "CompilerListener",
    "ConsoleListener",
    "Diagnostic",
    "DriverOptions",
    "GeneratorConfig",
    "Mode",
    "Plugin",
    "Severity",
    "run",
    "run_with_streams",
]
