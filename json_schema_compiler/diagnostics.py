"""
Diagnostics reported by the compiler and the listener interface that receives them.

Embedders pass a ``CompilerListener`` to ``driver.run`` to be notified about
progress, diagnostics and the compiled outline, and to request cancellation.
The default implementation ignores everything, so callers only override the
notifications they care about.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from .generator.outline import Outline


class Severity(str, Enum):
    """Severity of a diagnostic."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found while compiling.

    Attributes:
        severity: How serious the problem is
        message: Human readable description
        system_id: URI of the schema document the problem was found in
        line: 1-based line in the document, when known
        column: 1-based column in the document, when known
        location: JSON pointer of the offending schema node, when known
        cause: Underlying exception, if any
    """

    severity: Severity
    message: str
    system_id: str | None = None
    line: int | None = None
    column: int | None = None
    location: str | None = None
    cause: BaseException | None = field(default=None, compare=False)

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        severity: Severity = Severity.ERROR,
        system_id: str | None = None,
    ) -> Diagnostic:
        """Build a diagnostic that carries ``exc`` as its cause."""
        if isinstance(exc, json.JSONDecodeError):
            return cls(severity, exc.msg, system_id, exc.lineno, exc.colno, cause=exc)
        if isinstance(exc, OSError) and exc.strerror:
            target = exc.filename if exc.filename is not None else system_id
            message = f"{exc.strerror}: {target}" if target else exc.strerror
            return cls(severity, message, system_id, cause=exc)
        return cls(severity, str(exc) or type(exc).__name__, system_id, cause=exc)

    def describe_location(self) -> str | None:
        """Render where the problem was found, or None if unknown."""
        if self.system_id is None:
            return None
        if self.line is not None:
            return f"line {self.line} of {self.system_id}"
        if self.location:
            return f"{self.system_id}{self.location}"
        return self.system_id

    def __str__(self) -> str:
        text = f"[{self.severity.name}] {self.message}"
        where = self.describe_location()
        if where:
            text += f"\n  {where}"
        return text


class CompilerListener:
    """Receives notifications from a compilation run.

    Every method is a no-op, so an instance of this class is a valid silent
    listener.
    """

    def message(self, text: str) -> None:
        """Called with a status message for the user."""

    def generated_file(self, file_name: str, index: int, total: int) -> None:
        """Called before the ``index``-th of ``total`` artifacts is written."""

    def error(self, diagnostic: Diagnostic) -> None:
        pass

    def fatal_error(self, diagnostic: Diagnostic) -> None:
        pass

    def warning(self, diagnostic: Diagnostic) -> None:
        pass

    def info(self, diagnostic: Diagnostic) -> None:
        pass

    def is_canceled(self) -> bool:
        """Polled while loading schemas. Return True to abort the run."""
        return False

    def compiled(self, outline: Outline) -> None:
        """Called once code generation succeeded, before anything is written."""


class ConsoleErrorReporter:
    """Prints diagnostics to a text stream."""

    def __init__(self, out: IO[str] | None = None):
        self.out = out if out is not None else io.StringIO()
        self.has_error = False

    def error(self, diagnostic: Diagnostic) -> None:
        self.has_error = True
        self._print(diagnostic)

    def fatal_error(self, diagnostic: Diagnostic) -> None:
        self.has_error = True
        self._print(diagnostic)

    def warning(self, diagnostic: Diagnostic) -> None:
        self._print(diagnostic)

    def info(self, diagnostic: Diagnostic) -> None:
        self._print(diagnostic)

    def _print(self, diagnostic: Diagnostic) -> None:
        print(diagnostic, file=self.out)
        print(file=self.out)


class ConsoleListener(CompilerListener):
    """Listener that writes status messages and diagnostics to streams.

    Args:
        status: Stream for ignorable status messages, or None to drop them
        out: Stream for diagnostics, or None to drop them
    """

    def __init__(self, status: IO[str] | None, out: IO[str] | None):
        self.status = status
        self.reporter = ConsoleErrorReporter(out)

    def generated_file(self, file_name: str, index: int, total: int) -> None:
        self.message(file_name)

    def message(self, text: str) -> None:
        if self.status is not None:
            print(text, file=self.status)

    def error(self, diagnostic: Diagnostic) -> None:
        self.reporter.error(diagnostic)

    def fatal_error(self, diagnostic: Diagnostic) -> None:
        self.reporter.fatal_error(diagnostic)

    def warning(self, diagnostic: Diagnostic) -> None:
        self.reporter.warning(diagnostic)

    def info(self, diagnostic: Diagnostic) -> None:
        self.reporter.info(diagnostic)
