"""
Exception types raised across the compilation pipeline.
"""

from __future__ import annotations


class BadCommandLineError(Exception):
    """Raised when the command line cannot be turned into options.

    The message, when present, is shown to the user followed by the
    usage screen.
    """

    def __init__(self, message: str | None = None):
        super().__init__(message)
        self.message = message


class AbortError(Exception):
    """Raised by ``poll_abort`` when the embedding caller cancels the run.

    Unwinds the current stage without producing partial artifacts.
    """


class SchemaLoadError(Exception):
    """Raised when schema documents cannot be loaded.

    The cause has already been reported to the error receiver, so callers
    only convert this into a failure result.
    """
