"""
Error receivers used by the schema reader and the code generator.

Collaborators never talk to the listener directly. They report into an
``ErrorReceiver``, which filters, records and forwards diagnostics, and which
they poll for cancellation while loading schemas.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Protocol

from .diagnostics import Diagnostic, Severity
from .errors import AbortError

logger = logging.getLogger(__name__)


class ErrorListener(Protocol):
    """Anything that accepts the four diagnostic notifications."""

    def error(self, diagnostic: Diagnostic) -> None: ...

    def fatal_error(self, diagnostic: Diagnostic) -> None: ...

    def warning(self, diagnostic: Diagnostic) -> None: ...

    def info(self, diagnostic: Diagnostic) -> None: ...


class ErrorReceiver(ABC):
    """Destination of diagnostics raised while compiling."""

    @abstractmethod
    def error(self, diagnostic: Diagnostic) -> None:
        pass

    @abstractmethod
    def fatal_error(self, diagnostic: Diagnostic) -> None:
        pass

    @abstractmethod
    def warning(self, diagnostic: Diagnostic) -> None:
        pass

    @abstractmethod
    def info(self, diagnostic: Diagnostic) -> None:
        pass

    def poll_abort(self) -> None:
        """Raise ``AbortError`` if the run has been canceled.

        Called periodically by long-running collaborators. Does nothing by
        default.
        """

    def debug(self, message: str) -> None:
        logger.debug(message)

    def report(
        self,
        severity: Severity,
        message: str,
        system_id: str | None = None,
        location: str | None = None,
    ) -> None:
        """Build a diagnostic and dispatch it according to ``severity``."""
        diagnostic = Diagnostic(severity, message, system_id=system_id, location=location)
        if severity is Severity.FATAL:
            self.fatal_error(diagnostic)
        elif severity is Severity.ERROR:
            self.error(diagnostic)
        elif severity is Severity.WARNING:
            self.warning(diagnostic)
        else:
            self.info(diagnostic)


class ErrorReceiverFilter(ErrorReceiver):
    """Forwards diagnostics to another listener and remembers whether an error was seen.

    Args:
        core: Listener (or receiver) to forward to; None drops everything
    """

    def __init__(self, core: ErrorListener | None = None):
        self.core = core
        self.had_error = False

    def error(self, diagnostic: Diagnostic) -> None:
        self.had_error = True
        if self.core is not None:
            self.core.error(diagnostic)

    def fatal_error(self, diagnostic: Diagnostic) -> None:
        self.had_error = True
        if self.core is not None:
            self.core.fatal_error(diagnostic)

    def warning(self, diagnostic: Diagnostic) -> None:
        if self.core is not None:
            self.core.warning(diagnostic)

    def info(self, diagnostic: Diagnostic) -> None:
        if self.core is not None:
            self.core.info(diagnostic)

    def poll_abort(self) -> None:
        if isinstance(self.core, ErrorReceiver):
            self.core.poll_abort()


class DriverErrorFilter(ErrorReceiverFilter):
    """Receiver installed by the driver in front of the user's listener.

    Info diagnostics are only forwarded in verbose mode and warnings are
    dropped in quiet mode, although ``had_warning`` is latched either way.
    Cancellation requested through the listener surfaces as ``AbortError``.
    """

    def __init__(self, listener, quiet: bool = False, verbose: bool = False):
        super().__init__(listener)
        self.listener = listener
        self.quiet = quiet
        self.verbose = verbose
        self.had_warning = False

    def info(self, diagnostic: Diagnostic) -> None:
        if self.verbose:
            super().info(diagnostic)

    def warning(self, diagnostic: Diagnostic) -> None:
        self.had_warning = True
        if not self.quiet:
            super().warning(diagnostic)

    def poll_abort(self) -> None:
        if self.listener.is_canceled():
            raise AbortError()
