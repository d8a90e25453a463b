"""
Execution contexts for a compilation run.

Schema processing recurses as deep as the schema nests, so the driver runs
the whole pipeline on a dedicated worker thread with its own stack size and
an enlarged recursion limit. ``InlineExecutor`` runs on the calling thread,
which is easier to step through in a debugger.
"""

from __future__ import annotations

import logging
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STACK_SIZE = 256 * 1024 * 1024
DEFAULT_RECURSION_LIMIT = 50_000


class ExecutionContext(ABC):
    """Runs a callable and returns its result, re-raising its exception."""

    @abstractmethod
    def run(self, task: Callable[[], T]) -> T:
        pass


class InlineExecutor(ExecutionContext):
    """Runs the task on the calling thread."""

    def run(self, task: Callable[[], T]) -> T:
        return task()


class IsolatedExecutor(ExecutionContext):
    """Runs the task on a worker thread with its own resource budget.

    The caller blocks until the worker finishes. If the task raised, the same
    exception object is raised again on the calling thread.

    Args:
        stack_size: Stack size in bytes for the worker thread
        recursion_limit: Interpreter recursion limit while the task runs; the
            previous limit is restored afterwards and never lowered
    """

    def __init__(self, stack_size: int = DEFAULT_STACK_SIZE, recursion_limit: int = DEFAULT_RECURSION_LIMIT):
        self.stack_size = stack_size
        self.recursion_limit = recursion_limit

    def run(self, task: Callable[[], T]) -> T:
        outcome: dict[str, object] = {}

        def target() -> None:
            try:
                outcome["result"] = task()
            except BaseException as e:
                outcome["error"] = e

        previous_limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(previous_limit, self.recursion_limit))
        try:
            worker = self._start(target)
            worker.join()
        finally:
            sys.setrecursionlimit(previous_limit)

        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def _start(self, target: Callable[[], None]) -> threading.Thread:
        previous_size = threading.stack_size(self.stack_size)
        try:
            worker = threading.Thread(target=target, name="json-schema-compiler")
            worker.start()
        finally:
            threading.stack_size(previous_size)
        logger.debug("Started worker thread with a %d byte stack", self.stack_size)
        return worker
