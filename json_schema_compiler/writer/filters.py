"""
Writers that decorate another writer.
"""

from __future__ import annotations

from typing import IO, TYPE_CHECKING

from .base import CodeWriter, FilterCodeWriter, unit_path

if TYPE_CHECKING:
    from ..diagnostics import CompilerListener

COMMENT_PREFIXES = {
    ".py": "# ",
    ".cs": "// ",
}


class PrologCodeWriter(FilterCodeWriter):
    """Starts every source file with a comment block.

    Args:
        core: The writer to forward to
        prolog: Comment text, possibly several lines, without comment markers
    """

    def __init__(self, core: CodeWriter, prolog: str):
        super().__init__(core)
        self.prolog = prolog

    def open_source(self, package: str, file_name: str) -> IO[str]:
        stream = super().open_source(package, file_name)
        prefix = next((p for ext, p in COMMENT_PREFIXES.items() if file_name.endswith(ext)), "// ")
        for line in self.prolog.splitlines():
            stream.write(f"{prefix}{line}".rstrip() + "\n")
        stream.write("\n")
        return stream


class ProgressCodeWriter(FilterCodeWriter):
    """Tells the listener about every file before it is opened.

    Args:
        output: The writer to forward to
        listener: Receives ``generated_file(path, current, total)``
        total: Number of files that will be written
    """

    def __init__(self, output: CodeWriter, listener: CompilerListener, total: int):
        super().__init__(output)
        self.listener = listener
        self.total = total
        self.current = 0

    def open_binary(self, package: str, file_name: str) -> IO[bytes]:
        self._report(package, file_name)
        return super().open_binary(package, file_name)

    def open_source(self, package: str, file_name: str) -> IO[str]:
        self._report(package, file_name)
        return super().open_source(package, file_name)

    def _report(self, package: str, file_name: str) -> None:
        self.current += 1
        self.listener.generated_file(unit_path(package, file_name), self.current, self.total)
