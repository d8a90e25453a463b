"""
Destinations for generated source files.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import IO


class CodeWriter(ABC):
    """Receives generated files one at a time.

    Each file is opened, written and closed before the next one is opened.
    ``close`` is called once after the last file.
    """

    encoding: str = "utf-8"

    @abstractmethod
    def open_binary(self, package: str, file_name: str) -> IO[bytes]:
        """Open ``file_name`` of ``package`` for writing bytes.

        Raises:
            OSError: If the file cannot be created
        """

    def open_source(self, package: str, file_name: str) -> IO[str]:
        """Open ``file_name`` of ``package`` for writing text in ``self.encoding``."""
        return io.TextIOWrapper(self.open_binary(package, file_name), encoding=self.encoding, newline="\n")

    def close(self) -> None:
        pass


class FilterCodeWriter(CodeWriter):
    """Forwards everything to another writer. Subclasses override what they change.

    Args:
        core: The writer to forward to
    """

    def __init__(self, core: CodeWriter):
        self.core = core

    @property
    def encoding(self) -> str:
        return self.core.encoding

    @encoding.setter
    def encoding(self, value: str) -> None:
        self.core.encoding = value

    def open_binary(self, package: str, file_name: str) -> IO[bytes]:
        return self.core.open_binary(package, file_name)

    def open_source(self, package: str, file_name: str) -> IO[str]:
        return self.core.open_source(package, file_name)

    def close(self) -> None:
        self.core.close()


def unit_path(package: str, file_name: str) -> str:
    """``com.example`` + ``person.py`` -> ``com/example/person.py``."""
    if not package:
        return file_name
    return package.replace(".", "/") + "/" + file_name
