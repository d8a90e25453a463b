"""
Packs generated files into a zip archive.
"""

from __future__ import annotations

import zipfile
from typing import IO

from .base import CodeWriter, unit_path


class ZipCodeWriter(CodeWriter):
    """Writes every file as an entry of one zip archive.

    The stream does not need to be seekable, so the archive can go to
    standard output.

    Args:
        stream: Binary stream receiving the archive
        owns_stream: Close ``stream`` together with the archive
    """

    def __init__(self, stream: IO[bytes], owns_stream: bool = False):
        self.stream = stream
        self.owns_stream = owns_stream
        self.archive = zipfile.ZipFile(stream, mode="w", compression=zipfile.ZIP_DEFLATED)

    def open_binary(self, package: str, file_name: str) -> IO[bytes]:
        return self.archive.open(unit_path(package, file_name), mode="w")

    def close(self) -> None:
        self.archive.close()
        if self.owns_stream:
            self.stream.close()
        else:
            self.stream.flush()
