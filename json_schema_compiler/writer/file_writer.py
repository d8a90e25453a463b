"""
Writes generated files below a target directory.
"""

from __future__ import annotations

import io
import logging
import os
import stat
import tempfile
from pathlib import Path

from .base import CodeWriter, unit_path

logger = logging.getLogger(__name__)

READ_ONLY_MODE = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH
DEFAULT_MODE = READ_ONLY_MODE | stat.S_IWUSR


class _PendingFile(io.BytesIO):
    """Buffers the content of one file and commits it when closed."""

    def __init__(self, writer: FileCodeWriter, path: Path):
        super().__init__()
        self.writer = writer
        self.path = path

    def close(self) -> None:
        if self.closed:
            return
        data = self.getvalue()
        super().close()
        self.writer.commit(self.path, data)


class FileCodeWriter(CodeWriter):
    """Writes each file atomically below ``target_dir``.

    Content is written to a temporary file in the destination directory and
    then moved into place, so an interrupted run never leaves a truncated
    file behind. Package directories are created as needed.

    Args:
        target_dir: Root of the generated tree
        read_only: Make the generated files read-only
        encoding: Encoding of source files
    """

    def __init__(self, target_dir: str | Path, read_only: bool = False, encoding: str = "utf-8"):
        self.target_dir = Path(target_dir)
        self.read_only = read_only
        self.encoding = encoding

    def open_binary(self, package: str, file_name: str) -> _PendingFile:
        return _PendingFile(self, self.target_dir / unit_path(package, file_name))

    def commit(self, path: Path, data: bytes) -> None:
        """
        Atomically replace ``path`` with ``data``.

        Raises:
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        temp_path = Path(temp_path_str)
        try:
            with open(temp_fd, "wb") as f:
                f.write(data)
            temp_path.chmod(READ_ONLY_MODE if self.read_only else DEFAULT_MODE)
            if path.exists() and not os.access(path, os.W_OK):
                # Replacing a read-only file from a previous run
                path.chmod(DEFAULT_MODE)
            temp_path.replace(path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        logger.debug("Committed %s (%d bytes)", path, len(data))
