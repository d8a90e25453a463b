"""
Code writers: where generated files end up.
"""

from .base import CodeWriter, FilterCodeWriter, unit_path
from .file_writer import FileCodeWriter
from .filters import PrologCodeWriter, ProgressCodeWriter
from .zip_writer import ZipCodeWriter

__all__ = [
    "CodeWriter",
    "FileCodeWriter",
    "FilterCodeWriter",
    "PrologCodeWriter",
    "ProgressCodeWriter",
    "ZipCodeWriter",
    "unit_path",
]
