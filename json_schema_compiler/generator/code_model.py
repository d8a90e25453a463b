"""
Generated source files, held in memory until they are written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..writer import CodeWriter, unit_path

logger = logging.getLogger(__name__)


@dataclass
class CompilationUnit:
    """One generated source file.

    The content is rendered when the unit is written, so plugins that
    change the outline after generation still affect the output.
    """

    package: str
    file_name: str
    render: Callable[[], str]

    @property
    def path(self) -> str:
        """Path of the file relative to the output root, with ``/`` separators."""
        return unit_path(self.package, self.file_name)


class CodeModel:
    """The set of source files a compilation produces."""

    def __init__(self):
        self.class_name_replacer: dict[str, str] = {}
        self.units: list[CompilationUnit] = []

    def add_class_name_replacer(self, class_name: str, replacement: str) -> None:
        """Generate ``class_name`` as ``replacement``."""
        self.class_name_replacer[class_name] = replacement

    def replace_class_name(self, class_name: str) -> str:
        return self.class_name_replacer.get(class_name, class_name)

    def add_unit(self, package: str, file_name: str, render: Callable[[], str]) -> CompilationUnit:
        unit = CompilationUnit(package, file_name, render)
        self.units.append(unit)
        return unit

    def count_artifacts(self) -> int:
        return len(self.units)

    def build(self, writer: CodeWriter) -> None:
        """
        Render every unit and write it through ``writer``, then close the writer.

        Raises:
            OSError: If writing fails
        """
        try:
            for unit in self.units:
                content = unit.render()
                with writer.open_source(unit.package, unit.file_name) as stream:
                    stream.write(content)
                logger.debug("Wrote %s", unit.path)
        finally:
            writer.close()
