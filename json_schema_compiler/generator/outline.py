"""
Outline of the generated code.

The outline maps every model class and enum to the name and package it is
generated under. Plugins receive it after generation and may adjust it
before the sources are rendered.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..model.nodes import ClassDef, EnumDef
from .code_model import CodeModel


@dataclass
class ClassOutline:
    """A model class as it will be generated."""

    target: ClassDef
    name: str
    package: str

    # Immutable instances (frozen dataclass / sealed class with init-only setters)
    frozen: bool = False

    # Extra decorator or attribute lines emitted above the class
    annotations: list[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


@dataclass
class EnumOutline:
    """A model enum as it will be generated."""

    target: EnumDef
    name: str
    package: str

    @property
    def full_name(self) -> str:
        return f"{self.package}.{self.name}" if self.package else self.name


class Outline:
    """Everything generated by one compilation.

    Args:
        code_model: Code model holding the compilation units
    """

    def __init__(self, code_model: CodeModel):
        self.code_model = code_model
        self.classes: list[ClassOutline] = []
        self.enums: list[EnumOutline] = []
        self._by_model_name: dict[str, ClassOutline | EnumOutline] = {}

    def add_class(self, class_outline: ClassOutline) -> None:
        self.classes.append(class_outline)
        self._by_model_name[class_outline.target.name] = class_outline

    def add_enum(self, enum_outline: EnumOutline) -> None:
        self.enums.append(enum_outline)
        self._by_model_name[enum_outline.target.name] = enum_outline

    def resolve(self, model_name: str) -> ClassOutline | EnumOutline | None:
        """Find the outline generated for the model class or enum ``model_name``."""
        return self._by_model_name.get(model_name)

    def get_class(self, model_name: str) -> ClassOutline | None:
        outline = self.resolve(model_name)
        return outline if isinstance(outline, ClassOutline) else None

    def packages(self) -> list[str]:
        """Packages with generated types, in first-use order."""
        seen: dict[str, None] = {}
        for type_outline in (*self.classes, *self.enums):
            seen.setdefault(type_outline.package, None)
        return list(seen)

    def count_artifacts(self) -> int:
        """Number of files the outline generates."""
        return self.code_model.count_artifacts()
