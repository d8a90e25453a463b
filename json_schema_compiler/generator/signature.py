"""
Language-neutral dump of the generated types.
"""

from __future__ import annotations

from typing import IO

from ..model.nodes import TypeKind, TypeRef
from .outline import Outline


class SignatureWriter:
    """Prints the signature of every generated class and enum.

    Types are listed by fully qualified name, each with its fields and their
    types, so two outlines can be compared with a plain text diff.

    Args:
        outline: The outline to print
        out: Destination stream
    """

    def __init__(self, outline: Outline, out: IO[str]):
        self.outline = outline
        self.out = out
        self.indent = 0

    @staticmethod
    def write(outline: Outline, out: IO[str]) -> None:
        """
        Write the signatures of ``outline`` to ``out``.

        Raises:
            OSError: If writing fails
        """
        SignatureWriter(outline, out).dump()

    def dump(self) -> None:
        types = [*self.outline.classes, *self.outline.enums]
        for package in sorted({t.package for t in types}):
            self._println(f"package {package or '<default>'} {{")
            self.indent += 1
            for class_outline in sorted((c for c in self.outline.classes if c.package == package), key=lambda c: c.name):
                self._dump_class(class_outline)
            for enum_outline in sorted((e for e in self.outline.enums if e.package == package), key=lambda e: e.name):
                self._println(f"enum {enum_outline.name} {{")
                self.indent += 1
                for name in enum_outline.target.members:
                    self._println(name)
                self.indent -= 1
                self._println("}")
            self.indent -= 1
            self._println("}")
        self.out.flush()

    def _dump_class(self, class_outline) -> None:
        header = f"class {class_outline.name}"
        base = class_outline.target.base_class
        if base is not None:
            base_outline = self.outline.resolve(base)
            header += f" extends {base_outline.full_name if base_outline is not None else base}"
        self._println(header + " {")
        self.indent += 1
        for field_def in class_outline.target.fields:
            self._println(f"{self._type(field_def.type_ref)} {field_def.name};")
        self.indent -= 1
        self._println("}")

    def _type(self, type_ref: TypeRef) -> str:
        if type_ref.kind in (TypeKind.CLASS, TypeKind.ENUM):
            target = self.outline.resolve(type_ref.name)
            return target.full_name if target is not None else type_ref.name
        if type_ref.kind == TypeKind.ARRAY:
            return f"{self._type(type_ref.type_args[0])}[]" if type_ref.type_args else "any[]"
        if type_ref.kind == TypeKind.TUPLE:
            return "(" + ", ".join(self._type(t) for t in type_ref.type_args) + ")"
        if type_ref.kind == TypeKind.UNION:
            return "(" + " | ".join(self._type(t) for t in type_ref.type_args) + ")"
        if type_ref.kind == TypeKind.OPTIONAL:
            return f"{self._type(type_ref.type_args[0])}?"
        if type_ref.kind == TypeKind.CONST:
            return f"const {type_ref.const_value!r}"
        if type_ref.kind == TypeKind.ANY:
            return "any"
        return type_ref.name

    def _println(self, text: str) -> None:
        self.out.write("  " * self.indent + text + "\n")
