"""
Model nodes.

The model built from the whole schema forest. Every reference is resolved
and every type name is unique, but nothing here depends on the target
language; the renderers translate it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeKind(Enum):
    """Kind of type in the model."""

    PRIMITIVE = "primitive"  # string, integer, number, boolean, null
    CLASS = "class"
    ENUM = "enum"
    ARRAY = "array"
    TUPLE = "tuple"  # fixed items
    UNION = "union"
    OPTIONAL = "optional"  # not required, or nullable
    CONST = "const"
    ANY = "any"  # ignored or unconstrained


@dataclass
class TypeRef:
    """The type of a field, as seen by every renderer."""

    kind: TypeKind = TypeKind.PRIMITIVE
    name: str = ""  # Primitive schema type, or model class/enum name

    # For container types
    type_args: list[TypeRef] = field(default_factory=list)

    # For const/literal types
    const_value: Any = None

    @staticmethod
    def any_type() -> TypeRef:
        return TypeRef(TypeKind.ANY)

    @staticmethod
    def optional(inner: TypeRef) -> TypeRef:
        if inner.kind in (TypeKind.OPTIONAL, TypeKind.ANY):
            return inner
        return TypeRef(TypeKind.OPTIONAL, type_args=[inner])

    def referenced_names(self) -> Iterator[str]:
        """Yield the names of all classes and enums this type mentions."""
        if self.kind in (TypeKind.CLASS, TypeKind.ENUM):
            yield self.name
        for arg in self.type_args:
            yield from arg.referenced_names()


@dataclass
class FieldDef:
    """One property of a generated class, keyed by its JSON name."""

    name: str = ""  # JSON property name
    type_ref: TypeRef = field(default_factory=TypeRef.any_type)
    is_required: bool = False
    default_value: Any = None
    has_default: bool = False
    description: str | None = None


@dataclass
class EnumDef:
    """An enum definition."""

    name: str = ""
    package: str = ""
    value_type: str = "string"  # "string", "integer", etc.
    members: dict[str, Any] = field(default_factory=dict)  # member_name -> json_value
    description: str | None = None
    source: str = ""  # system id and JSON pointer of the declaration


@dataclass
class ClassDef:
    """A class definition."""

    name: str = ""
    package: str = ""

    # Inheritance
    base_class: str | None = None  # Model name of the base class

    fields: list[FieldDef] = field(default_factory=list)
    description: str | None = None
    source: str = ""  # system id and JSON pointer of the declaration
