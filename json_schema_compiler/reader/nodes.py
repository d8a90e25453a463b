"""
Parsed form of one schema document.

A document becomes a ``SchemaAST`` holding its named definitions and, when
the document itself describes an object, a root node. References stay
unresolved here; ``SchemaSet`` and the model analyzer resolve them across
the whole forest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """A schema fragment, located by its JSON pointer inside the document."""

    # JSON pointer used as the location of diagnostics
    source_path: str = ""

    # description, default and x-* keywords of the fragment
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def description(self) -> str | None:
        return self.metadata.get("description")


@dataclass
class PrimitiveNode(SchemaNode):
    """A plain JSON type: string, integer, number, boolean, null or object."""

    type_name: str = ""


@dataclass
class ConstNode(SchemaNode):
    value: Any = None
    inferred_type: str = ""


@dataclass
class EnumNode(SchemaNode):
    """Enumeration of literal values.

    ``member_names`` comes from ``x-enum-members`` and overrides the member
    name derived from a value.
    """

    values: list[Any] = field(default_factory=list)
    inferred_type: str = ""
    member_names: dict[Any, str] = field(default_factory=dict)


@dataclass
class RefNode(SchemaNode):
    # "#/definitions/Name" or "other.json#/definitions/Name"
    ref_path: str = ""


@dataclass
class ArrayNode(SchemaNode):
    """Array of ``items``, or a tuple when ``items`` is a list."""

    items: SchemaNode | list[SchemaNode] | None = None
    min_items: int | None = None


@dataclass
class PropertyDef(SchemaNode):
    """One entry of an object's ``properties``, keyed by its JSON name."""

    name: str = ""
    type_node: SchemaNode | None = None
    is_required: bool = False
    default_value: Any = None
    has_default: bool = False


@dataclass
class ObjectNode(SchemaNode):
    """Object schema; becomes a generated class when it is named."""

    properties: list[PropertyDef] = field(default_factory=list)


@dataclass
class UnionNode(SchemaNode):
    """``oneOf`` / ``anyOf`` alternatives, or a ``type`` list ("typeArray")."""

    variants: list[SchemaNode] = field(default_factory=list)
    union_type: str = "oneOf"


@dataclass
class AllOfNode(SchemaNode):
    """Derivation: ``base_ref`` is the base class, ``extension`` adds properties."""

    base_ref: RefNode | None = None
    extension: ObjectNode | None = None


@dataclass
class DefinitionNode(SchemaNode):
    """Named entry of ``definitions`` or ``$defs``."""

    name: str = ""
    body: SchemaNode | None = None


@dataclass
class SchemaAST:
    """One parsed document of the forest.

    Args:
        system_id: Absolute URI the document was read from
        root_name: Type name given to the document's own object schema
        root_node: The document's own object schema, if it declares one
        definitions: Named definitions in document order
        package: Target package requested with ``x-package``
    """

    system_id: str = ""
    root_name: str = ""
    root_node: SchemaNode | None = None
    definitions: list[DefinitionNode] = field(default_factory=list)
    package: str | None = None

    def find_definition(self, name: str) -> DefinitionNode | None:
        return next((d for d in self.definitions if d.name == name), None)
