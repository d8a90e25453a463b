"""
Turns one JSON Schema document into a ``SchemaAST``.

The parser only looks at a single document. ``$ref`` values are kept as
``RefNode`` and resolved later, once the whole forest is known. Problems
are reported through the error receiver, located by JSON pointer.
"""

from __future__ import annotations

from typing import Any

from ..diagnostics import Severity
from ..error_receiver import ErrorReceiver
from .nodes import (
    AllOfNode,
    ArrayNode,
    ConstNode,
    DefinitionNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)

# Keywords that have no counterpart in the generated classes
UNSUPPORTED_KEYWORDS = ("patternProperties", "if", "then", "else", "not", "dependencies", "dependentSchemas")

# bool first: it is a subclass of int
JSON_TYPES: tuple[tuple[type, str], ...] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (str, "string"),
    (type(None), "null"),
)


def json_type_of(value: Any) -> str:
    """The JSON Schema type name of a literal ``value``."""
    for python_type, name in JSON_TYPES:
        if isinstance(value, python_type):
            return name
    return "object"


class SchemaParser:
    """Parser for a single schema document.

    Args:
        receiver: Where problems found while parsing are reported
        system_id: URI of the document being parsed
    """

    def __init__(self, receiver: ErrorReceiver, system_id: str = ""):
        self.receiver = receiver
        self.system_id = system_id

    def parse(self, schema: dict[str, Any], root_name: str) -> SchemaAST:
        """
        Parse a whole document.

        Args:
            schema: The decoded JSON document
            root_name: Type name for the document's own object schema

        Returns:
            The document's definitions, in order, and its root node when the
            document declares ``properties`` or ``allOf`` itself
        """
        ast = SchemaAST(system_id=self.system_id, root_name=root_name, package=schema.get("x-package"))

        key = "$defs" if "$defs" in schema else "definitions"
        for name, body in (schema.get(key) or {}).items():
            self.receiver.poll_abort()
            pointer = f"#/{key}/{name}"

            # "_comment" entries and plain strings annotate the document
            if isinstance(body, str) or name.startswith("_comment"):
                continue
            if not isinstance(body, dict):
                self._report(Severity.ERROR, f"definition '{name}' is not a schema object", pointer)
                continue

            ast.definitions.append(DefinitionNode(name=name, body=self.parse_node(body, pointer), source_path=pointer))

        if "properties" in schema or "allOf" in schema:
            ast.root_node = self.parse_node(schema, "#")

        return ast

    def parse_node(self, schema: Any, pointer: str) -> SchemaNode:
        """Parse the fragment found at ``pointer``."""
        if not isinstance(schema, dict):
            self._report(Severity.ERROR, "expected a schema object", pointer)
            return PrimitiveNode(type_name="object", source_path=pointer)

        for keyword in UNSUPPORTED_KEYWORDS:
            if keyword in schema:
                self._report(Severity.WARNING, f"unsupported keyword '{keyword}' is ignored", pointer)

        metadata = {key: value for key, value in schema.items() if key.startswith("x-")}
        for key in ("description", "default"):
            if key in schema:
                metadata[key] = schema[key]

        if "$ref" in schema:
            return RefNode(ref_path=schema["$ref"], source_path=pointer, metadata=metadata)
        if "const" in schema:
            value = schema["const"]
            return ConstNode(value=value, inferred_type=json_type_of(value), source_path=pointer, metadata=metadata)
        if "oneOf" in schema or "anyOf" in schema:
            return self._union(schema, pointer, metadata)
        if "allOf" in schema:
            return self._derivation(schema, pointer, metadata)
        if "enum" in schema:
            return self._enum(schema, pointer, metadata)
        if "type" in schema:
            return self._typed(schema, pointer, metadata)
        if "properties" in schema:
            return self._object(schema, pointer, metadata)
        return PrimitiveNode(type_name="object", source_path=pointer, metadata=metadata)

    def _report(self, severity: Severity, message: str, pointer: str) -> None:
        self.receiver.report(severity, message, system_id=self.system_id, location=pointer)

    def _enum(self, schema: dict[str, Any], pointer: str, metadata: dict[str, Any]) -> EnumNode:
        values = schema["enum"]
        if not isinstance(values, list) or not values:
            self._report(Severity.ERROR, "enum must be a non-empty array", pointer)
            values = []
        return EnumNode(
            values=values,
            inferred_type=json_type_of(values[0]) if values else "string",
            member_names=schema.get("x-enum-members", {}),
            source_path=pointer,
            metadata=metadata,
        )

    def _union(self, schema: dict[str, Any], pointer: str, metadata: dict[str, Any]) -> UnionNode:
        keyword = "oneOf" if "oneOf" in schema else "anyOf"
        variants = [self.parse_node(v, f"{pointer}/{keyword}/{i}") for i, v in enumerate(schema[keyword])]
        return UnionNode(variants=variants, union_type=keyword, source_path=pointer, metadata=metadata)

    def _derivation(self, schema: dict[str, Any], pointer: str, metadata: dict[str, Any]) -> AllOfNode:
        """``allOf: [{$ref: base}, {properties...}]``, plus any sibling ``properties``."""
        parts = schema["allOf"]
        node = AllOfNode(source_path=pointer, metadata=metadata)

        if parts and isinstance(parts[0], dict) and "$ref" in parts[0]:
            node.base_ref = RefNode(ref_path=parts[0]["$ref"], source_path=f"{pointer}/allOf/0")
        elif parts:
            self._report(Severity.ERROR, "the first allOf entry must be a $ref to the base class", f"{pointer}/allOf/0")

        if len(parts) >= 2:
            added = self.parse_node(parts[1], f"{pointer}/allOf/1")
            if not isinstance(added, ObjectNode):
                added = ObjectNode(source_path=f"{pointer}/allOf/1", metadata=added.metadata)
            node.extension = added

        if "properties" in schema:
            siblings = self._object(schema, pointer, {})
            if node.extension is None:
                node.extension = siblings
            else:
                node.extension.properties.extend(siblings.properties)

        return node

    def _typed(self, schema: dict[str, Any], pointer: str, metadata: dict[str, Any]) -> SchemaNode:
        type_name = schema["type"]

        if isinstance(type_name, list):
            if len(type_name) != 1:
                variants = [self.parse_node({"type": t}, f"{pointer}/type/{t}") for t in type_name]
                return UnionNode(variants=variants, union_type="typeArray", source_path=pointer, metadata=metadata)
            type_name = type_name[0]

        if type_name == "array":
            items = schema.get("items")
            if isinstance(items, list):
                parsed: SchemaNode | list[SchemaNode] | None = [
                    self.parse_node(item, f"{pointer}/items/{i}") for i, item in enumerate(items)
                ]
            else:
                parsed = None if items is None else self.parse_node(items, f"{pointer}/items")
            return ArrayNode(items=parsed, min_items=schema.get("minItems"), source_path=pointer, metadata=metadata)

        if type_name == "object" and "properties" in schema:
            return self._object(schema, pointer, metadata)

        return PrimitiveNode(type_name=type_name, source_path=pointer, metadata=metadata)

    def _object(self, schema: dict[str, Any], pointer: str, metadata: dict[str, Any]) -> ObjectNode:
        declared = schema.get("properties", {})
        required = set(schema.get("required", []))
        node = ObjectNode(source_path=pointer, metadata=metadata)

        for name, body in declared.items():
            property_pointer = f"{pointer}/properties/{name}"
            value = self.parse_node(body, property_pointer)
            node.properties.append(
                PropertyDef(
                    name=name,
                    type_node=value,
                    is_required=name in required,
                    default_value=value.metadata.get("default"),
                    has_default="default" in value.metadata,
                    source_path=property_pointer,
                    metadata={"description": value.description} if value.description else {},
                )
            )

        for name in schema.get("required", []):
            if name not in declared:
                self._report(Severity.WARNING, f"required property '{name}' is not declared", pointer)

        return node
