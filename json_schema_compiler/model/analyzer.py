"""
Schema analyzer that turns parsed schema documents into the semantic model.

Resolves references across documents, handles inheritance, names inline
types and reports every problem it finds. Problems are reported and
analysis continues, so one run surfaces as many diagnostics as possible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..diagnostics import Severity
from ..error_receiver import ErrorReceiver
from ..reader.nodes import (
    AllOfNode,
    ArrayNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaAST,
    SchemaNode,
    UnionNode,
)
from ..reader.schema_set import ROOT_KEY, SchemaSet
from ..utils import enum_member_name, snake_to_pascal_case
from .nodes import ClassDef, EnumDef, FieldDef, TypeKind, TypeRef

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "generated"

PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}


@dataclass
class Declaration:
    """A named top-level schema type and the model name assigned to it."""

    name: str
    ast: SchemaAST
    key: str
    node: SchemaNode
    package: str

    @property
    def kind(self) -> str:
        if isinstance(self.node, (ObjectNode, AllOfNode)):
            return "class"
        if isinstance(self.node, EnumNode):
            return "enum"
        return "alias"

    @property
    def source(self) -> str:
        return f"{self.ast.system_id}{self.node.source_path}"


class SchemaAnalyzer:
    """Builds classes and enums from a schema set.

    Args:
        receiver: Where problems are reported
        default_package: Package forced on every document, or None to use
            each document's ``x-package``
        ignore_classes: Definition or class names to leave out
        global_ignore_fields: Property names to leave out of every class
    """

    def __init__(
        self,
        receiver: ErrorReceiver,
        default_package: str | None = None,
        ignore_classes: list[str] | None = None,
        global_ignore_fields: list[str] | None = None,
    ):
        self.receiver = receiver
        self.default_package = default_package
        self.ignore_classes = set(ignore_classes or [])
        self.global_ignore_fields = set(global_ignore_fields or [])

        # Will be set during analysis
        self.schema_set: SchemaSet | None = None
        self.declarations: dict[tuple[str, str], Declaration] = {}
        self.names: dict[str, str] = {}  # model name -> source of its declaration
        self.classes: list[ClassDef] = []
        self.enums: list[EnumDef] = []
        self._resolving_aliases: set[tuple[str, str]] = set()

    def analyze(self, schema_set: SchemaSet) -> tuple[list[ClassDef], list[EnumDef]]:
        """
        Analyze every document of ``schema_set``.

        Returns:
            The classes and enums of the model, in declaration order
        """
        self.schema_set = schema_set

        # First pass: name every declaration so references resolve in any order
        for ast in schema_set.documents:
            package = self._package_for(ast)
            if ast.root_node is not None:
                self._declare(ast, ROOT_KEY, ast.root_name, ast.root_node, package)
            for definition in ast.definitions:
                if definition.body is not None:
                    self._declare(ast, definition.name, definition.name, definition.body, package)

        # Second pass: build the model
        for declaration in list(self.declarations.values()):
            self.receiver.poll_abort()
            if declaration.kind == "class":
                self._build_class(declaration.name, declaration.node, declaration.ast, declaration.package)
            elif declaration.kind == "enum":
                self._build_enum(declaration.name, declaration.node, declaration.ast, declaration.package)
            else:
                self._report(
                    Severity.INFO,
                    f"definition '{declaration.key}' is an alias of a built-in type; no class is generated",
                    declaration.ast,
                    declaration.node,
                )

        self._check_inheritance()
        return self.classes, self.enums

    def _package_for(self, ast: SchemaAST) -> str:
        if self.default_package is not None:
            return self.default_package
        return ast.package or DEFAULT_PACKAGE

    def _report(self, severity: Severity, message: str, ast: SchemaAST, node: SchemaNode) -> None:
        self.receiver.report(severity, message, system_id=ast.system_id, location=node.source_path)

    def _declare(self, ast: SchemaAST, key: str, raw_name: str, node: SchemaNode, package: str) -> None:
        name = snake_to_pascal_case(raw_name)
        if key in self.ignore_classes or name in self.ignore_classes:
            logger.debug("Ignoring definition %s", key)
            return
        if not name:
            self._report(Severity.ERROR, f"cannot derive a class name from '{raw_name}'", ast, node)
            return

        declaration = Declaration(name, ast, key, node, package)
        if declaration.kind != "alias":
            if name in self.names:
                self._report(
                    Severity.ERROR,
                    f"class name '{name}' collides with the declaration at {self.names[name]}",
                    ast,
                    node,
                )
                return
            self.names[name] = declaration.source
        self.declarations[(ast.system_id, key)] = declaration

    def _unique_name(self, base: str, source: str) -> str:
        name = base
        counter = 2
        while name in self.names:
            name = f"{base}{counter}"
            counter += 1
        self.names[name] = source
        return name

    def _build_class(self, name: str, node: SchemaNode, ast: SchemaAST, package: str) -> ClassDef:
        class_def = ClassDef(
            name=name,
            package=package,
            description=node.description,
            source=f"{ast.system_id}{node.source_path}",
        )
        self.classes.append(class_def)
        self._report(Severity.INFO, f"generating class {name}", ast, node)

        body: ObjectNode | None = None
        if isinstance(node, AllOfNode):
            class_def.base_class = self._resolve_base(node, ast)
            body = node.extension
        elif isinstance(node, ObjectNode):
            body = node

        if body is not None:
            for prop in body.properties:
                if prop.name in self.global_ignore_fields:
                    continue
                type_ref = self._translate(prop.type_node, ast, name, prop.name)
                if not prop.is_required and not prop.has_default:
                    type_ref = TypeRef.optional(type_ref)
                class_def.fields.append(
                    FieldDef(
                        name=prop.name,
                        type_ref=type_ref,
                        is_required=prop.is_required,
                        default_value=prop.default_value,
                        has_default=prop.has_default,
                        description=prop.description,
                    )
                )
        return class_def

    def _resolve_base(self, node: AllOfNode, ast: SchemaAST) -> str | None:
        if node.base_ref is None:
            return None
        base_type = self._translate(node.base_ref, ast, "", "")
        if base_type.kind is not TypeKind.CLASS:
            self._report(Severity.ERROR, f"allOf base '{node.base_ref.ref_path}' is not an object definition", ast, node)
            return None
        return base_type.name

    def _build_enum(self, name: str, node: EnumNode, ast: SchemaAST, package: str) -> EnumDef:
        members: dict[str, object] = {}
        for value in node.values:
            member = node.member_names.get(str(value)) or enum_member_name(value)
            if member in members:
                member = f"{member}_{len(members)}"
            members[member] = value

        enum_def = EnumDef(
            name=name,
            package=package,
            value_type=node.inferred_type,
            members=members,
            description=node.description,
            source=f"{ast.system_id}{node.source_path}",
        )
        self.enums.append(enum_def)
        return enum_def

    def _translate(self, node: SchemaNode | None, ast: SchemaAST, owner: str, prop_name: str) -> TypeRef:
        """
        Translate a schema node into a model type.

        Args:
            node: The node to translate
            ast: Document containing the node
            owner: Name of the class the node belongs to (for naming inline types)
            prop_name: Name of the property the node describes

        Returns:
            The resolved type
        """
        if node is None:
            return TypeRef.any_type()

        if isinstance(node, RefNode):
            return self._translate_ref(node, ast)

        if isinstance(node, PrimitiveNode):
            if node.type_name == "object":
                return TypeRef.any_type()
            if node.type_name not in PRIMITIVE_TYPES:
                self._report(Severity.ERROR, f"unknown type '{node.type_name}'", ast, node)
                return TypeRef.any_type()
            return TypeRef(TypeKind.PRIMITIVE, node.type_name)

        if isinstance(node, ConstNode):
            return TypeRef(TypeKind.CONST, node.inferred_type, const_value=node.value)

        if isinstance(node, EnumNode):
            name = self._unique_name(f"{owner}{snake_to_pascal_case(prop_name)}", f"{ast.system_id}{node.source_path}")
            self._build_enum(name, node, ast, self._package_for(ast))
            return TypeRef(TypeKind.ENUM, name)

        if isinstance(node, (ObjectNode, AllOfNode)):
            name = self._unique_name(f"{owner}{snake_to_pascal_case(prop_name)}", f"{ast.system_id}{node.source_path}")
            self._build_class(name, node, ast, self._package_for(ast))
            return TypeRef(TypeKind.CLASS, name)

        if isinstance(node, ArrayNode):
            if isinstance(node.items, list):
                return TypeRef(TypeKind.TUPLE, type_args=[self._translate(item, ast, owner, prop_name) for item in node.items])
            return TypeRef(TypeKind.ARRAY, type_args=[self._translate(node.items, ast, owner, prop_name)])

        if isinstance(node, UnionNode):
            return self._translate_union(node, ast, owner, prop_name)

        return TypeRef.any_type()

    def _translate_ref(self, node: RefNode, ast: SchemaAST) -> TypeRef:
        resolved = self.schema_set.resolve(ast, node)
        if resolved is None:
            self._report(Severity.ERROR, f"undefined reference '{node.ref_path}'", ast, node)
            return TypeRef.any_type()

        key = (resolved.ast.system_id, resolved.key)
        declaration = self.declarations.get(key)
        if declaration is None:
            # Ignored by configuration
            return TypeRef.any_type()
        if declaration.kind == "class":
            return TypeRef(TypeKind.CLASS, declaration.name)
        if declaration.kind == "enum":
            return TypeRef(TypeKind.ENUM, declaration.name)

        if key in self._resolving_aliases:
            self._report(Severity.ERROR, f"circular reference '{node.ref_path}'", ast, node)
            return TypeRef.any_type()
        self._resolving_aliases.add(key)
        try:
            return self._translate(declaration.node, declaration.ast, declaration.name, "")
        finally:
            self._resolving_aliases.discard(key)

    def _translate_union(self, node: UnionNode, ast: SchemaAST, owner: str, prop_name: str) -> TypeRef:
        variants: list[TypeRef] = []
        nullable = False
        for variant in node.variants:
            type_ref = self._translate(variant, ast, owner, prop_name)
            if type_ref.kind is TypeKind.PRIMITIVE and type_ref.name == "null":
                nullable = True
            elif type_ref not in variants:
                variants.append(type_ref)

        if not variants:
            result = TypeRef(TypeKind.PRIMITIVE, "null")
            nullable = False
        elif len(variants) == 1:
            result = variants[0]
        else:
            result = TypeRef(TypeKind.UNION, type_args=variants)
        return TypeRef.optional(result) if nullable else result

    def _check_inheritance(self) -> None:
        by_name = {class_def.name: class_def for class_def in self.classes}
        for class_def in self.classes:
            seen = {class_def.name}
            current = class_def
            while current.base_class is not None:
                if current.base_class in seen:
                    self.receiver.report(
                        Severity.ERROR,
                        f"class {class_def.name} inherits from itself",
                        system_id=class_def.source.split("#", 1)[0],
                    )
                    class_def.base_class = None
                    break
                seen.add(current.base_class)
                current = by_name.get(current.base_class)
                if current is None:
                    break
