"""
Parsed schema documents of one compilation.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .forest import resolve_ref
from .nodes import AllOfNode, ObjectNode, RefNode, SchemaAST, SchemaNode

# Key under which a document root is registered next to its definitions
ROOT_KEY = "#"


@dataclass
class ComplexType:
    """A named schema type whose instances have a content model (properties)."""

    name: str
    ast: SchemaAST
    node: SchemaNode

    def content_particle(self) -> ObjectNode | AllOfNode | None:
        """The node describing the content model, or None for simple content."""
        if isinstance(self.node, (ObjectNode, AllOfNode)):
            return self.node
        return None


@dataclass
class ResolvedRef:
    """Target of a $ref."""

    ast: SchemaAST
    key: str  # definition name, or ROOT_KEY
    node: SchemaNode


@dataclass
class SchemaSet:
    """All documents of a compilation, parsed into ASTs, in load order."""

    documents: list[SchemaAST] = field(default_factory=list)

    def get_document(self, system_id: str) -> SchemaAST | None:
        for ast in self.documents:
            if ast.system_id == system_id:
                return ast
        return None

    def iterate_complex_types(self) -> Iterator[ComplexType]:
        """Yield every definition (and document root) with object content."""
        for ast in self.documents:
            if ast.root_node is not None:
                yield ComplexType(ast.root_name, ast, ast.root_node)
            for definition in ast.definitions:
                if definition.body is not None:
                    yield ComplexType(definition.name, ast, definition.body)

    def resolve(self, ast: SchemaAST, ref: RefNode) -> ResolvedRef | None:
        """Find the definition (or document root) a ``$ref`` points at.

        Args:
            ast: Document containing the reference
            ref: The reference

        Returns:
            The resolved target, or None if it does not exist
        """
        ref_path = ref.ref_path
        if ref_path.startswith("#"):
            target_ast: SchemaAST | None = ast
            fragment = ref_path
        else:
            target_ast = self.get_document(resolve_ref(ast.system_id, ref_path))
            fragment = "#" + ref_path.split("#", 1)[1] if "#" in ref_path else "#"
        if target_ast is None:
            return None

        if fragment in ("#", "#/"):
            if target_ast.root_node is None:
                return None
            return ResolvedRef(target_ast, ROOT_KEY, target_ast.root_node)

        # e.g., "#/definitions/MyClass" or "#/$defs/MyClass"
        parts = fragment.split("/")
        if len(parts) == 3 and parts[1] in ("definitions", "$defs"):
            definition = target_ast.find_definition(parts[2])
            if definition is not None and definition.body is not None:
                return ResolvedRef(target_ast, definition.name, definition.body)
        return None
