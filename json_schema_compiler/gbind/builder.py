"""
Builds content-model expressions from parsed object schemas.
"""

from __future__ import annotations

from ..reader.nodes import AllOfNode, ArrayNode, ObjectNode, PropertyDef, SchemaAST, SchemaNode
from ..reader.schema_set import ComplexType, SchemaSet
from .expression import EPSILON, Element, Expression, OneOrMore, optional, sequence


class ExpressionBuilder:
    """Turns the properties of an object schema into an ``Expression``.

    Properties become elements in declaration order. Properties that are not
    required may be absent, and array properties may repeat. An ``allOf``
    base contributes its own content model in front of the extension.

    Args:
        schema_set: Used to resolve ``allOf`` bases
    """

    def __init__(self, schema_set: SchemaSet):
        self.schema_set = schema_set

    def create_tree(self, complex_type: ComplexType) -> Expression:
        """Build the expression for the content model of ``complex_type``."""
        particle = complex_type.content_particle()
        if particle is None:
            return EPSILON
        return self._build(particle, complex_type.ast, set())

    def _build(self, node: SchemaNode, ast: SchemaAST, visiting: set[int]) -> Expression:
        if id(node) in visiting:
            # Circular allOf chain, stop here
            return EPSILON
        visiting = visiting | {id(node)}

        if isinstance(node, ObjectNode):
            return sequence(*(self._property(prop) for prop in node.properties))

        if isinstance(node, AllOfNode):
            base: Expression = EPSILON
            if node.base_ref is not None:
                resolved = self.schema_set.resolve(ast, node.base_ref)
                if resolved is not None:
                    base = self._build(resolved.node, resolved.ast, visiting)
            extension = self._build(node.extension, ast, visiting) if node.extension is not None else EPSILON
            return sequence(base, extension)

        return EPSILON

    def _property(self, prop: PropertyDef) -> Expression:
        expression: Expression = Element(prop.name)
        if isinstance(prop.type_node, ArrayNode):
            expression = OneOrMore(expression)
            if not prop.type_node.min_items:
                expression = optional(expression)
        if not prop.is_required:
            expression = optional(expression)
        return expression
