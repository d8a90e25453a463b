"""
Semantic model: resolved classes and enums, independent of the target language.

``SchemaAnalyzer`` and ``Model`` live in ``model.analyzer`` and ``model.model``.
"""

from .nodes import ClassDef, EnumDef, FieldDef, TypeKind, TypeRef

__all__ = [
    "ClassDef",
    "EnumDef",
    "FieldDef",
    "TypeKind",
    "TypeRef",
]
