"""
Schema reader: raw documents, their ASTs, and the parser between them.

``ModelLoader`` lives in ``reader.loader`` and is imported from there.
"""

from .forest import SchemaForest
from .nodes import SchemaAST
from .parser import SchemaParser
from .schema_set import ComplexType, SchemaSet

__all__ = [
    "ComplexType",
    "SchemaAST",
    "SchemaForest",
    "SchemaParser",
    "SchemaSet",
]
