"""
Content-model grammars of object schemas and their transition graphs.
"""

from .builder import ExpressionBuilder
from .expression import EPSILON, Choice, Element, Epsilon, Expression, OneOrMore, Sequence
from .graph import Graph

__all__ = [
    "EPSILON",
    "Choice",
    "Element",
    "Epsilon",
    "Expression",
    "ExpressionBuilder",
    "Graph",
    "OneOrMore",
    "Sequence",
]
