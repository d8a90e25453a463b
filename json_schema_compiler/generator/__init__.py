"""
Code generation: outline, renderers and the in-memory code model.
"""

from .code_model import CodeModel, CompilationUnit
from .outline import ClassOutline, EnumOutline, Outline
from .bean_generator import BeanGenerator
from .signature import SignatureWriter

__all__ = [
    "BeanGenerator",
    "ClassOutline",
    "CodeModel",
    "CompilationUnit",
    "EnumOutline",
    "Outline",
    "SignatureWriter",
]
