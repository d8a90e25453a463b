"""
The analyzed model of one compilation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..error_receiver import ErrorReceiver, ErrorReceiverFilter
from ..generator.bean_generator import BeanGenerator
from .nodes import ClassDef, EnumDef

if TYPE_CHECKING:
    from ..generator.code_model import CodeModel
    from ..generator.outline import Outline
    from ..options import Options

logger = logging.getLogger(__name__)


class Model:
    """Classes and enums derived from the schema set, before code generation.

    Args:
        options: Options of the run
        code_model: Code model that receives the generated units
        classes: Classes in declaration order
        enums: Enums in declaration order
    """

    def __init__(
        self,
        options: Options,
        code_model: CodeModel,
        classes: list[ClassDef] | None = None,
        enums: list[EnumDef] | None = None,
    ):
        self.options = options
        self.code_model = code_model
        self.classes = classes or []
        self.enums = enums or []

    def get_type(self, name: str) -> ClassDef | EnumDef | None:
        """Find a class or enum by its model name."""
        for type_def in (*self.classes, *self.enums):
            if type_def.name == name:
                return type_def
        return None

    def generate_code(self, options: Options, receiver: ErrorReceiver) -> Outline | None:
        """
        Generate the outline and run the active plugins against it.

        Args:
            options: Options of the run; its active plugins are run in order
            receiver: Where problems are reported

        Returns:
            The outline, or None if generation or a plugin failed (the cause
            has been reported to ``receiver``)
        """
        error_filter = ErrorReceiverFilter(receiver)

        outline = BeanGenerator.generate(self, error_filter)
        if outline is None:
            return None

        for plugin in options.active_plugins:
            logger.debug("Running plugin %s", plugin.option_name)
            if not plugin.run(outline, options, error_filter):
                return None

        if error_filter.had_error:
            return None
        return outline
