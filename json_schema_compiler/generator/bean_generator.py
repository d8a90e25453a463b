"""
Turns the model into an outline and registers the generated files.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..diagnostics import Severity
from ..error_receiver import ErrorReceiver, ErrorReceiverFilter
from ..model.nodes import ClassDef, EnumDef
from .backends import create_renderer
from .outline import ClassOutline, EnumOutline, Outline

if TYPE_CHECKING:
    from ..model.model import Model

logger = logging.getLogger(__name__)


class BeanGenerator:
    """Decides the generated name and package of every model type.

    Args:
        model: The analyzed model
        receiver: Where problems are reported
    """

    def __init__(self, model: Model, receiver: ErrorReceiver):
        self.model = model
        self.receiver = ErrorReceiverFilter(receiver)
        self.code_model = model.code_model
        self.options = model.options

    @staticmethod
    def generate(model: Model, receiver: ErrorReceiver) -> Outline | None:
        """
        Generate the outline of ``model``.

        Args:
            model: The analyzed model
            receiver: Where problems are reported

        Returns:
            The outline, or None if an error was reported
        """
        return BeanGenerator(model, receiver).build()

    def build(self) -> Outline | None:
        outline = Outline(self.code_model)
        taken: dict[tuple[str, str], str] = {}

        for class_def in self._ordered(self.model.classes):
            class_outline = ClassOutline(class_def, self._generated_name(class_def, taken), class_def.package)
            outline.add_class(class_outline)
        for enum_def in self.model.enums:
            enum_outline = EnumOutline(enum_def, self._generated_name(enum_def, taken), enum_def.package)
            outline.add_enum(enum_outline)

        if self.receiver.had_error:
            return None

        renderer = create_renderer(self.options.target_language.value, outline, self.options.config)
        renderer.register(self.code_model)
        logger.debug("Outline has %d classes, %d enums", len(outline.classes), len(outline.enums))
        return outline

    def _generated_name(self, type_def: ClassDef | EnumDef, taken: dict[tuple[str, str], str]) -> str:
        name = self.code_model.replace_class_name(type_def.name)
        if name != type_def.name:
            self.receiver.debug(f"renaming {type_def.name} to {name}")

        key = (type_def.package, name.lower())
        if key in taken:
            self.receiver.report(
                Severity.ERROR,
                f"{name} is generated twice in package '{type_def.package}' (also from {taken[key]})",
                system_id=type_def.source.split("#", 1)[0] or None,
                location="#" + type_def.source.split("#", 1)[1] if "#" in type_def.source else None,
            )
        taken[key] = type_def.source
        return name

    def _ordered(self, classes: list[ClassDef]) -> list[ClassDef]:
        """Classes listed in ``order_classes`` come first, in that order."""
        order = self.options.config.order_classes
        if not order:
            return list(classes)
        position = {name: index for index, name in enumerate(order)}
        return sorted(classes, key=lambda c: position.get(c.name, len(order)))
