"""
Generator settings read from the ``--config`` JSON file.

Keys of the file map one to one onto ``GeneratorConfig`` fields; unknown
keys are ignored. ``--replace`` entries from the command line are merged
into ``class_name_replacements`` by ``Options``.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path


@dataclass
class GeneratorConfig:
    """Settings shared by the model analyzer and the renderers."""

    # Type names left out of the model; references to them become "any"
    ignore_classes: list[str] = field(default_factory=list)

    # Property names dropped from every generated class
    global_ignore_fields: list[str] = field(default_factory=list)

    # Classes listed here are emitted first, in this order
    order_classes: list[str] = field(default_factory=list)

    # Schema type name -> generated class name
    class_name_replacements: dict[str, str] = field(default_factory=dict)

    python_kw_only: bool = True

    # Overrides the namespace derived from the package, e.g. "MyApp.Models"
    csharp_namespace: str = ""
    csharp_additional_usings: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        known = {f.name for f in fields(GeneratorConfig)}
        return GeneratorConfig(**{k: v for k, v in d.items() if k in known})

    @staticmethod
    def from_file(path: str | Path) -> GeneratorConfig:
        """Read the settings file.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a JSON object
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("the configuration must be a JSON object")
        return GeneratorConfig.from_dict(data)

    def to_dict(self) -> dict:
        return asdict(self)
