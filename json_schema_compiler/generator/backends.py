"""
Source renderers for the supported target languages.

A renderer registers one compilation unit per generated file on the code
model. Units render lazily through the Jinja2 templates shipped in
``json_schema_compiler/templates/<language>``.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..config import GeneratorConfig
from ..model.nodes import FieldDef, TypeKind, TypeRef
from ..utils import escape_csharp_keyword, pascal_to_snake_case, python_identifier, snake_to_pascal_case
from .code_model import CodeModel
from .outline import ClassOutline, EnumOutline, Outline

TEMPLATE_ROOT = Path(__file__).parent.parent / "templates"


class Renderer(ABC):
    """Base class for target language renderers.

    Args:
        outline: Outline to render
        config: Generator configuration
    """

    # Type mapping from schema primitive types to language types
    TYPE_MAP: dict[str, str] = {}

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, outline: Outline, config: GeneratorConfig):
        self.outline = outline
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = TEMPLATE_ROOT / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")
        self.enum_template = self.jinja_env.get_template(f"enum.{self.FILE_EXTENSION}.jinja2")

    @abstractmethod
    def register(self, code_model: CodeModel) -> None:
        """Add a compilation unit for every file of the outline to ``code_model``."""

    @abstractmethod
    def translate_type(self, type_ref: TypeRef) -> str:
        """
        Translate a model type to a language-specific type string.

        Args:
            type_ref: The type reference

        Returns:
            Language-specific type string
        """

    def type_name(self, model_name: str) -> str:
        """Generated name of a model class or enum."""
        type_outline = self.outline.resolve(model_name)
        return type_outline.name if type_outline is not None else model_name

    @staticmethod
    def _unwrap_optional(type_ref: TypeRef) -> TypeRef:
        if type_ref.kind is TypeKind.OPTIONAL and type_ref.type_args:
            return type_ref.type_args[0]
        return type_ref

    def _types_in(self, package: str) -> tuple[list[ClassOutline], list[EnumOutline]]:
        classes = [c for c in self.outline.classes if c.package == package]
        enums = [e for e in self.outline.enums if e.package == package]
        return classes, enums


class PythonRenderer(Renderer):
    """Renders one dataclass module per class and one enum module per enum."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"

    TYPE_MAP = {
        "integer": "int",
        "string": "str",
        "boolean": "bool",
        "number": "float",
        "null": "None",
    }

    def __init__(self, outline: Outline, config: GeneratorConfig):
        super().__init__(outline, config)
        self.init_template = self.jinja_env.get_template("init.py.jinja2")
        self.typing_imports: set[str] = set()

    @staticmethod
    def module_name(type_name: str) -> str:
        return pascal_to_snake_case(type_name) or type_name.lower()

    def register(self, code_model: CodeModel) -> None:
        for package in self.outline.packages():
            classes, enums = self._types_in(package)
            for class_outline in classes:
                code_model.add_unit(
                    package,
                    f"{self.module_name(class_outline.name)}.py",
                    lambda c=class_outline: self.render_class(c),
                )
            for enum_outline in enums:
                code_model.add_unit(
                    package,
                    f"{self.module_name(enum_outline.name)}.py",
                    lambda e=enum_outline: self.render_enum(e),
                )
            if package:
                code_model.add_unit(package, "__init__.py", lambda p=package: self.render_init(p))

    def import_line(self, model_name: str, from_package: str) -> str:
        """Import statement for a generated type, as seen from a module of ``from_package``."""
        target = self.outline.resolve(model_name)
        module = self.module_name(target.name)
        if target.package and target.package == from_package:
            return f"from .{module} import {target.name}"
        if target.package:
            return f"from {target.package}.{module} import {target.name}"
        return f"from {module} import {target.name}"

    def render_class(self, class_outline: ClassOutline) -> str:
        """Render the module of one class."""
        class_def = class_outline.target
        self.typing_imports = set()
        runtime_names: set[str] = set()
        referenced_names: set[str] = set()
        uses_field = False

        fields = []
        for field_def in self._ordered_fields(class_def.fields):
            annotation = self.translate_type(field_def.type_ref)
            value, needs_field = self._field_value(field_def, runtime_names)
            uses_field = uses_field or needs_field
            referenced_names.update(field_def.type_ref.referenced_names())
            declaration = f"{python_identifier(field_def.name)}: {annotation}"
            if value is not None:
                declaration += f" = {value}"
            fields.append({"declaration": declaration, "description": field_def.description})

        base = None
        if class_def.base_class is not None:
            base = self.type_name(class_def.base_class)
            runtime_names.add(class_def.base_class)

        runtime_names.discard(class_def.name)
        type_only = referenced_names - runtime_names - {class_def.name}
        if type_only:
            self.typing_imports.add("TYPE_CHECKING")

        dataclass_args = []
        if self.config.python_kw_only:
            dataclass_args.append("kw_only=True")
        if class_outline.frozen:
            dataclass_args.append("frozen=True")

        return self.class_template.render(
            dataclass_import="dataclass, field" if uses_field else "dataclass",
            typing_imports=sorted(self.typing_imports),
            runtime_imports=sorted(self.import_line(name, class_outline.package) for name in runtime_names),
            type_imports=sorted(self.import_line(name, class_outline.package) for name in type_only),
            annotations=class_outline.annotations,
            decorator=f"@dataclass({', '.join(dataclass_args)})" if dataclass_args else "@dataclass",
            class_name=class_outline.name,
            base=base,
            description=self._docstring(class_def.description),
            fields=fields,
        )

    def render_enum(self, enum_outline: EnumOutline) -> str:
        """Render the module of one enum."""
        enum_def = enum_outline.target
        if enum_def.value_type == "string":
            bases = "str, Enum"
        elif enum_def.value_type == "integer":
            bases = "int, Enum"
        else:
            bases = "Enum"
        members = [(name, self._python_literal(value)) for name, value in enum_def.members.items()]
        return self.enum_template.render(
            enum_name=enum_outline.name,
            bases=bases,
            description=self._docstring(enum_def.description),
            members=members,
        )

    def render_init(self, package: str) -> str:
        """Render the ``__init__.py`` re-exporting every type of ``package``."""
        classes, enums = self._types_in(package)
        outlines = [*classes, *enums]
        return self.init_template.render(
            imports=[self.import_line(o.target.name, package) for o in outlines],
            names=sorted(o.name for o in outlines),
        )

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a model type to a Python annotation."""
        if type_ref.kind == TypeKind.PRIMITIVE and type_ref.name in self.TYPE_MAP:
            return self.TYPE_MAP[type_ref.name]

        if type_ref.kind in (TypeKind.CLASS, TypeKind.ENUM):
            return self.type_name(type_ref.name)

        if type_ref.kind == TypeKind.ARRAY:
            if type_ref.type_args:
                return f"list[{self.translate_type(type_ref.type_args[0])}]"
            return "list"

        if type_ref.kind == TypeKind.TUPLE:
            if type_ref.type_args:
                item_types = ", ".join(self.translate_type(t) for t in type_ref.type_args)
                return f"tuple[{item_types}]"
            return "tuple"

        if type_ref.kind == TypeKind.UNION:
            return " | ".join(self.translate_type(t) for t in type_ref.type_args)

        if type_ref.kind == TypeKind.OPTIONAL:
            return f"{self.translate_type(type_ref.type_args[0])} | None"

        if type_ref.kind == TypeKind.CONST:
            self.typing_imports.add("Literal")
            return f"Literal[{self._python_literal(type_ref.const_value)}]"

        self.typing_imports.add("Any")
        return "Any"

    def format_default_value(self, value: Any) -> tuple[str, bool]:
        """
        Format a default value for Python.

        Returns:
            The expression, and whether it must be wrapped in a default factory
        """
        if isinstance(value, (list, dict)):
            return self._python_literal(value), True
        return self._python_literal(value), False

    def _field_value(self, field_def: FieldDef, runtime_names: set[str]) -> tuple[str | None, bool]:
        """Right hand side of a field declaration, and whether it uses ``field()``."""
        factory = False
        value: str | None = None
        if field_def.has_default:
            inner = self._unwrap_optional(field_def.type_ref)
            if inner.kind == TypeKind.ENUM and field_def.default_value is not None:
                runtime_names.add(inner.name)
                value = f"{self.type_name(inner.name)}({self._python_literal(field_def.default_value)})"
            else:
                value, factory = self.format_default_value(field_def.default_value)
        elif not field_def.is_required:
            value = "None"

        renamed = python_identifier(field_def.name) != field_def.name
        if not factory and not renamed:
            return value, False

        kwargs = []
        if factory:
            kwargs.append(f"default_factory=lambda: {value}")
        elif value is not None:
            kwargs.append(f"default={value}")
        if renamed:
            kwargs.append(f'metadata={{"json_name": {json.dumps(field_def.name)}}}')
        return f"field({', '.join(kwargs)})", True

    def _ordered_fields(self, fields: list[FieldDef]) -> list[FieldDef]:
        """Keep declaration order, except positional dataclasses need required fields first."""
        if self.config.python_kw_only:
            return list(fields)
        required = [f for f in fields if f.is_required and not f.has_default]
        optional = [f for f in fields if not (f.is_required and not f.has_default)]
        return required + optional

    @classmethod
    def _python_literal(cls, value: Any) -> str:
        if value is None:
            return "None"
        if isinstance(value, bool):
            return "True" if value else "False"
        if isinstance(value, str):
            return json.dumps(value)
        if isinstance(value, list):
            return "[" + ", ".join(cls._python_literal(v) for v in value) + "]"
        if isinstance(value, dict):
            items = ", ".join(f"{json.dumps(str(k))}: {cls._python_literal(v)}" for k, v in value.items())
            return "{" + items + "}"
        return repr(value)

    @staticmethod
    def _docstring(description: str | None) -> str | None:
        if not description:
            return None
        return description.strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


class CSharpRenderer(Renderer):
    """Renders one ``.cs`` file per class and per enum."""

    TEMPLATE_LANG = "cs"
    FILE_EXTENSION = "cs"

    TYPE_MAP = {
        "integer": "long",
        "string": "string",
        "boolean": "bool",
        "number": "double",
        "null": "object",
    }

    BASE_USINGS = ["System", "System.Collections.Generic", "System.Text.Json.Serialization"]

    def register(self, code_model: CodeModel) -> None:
        for package in self.outline.packages():
            classes, enums = self._types_in(package)
            for class_outline in classes:
                code_model.add_unit(package, f"{class_outline.name}.cs", lambda c=class_outline: self.render_class(c))
            for enum_outline in enums:
                code_model.add_unit(package, f"{enum_outline.name}.cs", lambda e=enum_outline: self.render_enum(e))

    def namespace_for(self, package: str) -> str:
        return self.config.csharp_namespace or package

    def _usings(self, package: str, referenced_names: set[str]) -> list[str]:
        usings = [*self.BASE_USINGS, *self.config.csharp_additional_usings]
        own_namespace = self.namespace_for(package)
        for name in referenced_names:
            target = self.outline.resolve(name)
            if target is None:
                continue
            namespace = self.namespace_for(target.package)
            if namespace and namespace != own_namespace:
                usings.append(namespace)
        return sorted(set(usings))

    def render_class(self, class_outline: ClassOutline) -> str:
        """Render the file of one class."""
        class_def = class_outline.target
        referenced_names: set[str] = set()
        accessor = "{ get; init; }" if class_outline.frozen else "{ get; set; }"

        properties = []
        for field_def in class_def.fields:
            referenced_names.update(field_def.type_ref.referenced_names())
            property_name = escape_csharp_keyword(snake_to_pascal_case(field_def.name) or field_def.name)
            if property_name == class_outline.name:
                property_name += "Value"
            modifiers = "public required" if field_def.is_required and not field_def.has_default else "public"
            declaration = f"{modifiers} {self.translate_type(field_def.type_ref)} {property_name} {accessor}"
            initializer = self._initializer(field_def)
            if initializer is not None:
                declaration += f" = {initializer};"
            properties.append(
                {
                    "json_name": json.dumps(field_def.name),
                    "declaration": declaration,
                    "description": field_def.description,
                }
            )

        header = "public sealed class" if class_outline.frozen else "public class"
        header += f" {class_outline.name}"
        if class_def.base_class is not None:
            referenced_names.add(class_def.base_class)
            header += f" : {self.type_name(class_def.base_class)}"

        return self.class_template.render(
            usings=self._usings(class_outline.package, referenced_names),
            namespace=self.namespace_for(class_outline.package),
            description=class_def.description,
            annotations=class_outline.annotations,
            header=header,
            properties=properties,
        )

    def render_enum(self, enum_outline: EnumOutline) -> str:
        """Render the file of one enum."""
        enum_def = enum_outline.target
        members = []
        for index, (name, value) in enumerate(enum_def.members.items()):
            member = {"name": self._member_name(name), "value": None, "json_value": None}
            if enum_def.value_type == "integer":
                member["value"] = value
            elif isinstance(value, str):
                member["json_value"] = json.dumps(value)
            else:
                member["value"] = index
            members.append(member)

        usings = ["System.Runtime.Serialization", "System.Text.Json.Serialization"]
        return self.enum_template.render(
            usings=usings,
            namespace=self.namespace_for(enum_outline.package),
            description=enum_def.description,
            string_values=enum_def.value_type == "string",
            enum_name=enum_outline.name,
            members=members,
        )

    def translate_type(self, type_ref: TypeRef) -> str:
        """Translate a model type to a C# type."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            return self.TYPE_MAP.get(type_ref.name, "object")

        if type_ref.kind in (TypeKind.CLASS, TypeKind.ENUM):
            return self.type_name(type_ref.name)

        if type_ref.kind == TypeKind.ARRAY:
            item_type = self.translate_type(type_ref.type_args[0]) if type_ref.type_args else "object"
            return f"List<{item_type}>"

        if type_ref.kind == TypeKind.TUPLE:
            if len(type_ref.type_args) >= 2:
                return "(" + ", ".join(self.translate_type(t) for t in type_ref.type_args) + ")"
            return "List<object>"

        if type_ref.kind == TypeKind.OPTIONAL:
            return f"{self.translate_type(type_ref.type_args[0])}?"

        if type_ref.kind == TypeKind.CONST:
            return self.TYPE_MAP.get(type_ref.name, "object")

        return "object"

    def format_default_value(self, value: Any, type_ref: TypeRef) -> str | None:
        """Format a default value for C#, or None if it has no literal form."""
        inner = self._unwrap_optional(type_ref)
        if value is None:
            return "null"
        if inner.kind == TypeKind.ENUM:
            target = self.outline.resolve(inner.name)
            for name, member_value in target.target.members.items() if target is not None else ():
                if member_value == value:
                    return f"{target.name}.{self._member_name(name)}"
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return json.dumps(value)
        if isinstance(value, float):
            return f"{value!r}d"
        if isinstance(value, int):
            return f"{value}L" if inner.kind == TypeKind.PRIMITIVE and inner.name == "integer" else str(value)
        if isinstance(value, list) and inner.kind == TypeKind.ARRAY and not value:
            return "new()"
        return None

    def _initializer(self, field_def: FieldDef) -> str | None:
        if field_def.has_default:
            return self.format_default_value(field_def.default_value, field_def.type_ref)
        return None

    @staticmethod
    def _member_name(name: str) -> str:
        return escape_csharp_keyword(snake_to_pascal_case(name) or name)


RENDERERS: dict[str, type[Renderer]] = {
    "python": PythonRenderer,
    "cs": CSharpRenderer,
}


def create_renderer(language: str, outline: Outline, config: GeneratorConfig) -> Renderer:
    """Create the renderer for a target language (``"python"`` or ``"cs"``)."""
    return RENDERERS[language](outline, config)
