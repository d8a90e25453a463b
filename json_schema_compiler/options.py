"""
Invocation options and their command line grammar.

The grammar is a list of click parameters. Subclasses extend it by
overriding ``params()`` and consume the extra values in ``apply()``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any

import click

from . import messages
from .cli_utils import reconstruct_command_line
from .config import GeneratorConfig
from .context import ProxySettings, RunContext
from .errors import BadCommandLineError
from .plugin import PLUGIN_GROUP, Plugin

logger = logging.getLogger(__name__)

PROGRAM_NAME = "json-schema-compiler"


class Language(Enum):
    """Schema language of the input documents."""

    JSONSCHEMA = "jsonschema"


class TargetLanguage(str, Enum):
    """Language of the generated code."""

    PYTHON = "python"
    CSHARP = "cs"


class ParseStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    ALREADY_REPORTED = "already_reported"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing the command line.

    ``FAILURE`` carries an optional message to show before the usage screen.
    ``ALREADY_REPORTED`` means parsing finished the job itself (e.g. printed
    the help screen) and the caller should stop without printing anything.
    """

    status: ParseStatus
    message: str | None = None

    @staticmethod
    def success() -> ParseResult:
        return ParseResult(ParseStatus.SUCCESS)

    @staticmethod
    def failure(message: str | None = None) -> ParseResult:
        return ParseResult(ParseStatus.FAILURE, message)

    @staticmethod
    def already_reported() -> ParseResult:
        return ParseResult(ParseStatus.ALREADY_REPORTED)


class Options:
    """Options of one compilation.

    Populated once by ``parse_arguments`` and treated as read-only afterwards.

    Args:
        printer: Where usage text is printed when parsing asks for it
    """

    def __init__(self, printer: Callable[[str], None] = print):
        self.printer = printer
        self.schema_language: Language | None = None
        self.target_language = TargetLanguage.PYTHON
        self.sources: list[str] = []
        self.target_dir = Path(".")
        self.default_package: str | None = None
        self.quiet = False
        self.verbose = False
        self.debug_mode = False
        self.no_file_header = False
        self.read_only = False
        self.encoding = "utf-8"
        self.class_name_replacer: dict[str, str] = {}
        self.config = GeneratorConfig()
        self.plugin_path: list[Path] = []
        self.plugin_specs: list[str] = []
        self.proxy: ProxySettings | None = None
        self.arguments: list[str] = []
        self.all_plugins: list[Plugin] = self.discover_plugins()
        self.active_plugins: list[Plugin] = []

    @staticmethod
    def discover_plugins() -> list[Plugin]:
        """Instantiate the plugins registered under the plugin entry-point group."""
        plugins = []
        for entry_point in entry_points(group=PLUGIN_GROUP):
            try:
                plugin_class = entry_point.load()
            except Exception:
                logger.warning("Failed to load plugin %s", entry_point.name, exc_info=True)
                continue
            plugins.append(plugin_class())
        return plugins

    def params(self) -> list[click.Parameter]:
        """The command line grammar understood by these options."""
        params: list[click.Parameter] = [
            click.Argument(["sources"], nargs=-1),
            click.Option(["-d", "--directory"], default=".", help="generated files will go into this directory"),
            click.Option(["-p", "--package"], default=None, help="specifies the target package"),
            click.Option(
                ["-l", "--language"],
                type=click.Choice([t.value for t in TargetLanguage]),
                default=TargetLanguage.PYTHON.value,
                help="language of the generated code",
            ),
            click.Option(["-c", "--config"], default=None, help="JSON file with generator configuration"),
            click.Option(["--replace"], multiple=True, help="rename a generated class, as FROM=TO"),
            click.Option(["--plugin-path"], multiple=True, help="directory to search for plugin modules"),
            click.Option(["--plugin"], multiple=True, help="load and activate a plugin given as module:Class"),
            click.Option(["--http-proxy"], default=None, help="set HTTP/HTTPS proxy, as [user[:password]@]host[:port]"),
            click.Option(["--http-proxy-file"], default=None, help="read the proxy specification from a file"),
            click.Option(["--no-header"], is_flag=True, help="suppress generation of a file header"),
            click.Option(["--read-only"], is_flag=True, help="generated files will be in read-only mode"),
            click.Option(["--encoding"], default="utf-8", help="character encoding for generated source files"),
            click.Option(["-q", "--quiet"], is_flag=True, help="suppress compiler output"),
            click.Option(["-v", "--verbose"], is_flag=True, help="be extra verbose"),
            click.Option(["--debug"], is_flag=True, hidden=True, help="run in debug mode"),
        ]
        for plugin in self.all_plugins:
            params.append(click.Option([f"--{plugin.option_name}"], is_flag=True, hidden=True))
            params.extend(plugin.params())
        return params

    def build_command(self) -> click.Command:
        return click.Command(PROGRAM_NAME, params=self.params(), add_help_option=False)

    def parse_arguments(self, args: Sequence[str]) -> ParseResult:
        """Parse the command line into these options."""
        self.arguments = list(args)
        command = self.build_command()
        try:
            ctx = command.make_context(PROGRAM_NAME, list(args))
        except click.UsageError as e:
            return ParseResult.failure(e.format_message())
        try:
            return self.apply(dict(ctx.params))
        except BadCommandLineError as e:
            return ParseResult.failure(e.message)

    def apply(self, params: dict[str, Any]) -> ParseResult:
        """Copy parsed parameter values into these options.

        Raises:
            BadCommandLineError: If a value is malformed
        """
        self.target_dir = Path(params["directory"])
        self.default_package = params["package"]
        self.target_language = TargetLanguage(params["language"])
        self.no_file_header = params["no_header"]
        self.read_only = params["read_only"]
        self.encoding = params["encoding"]
        self.quiet = params["quiet"]
        self.verbose = params["verbose"]
        self.debug_mode = params["debug"]
        self.plugin_path = [Path(p) for p in params["plugin_path"]]
        self.plugin_specs = list(params["plugin"])

        if params["config"] is not None:
            self.config = self._read_config(params["config"])
        self.class_name_replacer.update(self.config.class_name_replacements)
        for rule in params["replace"]:
            class_name, sep, replacement = rule.partition("=")
            if not sep or not class_name or not replacement:
                raise BadCommandLineError(messages.format(messages.INVALID_REPLACEMENT, rule))
            self.class_name_replacer[class_name] = replacement

        proxy_spec = params["http_proxy"]
        if params["http_proxy_file"] is not None:
            proxy_spec = self._read_proxy_file(params["http_proxy_file"])
        if proxy_spec is not None:
            try:
                self.proxy = ProxySettings.parse(proxy_spec)
            except ValueError:
                raise BadCommandLineError(messages.format(messages.INVALID_PROXY, proxy_spec)) from None

        for plugin in self.all_plugins:
            if params.get(plugin.option_name.replace("-", "_")):
                plugin.configure(params)
                self.active_plugins.append(plugin)

        for source in params["sources"]:
            self.add_grammar(source)
        if not self.sources:
            raise BadCommandLineError(messages.format(messages.NO_SCHEMA_FILES))

        return ParseResult.success()

    def add_grammar(self, source: str) -> None:
        """Add a schema file, every ``*.json`` file of a directory, or a URL."""
        path = Path(source)
        if "://" not in source and path.is_dir():
            self.sources.extend(str(p) for p in sorted(path.glob("*.json")))
        else:
            self.sources.append(source)

    def activate_plugins(self, context: RunContext) -> None:
        """Load the ``--plugin`` classes through the run's plugin search path.

        Raises:
            BadCommandLineError: If a plugin cannot be loaded
        """
        for spec in self.plugin_specs:
            try:
                plugin_class = context.load_class(spec)
            except Exception as e:
                # includes errors raised by the plugin module's own top-level code
                raise BadCommandLineError(messages.format(messages.PLUGIN_LOAD_FAILED, spec, e)) from e
            if not (isinstance(plugin_class, type) and issubclass(plugin_class, Plugin)):
                raise BadCommandLineError(messages.format(messages.PLUGIN_LOAD_FAILED, spec, "not a Plugin subclass"))
            plugin = plugin_class()
            self.all_plugins.append(plugin)
            self.active_plugins.append(plugin)

    def create_code_writer(self, core=None):
        """Build the writer chain for generated artifacts.

        Args:
            core: Writer that persists the bytes; defaults to files under
                the target directory
        """
        from .writer import FileCodeWriter, PrologCodeWriter

        if core is None:
            core = FileCodeWriter(self.target_dir, read_only=self.read_only, encoding=self.encoding)
        else:
            core.encoding = self.encoding
        if self.no_file_header:
            return core
        prolog = messages.format(messages.FILE_PROLOG_COMMENT, messages.format(messages.VERSION), self.command_line)
        return PrologCodeWriter(core, prolog)

    @property
    def command_line(self) -> str:
        return reconstruct_command_line(self.arguments)

    def _read_config(self, path: str) -> GeneratorConfig:
        try:
            return GeneratorConfig.from_file(path)
        except (OSError, ValueError) as e:
            raise BadCommandLineError(messages.format(messages.INVALID_CONFIG, path, e)) from e

    def _read_proxy_file(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise BadCommandLineError(messages.format(messages.INVALID_CONFIG, path, e)) from e


def usage(options: Options | None, private_usage: bool, printer: Callable[[str], None] = print) -> None:
    """Print the usage screen.

    Args:
        options: Partly or fully populated options, if parsing has started
        private_usage: Also list the private options
        printer: Destination of each printed block
    """
    source = options if options is not None else Options(printer)
    command = source.build_command()
    ctx = click.Context(command, info_name=PROGRAM_NAME)
    plugin_flags = {plugin.option_name.replace("-", "_") for plugin in source.all_plugins}

    printer(messages.format(messages.DRIVER_PUBLIC_USAGE))
    formatter = ctx.make_formatter()
    with formatter.section("Options"):
        formatter.write_dl(_help_records(command, ctx, hidden=False, skip=plugin_flags))
    printer(formatter.getvalue().rstrip("\n"))

    if private_usage:
        printer(messages.format(messages.DRIVER_PRIVATE_USAGE))
        formatter = ctx.make_formatter()
        formatter.write_dl(_help_records(command, ctx, hidden=True, skip=plugin_flags))
        printer(formatter.getvalue().rstrip("\n"))

    if source.all_plugins:
        printer(messages.format(messages.ADDON_USAGE))
        for plugin in source.all_plugins:
            printer(plugin.get_usage())


def _help_records(command: click.Command, ctx: click.Context, hidden: bool, skip: set[str]) -> list[tuple[str, str]]:
    records = []
    for param in command.get_params(ctx):
        if not isinstance(param, click.Option) or param.hidden != hidden or param.name in skip:
            continue
        records.append((", ".join(param.opts), param.help or ""))
    return records


def dump_options(options: Options) -> str:
    """Render the effective options as JSON, for verbose diagnostics."""
    return json.dumps(
        {
            "sources": options.sources,
            "target_dir": str(options.target_dir),
            "default_package": options.default_package,
            "target_language": options.target_language.value,
            "class_name_replacer": options.class_name_replacer,
            "plugins": [plugin.option_name for plugin in options.active_plugins],
            "config": options.config.to_dict(),
        },
        indent=2,
    )
