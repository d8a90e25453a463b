"""
Command line driver.

``run`` is the whole compilation for one invocation: it parses the options,
loads the schemas, generates code and writes it according to ``--mode``, and
turns every outcome into an exit code (``0`` on success, ``-1`` otherwise).
Embedders call ``run`` with their own ``CompilerListener``; ``main`` is the
console entry point.
"""

from __future__ import annotations

import io
import logging
import os
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import IO, Any

import click

from . import messages
from .context import SYSTEM_PROXY_VARIABLE, RunContext
from .diagnostics import CompilerListener, ConsoleListener, Diagnostic
from .error_receiver import DriverErrorFilter
from .errors import AbortError, BadCommandLineError, SchemaLoadError
from .execution import InlineExecutor, IsolatedExecutor
from .gbind import ExpressionBuilder, Graph
from .generator import BeanGenerator, CodeModel, SignatureWriter
from .generator.outline import Outline
from .modes import Mode, ModeType
from .options import Language, Options, ParseResult, ParseStatus, dump_options, usage
from .reader.loader import ModelLoader
from .writer import ProgressCodeWriter, ZipCodeWriter

logger = logging.getLogger(__name__)


class DriverOptions(Options):
    """Options of the command line driver.

    Adds the operation mode and the driver-only switches to the base grammar.
    """

    def __init__(self, printer: Callable[[str], None] = print):
        super().__init__(printer)
        self.mode = Mode.CODE
        self.no_ns = False

    def params(self) -> list[click.Parameter]:
        return super().params() + [
            click.Option(["--mode"], type=ModeType(), default=Mode.CODE.value, help="operation mode"),
            click.Option(["--no-namespace", "no_ns"], is_flag=True, help="do not generate namespace declarations"),
            click.Option(["--help", "show_help"], is_flag=True, help="display this help message"),
            click.Option(["--private-help"], is_flag=True, hidden=True, help="display this help message with private options"),
            click.Option(["--debug-inline"], is_flag=True, hidden=True, help="run on the calling thread"),
            click.Option(["--version"], is_flag=True, help="display version information"),
            click.Option(["--full-version"], is_flag=True, help="display full version information"),
        ]

    def apply(self, params: dict[str, Any]) -> ParseResult:
        if params["show_help"] or params["private_help"]:
            usage(self, params["private_help"], self.printer)
            return ParseResult.already_reported()

        self.mode = params["mode"]
        self.no_ns = params["no_ns"]
        result = super().apply(params)

        if self.mode is Mode.CODE and not self.target_dir.is_dir():
            raise BadCommandLineError(messages.format(messages.NON_EXISTENT_DIR, self.target_dir))
        return result


def run(
    args: Sequence[str],
    listener: CompilerListener | None = None,
    *,
    stdout: IO[str] | None = None,
    binary_stdout: IO[bytes] | None = None,
) -> int:
    """
    Run one compilation.

    Args:
        args: Command line arguments, without the program name
        listener: Receives messages, diagnostics and progress; may cancel
            the run. Defaults to a listener that ignores everything.
        stdout: Primary output for the forest, gbind and signature dumps.
            Defaults to ``sys.stdout``.
        binary_stdout: Primary output for a zip written to ``-d .``.
            Defaults to the binary buffer under ``stdout``; a zip to a
            text-only ``stdout`` without one is reported as an error.

    Returns:
        0 on success, -1 on any failure or informational exit

    Raises:
        RecursionError: In verbose mode, when the schema nests too deeply
    """
    if listener is None:
        listener = CompilerListener()
    args = list(args)

    for arg in args:
        if arg == "--version":
            listener.message(messages.format(messages.VERSION))
            return -1
        if arg == "--full-version":
            listener.message(messages.format(messages.FULLVERSION))
            return -1

    options = DriverOptions(printer=listener.message)
    options.schema_language = Language.JSONSCHEMA

    result = options.parse_arguments(args)
    if result.status is ParseStatus.FAILURE:
        _report_usage_error(options, listener, result.message)
        return -1
    if result.status is ParseStatus.ALREADY_REPORTED:
        return -1

    code_model = CodeModel()
    for class_name, replacement in options.class_name_replacer.items():
        code_model.add_class_name_replacer(class_name, replacement)

    if options.default_package == "":
        listener.message(messages.format(messages.WARNING_MSG, messages.format(messages.DEFAULT_PACKAGE_WARNING)))

    try:
        with RunContext.for_options(options, stdout, binary_stdout) as context:
            return _compile(options, listener, code_model, context)
    except RecursionError:
        if options.verbose:
            raise
        listener.message(messages.format(messages.STACK_OVERFLOW))
        return -1
    except AbortError:
        # canceled by the listener, nothing more to report
        return -1


def _report_usage_error(options: Options, listener: CompilerListener, message: str | None) -> None:
    if message:
        listener.message(message)
        listener.message("")
    usage(options, False, listener.message)


def _compile(options: DriverOptions, listener: CompilerListener, code_model: CodeModel, context: RunContext) -> int:
    try:
        options.activate_plugins(context)
    except BadCommandLineError as e:
        _report_usage_error(options, listener, e.message)
        return -1

    if not options.quiet:
        listener.message(messages.format(messages.PARSING_SCHEMA))

    receiver = DriverErrorFilter(listener, quiet=options.quiet, verbose=options.verbose)
    if options.verbose:
        receiver.debug("effective options:\n" + dump_options(options))

    loader = ModelLoader(options, code_model, receiver, context)

    if options.mode is Mode.FOREST:
        try:
            forest = loader.build_forest()
        except SchemaLoadError:
            return -1
        try:
            forest.dump(context.stdout)
        except OSError as e:
            receiver.error(Diagnostic.from_exception(e))
            return -1
        return 0

    if options.mode is Mode.GBIND:
        try:
            schema_set = loader.load_schema_set()
        except SchemaLoadError:
            return -1
        try:
            _dump_grammars(schema_set, context.stdout)
        except OSError as e:
            receiver.error(Diagnostic.from_exception(e))
            return -1
        return 0

    model = loader.load()
    if model is None:
        listener.message(messages.format(messages.PARSE_FAILED))
        return -1

    if not options.quiet:
        listener.message(messages.format(messages.COMPILING_SCHEMA))

    if options.mode is Mode.SIGNATURE:
        outline = BeanGenerator.generate(model, receiver)
        if outline is None:
            listener.message(messages.format(messages.FAILED_TO_GENERATE_CODE))
            return -1
        try:
            SignatureWriter.write(outline, context.stdout)
        except OSError as e:
            receiver.error(Diagnostic.from_exception(e))
            return -1
        return 0

    # CODE, DRYRUN and ZIP
    outline = model.generate_code(options, receiver)
    if outline is None:
        listener.message(messages.format(messages.FAILED_TO_GENERATE_CODE))
        return -1

    listener.compiled(outline)

    if options.mode is not Mode.DRYRUN:
        try:
            _write_outline(options, listener, outline, context)
        except OSError as e:
            receiver.error(Diagnostic.from_exception(e))
            return -1

    if options.debug_mode:
        marker = "hadWarning" if receiver.had_warning else "noWarning"
        try:
            (options.target_dir / marker).write_bytes(b"")
        except OSError as e:
            receiver.error(Diagnostic.from_exception(e))
            return -1

    return 0


def _dump_grammars(schema_set, out: IO[str]) -> None:
    builder = ExpressionBuilder(schema_set)
    for complex_type in schema_set.iterate_complex_types():
        if complex_type.content_particle() is None:
            continue
        tree = builder.create_tree(complex_type)
        print(f"Graph for {complex_type.name}", file=out)
        print(tree, file=out)
        print(Graph(tree), file=out)
        print(file=out)
    out.flush()


def _write_outline(options: DriverOptions, listener: CompilerListener, outline: Outline, context: RunContext) -> None:
    """
    Write the generated files to the target directory, or as a zip archive.

    Raises:
        OSError: If writing fails, or the zip goes to a text-only stdout
    """
    if options.mode is Mode.ZIP:
        if options.target_dir == Path("."):
            binary_stdout = context.binary_stdout
            if binary_stdout is None:
                raise io.UnsupportedOperation(messages.format(messages.NO_BINARY_STDOUT))
            writer = options.create_code_writer(ZipCodeWriter(binary_stdout))
        else:
            writer = options.create_code_writer(ZipCodeWriter(open(options.target_dir, "wb"), owns_stream=True))
    else:
        writer = options.create_code_writer()

    if not options.quiet:
        writer = ProgressCodeWriter(writer, listener, outline.count_artifacts())

    outline.code_model.build(writer)


def run_with_streams(args: Sequence[str], status: IO[str] | None, out: IO[str] | None) -> int:
    """
    Run one compilation, printing to text streams.

    Args:
        args: Command line arguments
        status: Stream for status messages and progress, or None to drop them
        out: Stream for diagnostics, or None to drop them

    Returns:
        The exit code of ``run``
    """
    return run(args, ConsoleListener(status, out))


@click.command(
    context_settings={"ignore_unknown_options": True, "allow_extra_args": True, "help_option_names": []},
    add_help_option=False,
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx: click.Context, args: tuple[str, ...]) -> None:
    """Compile JSON Schema documents into Python or C# classes."""
    args_list = list(args)
    os.environ.setdefault(SYSTEM_PROXY_VARIABLE, "true")

    verbose = "-v" in args_list or "--verbose" in args_list
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    executor = InlineExecutor() if "--debug-inline" in args_list else IsolatedExecutor()
    exit_code = executor.run(lambda: run_with_streams(args_list, sys.stderr, sys.stderr))
    ctx.exit(exit_code)


if __name__ == "__main__":
    main()
