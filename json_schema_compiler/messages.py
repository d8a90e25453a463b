"""
User-facing message catalog for the command line driver.
"""

from __future__ import annotations

from . import __version__

BUILD_ID = "BUILD_ID"
VERSION = "VERSION"
FULLVERSION = "FULLVERSION"
PARSING_SCHEMA = "PARSING_SCHEMA"
COMPILING_SCHEMA = "COMPILING_SCHEMA"
PARSE_FAILED = "PARSE_FAILED"
FAILED_TO_GENERATE_CODE = "FAILED_TO_GENERATE_CODE"
STACK_OVERFLOW = "STACK_OVERFLOW"
WARNING_MSG = "WARNING_MSG"
DEFAULT_PACKAGE_WARNING = "DEFAULT_PACKAGE_WARNING"
NO_SCHEMA_FILES = "NO_SCHEMA_FILES"
NON_EXISTENT_DIR = "NON_EXISTENT_DIR"
INVALID_REPLACEMENT = "INVALID_REPLACEMENT"
INVALID_CONFIG = "INVALID_CONFIG"
INVALID_PROXY = "INVALID_PROXY"
PLUGIN_LOAD_FAILED = "PLUGIN_LOAD_FAILED"
UNRECOGNIZED_MODE = "UNRECOGNIZED_MODE"
DRIVER_PUBLIC_USAGE = "DRIVER_PUBLIC_USAGE"
DRIVER_PRIVATE_USAGE = "DRIVER_PRIVATE_USAGE"
ADDON_USAGE = "ADDON_USAGE"
FILE_PROLOG_COMMENT = "FILE_PROLOG_COMMENT"
NO_BINARY_STDOUT = "NO_BINARY_STDOUT"

_MESSAGES = {
    BUILD_ID: "json-schema-compiler-{version}",
    VERSION: "json-schema-compiler {version}",
    FULLVERSION: 'json-schema-compiler full version "{version}-{build_id}"',
    PARSING_SCHEMA: "parsing a schema...",
    COMPILING_SCHEMA: "compiling a schema...",
    PARSE_FAILED: "failed to parse the schema.",
    FAILED_TO_GENERATE_CODE: "failed to generate code.",
    STACK_OVERFLOW: (
        "Stack overflow. Either you are compiling a large schema that requires more resources, "
        "or the compiler has a bug. Re-run with --verbose to see the full trace, or with a larger "
        "recursion budget."
    ),
    WARNING_MSG: "[WARNING] {0}",
    DEFAULT_PACKAGE_WARNING: (
        "Generating code into the default package is not recommended; "
        "generated modules may clash with other top-level names."
    ),
    NO_SCHEMA_FILES: "grammar is not specified",
    NON_EXISTENT_DIR: "{0}: the target directory does not exist",
    INVALID_REPLACEMENT: "invalid class name replacement '{0}', expected FROM=TO",
    INVALID_CONFIG: "unable to read the generator configuration {0}: {1}",
    INVALID_PROXY: "invalid proxy specification '{0}', expected [user[:password]@]host[:port]",
    PLUGIN_LOAD_FAILED: "unable to load plugin {0}: {1}",
    UNRECOGNIZED_MODE: "unrecognized mode {0}",
    NO_BINARY_STDOUT: "cannot write a zip archive to a text-only output stream",
    DRIVER_PUBLIC_USAGE: "Usage: json-schema-compiler [-options ...] <schema file/URL/dir> ...",
    DRIVER_PRIVATE_USAGE: "Private options:",
    ADDON_USAGE: "Extensions:",
    FILE_PROLOG_COMMENT: (
        "This file was generated by {0}\n"
        "Any modifications to this file will be lost upon recompilation of the source schema.\n"
        "Command line: {1}"
    ),
}


def format(key: str, *args: object) -> str:
    """Render the message registered under ``key`` with positional arguments."""
    build_id = _MESSAGES[BUILD_ID].format(version=__version__)
    return _MESSAGES[key].format(*args, version=__version__, build_id=build_id)
