#!/usr/bin/env python3

import errno
import io
import zipfile

import pytest
from click.testing import CliRunner

from json_schema_compiler import messages
from json_schema_compiler.context import SYSTEM_PROXY_VARIABLE, RunContext
from json_schema_compiler.driver import main, run, run_with_streams
from json_schema_compiler.reader.loader import ModelLoader

SHOUTING_PLUGIN = '''
from json_schema_compiler.plugin import Plugin


class ShoutingPlugin(Plugin):
    option_name = "x-shout"

    def run(self, outline, options, receiver):
        for class_outline in outline.classes:
            class_outline.annotations.append("# SHOUT")
        return True
'''


@pytest.fixture
def no_loading(monkeypatch):
    """Fail the test if anything tries to load a schema."""

    def load(self):
        raise AssertionError("schemas must not be loaded")

    monkeypatch.setattr(ModelLoader, "build_forest", load)


class TestInformationalExits:
    """Version, help and usage errors never compile anything"""

    def test_version(self, listener, no_loading):
        assert run(["--version", "-d", "nowhere"], listener) == -1
        assert listener.messages == ["json-schema-compiler 1.0.0"]

    def test_full_version(self, listener, no_loading):
        assert run(["--full-version"], listener) == -1
        assert listener.messages == ['json-schema-compiler full version "1.0.0-json-schema-compiler-1.0.0"']

    def test_help(self, listener, no_loading, person_schema):
        assert run(["--help", person_schema], listener) == -1
        assert listener.messages[0].startswith("Usage: json-schema-compiler")
        assert "--mode" in listener.text
        assert "--debug-inline" not in listener.text

    def test_private_help(self, listener, no_loading):
        assert run(["--private-help"], listener) == -1
        assert "Private options:" in listener.text
        assert "--debug-inline" in listener.text

    def test_no_schema(self, listener, no_loading):
        assert run([], listener) == -1
        assert listener.messages[0] == "grammar is not specified"
        assert listener.messages[1] == ""
        assert listener.messages[2].startswith("Usage:")

    def test_unknown_mode(self, listener, no_loading, person_schema):
        assert run(["--mode", "xx", person_schema], listener) == -1
        assert "unrecognized mode xx" in listener.messages[0]

    def test_missing_target_directory(self, listener, no_loading, tmp_path, person_schema):
        missing = tmp_path / "missing"
        assert run(["-d", str(missing), person_schema], listener) == -1
        assert listener.messages[0] == f"{missing}: the target directory does not exist"

    def test_missing_directory_is_fine_for_other_modes(self, listener, tmp_path, person_schema):
        out = io.StringIO()
        assert run(["--mode", "sig", "-d", str(tmp_path / "missing"), person_schema], listener, stdout=out) == 0


class TestCodeMode:
    """Generating source files"""

    def test_writes_files(self, listener, tmp_path, person_schema):
        assert run(["-d", str(tmp_path), person_schema], listener) == 0

        package = tmp_path / "generated"
        assert sorted(p.name for p in package.iterdir()) == ["__init__.py", "address.py", "color.py", "person.py"]
        person = (package / "person.py").read_text()
        assert person.startswith("# This file was generated by json-schema-compiler 1.0.0\n")
        assert "class Person:" in person

        assert listener.messages[:2] == ["parsing a schema...", "compiling a schema..."]
        assert listener.generated == [
            ("generated/person.py", 1, 4),
            ("generated/address.py", 2, 4),
            ("generated/color.py", 3, 4),
            ("generated/__init__.py", 4, 4),
        ]
        assert len(listener.outlines) == 1

    def test_quiet(self, listener, tmp_path, person_schema):
        assert run(["-q", "-d", str(tmp_path), person_schema], listener) == 0
        assert listener.messages == []
        assert listener.generated == []
        assert (tmp_path / "generated" / "person.py").exists()

    def test_no_header_and_csharp(self, listener, tmp_path, person_schema):
        assert run(["--no-header", "-l", "cs", "-d", str(tmp_path), person_schema], listener) == 0
        assert (tmp_path / "generated" / "Person.cs").read_text().startswith("using System;")

    def test_default_package_warning(self, listener, tmp_path, person_schema):
        assert run(["-p", "", "-d", str(tmp_path), person_schema], listener) == 0
        assert listener.messages[0].startswith("[WARNING] Generating code into the default package")
        assert (tmp_path / "person.py").exists()
        assert not (tmp_path / "__init__.py").exists()

    def test_class_name_replacement(self, listener, tmp_path, person_schema):
        assert run(["--replace", "Address=PostalAddress", "-d", str(tmp_path), person_schema], listener) == 0
        assert (tmp_path / "generated" / "postal_address.py").exists()
        assert not (tmp_path / "generated" / "address.py").exists()

    def test_verbose_reports_infos(self, listener, tmp_path, person_schema):
        assert run(["-v", "-d", str(tmp_path), person_schema], listener) == 0
        assert any(d.message == "generating class Person" for d in listener.infos)

    def test_without_listener(self, tmp_path, person_schema):
        assert run(["-d", str(tmp_path), person_schema]) == 0


class TestDebugMarkers:
    """--debug leaves a marker file in the target directory"""

    def test_no_warning(self, listener, tmp_path, person_schema):
        assert run(["--debug", "-d", str(tmp_path), person_schema], listener) == 0
        assert (tmp_path / "noWarning").exists()
        assert not (tmp_path / "hadWarning").exists()

    def test_had_warning(self, listener, tmp_path, test_data):
        assert run(["--debug", "-d", str(tmp_path), str(test_data / "warnings.schema.json")], listener) == 0
        assert (tmp_path / "hadWarning").exists()
        assert len(listener.warnings) == 1

    def test_quiet_still_marks_warnings(self, listener, tmp_path, test_data):
        assert run(["-q", "--debug", "-d", str(tmp_path), str(test_data / "warnings.schema.json")], listener) == 0
        assert (tmp_path / "hadWarning").exists()
        assert listener.warnings == []

    def test_no_marker_without_debug(self, listener, tmp_path, person_schema):
        assert run(["-d", str(tmp_path), person_schema], listener) == 0
        assert not (tmp_path / "noWarning").exists()


class TestOtherModes:
    """dryrun, zip, forest, gbind and signature"""

    def test_dryrun(self, listener, tmp_path, person_schema):
        assert run(["--mode", "dryrun", "-d", str(tmp_path), person_schema], listener) == 0
        assert list(tmp_path.iterdir()) == []
        assert len(listener.outlines) == 1
        assert listener.generated == []

    def test_zip_to_stdout(self, listener, person_schema):
        buffer = io.BytesIO()
        stdout = io.TextIOWrapper(buffer)
        assert run(["--mode", "zip", person_schema], listener, stdout=stdout) == 0

        with zipfile.ZipFile(io.BytesIO(buffer.getvalue())) as archive:
            assert archive.namelist() == [
                "generated/person.py",
                "generated/address.py",
                "generated/color.py",
                "generated/__init__.py",
            ]

    def test_zip_to_separate_binary_stream(self, listener, person_schema):
        out = io.StringIO()
        binary = io.BytesIO()
        assert run(["--mode", "zip", person_schema], listener, stdout=out, binary_stdout=binary) == 0
        with zipfile.ZipFile(io.BytesIO(binary.getvalue())) as archive:
            assert "generated/person.py" in archive.namelist()
        assert out.getvalue() == ""

    def test_zip_to_text_only_stream_is_an_error(self, listener, person_schema):
        out = io.StringIO()
        assert run(["--mode", "zip", person_schema], listener, stdout=out) == -1
        assert listener.errors[0].message == messages.format(messages.NO_BINARY_STDOUT)
        assert out.getvalue() == ""
        assert listener.generated == []

    def test_zip_to_file(self, listener, tmp_path, person_schema):
        target = tmp_path / "out.zip"
        assert run(["--mode", "zip", "-d", str(target), person_schema], listener) == 0
        with zipfile.ZipFile(target) as archive:
            assert "generated/person.py" in archive.namelist()

    def test_forest(self, listener, order_schema):
        out = io.StringIO()
        assert run(["--mode", "forest", order_schema], listener, stdout=out) == 0
        assert out.getvalue().count("---- file://") == 2
        assert listener.outlines == []

    def test_forest_with_missing_document(self, listener, tmp_path):
        out = io.StringIO()
        assert run(["--mode", "forest", str(tmp_path / "missing.json")], listener, stdout=out) == -1
        assert out.getvalue() == ""

    def test_gbind(self, listener, order_schema):
        out = io.StringIO()
        assert run(["--mode", "gbind", order_schema], listener, stdout=out) == 0
        text = out.getvalue()
        assert text.startswith("Graph for order\n")
        assert (
            "Graph for Item\n"
            "sku,(quantity|#epsilon)\n"
            "#source -> sku\n"
            "sku -> quantity, #sink\n"
            "quantity -> #sink\n"
            "#sink ->\n"
            "\n"
        ) in text
        assert "Graph for Color" not in text

    def test_signature(self, listener, person_schema):
        out = io.StringIO()
        assert run(["--mode", "signature", person_schema], listener, stdout=out) == 0
        assert out.getvalue().startswith("package generated {\n  class Address {\n")
        assert listener.outlines == []


class TestFailures:
    """Every failure is reported and turns into -1"""

    def test_missing_file(self, listener, tmp_path):
        assert run(["-d", str(tmp_path), str(tmp_path / "missing.json")], listener) == -1
        assert len(listener.errors) == 1
        assert "failed to parse the schema." in listener.messages

    def test_broken_schema(self, listener, tmp_path, test_data):
        assert run(["-d", str(tmp_path), str(test_data / "broken.schema.json")], listener) == -1
        assert len(listener.fatal_errors) == 1
        assert list(tmp_path.iterdir()) == []

    def test_invalid_reference(self, listener, tmp_path, test_data):
        assert run(["-d", str(tmp_path), str(test_data / "invalid_ref.schema.json")], listener) == -1
        assert "undefined reference" in listener.errors[0].message

    def test_generation_failure(self, listener, tmp_path, person_schema):
        assert run(["--replace", "Person=address", "-d", str(tmp_path), person_schema], listener) == -1
        assert "failed to generate code." in listener.messages
        assert list(tmp_path.iterdir()) == []

    def test_cancellation(self, listener, tmp_path, person_schema):
        listener.cancel_after_polls = 0
        assert run(["-d", str(tmp_path), person_schema], listener) == -1
        assert list(tmp_path.iterdir()) == []
        assert listener.errors == []

    def test_cancellation_while_analyzing(self, listener, tmp_path, person_schema):
        # one poll for the document, one per definition, then the analyzer
        listener.cancel_after_polls = 3
        assert run(["-d", str(tmp_path), person_schema], listener) == -1
        assert listener.polls == 4
        assert list(tmp_path.iterdir()) == []
        assert listener.outlines == []
        assert listener.errors == []

    @pytest.mark.parametrize("mode, polls", [("forest", 0), ("forest", 1), ("gbind", 1), ("gbind", 2)])
    def test_cancellation_in_dump_modes(self, listener, order_schema, mode, polls):
        listener.cancel_after_polls = polls
        out = io.StringIO()
        assert run(["--mode", mode, order_schema], listener, stdout=out) == -1
        assert out.getvalue() == ""
        assert listener.errors == []

    def test_gbind_write_failure(self, listener, order_schema):
        class BrokenPipe(io.StringIO):
            def write(self, s):
                raise BrokenPipeError(errno.EPIPE, "Broken pipe")

        assert run(["--mode", "gbind", order_schema], listener, stdout=BrokenPipe()) == -1
        assert listener.errors[0].message == "Broken pipe"

    def test_stack_overflow(self, listener, monkeypatch, tmp_path, person_schema):
        def load(self):
            raise RecursionError()

        monkeypatch.setattr(ModelLoader, "load", load)
        assert run(["-d", str(tmp_path), person_schema], listener) == -1
        assert listener.messages[-1] == messages.format(messages.STACK_OVERFLOW)

    def test_stack_overflow_verbose(self, listener, monkeypatch, tmp_path, person_schema):
        def load(self):
            raise RecursionError()

        monkeypatch.setattr(ModelLoader, "load", load)
        with pytest.raises(RecursionError):
            run(["-v", "-d", str(tmp_path), person_schema], listener)

    def test_context_closed_on_unexpected_error(self, listener, monkeypatch, tmp_path, person_schema):
        contexts = []
        original_enter = RunContext.__enter__

        def enter(self):
            contexts.append(self)
            return original_enter(self)

        def load(self):
            raise KeyError("unexpected")

        monkeypatch.setattr(RunContext, "__enter__", enter)
        monkeypatch.setattr(ModelLoader, "load", load)
        with pytest.raises(KeyError):
            run(["-d", str(tmp_path), person_schema], listener)
        assert len(contexts) == 1
        assert not contexts[0].is_open


class TestPlugins:
    """--plugin and --plugin-path"""

    def test_installed_plugin_class(self, listener, tmp_path, person_schema):
        args = ["--plugin", "json_schema_compiler.plugin:FrozenClassesPlugin", "-d", str(tmp_path), person_schema]
        assert run(args, listener) == 0
        assert "frozen=True" in (tmp_path / "generated" / "person.py").read_text()

    def test_plugin_from_search_path(self, listener, tmp_path, person_schema):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "shouting_plugin.py").write_text(SHOUTING_PLUGIN)
        out = tmp_path / "out"
        out.mkdir()

        args = ["--plugin-path", str(plugins), "--plugin", "shouting_plugin:ShoutingPlugin", "-d", str(out), person_schema]
        assert run(args, listener) == 0
        assert "# SHOUT\n@dataclass" in (out / "generated" / "person.py").read_text()

    def test_unknown_plugin_is_a_usage_error(self, listener, tmp_path, person_schema):
        assert run(["--plugin", "no_such_plugin_module:Plugin", "-d", str(tmp_path), person_schema], listener) == -1
        assert listener.messages[0].startswith("unable to load plugin no_such_plugin_module:Plugin")
        assert listener.messages[1] == ""
        assert listener.messages[2].startswith("Usage:")

    def test_broken_plugin_module_is_a_usage_error(self, listener, tmp_path, person_schema):
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "broken_plugin.py").write_text("class BrokenPlugin(:\n")
        out = tmp_path / "out"
        out.mkdir()

        args = ["--plugin-path", str(plugins), "--plugin", "broken_plugin:BrokenPlugin", "-d", str(out), person_schema]
        assert run(args, listener) == -1
        assert listener.messages[0].startswith("unable to load plugin broken_plugin:BrokenPlugin")
        assert listener.messages[2].startswith("Usage:")
        assert list(out.iterdir()) == []

    def test_not_a_plugin(self, listener, tmp_path, person_schema):
        assert run(["--plugin", "json_schema_compiler.options:Options", "-d", str(tmp_path), person_schema], listener) == -1
        assert "not a Plugin subclass" in listener.messages[0]


def test_run_with_streams(tmp_path, test_data):
    status = io.StringIO()
    out = io.StringIO()
    assert run_with_streams(["-d", str(tmp_path), str(test_data / "invalid_ref.schema.json")], status, out) == -1
    assert status.getvalue().startswith("parsing a schema...\n")
    assert "[ERROR] undefined reference '#/definitions/Missing'" in out.getvalue()


class TestMain:
    """The console entry point"""

    @pytest.fixture(autouse=True)
    def proxy_variable(self, monkeypatch):
        monkeypatch.setenv(SYSTEM_PROXY_VARIABLE, "false")

    def test_success(self, tmp_path, person_schema):
        result = CliRunner().invoke(main, ["-q", "-d", str(tmp_path), person_schema])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "generated" / "person.py").exists()

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == -1
        assert "json-schema-compiler 1.0.0" in result.output

    def test_failure(self, tmp_path):
        result = CliRunner().invoke(main, ["--debug-inline", "-d", str(tmp_path), str(tmp_path / "missing.json")])
        assert result.exit_code == -1
        assert "failed to parse the schema." in result.output


if __name__ == "__main__":
    pytest.main([__file__])
