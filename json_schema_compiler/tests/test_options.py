#!/usr/bin/env python3

from pathlib import Path

import pytest

from json_schema_compiler.context import ProxySettings
from json_schema_compiler.options import Options, ParseStatus, TargetLanguage, dump_options, usage
from json_schema_compiler.plugin import FrozenClassesPlugin
from json_schema_compiler.writer import FileCodeWriter, PrologCodeWriter


@pytest.fixture
def frozen_plugin_installed(monkeypatch):
    """Make the plugin discovery deterministic, whatever is installed."""
    monkeypatch.setattr(Options, "discover_plugins", staticmethod(lambda: [FrozenClassesPlugin()]))


class TestParseArguments:
    """Turning a command line into options"""

    def test_basic_options(self, tmp_path, person_schema):
        options = Options()
        result = options.parse_arguments(["-d", str(tmp_path), "-p", "com.example", "-l", "cs", "-q", person_schema])

        assert result.status is ParseStatus.SUCCESS
        assert options.sources == [person_schema]
        assert options.target_dir == tmp_path
        assert options.default_package == "com.example"
        assert options.target_language is TargetLanguage.CSHARP
        assert options.quiet
        assert not options.verbose

    def test_defaults(self, person_schema):
        options = Options()
        options.parse_arguments([person_schema])

        assert options.target_dir == Path(".")
        assert options.default_package is None
        assert options.target_language is TargetLanguage.PYTHON
        assert options.encoding == "utf-8"
        assert not options.no_file_header
        assert not options.read_only

    def test_empty_package_is_kept(self, person_schema):
        options = Options()
        options.parse_arguments(["-p", "", person_schema])
        assert options.default_package == ""

    def test_missing_sources(self):
        result = Options().parse_arguments(["-d", "."])
        assert result.status is ParseStatus.FAILURE
        assert result.message == "grammar is not specified"

    def test_unknown_option(self, person_schema):
        result = Options().parse_arguments(["--bogus", person_schema])
        assert result.status is ParseStatus.FAILURE
        assert "--bogus" in result.message

    def test_missing_option_value(self):
        result = Options().parse_arguments(["-d"])
        assert result.status is ParseStatus.FAILURE
        assert result.message

    def test_directory_source_expands_to_json_files(self, tmp_path):
        (tmp_path / "b.json").write_text("{}")
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("not a schema")

        options = Options()
        options.parse_arguments([str(tmp_path)])

        assert options.sources == [str(tmp_path / "a.json"), str(tmp_path / "b.json")]

    def test_url_source_is_kept(self):
        options = Options()
        options.parse_arguments(["https://example.com/schemas/person.json"])
        assert options.sources == ["https://example.com/schemas/person.json"]


class TestClassNameReplacement:
    """--replace and the configuration file"""

    def test_replace_rules(self, person_schema):
        options = Options()
        options.parse_arguments(["--replace", "Person=Human", "--replace", "Address=Location", person_schema])
        assert options.class_name_replacer == {"Person": "Human", "Address": "Location"}

    def test_invalid_rule(self, person_schema):
        result = Options().parse_arguments(["--replace", "Person", person_schema])
        assert result.status is ParseStatus.FAILURE
        assert "invalid class name replacement 'Person'" in result.message

    def test_config_replacements_are_merged(self, test_data, person_schema):
        options = Options()
        options.parse_arguments(["-c", str(test_data / "config.json"), "--replace", "Person=Human", person_schema])
        assert options.class_name_replacer == {"Address": "PostalAddress", "Person": "Human"}

    def test_command_line_wins_over_config(self, test_data, person_schema):
        options = Options()
        options.parse_arguments(["-c", str(test_data / "config.json"), "--replace", "Address=Location", person_schema])
        assert options.class_name_replacer == {"Address": "Location"}

    def test_unreadable_config(self, tmp_path, person_schema):
        result = Options().parse_arguments(["-c", str(tmp_path / "missing.json"), person_schema])
        assert result.status is ParseStatus.FAILURE
        assert "unable to read the generator configuration" in result.message

    def test_config_must_be_an_object(self, tmp_path, person_schema):
        config = tmp_path / "config.json"
        config.write_text("[1, 2]")
        result = Options().parse_arguments(["-c", str(config), person_schema])
        assert result.status is ParseStatus.FAILURE


class TestProxy:
    """--http-proxy and --http-proxy-file"""

    def test_full_spec(self, person_schema):
        options = Options()
        options.parse_arguments(["--http-proxy", "alice:secret@proxy.local:3128", person_schema])
        assert options.proxy == ProxySettings("proxy.local", 3128, "alice", "secret")
        assert options.proxy.url == "http://proxy.local:3128"

    def test_host_only(self, person_schema):
        options = Options()
        options.parse_arguments(["--http-proxy", "proxy.local", person_schema])
        assert options.proxy == ProxySettings("proxy.local", 80)

    def test_invalid_spec(self, person_schema):
        result = Options().parse_arguments(["--http-proxy", "a:b:c", person_schema])
        assert result.status is ParseStatus.FAILURE
        assert "invalid proxy specification 'a:b:c'" in result.message

    def test_proxy_file(self, tmp_path, person_schema):
        proxy_file = tmp_path / "proxy.txt"
        proxy_file.write_text("bob@gateway:8080\n")
        options = Options()
        options.parse_arguments(["--http-proxy-file", str(proxy_file), person_schema])
        assert options.proxy == ProxySettings("gateway", 8080, "bob", None)


class TestPlugins:
    """Plugin flags"""

    def test_plugin_flag_activates_plugin(self, frozen_plugin_installed, person_schema):
        options = Options()
        result = options.parse_arguments(["--x-frozen", person_schema])
        assert result.status is ParseStatus.SUCCESS
        assert [plugin.option_name for plugin in options.active_plugins] == ["x-frozen"]

    def test_plugin_inactive_by_default(self, frozen_plugin_installed, person_schema):
        options = Options()
        options.parse_arguments([person_schema])
        assert options.active_plugins == []

    def test_plugin_specs_are_recorded(self, person_schema, tmp_path):
        options = Options()
        options.parse_arguments(["--plugin-path", str(tmp_path), "--plugin", "my_plugin:MyPlugin", person_schema])
        assert options.plugin_path == [tmp_path]
        assert options.plugin_specs == ["my_plugin:MyPlugin"]


class TestUsage:
    """The usage screen"""

    def test_public_usage(self, frozen_plugin_installed):
        lines = []
        usage(None, False, lines.append)
        text = "\n".join(lines)

        assert text.startswith("Usage: json-schema-compiler")
        assert "--directory" in text
        assert "--encoding" in text
        assert "--debug" not in text
        assert "Extensions:" in text
        assert "--x-frozen" in text
        # plugin flags are only listed once, in the extension section
        assert text.count("--x-frozen") == 1

    def test_private_usage(self, frozen_plugin_installed):
        lines = []
        usage(None, True, lines.append)
        text = "\n".join(lines)

        assert "Private options:" in text
        assert "--debug" in text

    def test_no_extension_section_without_plugins(self, monkeypatch):
        monkeypatch.setattr(Options, "discover_plugins", staticmethod(lambda: []))
        lines = []
        usage(None, False, lines.append)
        assert "Extensions:" not in "\n".join(lines)


class TestCodeWriterChain:
    """Options.create_code_writer"""

    def test_prolog_by_default(self, tmp_path, person_schema):
        options = Options()
        options.parse_arguments(["-d", str(tmp_path), "--encoding", "latin-1", "--read-only", person_schema])

        writer = options.create_code_writer()
        assert isinstance(writer, PrologCodeWriter)
        assert isinstance(writer.core, FileCodeWriter)
        assert writer.core.target_dir == tmp_path
        assert writer.core.read_only
        assert writer.encoding == "latin-1"
        assert "json-schema-compiler" in writer.prolog
        assert "person.schema.json" in writer.prolog

    def test_no_header(self, tmp_path, person_schema):
        options = Options()
        options.parse_arguments(["-d", str(tmp_path), "--no-header", person_schema])
        assert isinstance(options.create_code_writer(), FileCodeWriter)

    def test_custom_core_gets_encoding(self, person_schema):
        class Core(FileCodeWriter):
            pass

        options = Options()
        options.parse_arguments(["--encoding", "utf-16", "--no-header", person_schema])
        core = Core(".")
        assert options.create_code_writer(core) is core
        assert core.encoding == "utf-16"


def test_dump_options(person_schema):
    options = Options()
    options.parse_arguments(["-p", "pkg", "--replace", "A=B", person_schema])
    dumped = dump_options(options)
    assert '"default_package": "pkg"' in dumped
    assert person_schema in dumped
    assert '"A": "B"' in dumped


if __name__ == "__main__":
    pytest.main([__file__])
