#!/usr/bin/env python3

import pytest

from json_schema_compiler.cli_utils import reconstruct_command_line


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_program_name_only(self):
        """An empty command line is just the program name"""
        assert reconstruct_command_line([]) == "json-schema-compiler"

    def test_existing_files_are_shortened(self, person_schema):
        """Paths to existing files keep only their file name"""
        result = reconstruct_command_line(["-p", "com.example", person_schema])
        assert result == "json-schema-compiler -p com.example person.schema.json"

    def test_other_arguments_unchanged(self, tmp_path):
        """Options, URLs, directories and missing files are kept verbatim"""
        arguments = ["-d", str(tmp_path), "--mode", "zip", "https://example.com/a.json", "missing.json"]
        result = reconstruct_command_line(arguments)
        assert result == "json-schema-compiler " + " ".join(arguments)


if __name__ == "__main__":
    pytest.main([__file__])
