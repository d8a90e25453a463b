#!/usr/bin/env python3

import click
import pytest

from json_schema_compiler.modes import Mode, ModeType


class TestModeResolve:
    """Resolving --mode operands"""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("code", Mode.CODE),
            ("COD", Mode.CODE),
            ("sig", Mode.SIGNATURE),
            ("Signature", Mode.SIGNATURE),
            ("for", Mode.FOREST),
            ("dry", Mode.DRYRUN),
            ("dryrun", Mode.DRYRUN),
            ("zip", Mode.ZIP),
            ("gbi", Mode.GBIND),
        ],
    )
    def test_prefix_match(self, token, expected):
        assert Mode.resolve(token) is expected

    @pytest.mark.parametrize("token", ["", "c", "co", "zi", "codex", "signatures", "unknown"])
    def test_no_match(self, token):
        assert Mode.resolve(token) is None

    def test_declaration_order(self):
        assert [mode.name for mode in Mode] == ["CODE", "SIGNATURE", "FOREST", "DRYRUN", "ZIP", "GBIND"]


class TestModeType:
    """The click parameter type for --mode"""

    def _parse(self, *args):
        @click.command()
        @click.option("--mode", type=ModeType(), default="code")
        def command(mode):
            return mode

        return command.main(list(args), standalone_mode=False)

    def test_converts_prefix(self):
        assert self._parse("--mode", "forest") is Mode.FOREST

    def test_default(self):
        assert self._parse() is Mode.CODE

    def test_unknown_mode_is_usage_error(self):
        with pytest.raises(click.BadParameter) as info:
            self._parse("--mode", "xx")
        assert "unrecognized mode xx" in info.value.format_message()


if __name__ == "__main__":
    pytest.main([__file__])
