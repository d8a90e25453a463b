#!/usr/bin/env python3

import io
import json
import logging

import pytest

from json_schema_compiler.diagnostics import ConsoleListener, Diagnostic, Severity
from json_schema_compiler.error_receiver import DriverErrorFilter, ErrorReceiverFilter
from json_schema_compiler.errors import AbortError


def diagnostic(severity=Severity.ERROR, message="boom"):
    return Diagnostic(severity, message, system_id="file:///schemas/a.json", location="#/definitions/A")


class TestDriverErrorFilter:
    """Quiet and verbose gating of diagnostics"""

    def test_info_only_when_verbose(self, listener):
        DriverErrorFilter(listener).info(diagnostic(Severity.INFO))
        assert listener.infos == []

        DriverErrorFilter(listener, verbose=True).info(diagnostic(Severity.INFO))
        assert len(listener.infos) == 1

    def test_warning_latched_and_forwarded(self, listener):
        receiver = DriverErrorFilter(listener)
        assert not receiver.had_warning
        receiver.warning(diagnostic(Severity.WARNING))
        assert receiver.had_warning
        assert len(listener.warnings) == 1

    def test_quiet_drops_warnings_but_latches(self, listener):
        receiver = DriverErrorFilter(listener, quiet=True)
        receiver.warning(diagnostic(Severity.WARNING))
        assert receiver.had_warning
        assert listener.warnings == []

    def test_errors_always_forwarded(self, listener):
        receiver = DriverErrorFilter(listener, quiet=True)
        receiver.error(diagnostic())
        receiver.fatal_error(diagnostic(Severity.FATAL))
        assert len(listener.errors) == 1
        assert len(listener.fatal_errors) == 1
        assert receiver.had_error

    def test_poll_abort(self, listener):
        receiver = DriverErrorFilter(listener)
        receiver.poll_abort()

        listener.cancel_after_polls = 0
        with pytest.raises(AbortError):
            receiver.poll_abort()

    def test_debug_goes_to_logging(self, listener, caplog):
        with caplog.at_level(logging.DEBUG, logger="json_schema_compiler.error_receiver"):
            DriverErrorFilter(listener).debug("loaded something")
        assert "loaded something" in caplog.text
        assert listener.messages == []

    def test_report_dispatches_by_severity(self, listener):
        receiver = DriverErrorFilter(listener, verbose=True)
        receiver.report(Severity.INFO, "i")
        receiver.report(Severity.WARNING, "w")
        receiver.report(Severity.ERROR, "e", system_id="file:///a.json", location="#/properties/x")
        receiver.report(Severity.FATAL, "f")

        assert [d.message for d in listener.infos] == ["i"]
        assert [d.message for d in listener.warnings] == ["w"]
        assert listener.errors[0].location == "#/properties/x"
        assert [d.message for d in listener.fatal_errors] == ["f"]


class TestErrorReceiverFilter:
    """Error latching in front of another receiver"""

    def test_chained_filters_forward_polling(self, listener):
        inner = DriverErrorFilter(listener)
        outer = ErrorReceiverFilter(inner)
        listener.cancel_after_polls = 0
        with pytest.raises(AbortError):
            outer.poll_abort()

    def test_latch_is_local(self, listener):
        inner = DriverErrorFilter(listener)
        outer = ErrorReceiverFilter(inner)
        outer.error(diagnostic())
        assert outer.had_error
        assert inner.had_error
        fresh = ErrorReceiverFilter(inner)
        assert not fresh.had_error

    def test_without_core(self):
        receiver = ErrorReceiverFilter()
        receiver.error(diagnostic())
        receiver.warning(diagnostic(Severity.WARNING))
        assert receiver.had_error


class TestDiagnostic:
    """Rendering of diagnostics"""

    def test_str_with_location(self):
        assert str(diagnostic()) == "[ERROR] boom\n  file:///schemas/a.json#/definitions/A"

    def test_str_without_location(self):
        assert str(Diagnostic(Severity.WARNING, "careful")) == "[WARNING] careful"

    def test_from_json_error(self):
        try:
            json.loads('{"a": }')
        except json.JSONDecodeError as e:
            result = Diagnostic.from_exception(e, Severity.FATAL, "file:///a.json")
        assert result.severity is Severity.FATAL
        assert result.line == 1
        assert result.cause is not None
        assert str(result).endswith("line 1 of file:///a.json")

    def test_from_os_error(self):
        error = FileNotFoundError(2, "No such file or directory", "/tmp/missing.json")
        result = Diagnostic.from_exception(error)
        assert result.message == "No such file or directory: /tmp/missing.json"


def test_console_listener():
    status = io.StringIO()
    out = io.StringIO()
    console = ConsoleListener(status, out)
    console.message("hello")
    console.generated_file("pkg/person.py", 1, 2)
    console.error(diagnostic())

    assert status.getvalue() == "hello\npkg/person.py\n"
    assert "[ERROR] boom" in out.getvalue()
    assert console.reporter.has_error


if __name__ == "__main__":
    pytest.main([__file__])
