from __future__ import annotations

from pathlib import Path

import pytest

from json_schema_compiler.diagnostics import CompilerListener

TEST_DATA = Path(__file__).parent / "test_data"


class RecordingListener(CompilerListener):
    """Listener that keeps every notification for later assertions."""

    def __init__(self, cancel_after_polls: int | None = None):
        self.messages: list[str] = []
        self.generated: list[tuple[str, int, int]] = []
        self.errors = []
        self.fatal_errors = []
        self.warnings = []
        self.infos = []
        self.outlines = []
        self.polls = 0
        self.cancel_after_polls = cancel_after_polls

    def message(self, text):
        self.messages.append(text)

    def generated_file(self, file_name, index, total):
        self.generated.append((file_name, index, total))

    def error(self, diagnostic):
        self.errors.append(diagnostic)

    def fatal_error(self, diagnostic):
        self.fatal_errors.append(diagnostic)

    def warning(self, diagnostic):
        self.warnings.append(diagnostic)

    def info(self, diagnostic):
        self.infos.append(diagnostic)

    def is_canceled(self):
        self.polls += 1
        return self.cancel_after_polls is not None and self.polls > self.cancel_after_polls

    def compiled(self, outline):
        self.outlines.append(outline)

    @property
    def text(self) -> str:
        return "\n".join(self.messages)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def test_data() -> Path:
    return TEST_DATA


@pytest.fixture
def person_schema() -> str:
    return str(TEST_DATA / "person.schema.json")


@pytest.fixture
def order_schema() -> str:
    return str(TEST_DATA / "order.schema.json")
