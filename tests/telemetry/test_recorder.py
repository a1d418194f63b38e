"""Tests for ErrorRecorder."""

from __future__ import annotations

import logging

import pytest

from rum.core.telemetry.recorder import (
    ErrorRecorder,
    get_error_recorder,
    reset_error_recorder,
)


class TestErrorRecorder:
    """Test cases for ErrorRecorder."""

    def test_record_and_recent(self) -> None:
        recorder = ErrorRecorder()
        error = ConnectionError("refused")

        recorder.record(error, source="h:1")

        (entry,) = recorder.recent()
        assert entry.error is error
        assert entry.source == "h:1"
        assert entry.recorded_at > 0

    def test_bounded(self) -> None:
        recorder = ErrorRecorder(max_entries=3)

        for i in range(5):
            recorder.record(RuntimeError(str(i)))

        assert len(recorder) == 3
        assert [str(e.error) for e in recorder.recent()] == ["2", "3", "4"]

    def test_clear(self) -> None:
        recorder = ErrorRecorder()
        recorder.record(RuntimeError("x"))

        recorder.clear()

        assert len(recorder) == 0

    def test_debug_logs_error(self, caplog: pytest.LogCaptureFixture) -> None:
        recorder = ErrorRecorder()

        with caplog.at_level(logging.ERROR, logger="rum.core.telemetry.recorder"):
            recorder.record(RuntimeError("visible"), source="h:1", debug=True)
            recorder.record(RuntimeError("hidden"), source="h:1")

        assert "visible" in caplog.text
        assert "hidden" not in caplog.text


def test_shared_recorder_singleton() -> None:
    reset_error_recorder()
    try:
        assert get_error_recorder() is get_error_recorder()
    finally:
        reset_error_recorder()
