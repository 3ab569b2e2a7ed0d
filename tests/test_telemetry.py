from __future__ import annotations

import json
import logging
from typing import Iterator

import pytest
from rich.logging import RichHandler

from rune.runtime import telemetry
from rune.runtime.telemetry import JsonFormatter, TelemetryConfig


@pytest.fixture(autouse=True)
def restore_config() -> Iterator[None]:
    previous = telemetry.active_config()
    yield
    telemetry.configure(config=previous)


def test_get_logger_nests_under_editor_logger() -> None:
    assert telemetry.get_logger("session").name == "rune.session"
    assert telemetry.get_logger("rune.view").name == "rune.view"
    assert telemetry.get_logger().name == "rune"


def test_record_event_carries_structured_data(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="rune")

    telemetry.record_event("save", data={"path": "a.txt", "lines": 3}, logger_name="rune.test")

    record = caplog.records[-1]
    assert record.name == "rune.test"
    assert record.getMessage().startswith("event::save")
    assert record.rune_data == {"path": "a.txt", "lines": "3"}


def test_record_event_below_level_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="rune")

    telemetry.record_event("noise", level="debug")

    assert not caplog.records


def test_span_failure_logs_and_reraises(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="rune")

    with pytest.raises(RuntimeError):
        with telemetry.span("work", component=True, metadata={"id": 7}):
            raise RuntimeError("boom")

    failures = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert len(failures) == 1
    assert failures[0].rune_data["reason"] == "boom"
    assert failures[0].rune_data["component"] == "work"
    end = caplog.records[-1]
    assert end.rune_data["outcome"] == "failed"


def test_configure_rejects_config_and_preset_together() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=TelemetryConfig(), preset="development")


def test_configure_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="staging")


def test_production_preset_uses_json(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_file = tmp_path / "rune.log"
    monkeypatch.setenv("RUNE_LOG_FILE", str(log_file))

    config = telemetry.configure(preset="production")
    telemetry.get_logger("files").error("disk full")

    assert config.json_format is True
    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "rune.files"
    assert payload["message"] == "disk full"


def test_json_formatter_includes_data() -> None:
    record = logging.LogRecord("rune.x", logging.INFO, __file__, 1, "hello", None, None)
    record.rune_data = {"k": "v"}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["data"] == {"k": "v"}


def test_console_logging_uses_rich_handler_on_stderr() -> None:
    telemetry.configure(config=TelemetryConfig(console=True))

    handlers = logging.getLogger("rune").handlers
    rich_handlers = [handler for handler in handlers if isinstance(handler, RichHandler)]

    assert len(rich_handlers) == 1
    assert rich_handlers[0].console.stderr is True
