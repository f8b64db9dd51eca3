"""Tests for structured logging setup."""
import json
import logging

import pytest

from pcfdev.logging import configure_logging, get_logger, log_operation


def read_events(path):
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestConfigureLogging:
    def test_level(self):
        configure_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_file_receives_json(self, tmp_path):
        log_file = tmp_path / "logs" / "pcfdev.json"
        configure_logging(level="INFO", log_file=log_file)

        get_logger("pcfdev.test").info("vm_imported", vm_name="pcfdev-default")

        events = read_events(log_file)
        assert events[-1]["event"] == "vm_imported"
        assert events[-1]["vm_name"] == "pcfdev-default"
        assert events[-1]["level"] == "info"

    def test_level_filters(self, tmp_path):
        log_file = tmp_path / "pcfdev.json"
        configure_logging(level="WARNING", log_file=log_file)

        get_logger("pcfdev.test").info("hidden")
        get_logger("pcfdev.test").warning("shown")

        assert [e["event"] for e in read_events(log_file)] == ["shown"]


class TestLogOperation:
    def test_started_and_completed(self, tmp_path):
        log_file = tmp_path / "pcfdev.json"
        configure_logging(level="INFO", log_file=log_file)

        with log_operation(get_logger("pcfdev.test"), "import_vm", vm_name="pcfdev-default"):
            pass

        events = read_events(log_file)
        assert [e["event"] for e in events] == ["import_vm.started", "import_vm.completed"]
        assert events[-1]["vm_name"] == "pcfdev-default"
        assert "duration_ms" in events[-1]

    def test_failure_is_logged_and_raised(self, tmp_path):
        log_file = tmp_path / "pcfdev.json"
        configure_logging(level="INFO", log_file=log_file)

        with pytest.raises(RuntimeError):
            with log_operation(get_logger("pcfdev.test"), "provision"):
                raise RuntimeError("boom")

        failed = read_events(log_file)[-1]
        assert failed["event"] == "provision.failed"
        assert failed["error"] == "boom"
        assert failed["error_type"] == "RuntimeError"
