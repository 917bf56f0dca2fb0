"""
Tests for CommandLogger and configure_logging.
"""

import json
import logging
from io import StringIO

import pytest

from kubeboot.logger import CommandLogger, JsonFormatter, configure_logging


@pytest.fixture
def captured_logs():
    output = StringIO()
    command_logger = logging.getLogger("kubeboot.commands")
    handler = logging.StreamHandler(output)
    handler.setFormatter(logging.Formatter("%(message)s"))
    command_logger.addHandler(handler)
    previous = command_logger.level
    command_logger.setLevel(logging.DEBUG)
    yield output
    command_logger.removeHandler(handler)
    command_logger.setLevel(previous)


def parse_log_line(captured_logs) -> dict:
    """Parse the last JSON log line."""
    lines = captured_logs.getvalue().strip().split("\n")
    if lines and lines[-1]:
        return json.loads(lines[-1])
    return {}


class TestCommandLogger:

    def test_started(self, captured_logs):
        CommandLogger().log_started("kubectl", "/bin/kubectl", ["get", "nodes"], mode="silent")

        log = parse_log_line(captured_logs)
        assert log["event"] == "command.started"
        assert log["args"] == ["get", "nodes"]
        assert log["mode"] == "silent"
        assert log["service"] == "kubeboot"

    def test_failed_omits_unknown_fields(self, captured_logs):
        CommandLogger().log_failed("helm", "executable not found")

        log = parse_log_line(captured_logs)
        assert log["event"] == "command.failed"
        assert "returncode" not in log
        assert "path" not in log

    def test_exhausted(self, captured_logs):
        CommandLogger().log_exhausted(3, RuntimeError("boom"))

        log = parse_log_line(captured_logs)
        assert log["event"] == "retry.exhausted"
        assert log["attempts"] == 3
        assert log["error"] == "boom"

    def test_extra_labels(self, captured_logs):
        CommandLogger(extra_labels={"cluster": "dev"}).log_values_written("/tmp/v.yaml", ["b", "a"])

        log = parse_log_line(captured_logs)
        assert log["labels"] == {"cluster": "dev"}
        assert log["keys"] == ["a", "b"]


class TestConfigureLogging:

    def test_replaces_previous_handler(self):
        package_logger = logging.getLogger("kubeboot")

        first = configure_logging("info", "text")
        second = configure_logging("debug", "json")

        assert first not in package_logger.handlers
        assert second in package_logger.handlers
        assert package_logger.level == logging.DEBUG
        assert isinstance(second.formatter, JsonFormatter)

    def test_json_formatter_merges_payload(self):
        record = logging.LogRecord(
            "kubeboot.commands", logging.INFO, __file__, 1,
            json.dumps({"event": "command.succeeded"}), None, None,
        )

        entry = json.loads(JsonFormatter().format(record))

        assert entry["event"] == "command.succeeded"
        assert entry["level"] == "info"

    def test_json_formatter_plain_message(self):
        record = logging.LogRecord("kubeboot", logging.WARNING, __file__, 1, "plain %s", ("text",), None)

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "plain text"
