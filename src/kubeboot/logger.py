"""
Structured logging for command execution events.

Emits one JSON document per event on the ``kubeboot.commands`` logger.
Nothing reaches a terminal unless the application calls
``configure_logging``; the package logger carries a NullHandler so that
silent invocations stay silent.

Logged events:
- command.started
- command.succeeded
- command.failed
- retry.attempt_failed
- retry.exhausted
- values.written

Usage:
    from kubeboot.logger import CommandLogger, configure_logging

    configure_logging("debug", "json")
    events = CommandLogger()
    events.log_started(name="kubectl", path="/usr/bin/kubectl", args=["get", "nodes"])
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

_package_logger = logging.getLogger("kubeboot")
_package_logger.addHandler(logging.NullHandler())

_command_logger = logging.getLogger("kubeboot.commands")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
        }
        message = record.getMessage()
        try:
            payload = json.loads(message)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            entry.update(payload)
        else:
            entry["message"] = message
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str = "warning", fmt: str = "text") -> logging.Handler:
    """
    Attach a stderr handler to the package logger.

    Calling it again replaces the previously attached handler.

    Args:
        level: debug, info, warning or error
        fmt: json or text

    Returns:
        The installed handler
    """
    for existing in list(_package_logger.handlers):
        if getattr(existing, "_kubeboot_handler", False):
            _package_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    handler._kubeboot_handler = True  # type: ignore[attr-defined]
    _package_logger.addHandler(handler)
    _package_logger.setLevel(_LEVELS.get(level, logging.WARNING))
    return handler


class CommandLogger:
    """
    Structured logger for command lifecycle events.

    Each entry includes the event name, a timestamp and the service name;
    event-specific fields are added as top-level keys.
    """

    def __init__(
        self,
        service_name: str = "kubeboot",
        extra_labels: Optional[Dict[str, str]] = None,
    ):
        self.service_name = service_name
        self.extra_labels = extra_labels or {}
        self._logger = _command_logger

    def _emit(self, event: str, level: str = "info", **fields: Any) -> None:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "service": self.service_name,
        }
        entry.update({k: v for k, v in fields.items() if v is not None})
        if self.extra_labels:
            entry["labels"] = self.extra_labels

        log_line = json.dumps(entry, default=str)

        if level == "error":
            self._logger.error(log_line)
        elif level == "warn":
            self._logger.warning(log_line)
        elif level == "debug":
            self._logger.debug(log_line)
        else:
            self._logger.info(log_line)

    def log_started(self, name: str, path: str, args: Sequence[str], mode: str = "visible") -> None:
        """Log that a process is about to be spawned."""
        self._emit(
            event="command.started",
            level="debug",
            command=name,
            path=path,
            args=list(args),
            mode=mode,
        )

    def log_succeeded(
        self,
        name: str,
        path: str,
        duration_seconds: float,
        level: str = "info",
    ) -> None:
        """Log a zero exit status."""
        self._emit(
            event="command.succeeded",
            level=level,
            command=name,
            path=path,
            duration_seconds=round(duration_seconds, 3),
        )

    def log_failed(
        self,
        name: str,
        reason: str,
        path: Optional[str] = None,
        returncode: Optional[int] = None,
        level: str = "info",
    ) -> None:
        """Log a resolution, spawn, exit or sink failure."""
        self._emit(
            event="command.failed",
            level=level,
            command=name,
            path=path,
            returncode=returncode,
            reason=reason,
        )

    def log_attempt_failed(self, attempt: int, attempts: int, error: BaseException) -> None:
        """Log a failed attempt that will be retried."""
        self._emit(
            event="retry.attempt_failed",
            attempt=attempt,
            attempts=attempts,
            error=str(error),
        )

    def log_exhausted(self, attempts: int, error: Optional[BaseException]) -> None:
        """Log that every permitted attempt failed."""
        self._emit(
            event="retry.exhausted",
            level="error",
            attempts=attempts,
            error=str(error) if error is not None else None,
        )

    def log_values_written(self, path: str, keys: Sequence[str]) -> None:
        """Log a generated values file."""
        self._emit(
            event="values.written",
            path=path,
            keys=sorted(str(k) for k in keys),
        )
