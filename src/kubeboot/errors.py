"""
Error kinds raised by kubeboot.

All errors derive from KubebootError so the CLI can turn any of them into a
single failure line. Each carries the context needed to explain what went
wrong without re-running the command.
"""

from __future__ import annotations

from typing import Optional, Sequence


class KubebootError(Exception):
    """Base class for all kubeboot errors."""
    pass


class ResolutionError(KubebootError):
    """Raised when a logical command name has no executable path."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        message = f"executable not found for command '{name}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SpawnError(KubebootError):
    """Raised when a resolved executable cannot be started."""

    def __init__(self, path: str, args: Sequence[str], cause: OSError) -> None:
        self.path = path
        self.arguments = list(args)
        self.cause = cause
        super().__init__(f"failed to start {path}: {cause}")


class ExitError(KubebootError):
    """Rich error for a process that exited with a non-zero status."""

    def __init__(
        self,
        path: str,
        args: Sequence[str],
        returncode: int,
        stderr: str = "",
    ) -> None:
        self.path = path
        self.arguments = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._format_message())

    @property
    def command(self) -> str:
        return " ".join([self.path, *self.arguments])

    def _format_message(self) -> str:
        message = f"command '{self.command}' exited with status {self.returncode}"
        if self.stderr and self.stderr.strip():
            message = f"{message}: {self.stderr.strip()}"
        return message


class RetryExhausted(KubebootError):
    """Raised when every permitted attempt of a retried operation failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        message = f"retry failed after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        super().__init__(message)


class ValuesParseError(KubebootError):
    """Raised when a defaults document is not a valid YAML mapping."""
    pass


class ValuesWriteError(KubebootError):
    """Raised when a generated document cannot be written to disk."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path}: {cause}")


class OutputSinkError(KubebootError):
    """
    Raised when a caller-supplied sink rejected the child's output.

    The child still ran to completion; everything it wrote is kept on
    ``stdout`` and ``stderr``.
    """

    def __init__(
        self,
        path: str,
        args: Sequence[str],
        stream: str,
        cause: BaseException,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.path = path
        self.arguments = list(args)
        self.stream = stream
        self.cause = cause
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{stream} sink of {path} failed: {cause}")
