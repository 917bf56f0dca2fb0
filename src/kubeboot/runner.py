"""
Run external tools by logical name.

Every call resolves the name through the injected ExecutableResolver before
anything is spawned, runs exactly one child process, and blocks until it
exits. The modes differ only in where the child's output goes and whether
kubeboot prints its own "Running command" / "Failed to run command" lines:

    run            stream output live, announce, report failures
    run_silent     capture everything, print nothing
    run_on_stdio   announce, then hand the terminal to the child
    run_custom_io  copy output into caller sinks, announce unless quiet

Example:
    runner = ProcessRunner(ExecutableResolver.detect())
    runner.run("kubectl", "get", "nodes")
"""

from __future__ import annotations

import codecs
import io
import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence, Tuple

import click

from kubeboot.errors import ExitError, OutputSinkError, ResolutionError, SpawnError
from kubeboot.executables import ExecutableResolver
from kubeboot.logger import CommandLogger

__all__ = ["ExecutionResult", "ProcessRunner"]

PIPE_CHUNK_SIZE = 4096


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a successful invocation."""

    path: str
    args: Tuple[str, ...]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def command(self) -> str:
        return _format_command(self.path, self.args)


def _format_command(path: str, args: Sequence[str]) -> str:
    return " ".join([path, *args])


def _is_binary(sink: IO) -> bool:
    return isinstance(sink, (io.RawIOBase, io.BufferedIOBase))


class _Pump(threading.Thread):
    """
    Copy one child pipe into the capture buffer and every sink until EOF.

    Chunks are forwarded as soon as the child writes them, so partial lines
    and carriage-return progress output show up live. Binary sinks receive
    the raw bytes, text sinks the decoded text. A sink that raises is dropped
    and its first error kept in ``error``; the pipe is still drained so the
    child never blocks on a full buffer.
    """

    def __init__(self, stream_name: str, stream: IO[bytes], sinks: Sequence[IO]) -> None:
        super().__init__(name=f"kubeboot-{stream_name}", daemon=True)
        self.stream_name = stream_name
        self.stream = stream
        self.sinks = list(sinks)
        self.captured = bytearray()
        self.error: Optional[BaseException] = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def run(self) -> None:
        try:
            for chunk in iter(lambda: self.stream.read1(PIPE_CHUNK_SIZE), b""):
                self.captured += chunk
                self._forward(chunk, self._decoder.decode(chunk))
            self._forward(b"", self._decoder.decode(b"", final=True))
        finally:
            self.stream.close()

    @property
    def text(self) -> str:
        return self.captured.decode("utf-8", errors="replace")

    def _forward(self, chunk: bytes, text: str) -> None:
        if not chunk and not text:
            return
        for sink in list(self.sinks):
            try:
                sink.write(chunk if _is_binary(sink) else text)
                flush = getattr(sink, "flush", None)
                if flush is not None:
                    flush()
            except Exception as e:
                self.sinks.remove(sink)
                if self.error is None:
                    self.error = e


class ProcessRunner:
    """
    Runs resolved executables in one of four output modes.

    Args:
        resolver: Logical name to executable path table
        command_logger: Structured event logger (created if omitted)
    """

    def __init__(
        self,
        resolver: ExecutableResolver,
        *,
        command_logger: Optional[CommandLogger] = None,
    ) -> None:
        self.resolver = resolver
        self.events = command_logger or CommandLogger()

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def run(self, name: str, *args: str) -> ExecutionResult:
        """Run with live output, printing an announcement and any failure."""
        return self._run_reported(
            name,
            args,
            stdout_sinks=[sys.stdout],
            stderr_sinks=[sys.stderr],
            announce=True,
            mode="visible",
        )

    def run_silent(self, name: str, *args: str) -> ExecutionResult:
        """
        Run with all output suppressed, even on failure.

        Lifecycle events are logged at DEBUG, so only an explicit
        ``--log-level debug`` lets anything reach stderr.
        """
        path = self._resolve(name, level="debug")
        self.events.log_started(name, path, args, mode="silent")
        return self._execute(name, path, args, stdout_sinks=[], stderr_sinks=[], level="debug")

    def run_on_stdio(self, name: str, *args: str) -> ExecutionResult:
        """
        Run attached to this process's terminal.

        Nothing is captured, so interactive tools and progress bars behave
        as if they were started directly from the shell.
        """
        try:
            path = self._resolve(name)
        except ResolutionError:
            self._report_failure(name, args)
            raise
        self._announce(path, args)
        self.events.log_started(name, path, args, mode="stdio")

        started = time.monotonic()
        try:
            process = subprocess.Popen([path, *args])
        except OSError as e:
            self.events.log_failed(name, str(e), path=path)
            self._report_failure(path, args)
            raise SpawnError(path, args, e) from e
        returncode = process.wait()

        if returncode != 0:
            self.events.log_failed(name, "non-zero exit", path=path, returncode=returncode)
            self._report_failure(path, args)
            raise ExitError(path, args, returncode)

        self.events.log_succeeded(name, path, time.monotonic() - started)
        return ExecutionResult(path=path, args=tuple(args), returncode=returncode)

    def run_custom_io(
        self,
        name: str,
        stdout: Optional[IO],
        stderr: Optional[IO],
        *args: str,
        quiet: bool = False,
    ) -> ExecutionResult:
        """
        Run with output copied into caller-supplied sinks.

        Args:
            name: Logical command name
            stdout: Text or binary sink for the child's stdout (None discards)
            stderr: Text or binary sink for the child's stderr (None discards)
            *args: Command arguments
            quiet: Suppress the announcement and failure message

        Raises:
            OutputSinkError: A sink rejected a write; the child still ran to
                completion and its full output is on the error
        """
        return self._run_reported(
            name,
            args,
            stdout_sinks=[stdout] if stdout is not None else [],
            stderr_sinks=[stderr] if stderr is not None else [],
            announce=not quiet,
            mode="custom-io",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, name: str, level: str = "info") -> str:
        try:
            return self.resolver.resolve(name)
        except ResolutionError as e:
            self.events.log_failed(name, str(e), level=level)
            raise

    def _run_reported(
        self,
        name: str,
        args: Sequence[str],
        stdout_sinks: List[IO],
        stderr_sinks: List[IO],
        announce: bool,
        mode: str,
    ) -> ExecutionResult:
        level = "info" if announce else "debug"
        try:
            path = self._resolve(name, level=level)
        except ResolutionError:
            if announce:
                self._report_failure(name, args)
            raise

        if announce:
            self._announce(path, args)
        self.events.log_started(name, path, args, mode=mode)

        try:
            return self._execute(name, path, args, stdout_sinks, stderr_sinks, level=level)
        except ExitError as e:
            if announce:
                self._report_failure(path, args, e.stderr)
            raise
        except SpawnError as e:
            if announce:
                self._report_failure(path, args, str(e.cause))
            raise
        except OutputSinkError as e:
            if announce:
                self._report_failure(path, args, str(e))
            raise

    def _execute(
        self,
        name: str,
        path: str,
        args: Sequence[str],
        stdout_sinks: List[IO],
        stderr_sinks: List[IO],
        level: str = "info",
    ) -> ExecutionResult:
        started = time.monotonic()
        try:
            process = subprocess.Popen(
                [path, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            self.events.log_failed(name, str(e), path=path, level=level)
            raise SpawnError(path, args, e) from e

        pumps = [
            _Pump("stdout", process.stdout, stdout_sinks),
            _Pump("stderr", process.stderr, stderr_sinks),
        ]
        for pump in pumps:
            pump.start()
        returncode = process.wait()
        for pump in pumps:
            pump.join()

        out, err = pumps
        stdout_text = out.text
        stderr_text = err.text

        if returncode != 0:
            self.events.log_failed(name, "non-zero exit", path=path, returncode=returncode, level=level)
            raise ExitError(path, args, returncode, stderr_text)

        for pump in pumps:
            if pump.error is not None:
                self.events.log_failed(name, f"{pump.stream_name} sink failed", path=path, level=level)
                raise OutputSinkError(
                    path, args, pump.stream_name, pump.error,
                    stdout=stdout_text, stderr=stderr_text,
                ) from pump.error

        self.events.log_succeeded(name, path, time.monotonic() - started, level=level)
        return ExecutionResult(
            path=path,
            args=tuple(args),
            returncode=returncode,
            stdout=stdout_text,
            stderr=stderr_text,
        )

    @staticmethod
    def _announce(path: str, args: Sequence[str]) -> None:
        click.echo(f"Running command: {_format_command(path, args)}")

    @staticmethod
    def _report_failure(path: str, args: Sequence[str], stderr: str = "") -> None:
        click.echo(f"Failed to run command: {_format_command(path, args)}")
        if stderr and stderr.strip():
            click.echo(stderr.rstrip("\n"))
