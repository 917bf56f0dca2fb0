"""Shared construction of the ProcessRunner for CLI commands."""

import click

from kubeboot.executables import ExecutableResolver
from kubeboot.runner import ProcessRunner


def get_runner(ctx: click.Context) -> ProcessRunner:
    """Return the runner stored on the context, building one on first use."""
    obj = ctx.ensure_object(dict)
    runner = obj.get("runner")
    if runner is None:
        config = obj["config"]
        resolver = ExecutableResolver.detect(overrides=config.executable_paths)
        runner = ProcessRunner(resolver)
        obj["runner"] = runner
    return runner
