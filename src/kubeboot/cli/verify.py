"""kubeboot CLI - tool verification."""

import click

from kubeboot.cluster import ClusterBootstrapper
from kubeboot.console import CROSS, TICK

from ._runner import get_runner


@click.command()
@click.pass_context
def verify(ctx):
    """Check that every required tool is installed and responding."""
    bootstrapper = ClusterBootstrapper(get_runner(ctx), ctx.obj["config"])
    status = bootstrapper.verify_tools()

    for tool, ok in status.items():
        click.echo(f"{TICK if ok else CROSS} {tool}")

    if not all(status.values()):
        missing = ", ".join(tool for tool, ok in status.items() if not ok)
        raise click.ClickException(f"Unavailable tools: {missing}")
