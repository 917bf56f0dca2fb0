"""kubeboot CLI - kind cluster lifecycle."""

import click

from kubeboot.cluster import ClusterBootstrapper
from kubeboot.console import fatal, success
from kubeboot.errors import KubebootError

from ._runner import get_runner


def _bootstrapper(ctx) -> ClusterBootstrapper:
    return ClusterBootstrapper(get_runner(ctx), ctx.obj["config"])


@click.group()
def cluster():
    """Manage the local kind cluster."""
    pass


@cluster.command()
@click.option("--name", "-n", default=None, help="Cluster name (default: KUBEBOOT_CLUSTER_NAME)")
@click.option("--wait/--no-wait", default=True, help="Wait for the control plane")
@click.pass_context
def create(ctx, name, wait):
    """Create the cluster if it does not exist."""
    bootstrapper = _bootstrapper(ctx)
    name = name or bootstrapper.config.cluster_name
    try:
        created = bootstrapper.create(name)
        if wait:
            bootstrapper.wait_until_ready(name)
    except KubebootError as e:
        fatal(str(e))

    if created:
        success(f"Cluster {name} created")
    else:
        success(f"Cluster {name} already exists")


@cluster.command()
@click.option("--name", "-n", default=None)
@click.pass_context
def wait(ctx, name):
    """Wait until the control plane answers."""
    bootstrapper = _bootstrapper(ctx)
    name = name or bootstrapper.config.cluster_name
    try:
        bootstrapper.wait_until_ready(name)
    except KubebootError as e:
        fatal(str(e))
    success(f"Cluster {name} is ready")


@cluster.command()
@click.option("--name", "-n", default=None)
@click.pass_context
def delete(ctx, name):
    """Delete the cluster."""
    bootstrapper = _bootstrapper(ctx)
    name = name or bootstrapper.config.cluster_name
    try:
        bootstrapper.delete(name)
    except KubebootError as e:
        fatal(str(e))
    success(f"Cluster {name} deleted")
