"""
kubeboot CLI - bootstrap local Kubernetes environments.

Commands:
    kubeboot verify     Check that docker, kind, kubectl and helm work
    kubeboot values     Generate a Helm values file from defaults + overrides
    kubeboot project    Generate a KubeSlice Project manifest
    kubeboot cluster    Create, wait for, or delete the local kind cluster
"""

import click

from kubeboot.config import get_config
from kubeboot.logger import configure_logging

from .cluster import cluster
from .generate import project, values
from .verify import verify


@click.group()
@click.version_option(package_name="kubeboot")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Override KUBEBOOT_LOG_LEVEL",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"]),
    default=None,
    help="Override KUBEBOOT_LOG_FORMAT",
)
@click.pass_context
def main(ctx, log_level, log_format):
    """kubeboot - local Kubernetes environment bootstrapper."""
    ctx.ensure_object(dict)
    config = ctx.obj.get("config") or get_config()
    ctx.obj["config"] = config
    configure_logging(log_level or config.log_level, log_format or config.log_format)


# Register standalone commands
main.add_command(verify)
main.add_command(values)
main.add_command(project)

# Register command groups
main.add_command(cluster)


if __name__ == "__main__":
    main()
