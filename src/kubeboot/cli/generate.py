"""kubeboot CLI - values file and project manifest generation."""

from typing import Any, Dict, Tuple

import click
import yaml

from kubeboot.console import fatal, success
from kubeboot.errors import KubebootError
from kubeboot.project import write_project_manifest
from kubeboot.values import generate_values_file


def parse_set_options(items: Tuple[str, ...]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as YAML scalars."""
    overrides: Dict[str, Any] = {}
    for item in items:
        if "=" not in item:
            raise click.BadParameter(f"{item!r} (expected key=value)", param_hint="--set")
        key, raw = item.split("=", 1)
        if not key:
            raise click.BadParameter(f"{item!r} has an empty key", param_hint="--set")
        try:
            overrides[key] = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError:
            overrides[key] = raw
    return overrides


@click.command()
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="Values file to write")
@click.option("--defaults", "-d", type=click.File("r"), default=None, help="Defaults YAML document")
@click.option("--set", "set_values", multiple=True, help="Override as dotted.key=value (repeatable)")
def values(output, defaults, set_values):
    """Generate a Helm values file from defaults and overrides."""
    overrides = parse_set_options(set_values)
    defaults_text = defaults.read() if defaults else ""
    try:
        generate_values_file(output, overrides, defaults_text)
    except KubebootError as e:
        fatal(str(e))
    success(f"Values written to {output}")


@click.command()
@click.argument("name")
@click.option("--user", "-u", "users", multiple=True, help="Read-write user (repeatable, default: admin)")
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False))
def project(name, users, output):
    """Generate a KubeSlice Project manifest."""
    try:
        write_project_manifest(output, name, list(users))
    except KubebootError as e:
        fatal(str(e))
    success(f"Project manifest written to {output}")
