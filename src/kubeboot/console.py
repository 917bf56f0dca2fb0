"""User-facing status lines."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

TICK = "✔"
CROSS = "✘"


def success(message: str) -> None:
    click.echo(f"{TICK} {message}")


def fatal(message: str, code: int = 1) -> NoReturn:
    """Print ``message`` to stderr and exit."""
    click.echo(f"{CROSS} {message}", err=True)
    sys.exit(code)
