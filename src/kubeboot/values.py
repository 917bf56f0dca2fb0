"""
Helm values generation.

Combines a defaults document with dotted-key overrides and writes the result
as a values file:

    defaults:   controller: {logLevel: info, replicas: 1}
    overrides:  {"controller.logLevel": "debug", "image.tag": "latest"}
    result:     controller: {logLevel: debug, replicas: 1}
                image: {tag: latest}

Merging is right-biased: a nested mapping is merged key by key only when both
sides hold a mapping; any other combination takes the override as-is.
"""

from __future__ import annotations

import copy
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Union

import yaml

from kubeboot.errors import ValuesParseError, ValuesWriteError
from kubeboot.logger import CommandLogger

logger = logging.getLogger(__name__)

ConfigTree = Dict[Any, Any]


class ValueKind(str, Enum):
    """Structural kind of a configuration tree node."""

    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAP = "map"


def kind_of(value: Any) -> ValueKind:
    """
    Classify a parsed YAML node.

    Only mappings and lists are structural; numbers, dates, strings, None
    and anything else a YAML loader may produce are scalars.
    """
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def merge(destination: MutableMapping, source: Mapping) -> MutableMapping:
    """
    Deep-merge ``source`` into ``destination`` in place.

    Args:
        destination: Base tree (defaults); modified and returned
        source: Override tree; never modified

    Returns:
        ``destination``
    """
    for key, value in source.items():
        current = destination.get(key)
        if (
            key in destination
            and kind_of(current) is ValueKind.MAP
            and kind_of(value) is ValueKind.MAP
        ):
            destination[key] = merge(current, value)
        else:
            destination[key] = copy.deepcopy(value)
    return destination


def expand_dotted(path: str, value: Any) -> ConfigTree:
    """
    Turn a dotted key into a single-branch tree.

    >>> expand_dotted("controller.logLevel", "debug")
    {'controller': {'logLevel': 'debug'}}
    """
    tree: Any = value
    for part in reversed(path.split(".")):
        tree = {part: tree}
    return tree


def expand_overrides(overrides: Optional[Mapping[str, Any]]) -> ConfigTree:
    """Expand every dotted override and fold them into one tree."""
    expanded: ConfigTree = {}
    for path, value in (overrides or {}).items():
        merge(expanded, expand_dotted(path, value))
    return expanded


def load_defaults(text: Optional[str]) -> ConfigTree:
    """
    Parse a defaults document.

    Empty input yields an empty tree.

    Raises:
        ValuesParseError: Invalid YAML, or a document that is not a mapping
    """
    if not text or not text.strip():
        return {}
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValuesParseError(f"invalid defaults YAML: {e}") from e
    if parsed is None:
        return {}
    if kind_of(parsed) is not ValueKind.MAP:
        raise ValuesParseError(
            f"defaults YAML must be a mapping, got {type(parsed).__name__}"
        )
    return dict(parsed)


def render_values(tree: Mapping) -> str:
    """Serialize a tree as block-style YAML."""
    return yaml.safe_dump(
        dict(tree),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def write_atomic(path: Union[str, Path], content: str) -> None:
    """
    Write a text file atomically.

    The content goes to a temporary file next to ``path`` which is then
    renamed over it, so readers see either the old file or the new one.
    The parent directory must already exist.

    Raises:
        ValuesWriteError: The file could not be created or written
    """
    path = Path(path)
    try:
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise ValuesWriteError(str(path), e) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except OSError as e:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise ValuesWriteError(str(path), e) from e


def generate_values_file(
    output_path: Union[str, Path],
    overrides: Optional[Mapping[str, Any]],
    defaults_yaml: Optional[str],
    command_logger: Optional[CommandLogger] = None,
) -> ConfigTree:
    """
    Write a values file built from defaults plus dotted-key overrides.

    Args:
        output_path: Destination file
        overrides: Dotted path to leaf value (None means no overrides)
        defaults_yaml: Raw defaults document (may be empty)
        command_logger: Structured event logger

    Returns:
        The merged tree that was written

    Raises:
        ValuesParseError: Malformed defaults; nothing is written
        ValuesWriteError: Destination could not be written
    """
    tree = load_defaults(defaults_yaml)
    merge(tree, expand_overrides(overrides))

    write_atomic(output_path, render_values(tree))

    logger.debug("Wrote values file %s", output_path)
    (command_logger or CommandLogger()).log_values_written(str(output_path), list(tree))
    return tree
