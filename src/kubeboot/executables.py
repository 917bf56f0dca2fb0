"""
Logical command names and their resolved executable paths.

The resolver is handed to the ProcessRunner at construction time; it is the
only place a logical name such as ``kubectl`` is turned into a path.
"""

from __future__ import annotations

import logging
import shutil
from typing import Dict, Iterable, List, Mapping, Optional

from kubeboot.errors import ResolutionError

logger = logging.getLogger(__name__)

KNOWN_EXECUTABLES = ("kind", "kubectl", "docker", "helm")

# Arguments used to probe whether a tool is installed and working
EXECUTABLE_VERIFY_COMMANDS: Dict[str, List[str]] = {
    "kind": ["version"],
    "kubectl": ["version", "--client=true"],
    "docker": ["ps", "-a"],
    "helm": ["version"],
}


class ExecutableResolver:
    """
    Read-only mapping from logical command name to executable path.

    A resolver built from ``None`` behaves as an unset table: every
    lookup fails.
    """

    def __init__(self, paths: Optional[Mapping[str, str]] = None) -> None:
        self._paths = dict(paths) if paths is not None else None

    @classmethod
    def detect(
        cls,
        names: Iterable[str] = KNOWN_EXECUTABLES,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> "ExecutableResolver":
        """
        Build a resolver by searching PATH.

        Explicit overrides win over PATH lookups. Tools that cannot be
        found are left out of the table.
        """
        overrides = overrides or {}
        paths: Dict[str, str] = {}
        for name in names:
            found = overrides.get(name) or shutil.which(name)
            if found:
                paths[name] = found
            else:
                logger.debug("Executable %s not found on PATH", name)
        for name, path in overrides.items():
            paths.setdefault(name, path)
        return cls(paths)

    @property
    def paths(self) -> Dict[str, str]:
        return dict(self._paths or {})

    def resolve(self, name: str) -> str:
        """Return the executable path for ``name``."""
        if self._paths is None:
            raise ResolutionError(name, "executable table is not set")
        path = self._paths.get(name)
        if not path:
            raise ResolutionError(name)
        return path

    def __contains__(self, name: object) -> bool:
        return self._paths is not None and name in self._paths

    def __repr__(self) -> str:
        return f"ExecutableResolver({self._paths!r})"
