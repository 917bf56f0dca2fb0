"""KubeSlice multi-tenant Project manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import yaml

from kubeboot.values import write_atomic

PROJECT_API_VERSION = "controller.kubeslice.io/v1alpha1"
CONTROLLER_NAMESPACE = "kubeslice-controller"
DEFAULT_PROJECT_USERS = ("admin",)


def project_manifest(
    name: str,
    users: Optional[Sequence[str]] = None,
    namespace: str = CONTROLLER_NAMESPACE,
) -> Dict[str, Any]:
    """
    Build a Project resource granting read-write access to ``users``.

    An empty or missing user list falls back to ``admin``.
    """
    read_write = list(users) if users else list(DEFAULT_PROJECT_USERS)
    return {
        "apiVersion": PROJECT_API_VERSION,
        "kind": "Project",
        "metadata": {
            "name": name,
            "namespace": namespace,
        },
        "spec": {
            "serviceAccount": {
                "readWrite": read_write,
            },
        },
    }


def write_project_manifest(
    path: Union[str, Path],
    name: str,
    users: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    manifest = project_manifest(name, users)
    write_atomic(path, yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False))
    return manifest
