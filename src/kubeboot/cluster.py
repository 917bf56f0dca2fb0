"""Local kind cluster lifecycle and tool verification."""

from __future__ import annotations

import io
import logging
from typing import Dict, List, Optional

from kubeboot.config import KubebootConfig, get_config
from kubeboot.errors import ExitError, KubebootError
from kubeboot.executables import EXECUTABLE_VERIFY_COMMANDS
from kubeboot.retry import retry
from kubeboot.runner import ExecutionResult, ProcessRunner

__all__ = ["ClusterBootstrapper"]

logger = logging.getLogger(__name__)


class ClusterBootstrapper:
    """Create, wait for and delete a local kind cluster."""

    def __init__(self, runner: ProcessRunner, config: Optional[KubebootConfig] = None) -> None:
        self.runner = runner
        self.config = config or get_config()

    def existing_clusters(self) -> List[str]:
        """Names reported by ``kind get clusters``."""
        out = io.StringIO()
        self.runner.run_custom_io("kind", out, None, "get", "clusters", quiet=True)
        return [line.strip() for line in out.getvalue().splitlines() if line.strip()]

    def create(self, name: Optional[str] = None) -> bool:
        """
        Create the cluster unless it already exists.

        Returns:
            True if a cluster was created, False if it was already there
        """
        name = name or self.config.cluster_name
        if name in self.existing_clusters():
            logger.info("Cluster %s already exists", name)
            return False
        self.runner.run("kind", "create", "cluster", "--name", name)
        return True

    def wait_until_ready(self, name: Optional[str] = None) -> ExecutionResult:
        """Poll the control plane until it answers or attempts run out."""
        name = name or self.config.cluster_name
        return retry(
            self.config.retry_attempts,
            self.config.retry_delay_seconds,
            lambda: self.runner.run_silent("kubectl", "cluster-info", "--context", f"kind-{name}"),
            retry_on=(ExitError,),
        )

    def delete(self, name: Optional[str] = None) -> ExecutionResult:
        name = name or self.config.cluster_name
        return self.runner.run("kind", "delete", "cluster", "--name", name)

    def verify_tools(self) -> Dict[str, bool]:
        """Probe every known tool; a missing or broken tool maps to False."""
        status: Dict[str, bool] = {}
        for tool, args in EXECUTABLE_VERIFY_COMMANDS.items():
            try:
                self.runner.run_silent(tool, *args)
            except KubebootError as e:
                logger.debug("Verification of %s failed: %s", tool, e)
                status[tool] = False
            else:
                status[tool] = True
        return status
