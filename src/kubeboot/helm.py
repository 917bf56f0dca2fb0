"""Helm chart repositories and releases."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from kubeboot.errors import ExitError
from kubeboot.retry import retry
from kubeboot.runner import ExecutionResult, ProcessRunner
from kubeboot.timeouts import (
    HELM_INSTALL_TIMEOUT,
    HELM_REPO_ADD_MAX_ATTEMPTS,
    HELM_REPO_ADD_RETRY_DELAY_S,
)
from kubeboot.values import generate_values_file

logger = logging.getLogger(__name__)


class HelmChart(BaseModel):
    """A chart to install, with its values sources."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Chart name within its repository")
    release: str = Field(..., description="Helm release name")
    namespace: str = Field(default="default")
    repo_name: str = Field(..., description="Local alias of the chart repository")
    repo_url: Optional[str] = Field(default=None, description="Repository URL to add before install")
    version: Optional[str] = Field(default=None)
    values: Dict[str, Any] = Field(
        default_factory=dict,
        description="Overrides keyed by dotted path, e.g. controller.logLevel",
    )
    defaults: str = Field(default="", description="Raw YAML defaults document")

    @property
    def reference(self) -> str:
        return f"{self.repo_name}/{self.name}"


class HelmClient:
    """
    Thin wrapper over the helm binary.

    Args:
        runner: ProcessRunner that resolves ``helm``
        work_dir: Directory that receives generated values files
    """

    def __init__(self, runner: ProcessRunner, *, work_dir: Union[str, Path]) -> None:
        self.runner = runner
        self.work_dir = Path(work_dir)

    def repo_add(
        self,
        name: str,
        url: str,
        attempts: int = HELM_REPO_ADD_MAX_ATTEMPTS,
        delay: float = HELM_REPO_ADD_RETRY_DELAY_S,
    ) -> None:
        """Add (or refresh) a chart repository, retrying network failures."""
        retry(
            attempts,
            delay,
            lambda: self.runner.run_silent("helm", "repo", "add", name, url, "--force-update"),
            retry_on=(ExitError,),
        )
        self.runner.run_silent("helm", "repo", "update", name)

    def values_path(self, chart: HelmChart) -> Path:
        return self.work_dir / f"{chart.release}-values.yaml"

    def install(self, chart: HelmChart, *, wait: bool = True) -> ExecutionResult:
        """Generate the values file and upgrade-or-install the release."""
        if chart.repo_url:
            self.repo_add(chart.repo_name, chart.repo_url)

        self.work_dir.mkdir(parents=True, exist_ok=True)
        values_file = self.values_path(chart)
        generate_values_file(values_file, chart.values, chart.defaults)

        args: List[str] = [
            "upgrade", "--install", chart.release, chart.reference,
            "--namespace", chart.namespace,
            "--create-namespace",
            "-f", str(values_file),
        ]
        if chart.version:
            args += ["--version", chart.version]
        if wait:
            args += ["--wait", "--timeout", HELM_INSTALL_TIMEOUT]

        logger.info("Installing %s as %s in %s", chart.reference, chart.release, chart.namespace)
        return self.runner.run("helm", *args)

    def uninstall(self, release: str, namespace: str = "default") -> ExecutionResult:
        return self.runner.run_silent("helm", "uninstall", release, "--namespace", namespace)
