"""
Centralized configuration for kubeboot.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (KUBEBOOT_*)
3. .env file
4. Default values

Example:
    from kubeboot.config import get_config

    config = get_config()
    print(config.retry_attempts)  # From KUBEBOOT_RETRY_ATTEMPTS or default

    # Override at runtime
    config = get_config(cluster_name="demo")
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kubeboot.timeouts import CLUSTER_READY_MAX_ATTEMPTS, CLUSTER_READY_RETRY_DELAY_S


class KubebootConfig(BaseSettings):
    """
    Central configuration for kubeboot.

    All settings can be overridden via environment variables
    prefixed with KUBEBOOT_.

    Example:
        export KUBEBOOT_CLUSTER_NAME=demo
        export KUBEBOOT_LOG_LEVEL=debug
        export KUBEBOOT_EXECUTABLE_PATHS='{"kind": "/opt/bin/kind"}'
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBEBOOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cluster
    cluster_name: str = Field(
        default="kubeboot",
        description="Name of the local kind cluster",
    )
    work_dir: str = Field(
        default="~/.kubeboot",
        description="Directory for generated values files and manifests",
    )

    # Retry policy for flaky operations
    retry_attempts: int = Field(
        default=CLUSTER_READY_MAX_ATTEMPTS,
        ge=0,
        description="Attempt limit for retried operations",
    )
    retry_delay_seconds: float = Field(
        default=CLUSTER_READY_RETRY_DELAY_S,
        ge=0,
        description="Fixed delay between retried attempts",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for kubeboot",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format",
    )

    # Executables
    executable_paths: Dict[str, str] = Field(
        default_factory=dict,
        description="Explicit executable paths by logical command name",
    )

    @field_validator("work_dir")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ and environment variables in paths."""
        return os.path.expanduser(os.path.expandvars(v))

    def get_work_path(self, cluster: Optional[str] = None) -> Path:
        """Get the working directory, optionally scoped to a cluster."""
        base = Path(self.work_dir)
        if cluster:
            return base / cluster
        return base


# Global singleton
_config: Optional[KubebootConfig] = None


def get_config(**overrides) -> KubebootConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.
    """
    global _config

    if overrides or _config is None:
        _config = KubebootConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
