"""
Timeout and retry constants for kubeboot.

Centralizes tuning values so the CLI, configuration defaults and call sites
agree on them.
"""

from __future__ import annotations

# =============================================================================
# Cluster Readiness
# =============================================================================

# Attempts made while waiting for a freshly created control plane
CLUSTER_READY_MAX_ATTEMPTS = 10

# Fixed delay between readiness probes
CLUSTER_READY_RETRY_DELAY_S = 5.0

# =============================================================================
# Helm
# =============================================================================

# Timeout passed to `helm upgrade --install --wait`
HELM_INSTALL_TIMEOUT = "5m"

# Attempts made when adding a chart repository (network flakes)
HELM_REPO_ADD_MAX_ATTEMPTS = 3

# Fixed delay between repository add attempts
HELM_REPO_ADD_RETRY_DELAY_S = 2.0
