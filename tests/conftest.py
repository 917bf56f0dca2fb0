"""
Pytest configuration and fixtures for kubeboot tests.

Child processes are the running interpreter executing a short script, so the
tests need nothing but Python on the machine.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Generator, List

import pytest

from kubeboot.config import reset_config
from kubeboot.executables import ExecutableResolver
from kubeboot.runner import ProcessRunner


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_global_state() -> Generator[None, None, None]:
    """Reset the config singleton and any handler installed by the CLI."""
    reset_config()
    yield
    reset_config()
    package_logger = logging.getLogger("kubeboot")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_kubeboot_handler", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ============================================================================
# Mock Command Fixtures
# ============================================================================

MOCK_BEHAVIORS = {
    "success": "import sys; sys.stdout.write('SUCCESS')",
    "fail": "import sys; sys.stderr.write('FAILURE'); sys.exit(1)",
    "success_with_args": "import sys; sys.stdout.write('SUCCESS: ' + ' '.join(sys.argv[1:]))",
    "stderr_only": "import sys; sys.stderr.write('WARNING: A non-fatal warning')",
    "five_lines": "import sys; sys.stdout.write('x\\n' * 5)",
    # Writes a partial line, then waits for the file named by argv[1]
    "partial_line_then_wait": (
        "import os, sys, time\n"
        "sys.stdout.write('progress')\n"
        "sys.stdout.flush()\n"
        "deadline = time.monotonic() + 10\n"
        "while not os.path.exists(sys.argv[1]):\n"
        "    if time.monotonic() > deadline:\n"
        "        sys.exit(2)\n"
        "    time.sleep(0.05)\n"
    ),
    "noisy_fail": (
        "import sys; sys.stdout.write('partial output'); "
        "sys.stderr.write('FAILURE'); sys.exit(3)"
    ),
}


@pytest.fixture
def mock_resolver() -> ExecutableResolver:
    """Resolver mapping the logical name ``mock-cli`` to this interpreter."""
    return ExecutableResolver({"mock-cli": sys.executable})


@pytest.fixture
def runner(mock_resolver: ExecutableResolver) -> ProcessRunner:
    return ProcessRunner(mock_resolver)


@pytest.fixture
def mock_args() -> Callable[..., List[str]]:
    """Build the argument list that makes ``mock-cli`` behave a certain way."""

    def build(behavior: str, *extra: str) -> List[str]:
        return ["-c", MOCK_BEHAVIORS[behavior], *extra]

    return build
