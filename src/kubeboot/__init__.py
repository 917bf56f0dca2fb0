"""
kubeboot - bootstrap local Kubernetes environments.

Runs the external tools a local environment needs (docker, kind, kubectl,
helm) and generates the YAML artifacts that go with them.

Key Features:
- ProcessRunner resolves logical tool names and runs them in visible,
  silent, terminal-attached or caller-captured modes
- retry() wraps flaky operations with a bounded attempt count and fixed delay
- generate_values_file() deep-merges Helm defaults with dotted-key overrides

Example usage:
    from kubeboot import ExecutableResolver, ProcessRunner
    from kubeboot.retry import retry

    runner = ProcessRunner(ExecutableResolver.detect())
    retry(10, 5.0, lambda: runner.run_silent("kubectl", "cluster-info"))
"""

__version__ = "0.1.0"
__all__ = [
    "ExecutableResolver",
    "ProcessRunner",
    "ExecutionResult",
    "merge",
    "generate_values_file",
    "__version__",
]


# Lazy imports keep `import kubeboot` free of click/yaml/pydantic imports
def __getattr__(name: str):
    if name == "ExecutableResolver":
        from kubeboot.executables import ExecutableResolver
        return ExecutableResolver
    if name in ("ProcessRunner", "ExecutionResult"):
        from kubeboot import runner
        return getattr(runner, name)
    if name in ("merge", "generate_values_file"):
        from kubeboot import values
        return getattr(values, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
