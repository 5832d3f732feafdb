"""Infrastructure layer — the host system behind the core protocols.

This layer wraps the filesystem, the process, and the Python machinery
that evaluates, loads and compiles hosted code.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Each class satisfies one protocol from :mod:`runtime_cli.core.protocols`
  structurally.
"""

from runtime_cli.infra.filesystem import LocalFileSystem
from runtime_cli.infra.node import LocalNode
from runtime_cli.infra.process import SystemProcess
from runtime_cli.infra.python_runtime import (
    PyCompileCompiler,
    PythonApplications,
    PythonCodeServer,
    ThreadPoolLoader,
    runtime_version,
)

__all__: list[str] = [
    "LocalFileSystem",
    "LocalNode",
    "PyCompileCompiler",
    "PythonApplications",
    "PythonCodeServer",
    "SystemProcess",
    "ThreadPoolLoader",
    "runtime_version",
]
