"""Protocols (interfaces) for the collaborators the core depends on.

The evaluator, the loaders, the compiler, glob resolution and the
process primitives all live outside the core.  Core code depends ONLY
on these protocols; concrete adapters live in ``runtime_cli.infra``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Protocol


class FileSystem(Protocol):
    """Filesystem queries used while parsing and dispatching."""

    def wildcard(self, pattern: str) -> list[str]:
        """Expand *pattern* (``**`` recursive) into sorted matching paths."""
        ...  # pragma: no cover

    def is_regular(self, path: str) -> bool:
        ...  # pragma: no cover

    def is_dir(self, path: str) -> bool:
        ...  # pragma: no cover

    def ensure_dir(self, path: str) -> None:
        """Create *path* and its parents if they are missing."""
        ...  # pragma: no cover

    def find_executable(self, name: str) -> str | None:
        """Resolve *name* on the executable search path."""
        ...  # pragma: no cover

    def is_batch_platform(self) -> bool:
        """Return ``True`` when executables are wrapped in batch scripts."""
        ...  # pragma: no cover


class CodeServer(Protocol):
    """Contract for the code evaluator and sequential file loader.

    Implementations let the hosted program's own exceptions propagate
    unchanged; the dispatcher never catches them.
    """

    def eval_string(self, expr: str) -> None:
        """Evaluate *expr* in a fresh, empty environment."""
        ...  # pragma: no cover

    def require_file(self, path: str) -> None:
        """Load and execute the file at *path*."""
        ...  # pragma: no cover


class ApplicationController(Protocol):
    """Starts applications by name."""

    def ensure_all_started(self, name: str) -> None:
        """Start *name* and its dependency closure.

        Raises
        ------
        ApplicationStartError
            Naming the application that failed and the reason.
        """
        ...  # pragma: no cover


class ParallelCompiler(Protocol):
    """Compiles a set of source files into an output directory."""

    def files_to_path(
        self,
        files: Sequence[str],
        output: str,
        *,
        options: Mapping[str, bool],
        each_file: Callable[[str], None] | None = None,
    ) -> None:
        """Compile *files* into *output*, calling *each_file* per file."""
        ...  # pragma: no cover


class ParallelLoader(Protocol):
    """Loads files concurrently and blocks until all of them finish."""

    def require_files(self, files: Sequence[str]) -> None:
        ...  # pragma: no cover


class Node(Protocol):
    """The distribution node this process runs as."""

    def is_alive(self) -> bool:
        ...  # pragma: no cover

    def set_cookie(self, cookie: str) -> None:
        ...  # pragma: no cover


class ProcessControl(Protocol):
    """Low-level process termination."""

    def halt(self, status: int) -> None:
        """Terminate the process with *status*.  Does not return normally."""
        ...  # pragma: no cover
