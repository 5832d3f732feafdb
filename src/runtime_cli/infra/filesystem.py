"""Infrastructure: local filesystem, glob expansion and executable lookup.

Rules
-----
* Glob expansion via :func:`glob.glob` with ``recursive=True`` so that
  ``**`` descends into subdirectories.
* Executable lookup via :func:`shutil.which` only — no subprocess.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import glob
import os
import platform
import shutil


class LocalFileSystem:
    """Concrete :class:`~runtime_cli.core.protocols.FileSystem` for the host OS."""

    def wildcard(self, pattern: str) -> list[str]:
        """Return paths matching *pattern*, sorted for a stable order."""
        return sorted(glob.glob(pattern, recursive=True))

    def is_regular(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def ensure_dir(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)

    def find_executable(self, name: str) -> str | None:
        return shutil.which(name)

    def is_batch_platform(self) -> bool:
        """Windows wraps scripts on PATH in ``.bat`` launchers."""
        return platform.system().lower() == "windows"
