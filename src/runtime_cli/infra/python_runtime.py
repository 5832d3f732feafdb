"""Python-hosted implementations of the code-loading collaborators.

The command plan is language-agnostic; these adapters host Python
source.  ``-e`` evaluates Python, files run as ``__main__`` through
:mod:`runpy`, ``--app`` imports a module and calls its ``start()``, and
``+elixirc`` byte-compiles with :mod:`py_compile`.

Exceptions raised by the hosted program propagate unchanged.
Failures of the machinery itself are re-raised as
:class:`~runtime_cli.exceptions.RuntimeCliError` subclasses.
"""

from __future__ import annotations

import importlib
import logging
import os
import platform
import py_compile
import runpy
import threading
import warnings
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from runtime_cli.exceptions import ApplicationStartError, CompilationError

logger = logging.getLogger(__name__)

DEPENDENCIES_ATTRIBUTE = "APPLICATION_DEPENDENCIES"
"""Module attribute listing the applications to start first."""


def runtime_version() -> str:
    """Return the hosted runtime's name and version."""
    return f"Python {platform.python_version()}"


# ---------------------------------------------------------------------------
# Evaluation and loading
# ---------------------------------------------------------------------------

class PythonCodeServer:
    """Concrete :class:`~runtime_cli.core.protocols.CodeServer`.

    Each file is required at most once per server, even when several
    threads of the parallel loader ask for it.
    """

    def __init__(self) -> None:
        self._required: set[str] = set()
        self._lock = threading.Lock()

    @property
    def required(self) -> frozenset[str]:
        """Absolute paths of every file required so far."""
        with self._lock:
            return frozenset(self._required)

    def eval_string(self, expr: str) -> None:
        code = compile(expr, "<eval>", "exec")
        exec(code, {"__name__": "__main__"})  # noqa: S102

    def require_file(self, path: str) -> None:
        absolute = os.path.abspath(path)
        with self._lock:
            if absolute in self._required:
                logger.debug("Skipping already required file %s", absolute)
                return
            self._required.add(absolute)
        logger.debug("Requiring %s", absolute)
        runpy.run_path(absolute, run_name="__main__")


class ThreadPoolLoader:
    """Concrete :class:`~runtime_cli.core.protocols.ParallelLoader`.

    Blocks until every file has been required; the first failure is
    re-raised once all workers are done.
    """

    def __init__(self, code: PythonCodeServer, *, max_workers: int | None = None) -> None:
        self._code = code
        self._max_workers = max_workers

    def require_files(self, files: Sequence[str]) -> None:
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [executor.submit(self._code.require_file, file) for file in files]
        for future in futures:
            future.result()


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------

class PythonApplications:
    """Concrete :class:`~runtime_cli.core.protocols.ApplicationController`.

    An application is an importable module.  Its ``APPLICATION_DEPENDENCIES``
    are started first, then its ``start()`` function is called if it has
    one.  Each application starts at most once.
    """

    def __init__(self) -> None:
        self._started: list[str] = []

    @property
    def started(self) -> tuple[str, ...]:
        """Applications started so far, in start order."""
        return tuple(self._started)

    def ensure_all_started(self, name: str) -> None:
        self._start(name, starting=())

    def _start(self, name: str, starting: tuple[str, ...]) -> None:
        if name in self._started:
            return
        if name in starting:
            raise ApplicationStartError(name, "circular application dependency")

        try:
            module = importlib.import_module(name)
        except ImportError as exc:
            raise ApplicationStartError(name, f"not found ({exc})") from exc

        for dependency in getattr(module, DEPENDENCIES_ATTRIBUTE, ()):
            self._start(dependency, starting + (name,))

        start: Callable[[], object] | None = getattr(module, "start", None)
        if callable(start):
            try:
                start()
            except Exception as exc:
                raise ApplicationStartError(
                    name, f"{type(exc).__name__}: {exc}",
                ) from exc

        logger.debug("Started application %s", name)
        self._started.append(name)


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

class PyCompileCompiler:
    """Concrete :class:`~runtime_cli.core.protocols.ParallelCompiler`.

    Option mapping
    --------------
    * ``docs=False``              → optimisation level 2 (strips docstrings).
    * ``debug_info=False``        → optimisation level 1 (strips asserts).
    * ``warnings_as_errors=True`` → compile-time warnings fail the build.
    * ``ignore_module_conflict``  → allow two sources with the same
      module name; otherwise that is a :class:`CompilationError`.
    """

    def __init__(self, *, max_workers: int | None = None) -> None:
        self._max_workers = max_workers

    @staticmethod
    def target_for(file: str, output: str) -> str:
        """Return the bytecode path for *file* inside *output*."""
        module = os.path.splitext(os.path.basename(file))[0]
        return os.path.join(output, f"{module}.pyc")

    @staticmethod
    def optimization_level(options: Mapping[str, bool]) -> int:
        if not options.get("docs", True):
            return 2
        if not options.get("debug_info", True):
            return 1
        return -1

    def files_to_path(
        self,
        files: Sequence[str],
        output: str,
        *,
        options: Mapping[str, bool],
        each_file: Callable[[str], None] | None = None,
    ) -> None:
        targets = [self.target_for(file, output) for file in files]
        if not options.get("ignore_module_conflict", False):
            self._check_conflicts(files, targets)

        optimize = self.optimization_level(options)
        with warnings.catch_warnings():
            if options.get("warnings_as_errors", False):
                warnings.simplefilter("error")
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = executor.map(
                    lambda pair: self._compile_one(pair[0], pair[1], optimize),
                    zip(files, targets),
                )
                for file in results:
                    if each_file is not None:
                        each_file(file)

    @staticmethod
    def _compile_one(file: str, target: str, optimize: int) -> str:
        try:
            py_compile.compile(file, cfile=target, doraise=True, optimize=optimize)
        except py_compile.PyCompileError as exc:
            raise CompilationError(exc.msg.strip()) from exc
        return file

    @staticmethod
    def _check_conflicts(files: Sequence[str], targets: Sequence[str]) -> None:
        seen: dict[str, str] = {}
        for file, target in zip(files, targets):
            if target in seen:
                raise CompilationError(
                    f"{file} and {seen[target]} both define module "
                    f"{os.path.basename(target)[:-4]}",
                    hint="Pass --ignore-module-conflict to overwrite.",
                )
            seen[target] = file
