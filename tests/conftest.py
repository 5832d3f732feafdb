"""Shared pytest fixtures and configuration for the runtime-cli test suite.

Guidelines
----------
* No test halts the real process — :class:`FakeProcess` records halts.
* Filesystem-dependent core tests use :class:`FakeFileSystem`; only the
  infra tests touch ``tmp_path``.
* Hosted code is never imported from outside ``tmp_path``.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Iterator
from unittest.mock import MagicMock

import pytest

from runtime_cli.cli.app import Runtime
from runtime_cli.core.argv_parser import ArgvParser
from runtime_cli.core.dispatcher import CommandDispatcher
from runtime_cli.core.registries import CodePathRegistry, ExitHookRegistry, bind_exit_hooks


class FakeFileSystem:
    """In-memory :class:`~runtime_cli.core.protocols.FileSystem`."""

    def __init__(
        self,
        files: Iterable[str] = (),
        dirs: Iterable[str] = (),
        executables: dict[str, str] | None = None,
        *,
        batch: bool = False,
    ) -> None:
        self.files: set[str] = set(files)
        self.dirs: set[str] = set(dirs)
        self.executables: dict[str, str] = dict(executables or {})
        self.batch = batch
        self.ensured: list[str] = []

    def wildcard(self, pattern: str) -> list[str]:
        return sorted(
            path for path in self.files | self.dirs if fnmatch.fnmatchcase(path, pattern)
        )

    def is_regular(self, path: str) -> bool:
        return path in self.files

    def is_dir(self, path: str) -> bool:
        return path in self.dirs

    def ensure_dir(self, path: str) -> None:
        self.ensured.append(path)

    def find_executable(self, name: str) -> str | None:
        return self.executables.get(name)

    def is_batch_platform(self) -> bool:
        return self.batch


class FakeProcess:
    """Records halts instead of terminating."""

    def __init__(self) -> None:
        self.halts: list[int] = []

    def halt(self, status: int) -> None:
        self.halts.append(status)


@pytest.fixture(autouse=True)
def _isolated_exit_hook_binding() -> Iterator[None]:
    """Start every test with no bound exit-hook registry."""
    previous = bind_exit_hooks(None)
    yield
    bind_exit_hooks(previous)


@pytest.fixture
def fs() -> FakeFileSystem:
    return FakeFileSystem()


@pytest.fixture
def search_path() -> list[str]:
    return []


@pytest.fixture
def code_paths(search_path: list[str]) -> CodePathRegistry:
    return CodePathRegistry(search_path)


@pytest.fixture
def report_version() -> MagicMock:
    return MagicMock()


@pytest.fixture
def parser(
    fs: FakeFileSystem, code_paths: CodePathRegistry, report_version: MagicMock,
) -> ArgvParser:
    return ArgvParser(fs, code_paths, report_version, source_suffix=".ex")


@pytest.fixture
def dispatcher(fs: FakeFileSystem) -> CommandDispatcher:
    return CommandDispatcher(
        fs=fs,
        code=MagicMock(),
        apps=MagicMock(),
        compiler=MagicMock(),
        loader=MagicMock(),
        node=MagicMock(),
        announce=MagicMock(),
    )


@pytest.fixture
def process() -> FakeProcess:
    return FakeProcess()


@pytest.fixture
def runtime(fs: FakeFileSystem, process: FakeProcess, search_path: list[str]) -> Runtime:
    return Runtime(
        fs=fs,
        code=MagicMock(),
        apps=MagicMock(),
        compiler=MagicMock(),
        loader=MagicMock(),
        node=MagicMock(),
        process=process,
        version=lambda: "Python 3.12.0",
        code_paths=CodePathRegistry(search_path),
        exit_hooks=ExitHookRegistry(),
        publish_argv=MagicMock(),
        on_shutdown=MagicMock(),
    )
