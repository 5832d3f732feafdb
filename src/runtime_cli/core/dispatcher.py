"""Command dispatch: run every command of a parsed plan.

Each handler either succeeds (returns ``None``) or returns one
human-readable error string.  Dispatch never stops early on such an
error.  Exceptions raised by collaborators are NOT caught here; they
travel to the failure boundary, which prunes and prints them.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence

from runtime_cli.core.models import (
    App,
    Command,
    Compile,
    Config,
    Cookie,
    Eval,
    File,
    ParallelRequire,
    Require,
    Script,
)
from runtime_cli.core.protocols import (
    ApplicationController,
    CodeServer,
    FileSystem,
    Node,
    ParallelCompiler,
    ParallelLoader,
)
from runtime_cli.exceptions import ApplicationStartError

logger = logging.getLogger(__name__)


def _unique(items: Sequence[str]) -> list[str]:
    """Deduplicate *items* keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


class CommandDispatcher:
    """Executes commands against the injected collaborators.

    Parameters
    ----------
    fs:
        Glob expansion and file checks.
    code:
        Evaluator and sequential loader.
    apps:
        Application starter.
    compiler:
        Parallel compiler used by :class:`Compile`.
    loader:
        Parallel loader used by :class:`ParallelRequire`.
    node:
        The distribution node, for :class:`Cookie`.
    announce:
        Called with one line per compiled file when verbose compilation
        is enabled.
    """

    def __init__(
        self,
        *,
        fs: FileSystem,
        code: CodeServer,
        apps: ApplicationController,
        compiler: ParallelCompiler,
        loader: ParallelLoader,
        node: Node,
        announce: Callable[[str], None] = print,
    ) -> None:
        self._fs = fs
        self._code = code
        self._apps = apps
        self._compiler = compiler
        self._loader = loader
        self._node = node
        self._announce = announce

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_commands(self, config: Config) -> list[str]:
        """Run every command of *config* in order and collect errors.

        Returns
        -------
        list[str]
            ``config.errors`` followed by the dispatch-time errors, in
            execution order.
        """
        errors = list(config.errors)
        for command in config.commands:
            logger.debug("Running %r", command)
            error = self.process_command(command, config)
            if error is not None:
                errors.append(error)
        return errors

    def process_command(self, command: Command, config: Config) -> str | None:
        """Run a single *command*; return an error string or ``None``."""
        if isinstance(command, Cookie):
            return self._cookie(command)
        if isinstance(command, Eval):
            return self._invoke(self._code.eval_string, command.expr)
        if isinstance(command, App):
            return self._app(command)
        if isinstance(command, Script):
            return self._script(command)
        if isinstance(command, File):
            return self._file(command)
        if isinstance(command, Require):
            return self._require(command)
        if isinstance(command, ParallelRequire):
            return self._parallel_require(command)
        if isinstance(command, Compile):
            return self._compile(command, config)
        raise TypeError(f"Unknown command: {command!r}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _cookie(self, command: Cookie) -> str | None:
        if not self._node.is_alive():
            return (
                "--cookie : Cannot set cookie if the node is not alive "
                "(set --name or --sname)"
            )
        return self._invoke(self._node.set_cookie, command.value)

    def _app(self, command: App) -> str | None:
        try:
            self._apps.ensure_all_started(command.name)
        except ApplicationStartError as exc:
            return f"--app : Could not start application {exc.app}: {exc.reason}"
        return None

    def _script(self, command: Script) -> str | None:
        executable = self._find_executable(command.path)
        if executable is None:
            return f"-S : Could not find executable {command.path}"
        return self._invoke(self._code.require_file, executable)

    def _file(self, command: File) -> str | None:
        if not self._fs.is_regular(command.path):
            return f"No file named {command.path}"
        return self._invoke(self._code.require_file, command.path)

    def _require(self, command: Require) -> str | None:
        files = self._filter_pattern(command.pattern)
        if not files:
            return f"-r : No files matched pattern {command.pattern}"
        return self._invoke(self._require_each, files)

    def _parallel_require(self, command: ParallelRequire) -> str | None:
        files = self._filter_pattern(command.pattern)
        if not files:
            return f"-pr : No files matched pattern {command.pattern}"
        return self._invoke(self._loader.require_files, files)

    def _compile(self, command: Compile, config: Config) -> str | None:
        self._fs.ensure_dir(config.output)

        matched: list[str] = []
        missing: list[str] = []
        for pattern in command.patterns:
            files = self._filter_pattern(pattern)
            if files:
                matched.extend(files)
            else:
                missing.append(pattern)

        if missing:
            return f"No files matched pattern(s) {','.join(_unique(missing))}"
        if not matched:
            return "No files matched provided patterns"

        each_file = self._announce_compiled if config.verbose_compile else None
        return self._invoke(
            self._compiler.files_to_path,
            _unique(matched),
            config.output,
            options=dict(config.compiler_options),
            each_file=each_file,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _invoke(self, fun: Callable[..., object], *args: object, **kwargs: object) -> None:
        """Generic invocation wrapper: run *fun* and report success.

        Failure traces are cut at this frame before they are printed.
        """
        fun(*args, **kwargs)
        return None

    def _announce_compiled(self, file: str) -> None:
        self._announce(f"Compiled {file}")

    def _require_each(self, files: Sequence[str]) -> None:
        for file in files:
            self._code.require_file(file)

    def _filter_pattern(self, pattern: str) -> list[str]:
        return [path for path in _unique(self._fs.wildcard(pattern)) if self._fs.is_regular(path)]

    def _find_executable(self, name: str) -> str | None:
        executable = self._fs.find_executable(name)
        if executable is None:
            return None
        if self._fs.is_batch_platform():
            # The batch wrapper sits next to the real, extension-less script.
            executable = os.path.splitext(executable)[0]
            if not self._fs.is_regular(executable):
                return None
        return executable
