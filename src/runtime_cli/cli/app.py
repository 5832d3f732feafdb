"""CLI application entry point for runtime-cli.

This module wires the core (parser, dispatcher, exit coordinator) to
the concrete collaborators from ``infra`` and to the console.

Run structure
-------------
1. Parse the argument vector inside the failure boundary without
   halting, so ``--version`` and unexpected parse failures still go
   through the exit hooks.
2. Publish the trailing arguments to the hosted program.  For the whole
   run, :func:`runtime_cli.at_exit` registers into this run's exit-hook
   registry.
3. Dispatch the command plan inside the failure boundary.  Collected
   errors are printed one per line and turn into exit status 1.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core and
  infrastructure layers.
* This module is the only place that chooses concrete collaborators.
"""

from __future__ import annotations

import atexit
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from runtime_cli.cli.console import console, out
from runtime_cli.cli.logging_utils import configure_logging, resolve_level
from runtime_cli.core import exit_codes
from runtime_cli.core.argv_parser import ArgvParser
from runtime_cli.core.dispatcher import CommandDispatcher
from runtime_cli.core.exit_coordinator import ExitCoordinator, run_guarded
from runtime_cli.core.models import Config
from runtime_cli.core.protocols import (
    ApplicationController,
    CodeServer,
    FileSystem,
    Node,
    ParallelCompiler,
    ParallelLoader,
    ProcessControl,
)
from runtime_cli.core.registries import CodePathRegistry, ExitHookRegistry, bind_exit_hooks
from runtime_cli.core.stacktrace import StackTracePruner
from runtime_cli.exceptions import RuntimeCliError, TerminationRequested


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

def _publish_argv(args: list[str]) -> None:
    """Expose trailing arguments to the hosted program as ``sys.argv[1:]``."""
    sys.argv[1:] = args


@dataclass
class Runtime:
    """Every collaborator one invocation needs, in one place."""

    fs: FileSystem
    code: CodeServer
    apps: ApplicationController
    compiler: ParallelCompiler
    loader: ParallelLoader
    node: Node
    process: ProcessControl
    version: Callable[[], str]
    code_paths: CodePathRegistry = field(default_factory=CodePathRegistry)
    exit_hooks: ExitHookRegistry = field(default_factory=ExitHookRegistry)
    publish_argv: Callable[[list[str]], None] = _publish_argv
    on_shutdown: Callable[[Callable[[], None]], object] = atexit.register
    """Registers a callback run at interpreter exit (used with ``--no-halt``)."""


def build_runtime() -> Runtime:
    """Create the default, Python-hosted runtime."""
    from runtime_cli.infra import (
        LocalFileSystem,
        LocalNode,
        PyCompileCompiler,
        PythonApplications,
        PythonCodeServer,
        SystemProcess,
        ThreadPoolLoader,
        runtime_version,
    )

    code = PythonCodeServer()
    return Runtime(
        fs=LocalFileSystem(),
        code=code,
        apps=PythonApplications(),
        compiler=PyCompileCompiler(),
        loader=ThreadPoolLoader(code),
        node=LocalNode(),
        process=SystemProcess(),
        version=runtime_version,
    )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

_pruner = StackTracePruner()


def print_failure(exc: BaseException) -> None:
    """Print *exc* with internal frames pruned from its traceback.

    A :class:`RuntimeCliError` hint is shown below the trace.
    """
    console.print_text(_pruner.format_exception(exc), style="red")
    if isinstance(exc, RuntimeCliError) and exc.hint:
        console.print_text(f"Hint: {exc.hint}", style="yellow")


def print_errors(errors: Sequence[str]) -> None:
    for error in errors:
        console.print_text(error)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def _process(dispatcher: CommandDispatcher, config: Config) -> Config:
    errors = dispatcher.process_commands(config)
    if errors:
        print_errors(errors)
        raise TerminationRequested(exit_codes.GENERAL_ERROR)
    return config


def main(argv: Sequence[str] | None = None, runtime: Runtime | None = None) -> Config | None:
    """Run the runtime-cli front end.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    runtime:
        Collaborators to run against; :func:`build_runtime` by default.

    Returns
    -------
    Config | None
        The executed config when ``--no-halt`` kept the process alive.
        Otherwise the process has been halted and, with a non-exiting
        :class:`ProcessControl`, ``None`` is returned.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    runtime = runtime or build_runtime()

    coordinator = ExitCoordinator(runtime.exit_hooks, runtime.process, print_failure)
    previous_hooks = bind_exit_hooks(runtime.exit_hooks)
    still_running = False
    try:
        executed = _run(args, runtime, coordinator)
        if executed is not None:
            # Still running: hooks are drained when the interpreter exits.
            still_running = True
            runtime.on_shutdown(lambda: _shutdown(coordinator, previous_hooks))
        return executed
    finally:
        if not still_running:
            bind_exit_hooks(previous_hooks)


def _shutdown(coordinator: ExitCoordinator, previous_hooks: ExitHookRegistry | None) -> None:
    try:
        coordinator.drain(exit_codes.SUCCESS)
    finally:
        bind_exit_hooks(previous_hooks)


def _run(args: list[str], runtime: Runtime, coordinator: ExitCoordinator) -> Config | None:
    def report_version() -> None:
        out.print_text(runtime.version())

    def announce(message: str) -> None:
        console.print(f"\n[yellow]{message}[/yellow]")

    parser = ArgvParser(runtime.fs, runtime.code_paths, report_version)
    parsed = run_guarded(
        lambda: parser.parse(args),
        coordinator,
        print_failure,
        halt=False,
        announce=announce,
    )
    if parsed is None:
        return None

    config, trailing = parsed
    runtime.publish_argv(trailing)

    dispatcher = CommandDispatcher(
        fs=runtime.fs,
        code=runtime.code,
        apps=runtime.apps,
        compiler=runtime.compiler,
        loader=runtime.loader,
        node=runtime.node,
        announce=out.print_text,
    )
    return run_guarded(
        lambda: _process(dispatcher, config),
        coordinator,
        print_failure,
        halt=config.halt,
        announce=announce,
    )


# ---------------------------------------------------------------------------
# Script-level entry point
# ---------------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point.

    Configures logging, then hands over to :func:`main`, which owns the
    failure boundary and terminates the process itself.
    """
    configure_logging(resolve_level())
    main()
