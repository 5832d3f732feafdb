"""Core layer — parsing, dispatch and the exit lifecycle.

Rules
-----
* No ``print()`` calls; output goes through injected callables.
* No direct process exit; termination is requested by raising
  :class:`~runtime_cli.exceptions.TerminationRequested`.
* No imports from ``cli`` or ``infra``; collaborators are injected
  through the protocols in :mod:`runtime_cli.core.protocols`.
"""

from runtime_cli.core.argv_parser import ArgvParser, SharedOptionParser
from runtime_cli.core.dispatcher import CommandDispatcher
from runtime_cli.core.exit_coordinator import ExitCoordinator, run_guarded
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
from runtime_cli.core.registries import (
    CodePathRegistry,
    ExitHookRegistry,
    at_exit,
    bind_exit_hooks,
)
from runtime_cli.core.stacktrace import StackTracePruner

__all__: list[str] = [
    "App",
    "ArgvParser",
    "CodePathRegistry",
    "Command",
    "CommandDispatcher",
    "Compile",
    "Config",
    "Cookie",
    "Eval",
    "ExitCoordinator",
    "ExitHookRegistry",
    "File",
    "ParallelRequire",
    "Require",
    "Script",
    "SharedOptionParser",
    "StackTracePruner",
    "at_exit",
    "bind_exit_hooks",
    "run_guarded",
]
