"""Domain models for runtime-cli.

All models are **frozen** dataclasses.  The parser threads a
:class:`Config` through every step by building new values with
:func:`dataclasses.replace`, never by mutation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


# ---------------------------------------------------------------------------
# Command variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Cookie:
    """Set the cluster cookie of the running node."""

    value: str


@dataclass(frozen=True, slots=True)
class Eval:
    """Evaluate an expression string in an empty environment."""

    expr: str


@dataclass(frozen=True, slots=True)
class App:
    """Start an application together with its dependencies."""

    name: str


@dataclass(frozen=True, slots=True)
class Script:
    """Locate an executable on the search path and load it."""

    path: str


@dataclass(frozen=True, slots=True)
class File:
    """Load a single source file."""

    path: str


@dataclass(frozen=True, slots=True)
class Require:
    """Load every regular file matching a glob, one after another."""

    pattern: str


@dataclass(frozen=True, slots=True)
class ParallelRequire:
    """Load every regular file matching a glob through the parallel loader."""

    pattern: str


@dataclass(frozen=True, slots=True)
class Compile:
    """Compile the union of files matched by *patterns*."""

    patterns: tuple[str, ...]


Command = Union[Cookie, Eval, App, Script, File, Require, ParallelRequire, Compile]


# ---------------------------------------------------------------------------
# Invocation config
# ---------------------------------------------------------------------------

CompilerOption = tuple[str, bool]


@dataclass(frozen=True, slots=True)
class Config:
    """Cumulative result of parsing one argument vector.

    ``commands`` and ``compile`` are kept in flag order, so the
    dispatcher runs ``commands`` as-is.
    """

    output: str = "."
    """Target directory for compiled artifacts."""

    commands: tuple[Command, ...] = ()
    """Commands in execution order."""

    compile: tuple[str, ...] = ()
    """Source patterns gathered in compiler mode, folded into one ``Compile``."""

    halt: bool = True
    """Whether the process terminates once every command has run."""

    compiler_options: tuple[CompilerOption, ...] = ()
    """``(key, value)`` pairs; a later duplicate key wins when applied."""

    errors: tuple[str, ...] = ()
    """Parse-time errors, reported ahead of dispatch-time errors."""

    verbose_compile: bool = False
    """Print every compiled file."""

    def has_eval(self) -> bool:
        """Return ``True`` once an :class:`Eval` command is in the plan."""
        return any(isinstance(command, Eval) for command in self.commands)
