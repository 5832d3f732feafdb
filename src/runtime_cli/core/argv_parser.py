"""Argument-vector parsing: one state machine, three rule tables.

The top-level, compiler (``+elixirc``) and interactive (``+iex``) modes
share the same loop.  Each mode contributes:

* a table of mode-specific flags, each with an arity and an outcome
  (keep going, stop and hand back the rest, or switch mode);
* a handler for bare (non-flag) tokens;
* a finisher run when the tokens are exhausted.

Everything else is common: ``--`` stops parsing in every mode, and any
flag-shaped token the mode does not know goes to the
:class:`SharedOptionParser`.  When that makes no progress, the token is
recorded as ``"<flag> : Unknown option"`` and skipped.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import NamedTuple

from runtime_cli.core.models import (
    App,
    Command,
    Compile,
    Config,
    Eval,
    File,
    ParallelRequire,
    Require,
    Script,
)
from runtime_cli.core.protocols import FileSystem
from runtime_cli.core.registries import CodePathRegistry
from runtime_cli.exceptions import TerminationRequested

logger = logging.getLogger(__name__)

ParseResult = tuple[Config, list[str]]

TOP = "top"
COMPILER = "compiler"
INTERACTIVE = "interactive"

_CONTINUE = "continue"
_STOP = "stop"

# Passthrough flags consumed for the benefit of the VM launcher.
_VALUE_PASSTHROUGH: frozenset[str] = frozenset({"--erl", "--sname", "--name", "--cookie"})
_BARE_PASSTHROUGH: frozenset[str] = frozenset({"--detached", "--hidden", "--gen-debug"})


def is_flag(token: str) -> bool:
    """Return ``True`` for tokens that look like options."""
    return token.startswith("-")


def _with_command(config: Config, command: Command) -> Config:
    return replace(config, commands=config.commands + (command,))


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

class SharedOptionParser:
    """Recognizes the options every mode accepts.

    Parameters
    ----------
    fs:
        Used to expand ``-pa``/``-pz`` globs.
    code_paths:
        Receives every code path registered by ``-pa``/``-pz``.
    report_version:
        Called for ``-v``/``--version`` before termination is requested.
    """

    def __init__(
        self,
        fs: FileSystem,
        code_paths: CodePathRegistry,
        report_version: Callable[[], None],
    ) -> None:
        self._fs = fs
        self._code_paths = code_paths
        self._report_version = report_version

    def parse(self, tokens: Sequence[str], config: Config) -> tuple[list[str], Config]:
        """Consume leading shared options and return what is left.

        Tokens that are not shared options are returned untouched; the
        caller decides whether that counts as an unknown option.

        Raises
        ------
        TerminationRequested
            With status 0, after reporting the version.
        """
        tokens = list(tokens)
        while tokens:
            head, rest = tokens[0], tokens[1:]

            if head in ("-v", "--version"):
                self._report_version()
                raise TerminationRequested(0)

            if head in ("-pa", "-pz") and rest:
                add = self._code_paths.prepend if head == "-pa" else self._code_paths.append
                self._add_code_path(rest[0], add)
                tokens = rest[1:]
            elif head == "--app" and rest:
                config = _with_command(config, App(rest[0]))
                tokens = rest[1:]
            elif head == "--no-halt":
                config = replace(config, halt=False)
                tokens = rest
            elif head == "-e" and rest:
                config = _with_command(config, Eval(rest[0]))
                tokens = rest[1:]
            elif head == "-r" and rest:
                config = _with_command(config, Require(rest[0]))
                tokens = rest[1:]
            elif head == "-pr" and rest:
                config = _with_command(config, ParallelRequire(rest[0]))
                tokens = rest[1:]
            elif head in _VALUE_PASSTHROUGH and rest:
                tokens = rest[1:]
            elif head in _BARE_PASSTHROUGH:
                tokens = rest
            else:
                break
        return tokens, config

    def _add_code_path(self, path: str, add: Callable[[str], None]) -> None:
        expanded = os.path.abspath(os.path.expanduser(path))
        matches = self._fs.wildcard(expanded)
        if not matches:
            add(expanded)
            return
        for match in matches:
            add(match)


# ---------------------------------------------------------------------------
# Mode tables
# ---------------------------------------------------------------------------

class _Step(NamedTuple):
    config: Config
    tokens: list[str]
    done: bool = False


@dataclass(frozen=True, slots=True)
class _Rule:
    arity: int
    apply: Callable[[Config, list[str]], Config]
    then: str = _CONTINUE
    """``_CONTINUE``, ``_STOP`` or the name of the mode to switch to."""


@dataclass(frozen=True, slots=True)
class _Mode:
    rules: Mapping[str, _Rule]
    bare: Callable[[Config, list[str]], _Step]
    finish: Callable[[Config], Config]


def _keep(config: Config, _values: list[str]) -> Config:
    return config


def _add_script(config: Config, values: list[str]) -> Config:
    return _with_command(config, Script(values[0]))


def _set_output(config: Config, values: list[str]) -> Config:
    return replace(config, output=values[0])


def _set_verbose(config: Config, _values: list[str]) -> Config:
    return replace(config, verbose_compile=True)


def _compiler_option(key: str, value: bool) -> Callable[[Config, list[str]], Config]:
    def apply(config: Config, _values: list[str]) -> Config:
        return replace(config, compiler_options=config.compiler_options + ((key, value),))

    return apply


def _fold_compile(config: Config) -> Config:
    return _with_command(config, Compile(config.compile))


def _identity(config: Config) -> Config:
    return config


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class ArgvParser:
    """Parses an argument vector into a :class:`Config` plus trailing args.

    Parameters
    ----------
    fs:
        Filesystem queries (directory detection, glob expansion).
    code_paths:
        Registry that ``-pa``/``-pz`` write to.
    report_version:
        Called when ``-v``/``--version`` is seen.
    source_suffix:
        File suffix used when a directory is given in compiler mode.
    """

    def __init__(
        self,
        fs: FileSystem,
        code_paths: CodePathRegistry,
        report_version: Callable[[], None],
        *,
        source_suffix: str = ".py",
    ) -> None:
        self._fs = fs
        self._source_suffix = source_suffix
        self._shared = SharedOptionParser(fs, code_paths, report_version)
        self._modes: dict[str, _Mode] = {
            TOP: _Mode(
                rules={
                    "+elixirc": _Rule(0, _keep, COMPILER),
                    "+iex": _Rule(0, _keep, INTERACTIVE),
                    "-S": _Rule(1, _add_script, _STOP),
                },
                bare=self._top_bare,
                finish=_identity,
            ),
            COMPILER: _Mode(
                rules={
                    "-o": _Rule(1, _set_output),
                    "--no-docs": _Rule(0, _compiler_option("docs", False)),
                    "--no-debug-info": _Rule(0, _compiler_option("debug_info", False)),
                    "--ignore-module-conflict": _Rule(
                        0, _compiler_option("ignore_module_conflict", True),
                    ),
                    "--warnings-as-errors": _Rule(
                        0, _compiler_option("warnings_as_errors", True),
                    ),
                    "--verbose": _Rule(0, _set_verbose),
                },
                bare=self._compiler_bare,
                finish=_fold_compile,
            ),
            INTERACTIVE: _Mode(
                rules={
                    # Consumed here only so they are not reported as unknown.
                    "--dot-iex": _Rule(1, _keep),
                    "--remsh": _Rule(1, _keep),
                    "-S": _Rule(1, _add_script, _STOP),
                },
                bare=self._interactive_bare,
                finish=_identity,
            ),
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self, argv: Sequence[str], config: Config | None = None) -> ParseResult:
        """Parse *argv* from the top-level mode."""
        return self.parse_mode(TOP, argv, config or Config())

    def parse_mode(self, mode: str, argv: Sequence[str], config: Config) -> ParseResult:
        """Parse *argv* starting in *mode* (``TOP``, ``COMPILER``, ``INTERACTIVE``)."""
        current = self._modes[mode]
        tokens = list(argv)

        while tokens:
            head, rest = tokens[0], tokens[1:]

            if head == "--":
                return config, rest

            rule = current.rules.get(head)
            if rule is not None and len(rest) >= rule.arity:
                config = rule.apply(config, rest[:rule.arity])
                tokens = rest[rule.arity:]
                if rule.then == _STOP:
                    return config, tokens
                if rule.then != _CONTINUE:
                    logger.debug("Switching to %s mode", rule.then)
                    current = self._modes[rule.then]
            elif is_flag(head):
                tokens, config = self._shared_or_unknown(tokens, config)
            else:
                step = current.bare(config, tokens)
                if step.done:
                    return step.config, step.tokens
                config, tokens = step.config, step.tokens

        return current.finish(config), []

    # ------------------------------------------------------------------
    # Unknown-flag policy
    # ------------------------------------------------------------------

    def _shared_or_unknown(
        self, tokens: list[str], config: Config,
    ) -> tuple[list[str], Config]:
        remaining, config = self._shared.parse(tokens, config)
        if len(remaining) < len(tokens):
            return remaining, config
        head = tokens[0]
        logger.debug("Unknown option %s", head)
        return tokens[1:], replace(config, errors=config.errors + (f"{head} : Unknown option",))

    # ------------------------------------------------------------------
    # Bare tokens
    # ------------------------------------------------------------------

    def _top_bare(self, config: Config, tokens: list[str]) -> _Step:
        if config.has_eval():
            return _Step(config, tokens, done=True)
        return _Step(_with_command(config, File(tokens[0])), tokens[1:])

    def _compiler_bare(self, config: Config, tokens: list[str]) -> _Step:
        token = tokens[0]
        pattern = f"{token}/**/*{self._source_suffix}" if self._fs.is_dir(token) else token
        return _Step(replace(config, compile=config.compile + (pattern,)), tokens[1:])

    def _interactive_bare(self, config: Config, tokens: list[str]) -> _Step:
        return _Step(_with_command(config, File(tokens[0])), tokens[1:], done=True)
