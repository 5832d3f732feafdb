"""Tests for the argument-vector state machine (core/argv_parser.py).

Covers every mode (top-level, ``+elixirc``, ``+iex``), the shared
options, the unknown-flag policy, and the ordering guarantees of the
produced plan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from runtime_cli.core.argv_parser import (
    COMPILER,
    INTERACTIVE,
    ArgvParser,
    SharedOptionParser,
    is_flag,
)
from runtime_cli.core.models import (
    App,
    Compile,
    Config,
    Eval,
    File,
    ParallelRequire,
    Require,
    Script,
)
from runtime_cli.core.registries import CodePathRegistry
from runtime_cli.exceptions import TerminationRequested

if TYPE_CHECKING:
    from conftest import FakeFileSystem


# ---------------------------------------------------------------------------
# Top-level mode
# ---------------------------------------------------------------------------

class TestTopLevel:
    def test_empty_argv(self, parser: ArgvParser) -> None:
        config, rest = parser.parse([])
        assert config == Config()
        assert rest == []

    def test_eval_short_circuits_next_bare_token(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-e", "1+1", "foo.exs"])
        assert config.commands == (Eval("1+1"),)
        assert rest == ["foo.exs"]

    def test_eval_short_circuit_keeps_everything_after(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-e", "x", "foo.exs", "-r", "a", "bar"])
        assert config.commands == (Eval("x"),)
        assert rest == ["foo.exs", "-r", "a", "bar"]

    def test_flags_after_eval_still_parse(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-e", "x", "-r", "lib/*.ex", "--app", "web"])
        assert config.commands == (Eval("x"), Require("lib/*.ex"), App("web"))
        assert rest == []

    def test_script_stops_parsing(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-S", "myscript", "extra", "args"])
        assert config.commands == (Script("myscript"),)
        assert rest == ["extra", "args"]

    def test_script_wins_over_eval_short_circuit(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-e", "x", "-S", "mix", "test"])
        assert config.commands == (Eval("x"), Script("mix"))
        assert rest == ["test"]

    def test_bare_tokens_become_files_in_order(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["a.exs", "b.exs"])
        assert config.commands == (File("a.exs"), File("b.exs"))
        assert rest == []

    def test_double_dash_truncates(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-r", "a.ex", "--", "-e", "ignored"])
        assert config.commands == (Require("a.ex"),)
        assert rest == ["-e", "ignored"]

    def test_commands_keep_flag_order(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(
            ["--app", "a", "-e", "one", "-r", "r*", "-pr", "p*", "-e", "two"],
        )
        assert config.commands == (
            App("a"),
            Eval("one"),
            Require("r*"),
            ParallelRequire("p*"),
            Eval("two"),
        )

    def test_script_without_value_is_unknown(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-S"])
        assert config.errors == ("-S : Unknown option",)
        assert config.commands == ()
        assert rest == []


# ---------------------------------------------------------------------------
# Unknown-flag policy
# ---------------------------------------------------------------------------

class TestUnknownOptions:
    def test_unknown_flag_is_recorded_and_skipped(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["-x", "-e", "1"])
        assert config.errors == ("-x : Unknown option",)
        assert config.commands == (Eval("1"),)
        assert rest == []

    def test_each_unknown_flag_yields_one_error(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["-x", "--what", "a.exs", "-y"])
        assert config.errors == (
            "-x : Unknown option",
            "--what : Unknown option",
            "-y : Unknown option",
        )
        assert config.commands == (File("a.exs"),)

    def test_value_flag_missing_value_is_unknown(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["-e"])
        assert config.errors == ("-e : Unknown option",)
        assert config.commands == ()

    def test_unknown_after_shared_progress_is_not_reported_twice(
        self, parser: ArgvParser,
    ) -> None:
        config, _ = parser.parse(["--no-halt", "-x"])
        assert config.halt is False
        assert config.errors == ("-x : Unknown option",)

    def test_repeated_passthrough_with_dangling_flag(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["--erl", "--erl", "--erl"])
        assert config.errors == ("--erl : Unknown option",)

    def test_lone_dash_is_flag_shaped(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["-"])
        assert config.errors == ("- : Unknown option",)

    def test_is_flag(self) -> None:
        assert is_flag("-x")
        assert is_flag("--long")
        assert not is_flag("+iex")
        assert not is_flag("file.exs")


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

class TestSharedOptions:
    def test_no_halt(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["--no-halt"])
        assert config.halt is False

    @pytest.mark.parametrize("flag", ["--erl", "--sname", "--name", "--cookie"])
    def test_value_passthrough_is_discarded(self, parser: ArgvParser, flag: str) -> None:
        config, rest = parser.parse([flag, "value", "a.exs"])
        assert config.commands == (File("a.exs"),)
        assert config.errors == ()
        assert rest == []

    @pytest.mark.parametrize("flag", ["--detached", "--hidden", "--gen-debug"])
    def test_bare_passthrough_is_discarded(self, parser: ArgvParser, flag: str) -> None:
        config, _ = parser.parse([flag, "a.exs"])
        assert config.commands == (File("a.exs"),)
        assert config.errors == ()

    @pytest.mark.parametrize("flag", ["-v", "--version"])
    def test_version_reports_and_requests_termination(
        self, parser: ArgvParser, report_version: MagicMock, flag: str,
    ) -> None:
        with pytest.raises(TerminationRequested) as exc_info:
            parser.parse(["-e", "1", flag, "-x"])
        assert exc_info.value.status == 0
        report_version.assert_called_once_with()

    def test_code_path_glob_registers_every_match(
        self,
        fs: FakeFileSystem,
        parser: ArgvParser,
        code_paths: CodePathRegistry,
        search_path: list[str],
    ) -> None:
        fs.dirs.update({"/deps/a/ebin", "/deps/b/ebin"})
        parser.parse(["-pa", "/deps/*/ebin"])
        assert code_paths.paths == ("/deps/a/ebin", "/deps/b/ebin")
        assert search_path == ["/deps/b/ebin", "/deps/a/ebin"]

    def test_code_path_without_match_registers_literal(
        self, parser: ArgvParser, search_path: list[str],
    ) -> None:
        parser.parse(["-pz", "/missing/ebin"])
        assert search_path == ["/missing/ebin"]

    def test_code_path_is_made_absolute(
        self, parser: ArgvParser, code_paths: CodePathRegistry,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir("/")
        parser.parse(["-pa", "lib"])
        assert code_paths.paths == ("/lib",)

    def test_shared_parser_returns_unrecognized_tokens_unchanged(
        self, fs: FakeFileSystem, code_paths: CodePathRegistry,
    ) -> None:
        shared = SharedOptionParser(fs, code_paths, MagicMock())
        tokens, config = shared.parse(["--no-halt", "-e", "x", "-o", "out"], Config())
        assert tokens == ["-o", "out"]
        assert config.halt is False
        assert config.commands == (Eval("x"),)


# ---------------------------------------------------------------------------
# Compiler mode
# ---------------------------------------------------------------------------

class TestCompilerMode:
    def test_options_output_and_fold(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(
            ["+elixirc", "a.ex", "--warnings-as-errors", "-o", "out"],
        )
        assert config.output == "out"
        assert ("warnings_as_errors", True) in config.compiler_options
        assert config.commands == (Compile(("a.ex",)),)
        assert rest == []

    def test_patterns_keep_flag_order(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["+elixirc", "c.ex", "a.ex", "b.ex"])
        assert config.commands == (Compile(("c.ex", "a.ex", "b.ex")),)

    def test_all_compiler_flags(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(
            [
                "+elixirc",
                "--no-docs",
                "--no-debug-info",
                "--ignore-module-conflict",
                "--warnings-as-errors",
                "--verbose",
            ],
        )
        assert config.compiler_options == (
            ("docs", False),
            ("debug_info", False),
            ("ignore_module_conflict", True),
            ("warnings_as_errors", True),
        )
        assert config.verbose_compile is True
        assert config.commands == (Compile(()),)

    def test_directory_expands_to_recursive_glob(
        self, fs: FakeFileSystem, parser: ArgvParser,
    ) -> None:
        fs.dirs.add("lib")
        config, _ = parser.parse(["+elixirc", "lib", "missing.ex"])
        assert config.commands == (Compile(("lib/**/*.ex", "missing.ex")),)

    def test_commands_before_mode_switch_come_first(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["-e", "setup", "+elixirc", "a.ex", "-r", "b*"])
        assert config.commands == (Eval("setup"), Require("b*"), Compile(("a.ex",)))

    def test_unknown_flag_in_compiler_mode(self, parser: ArgvParser) -> None:
        config, _ = parser.parse(["+elixirc", "-x", "a.ex"])
        assert config.errors == ("-x : Unknown option",)
        assert config.commands == (Compile(("a.ex",)),)

    def test_double_dash_stops_without_compile(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["+elixirc", "a.ex", "--", "b"])
        assert config.commands == ()
        assert config.compile == ("a.ex",)
        assert rest == ["b"]

    def test_parse_mode_entry_point(self, parser: ArgvParser) -> None:
        config, _ = parser.parse_mode(COMPILER, ["x.ex"], Config())
        assert config.commands == (Compile(("x.ex",)),)


# ---------------------------------------------------------------------------
# Interactive mode
# ---------------------------------------------------------------------------

class TestInteractiveMode:
    def test_dot_iex_and_remsh_are_consumed(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(
            ["+iex", "--dot-iex", "custom.exs", "--remsh", "node@host"],
        )
        assert config.errors == ()
        assert config.commands == ()
        assert rest == []

    def test_script(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["+iex", "-S", "mix", "run"])
        assert config.commands == (Script("mix"),)
        assert rest == ["run"]

    def test_bare_token_is_file_and_stops(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["+iex", "a.exs", "b.exs"])
        assert config.commands == (File("a.exs"),)
        assert rest == ["b.exs"]

    def test_shared_options_and_unknowns(self, parser: ArgvParser) -> None:
        config, _ = parser.parse_mode(
            INTERACTIVE, ["--app", "web", "-x", "--no-halt"], Config(),
        )
        assert config.commands == (App("web"),)
        assert config.errors == ("-x : Unknown option",)
        assert config.halt is False

    def test_double_dash(self, parser: ArgvParser) -> None:
        config, rest = parser.parse(["+iex", "--", "a.exs"])
        assert config.commands == ()
        assert rest == ["a.exs"]


# ---------------------------------------------------------------------------
# Token accounting
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("argv", "expected_commands", "expected_errors"),
    [
        (["a", "-x", "b"], 2, 1),
        (["-r", "x", "-q", "-pr", "y", "--bogus"], 2, 2),
        (["+elixirc", "a", "-z", "b", "-o", "d"], 1, 1),
    ],
)
def test_every_token_is_consumed_or_reported(
    parser: ArgvParser,
    argv: list[str],
    expected_commands: int,
    expected_errors: int,
) -> None:
    config, rest = parser.parse(argv)
    assert rest == []
    assert len(config.commands) == expected_commands
    assert len(config.errors) == expected_errors
