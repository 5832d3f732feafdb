"""Custom exception hierarchy for runtime-cli.

Errors that a command handler can anticipate are reported as plain
strings and never raised.  The classes below cover the remaining cases:
explicit termination requests travelling up to the failure boundary,
and typed failures raised by the default collaborators.

Hierarchy
---------
RuntimeCliError
├── TerminationRequested
├── ApplicationStartError
├── CompilationError
└── EnvironmentError
"""

from __future__ import annotations


class RuntimeCliError(Exception):
    """Base exception for all runtime-cli errors.

    Carries an optional *hint* rendered below the message by the CLI
    layer, mirroring how user-facing errors are printed elsewhere.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Process lifecycle -----------------------------------------------------

class TerminationRequested(RuntimeCliError):
    """Raised to ask the failure boundary to terminate with *status*.

    Inner logic never exits the process itself.  It raises this and the
    boundary drains exit hooks before halting.
    """

    def __init__(self, status: int) -> None:
        super().__init__(f"termination requested with status {status}")
        self.status: int = status


# --- Collaborator failures -------------------------------------------------

class ApplicationStartError(RuntimeCliError):
    """Raised when an application (or one of its dependencies) fails to start."""

    def __init__(self, app: str, reason: str) -> None:
        super().__init__(f"{app}: {reason}")
        self.app: str = app
        self.reason: str = reason


class CompilationError(RuntimeCliError):
    """Raised by the compiler collaborator when a source file fails to compile."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(RuntimeCliError):
    """Raised when an optional runtime dependency is not available."""
