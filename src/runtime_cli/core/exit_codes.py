"""Exit-code constants used by the failure boundary.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
Explicit termination requests exit with their own status instead.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — every command ran without error."""

GENERAL_ERROR: int = 1
"""Aggregated parse/dispatch errors, or an unhandled exception."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
