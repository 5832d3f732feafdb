"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--version``, plain error reporting)
remain functional even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from runtime_cli.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance targeting stderr (or stdout)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool = True) -> None:
		self._stderr = stderr

	def _stream(self) -> Any:
		return sys.stderr if self._stderr else sys.stdout

	def print(self, *objects: object) -> None:
		"""Render markup with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except EnvironmentError:
			print(*objects, file=self._stream())
			return
		rich_console.print(*objects)

	def print_text(self, text: str, *, style: str | None = None) -> None:
		"""Print *text* verbatim: no markup, no wrapping.

		Used for error lines and tracebacks, which may contain square
		brackets that Rich would otherwise read as markup.
		"""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except EnvironmentError:
			print(text, file=self._stream())
			return
		rich_console.print(text, style=style, markup=False, soft_wrap=True)


console = _ConsoleProxy()
"""Diagnostics and errors (stderr)."""

out = _ConsoleProxy(stderr=False)
"""Regular program output such as the version line (stdout)."""
