"""Logging helpers for runtime-cli.

Diagnostic logging is off by default (``WARNING``) so that the
runtime's own output is not polluted.  Set ``RUNTIME_CLI_LOG_LEVEL``
(e.g. ``DEBUG``) to see how arguments were parsed and dispatched.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from runtime_cli.cli.console import get_rich_console

LOG_LEVEL_ENV: str = "RUNTIME_CLI_LOG_LEVEL"


def resolve_level(environ: Mapping[str, str] | None = None) -> int:
    """Read the log level from the environment, defaulting to ``WARNING``.

    Unknown level names fall back to ``WARNING`` rather than failing the
    run.
    """
    env = os.environ if environ is None else environ
    name = env.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: int) -> None:
    """Configure the root logger, rendering through Rich when available."""
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        logging.basicConfig(
            level=level,
            format="%(levelname)s %(name)s: %(message)s",
        )
        return

    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=get_rich_console(), show_path=False, markup=False)],
    )
