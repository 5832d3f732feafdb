"""Infrastructure: process termination."""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)


class SystemProcess:
    """Concrete :class:`~runtime_cli.core.protocols.ProcessControl`.

    Halting raises :class:`SystemExit` so interpreter shutdown (stream
    flushing, non-daemon thread joins) still happens.
    """

    def halt(self, status: int) -> None:
        logger.debug("Halting with status %d", status)
        sys.stdout.flush()
        sys.exit(status)
