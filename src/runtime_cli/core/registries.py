"""Process-wide registries, owned explicitly and injected where needed.

Both registries follow the same contract: create one per invocation,
use it (directly or as a context manager), and call :meth:`close` when
done.  Closing undoes every side effect the registry made.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)

ExitHook = Callable[[int], object]


class CodePathRegistry:
    """Registers code paths on a search-path list (``sys.path`` by default).

    Only entries added through this registry are removed on close.
    """

    def __init__(self, search_path: list[str] | None = None) -> None:
        self._search_path: list[str] = sys.path if search_path is None else search_path
        self._added: list[str] = []

    @property
    def paths(self) -> tuple[str, ...]:
        """Paths registered so far, in registration order."""
        return tuple(self._added)

    def prepend(self, path: str) -> None:
        logger.debug("Prepending code path %s", path)
        self._search_path.insert(0, path)
        self._added.append(path)

    def append(self, path: str) -> None:
        logger.debug("Appending code path %s", path)
        self._search_path.append(path)
        self._added.append(path)

    def close(self) -> None:
        """Remove every path this registry added (idempotent)."""
        for path in self._added:
            if path in self._search_path:
                self._search_path.remove(path)
        self._added.clear()

    def __enter__(self) -> CodePathRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ExitHookRegistry:
    """Queue of hooks run at orderly shutdown.

    Hooks receive the final exit status.  A hook may register further
    hooks while running; :meth:`flush` hands back one pass at a time.
    """

    def __init__(self) -> None:
        self._hooks: list[ExitHook] = []

    def __len__(self) -> int:
        return len(self._hooks)

    def register(self, hook: ExitHook) -> None:
        self._hooks.append(hook)

    def flush(self) -> list[ExitHook]:
        """Return the pending hooks in registration order and empty the queue."""
        hooks, self._hooks = self._hooks, []
        return hooks

    def close(self) -> None:
        """Drop any hooks still pending."""
        self._hooks.clear()

    def __enter__(self) -> ExitHookRegistry:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Hosted-code access
# ---------------------------------------------------------------------------

_active_hooks: ExitHookRegistry | None = None


def bind_exit_hooks(registry: ExitHookRegistry | None) -> ExitHookRegistry | None:
    """Make *registry* the target of :func:`at_exit`.

    Returns the previously bound registry so the caller can restore it.
    """
    global _active_hooks
    previous, _active_hooks = _active_hooks, registry
    return previous


def at_exit(hook: ExitHook) -> None:
    """Register *hook* to run with the final exit status of the current run.

    Hosted code calls this as ``runtime_cli.at_exit(hook)``.  A hook may
    itself call :func:`at_exit`; the new hook runs in the next drain pass.

    Raises
    ------
    RuntimeError
        When no invocation is running.
    """
    if _active_hooks is None:
        raise RuntimeError("at_exit() called outside a runtime-cli invocation")
    _active_hooks.register(hook)
