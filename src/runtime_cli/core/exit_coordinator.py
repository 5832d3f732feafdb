"""Process exit lifecycle: exit-hook draining and the failure boundary.

:class:`ExitCoordinator` owns the last steps of every run: it drains
the :class:`~runtime_cli.core.registries.ExitHookRegistry` until it
stays empty, then asks :class:`~runtime_cli.core.protocols.ProcessControl`
to halt.

:func:`run_guarded` is the outermost boundary around an entry action.
It maps the way an action ends (normal return, explicit termination
request, interrupt, unexpected exception) onto an exit status.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from runtime_cli.core import exit_codes
from runtime_cli.core.protocols import ProcessControl
from runtime_cli.core.registries import ExitHookRegistry
from runtime_cli.exceptions import TerminationRequested

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExitCoordinator:
    """Runs exit hooks and terminates the process.

    Parameters
    ----------
    hooks:
        Registry the hooks are flushed from.
    process:
        Performs the actual termination.
    report_failure:
        Called with any exception raised by a hook.
    """

    def __init__(
        self,
        hooks: ExitHookRegistry,
        process: ProcessControl,
        report_failure: Callable[[BaseException], None],
    ) -> None:
        self._hooks = hooks
        self._process = process
        self._report_failure = report_failure

    def drain(self, status: int) -> None:
        """Call every registered hook with *status* until none are left.

        Hooks registered while a pass runs are picked up by the next
        pass.  A failing hook is reported and the drain carries on.
        """
        hooks = self._hooks.flush()
        while hooks:
            logger.debug("Running %d exit hook(s) with status %d", len(hooks), status)
            for hook in hooks:
                try:
                    hook(status)
                except BaseException as exc:  # noqa: BLE001
                    self._report_failure(exc)
            hooks = self._hooks.flush()

    def exit(self, status: int) -> None:
        """Drain the hooks, then halt the process with *status*."""
        self.drain(status)
        self.halt(status)

    def halt(self, status: int) -> None:
        """Terminate with *status* without running hooks."""
        self._process.halt(status)


def _system_exit_status(exc: SystemExit) -> int | None:
    """Return the integer status of *exc*, or ``None`` if it is not one."""
    if exc.code is None:
        return exit_codes.SUCCESS
    if isinstance(exc.code, int) and not isinstance(exc.code, bool):
        return exc.code
    return None


def run_guarded(
    action: Callable[[], T],
    coordinator: ExitCoordinator,
    report_failure: Callable[[BaseException], None],
    *,
    halt: bool = True,
    announce: Callable[[str], None] | None = None,
) -> T | None:
    """Run *action* inside the top-level failure boundary.

    * Normal return: when *halt* is set, exit with 0; otherwise return
      the action's result and leave the process running.
    * :class:`TerminationRequested` or an integer :class:`SystemExit`:
      exit with that status (``SystemExit(None)`` counts as 0).
    * :class:`KeyboardInterrupt`: exit with 130.
    * Anything else: drain hooks with 1, report the failure, halt(1).
    """
    try:
        result = action()
    except TerminationRequested as exc:
        coordinator.exit(exc.status)
        return None
    except SystemExit as exc:
        status = _system_exit_status(exc)
        if status is not None:
            coordinator.exit(status)
            return None
        _fail(exc, coordinator, report_failure)
        return None
    except KeyboardInterrupt:
        if announce is not None:
            announce("Aborted by user.")
        coordinator.exit(exit_codes.KEYBOARD_INTERRUPT)
        return None
    except Exception as exc:  # noqa: BLE001
        _fail(exc, coordinator, report_failure)
        return None

    if halt:
        coordinator.exit(exit_codes.SUCCESS)
        return None
    return result


def _fail(
    exc: BaseException,
    coordinator: ExitCoordinator,
    report_failure: Callable[[BaseException], None],
) -> None:
    coordinator.drain(exit_codes.GENERAL_ERROR)
    report_failure(exc)
    coordinator.halt(exit_codes.GENERAL_ERROR)
