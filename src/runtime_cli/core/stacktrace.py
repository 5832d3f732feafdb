"""Pruning of internal frames from uncaught failure traces.

Python lists traceback frames outermost first.  A failure raised from a
command therefore looks like::

    <cli / boundary / dispatcher frames>
    CommandDispatcher._invoke           <- generic invocation wrapper
    <hosted program frames>
    <loader machinery: runpy, importlib, py_compile>

Only the hosted program frames are interesting.  The pruner strips the
loader machinery on the innermost side, then cuts the wrapper frame and
everything outside it.  What remains is returned verbatim.
"""

from __future__ import annotations

import os
import traceback
from collections.abc import Iterable, Sequence

INTERNAL_ORIGINS: frozenset[str] = frozenset(
    {
        "runpy",
        "py_compile",
        "importlib",
        "importlib._bootstrap",
        "importlib._bootstrap_external",
    }
)
"""Origins of the machinery that loads and compiles hosted code."""

WRAPPER_FUNCTION: str = "_invoke"
WRAPPER_MODULE: str = "runtime_cli.core.dispatcher"


def frame_origin(frame: traceback.FrameSummary) -> str:
    """Return the module-ish origin of *frame* derived from its filename.

    ``<frozen importlib._bootstrap>`` becomes ``importlib._bootstrap``;
    ``.../importlib/__init__.py`` becomes ``importlib``; any other path
    becomes its stem.
    """
    filename = frame.filename
    if filename.startswith("<frozen ") and filename.endswith(">"):
        return filename[len("<frozen "):-1]
    head, tail = os.path.split(filename)
    stem = os.path.splitext(tail)[0]
    if stem == "__init__":
        return os.path.basename(head)
    return stem


class StackTracePruner:
    """Removes internal frames from a trace.

    Parameters
    ----------
    internal_origins:
        Origins (see :func:`frame_origin`) treated as internal machinery.
    wrapper_module:
        Dotted module name holding the invocation wrapper.
    wrapper_function:
        Function name of the invocation wrapper.
    """

    def __init__(
        self,
        internal_origins: Iterable[str] = INTERNAL_ORIGINS,
        *,
        wrapper_module: str = WRAPPER_MODULE,
        wrapper_function: str = WRAPPER_FUNCTION,
    ) -> None:
        self._internal = frozenset(internal_origins)
        self._wrapper_path = os.sep + os.path.join(*wrapper_module.split(".")) + ".py"
        self._wrapper_function = wrapper_function

    def is_internal(self, frame: traceback.FrameSummary) -> bool:
        return frame_origin(frame) in self._internal

    def is_wrapper(self, frame: traceback.FrameSummary) -> bool:
        return (
            frame.name == self._wrapper_function
            and os.path.normpath(frame.filename).endswith(self._wrapper_path)
        )

    def prune(
        self, frames: Sequence[traceback.FrameSummary],
    ) -> list[traceback.FrameSummary]:
        """Return *frames* without internal machinery and wrapper frames."""
        end = len(frames)
        while end > 0 and self.is_internal(frames[end - 1]):
            end -= 1

        start = 0
        for index in range(end - 1, -1, -1):
            if self.is_wrapper(frames[index]):
                start = index + 1
                break

        return list(frames[start:end])

    def format_exception(self, exc: BaseException) -> str:
        """Render *exc* like :func:`traceback.format_exception`, pruned."""
        frames = traceback.extract_tb(exc.__traceback__)
        lines = ["Traceback (most recent call last):\n"]
        lines.extend(traceback.format_list(self.prune(frames)))
        lines.extend(traceback.format_exception_only(type(exc), exc))
        return "".join(lines).rstrip("\n")
