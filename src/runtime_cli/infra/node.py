"""Infrastructure: the distribution node of the current process."""

from __future__ import annotations


class LocalNode:
    """A node that is only alive when it has been given a name.

    ``--name``/``--sname`` are consumed by the launcher, so a node built
    from the command line alone is never alive.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name: str | None = name
        self.cookie: str | None = None

    def is_alive(self) -> bool:
        return self.name is not None

    def set_cookie(self, cookie: str) -> None:
        self.cookie = cookie
