"""runtime-cli — command-line front end for a language runtime.

Turns an argument vector into an ordered plan of commands, runs the plan
while collecting errors, and owns the process exit lifecycle.

Code run by the CLI can register shutdown work with :func:`at_exit`.
"""

from runtime_cli.core.registries import at_exit
from runtime_cli.version import __version__

__all__: list[str] = ["__version__", "at_exit"]
