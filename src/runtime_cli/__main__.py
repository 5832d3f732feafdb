"""Allow ``python -m runtime_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m runtime_cli`` behaves identically to the
``runtime-cli`` console script.
"""

from __future__ import annotations

from runtime_cli.cli.app import cli

if __name__ == "__main__":
    cli()
