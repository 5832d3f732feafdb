"""CLI layer — wiring, console output, and the process entry point.

This package is the outermost layer of the application.  It may import
from ``core`` and ``infra``, but no other layer may import from ``cli``.
"""
