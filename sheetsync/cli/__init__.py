"""Command line entry point (``sheetsync`` / ``python -m sheetsync.cli``)."""

from .app import EXIT_FATAL, EXIT_PARTIAL_APPLY, EXIT_SUCCESS, main

__all__ = ["main", "EXIT_SUCCESS", "EXIT_FATAL", "EXIT_PARTIAL_APPLY"]
