"""Report rendering module."""

from .leak_reporter import LeakReporter, EXIT_OK, EXIT_FATAL, EXIT_LEAKS

__all__ = ["LeakReporter", "EXIT_OK", "EXIT_FATAL", "EXIT_LEAKS"]
