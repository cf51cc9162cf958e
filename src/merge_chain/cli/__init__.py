"""CLI helpers exposed for other modules."""

from .ui import StepTracker, console, print_error

__all__ = ["StepTracker", "console", "print_error"]
