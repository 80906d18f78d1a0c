"""REST backend for a MU Online server website."""

__version__ = "1.0.0"
