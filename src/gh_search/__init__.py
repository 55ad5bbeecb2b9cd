"""Search GitHub repositories and expose the results as observable UI state."""

__version__ = "0.1.0"
