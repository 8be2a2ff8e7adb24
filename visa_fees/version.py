"""Package version, reported by GET / and in the startup log."""

__version__ = "0.1"
