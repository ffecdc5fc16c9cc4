"""Customer chat backend with JSON-file history storage."""

__version__ = "0.1.0"
