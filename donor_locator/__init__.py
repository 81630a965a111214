"""Blood donor registry with proximity search."""

__version__ = "0.1.0"
