"""Content-aware delta patches between two versions of a zip/jar archive."""

__version__ = "0.1.0"
