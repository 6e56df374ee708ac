"""Base exception for yabp."""


class YabpError(Exception):
    """Base class for errors reported to the immediate caller."""
