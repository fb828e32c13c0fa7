"""Exceptions raised by the matching library."""


class CrateMatchError(Exception):
    """Base class for cratematch errors."""


class UnknownPresetError(CrateMatchError, KeyError):
    """Raised when a matching preset name is not registered."""


class BatchTooLargeError(CrateMatchError, ValueError):
    """Raised when a batch exceeds the configured maximum size."""
