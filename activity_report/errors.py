"""
Error kinds raised by the activity monitoring pipeline.
"""


class SourceUnavailable(OSError):
    """The source archive could not be fetched or opened."""


class ParseError(ValueError):
    """The record file is absent, malformed, or does not match the schema."""


class ImputationError(ValueError):
    """A missing value has no per-interval mean and no usable fallback."""


class ImputationWarning(UserWarning):
    """Some intervals had no valid samples and were filled with the fallback value."""
