"""Error types raised by the compressors.

Both concrete errors subclass ``ValueError`` so callers that already guard
against bad data with ``except ValueError`` keep working.
"""


class CompressionError(Exception):
    """Base class for all compression errors."""


class InvalidInput(CompressionError, ValueError):
    """Caller violated a precondition (unsorted IDs, ID out of range, ...)."""


class CorruptStream(CompressionError, ValueError):
    """Compressed buffer is truncated, damaged or does not match its header."""
