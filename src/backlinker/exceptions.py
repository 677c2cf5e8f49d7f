"""Exception hierarchy for backlinker.

None of these escape the public operations of the discovery engine; they are
raised by collaborators and caught (and logged) at component boundaries.
"""


class BacklinkerError(Exception):
    """Base exception for all backlinker errors."""


class IndexAccessError(BacklinkerError):
    """Raised when the note index cannot be read or returns malformed data."""


class ExtractionError(BacklinkerError):
    """Raised when block extraction fails for a document."""


class UnknownStrategyError(ExtractionError):
    """Raised when a block boundary strategy name is not registered."""


class ConfigError(BacklinkerError, ValueError):
    """Raised when configuration values are invalid."""
