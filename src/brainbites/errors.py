"""Exception hierarchy for Brain Bites."""


class BrainBitesError(Exception):
    """Base class for all Brain Bites errors."""

    pass


class DataSourceUnavailable(BrainBitesError):
    """Raised when a question source cannot produce any rows."""

    pass


class StorageError(BrainBitesError):
    """Raised when the key-value store cannot be read or written."""

    pass


class InvalidReward(BrainBitesError, ValueError):
    """Raised when a credit amount is not a positive integer."""

    pass


class NoActiveQuestion(BrainBitesError):
    """Raised when an answer arrives with no open question."""

    pass
