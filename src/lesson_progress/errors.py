"""Exception types for lesson progress tracking."""


class ProgressError(Exception):
    """Base class for all lesson-progress errors."""


class StorageError(ProgressError):
    """The key-value store could not be read or written."""


class SnapshotFormatError(ProgressError):
    """A persisted snapshot is not a flat mapping of strings."""


class LoadFailure(ProgressError):
    """Reading the seen-timestamps snapshot failed.

    The cache falls back to an empty mapping, so every entity with a
    timestamp reads as updated.
    """


class PersistFailure(ProgressError):
    """Writing the seen-timestamps snapshot failed.

    The in-memory mapping is kept; the next acknowledgment writes the
    full snapshot again.
    """
