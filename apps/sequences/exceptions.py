"""
Domain exceptions for sequences app.

Exception Hierarchy:
    SequenceServiceError (base)
    └── StorageUnavailable
"""


class SequenceServiceError(Exception):
    """Base exception for sequence service errors."""
    pass


class StorageUnavailable(SequenceServiceError):
    """
    Raised when the backing store cannot be reached or the increment fails.

    Callers are expected to abort the record they were numbering. The
    generator never retries on its own.

    Example:
        raise StorageUnavailable("Could not advance sequence 'orderNumber'")
    """

    pass
