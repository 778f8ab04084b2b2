"""Exception classes raised by bucket-ann."""

from typing import Optional


class BucketIndexError(Exception):
    """Base class for all bucket-ann errors."""

    pass


class DimensionMismatch(BucketIndexError, ValueError):
    """Raised when two vectors being compared have different lengths."""

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            message or f"Vector dim mismatch: expected {expected}, got {actual}."
        )


class EmptyVectorError(BucketIndexError, ValueError):
    """Raised when a zero-length vector is inserted."""

    def __init__(self, message: str = "vector must not be empty"):
        super().__init__(message)


class EmptyIndex(BucketIndexError, LookupError):
    """Raised when querying an index that has no buckets yet."""

    def __init__(self, message: str = "Cannot query an empty index."):
        super().__init__(message)
