"""Fixture cache exceptions.

Every error carries the kind of cache that raised it, the operation that
failed and a detail naming the offending key or field, so a failed step
reads well in pytest and Robot Framework output.
"""

from typing import List, Tuple


class CacheError(Exception):
    """Base exception for fixture cache errors."""

    def __init__(self, cache_kind: str, operation: str, detail: str):
        self.cache_kind = cache_kind
        self.operation = operation
        self.detail = detail
        super().__init__(f"{cache_kind}::{operation}: {detail}")


class InvalidKeyError(CacheError, ValueError):
    """Raised when a primary key is empty or not a scalar."""


class InvalidArgumentError(CacheError, ValueError):
    """Raised when an operation is called without usable arguments."""


class InvalidValueError(CacheError, TypeError):
    """Raised when a value does not have the shape a cache requires."""


class DuplicateKeyError(CacheError):
    """Raised when a live key is added a second time."""


class NotFoundError(CacheError, LookupError):
    """Raised when a key is not present in a cache."""


class FieldNotFoundError(NotFoundError):
    """Raised when a cached record has no such field."""


class UnknownIndexError(CacheError, LookupError):
    """Raised when an index name was never declared on a cache."""


class IndexNotDeclaredError(UnknownIndexError):
    """Raised by find() when a criteria field has no declared index."""


class UnknownSiblingCacheError(CacheError, LookupError):
    """Raised when a pointer names a cache the referential cache does not know."""


class UnsupportedOperationError(CacheError, NotImplementedError):
    """Raised by operations a cache kind deliberately does not implement."""


class CleanupError(CacheError):
    """Raised after a teardown in which one or more deletions failed.

    The teardown itself always runs to completion; ``failures`` lists
    ``(key, exception)`` pairs for everything that went wrong.
    """

    def __init__(
        self,
        cache_kind: str,
        operation: str,
        failures: List[Tuple[str, Exception]],
    ):
        self.failures = failures
        summary = "; ".join(f"{key}: {exc}" for key, exc in failures)
        super().__init__(
            cache_kind,
            operation,
            f"{len(failures)} cleanup failure(s): {summary}",
        )
