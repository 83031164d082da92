"""The base implementation for scenario fixture caching.

A ``CacheBase`` stores the objects created during one scenario under a
scalar primary key, indexes mapping values by declared field names, and
drives teardown through ``clean()``. Not every operation is implemented
here; subclasses fill in the ones that depend on what they store.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import (
    CleanupError,
    DuplicateKeyError,
    FieldNotFoundError,
    IndexNotDeclaredError,
    InvalidArgumentError,
    InvalidKeyError,
    NotFoundError,
    UnknownIndexError,
    UnsupportedOperationError,
)
from .index import IndexTable, is_scalar

logger = logging.getLogger(__name__)

NOCLEAN = "noclean"

_RULE = "*" * 26


class _NoValue:
    """Sentinel for cache instructions that were never set."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


class CacheBase:
    """Keyed store for fixtures created during a single scenario.

    Entries are added once and are then immutable: re-adding a live key is an
    error, and the only per-entry state that can change afterwards is the set
    of cache instructions (such as ``noclean``).
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}
        self._instructions: Dict[str, Dict[str, Any]] = {}
        self._indices = IndexTable()

    def __str__(self) -> str:
        return self.describe()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    @property
    def kind(self) -> str:
        """Name used to identify this cache in errors and logs."""
        return type(self).__name__

    # =========================================================================
    # Storage
    # =========================================================================

    def _normalize_key(self, key: Any, operation: str) -> str:
        if key is None or key == "" or not is_scalar(key):
            raise InvalidKeyError(
                self.kind,
                operation,
                f"couldn't determine primary key from {key!r}; "
                "value can't be added to the cache",
            )
        return str(key)

    def add(self, key: Any, value: Any = None) -> str:
        """Add an entry to the cache.

        Args:
            key: Scalar primary key, stored in its string form
            value: The record to store. When omitted, the key itself is
                stored as the value and nothing is indexed.

        Returns:
            The normalized key

        Raises:
            InvalidKeyError: If the key is empty or not a scalar
            DuplicateKeyError: If the key is already present
        """
        key = self._normalize_key(key, "add")
        if self.has(key):
            raise DuplicateKeyError(
                self.kind, "add", f"an item with the key {key} already exists"
            )
        if value is None:
            value = key
        elif isinstance(value, Mapping):
            value = dict(value)
        self._entries[key] = value
        logger.debug("%s: added %s", self.kind, key)

        if isinstance(value, Mapping):
            indexed = self._indices.register(key, value)
            if indexed:
                logger.debug(
                    "%s: indexed %s by %s", self.kind, key, ", ".join(indexed)
                )
        return key

    def has(self, key: Any) -> bool:
        """Check whether a key is present without raising."""
        return key is not None and str(key) in self._entries

    def _stored(self, key: Any, operation: str) -> Any:
        if not self.has(key):
            raise NotFoundError(
                self.kind, operation, f"no result found for key {key}"
            )
        return self._entries[str(key)]

    def get(self, key: Any) -> Any:
        """Return the value stored under ``key``."""
        return self._stored(key, "get")

    def get_value(self, key: Any, field: str) -> Any:
        """Return a single field of the record stored under ``key``."""
        record = self.get(key)
        if not isinstance(record, Mapping) or field not in record:
            raise FieldNotFoundError(
                self.kind,
                "get_value",
                f"the field '{field}' does not exist on the item {key}",
            )
        return record[field]

    def delete_value(self, key: Any, field: str) -> Any:
        raise UnsupportedOperationError(
            self.kind, "delete_value", f"no implementation available (key {key})"
        )

    def remove(self, key: Any) -> Any:
        raise UnsupportedOperationError(
            self.kind, "remove", f"does not implement removal (key {key})"
        )

    def find(self, criteria: Mapping[str, Any]) -> List[Any]:
        raise UnsupportedOperationError(
            self.kind, "find", f"does not implement find (criteria {dict(criteria)})"
        )

    def count(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return list(self._entries)

    def get_entity_type(self) -> Optional[str]:
        return None

    # =========================================================================
    # Indices
    # =========================================================================

    def add_indices(self, *names: str) -> None:
        """Declare index names. Declaring a name twice is harmless."""
        if not names:
            raise InvalidArgumentError(
                self.kind, "add_indices", "no index names were passed"
            )
        self._indices.declare(names)

    def get_named_indices(self) -> List[str]:
        return self._indices.names()

    def get_index(self, index_name: str, field_value: Any) -> List[str]:
        """Return the keys whose record had ``field_value`` for ``index_name``.

        Raises:
            UnknownIndexError: If ``index_name`` was never declared
        """
        if index_name not in self._indices:
            raise UnknownIndexError(
                self.kind,
                "get_index",
                f"the index {index_name} does not exist in this cache "
                f"(declared: {', '.join(self.get_named_indices()) or 'none'})",
            )
        return self._indices.lookup(index_name, field_value)

    def _match_keys(self, criteria: Mapping[str, Any]) -> List[str]:
        """Intersect the index buckets for every ``field=value`` pair.

        Keys come back in the order of the first field's bucket. An empty
        ``criteria`` matches every entry. Buckets may still list removed
        keys, so only live keys are returned, each once.
        """
        for field in criteria:
            if field not in self._indices:
                raise IndexNotDeclaredError(
                    self.kind,
                    "find",
                    f"the field '{field}' is not indexed "
                    f"(declared: {', '.join(self.get_named_indices()) or 'none'})",
                )
        if not criteria:
            return self.keys()

        matched: Optional[List[str]] = None
        for field, value in criteria.items():
            bucket = [key for key in self._indices.lookup(field, value) if self.has(key)]
            if not bucket:
                return []
            if matched is None:
                matched = list(dict.fromkeys(bucket))
            else:
                allowed = set(bucket)
                matched = [key for key in matched if key in allowed]
                if not matched:
                    return []
        return matched or []

    # =========================================================================
    # Cache instructions
    # =========================================================================

    def add_cache_instruction(self, key: Any, name: str, value: Any = True) -> None:
        """Attach an instruction, such as ``noclean``, to an entry."""
        self._stored(key, "add_cache_instruction")
        self._instructions.setdefault(str(key), {})[name] = value

    def get_cache_instruction(self, key: Any, name: str) -> Any:
        """Return an instruction value, or ``NO_VALUE`` if it was never set."""
        if key is None:
            return NO_VALUE
        return self._instructions.get(str(key), {}).get(name, NO_VALUE)

    # =========================================================================
    # Teardown
    # =========================================================================

    def clean(self) -> None:
        """Delete every entry not flagged ``noclean``, then reset the cache.

        A failure on one entry doesn't stop the others from being purged,
        and storage is reset regardless.

        Raises:
            CleanupError: If one or more entries could not be purged
        """
        if self.count() == 0:
            return

        failures: List[Tuple[str, Exception]] = []
        attempted = 0
        skipped = 0
        try:
            for key in self.keys():
                if self.get_cache_instruction(key, NOCLEAN):
                    skipped += 1
                    logger.debug(
                        "%s: %s is flagged %s, dropping without deletion",
                        self.kind,
                        key,
                        NOCLEAN,
                    )
                    continue
                attempted += 1
                try:
                    self._purge(key)
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "%s: the item %s couldn't be deleted: %s", self.kind, key, exc
                    )
                    failures.append((key, exc))
            try:
                self._after_purge(attempted)
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s: post-cleanup step failed: %s", self.kind, exc)
                failures.append(("<after purge>", exc))
        finally:
            count = self.count()
            self._reset()

        logger.info(
            "%s: cleaned %d entries (%d skipped, %d failed)",
            self.kind,
            count,
            skipped,
            len(failures),
        )
        if failures:
            raise CleanupError(self.kind, "clean", failures)

    def _purge(self, key: str) -> None:
        """Delete the object behind ``key``. References only need dropping."""

    def _after_purge(self, attempted: int) -> None:
        """Hook run once after every entry has been purged."""

    def _reset(self) -> None:
        """Reset cache storage.

        Only ``clean()`` should call this, as it performs the external
        deletion that would otherwise be skipped.
        """
        self._entries = {}
        self._instructions = {}
        self._indices.reset()

    # =========================================================================
    # Introspection
    # =========================================================================

    def describe(self) -> str:
        """Describe the cache state: keys and indices, never values."""
        lines = [
            _RULE,
            f" {self.kind}",
            _RULE,
            f"Cache entry count: {self.count()}",
            f"Keys: {', '.join(self.keys())}",
            "Indices:",
        ]
        for name in self.get_named_indices():
            lines.append(f"Index values stored in {name}")
            lines.extend(f"\t{value}" for value in self._indices.bucket_values(name))
        lines.append(_RULE)
        return "\n".join(lines)
