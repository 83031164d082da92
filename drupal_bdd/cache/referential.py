"""Caches whose entries point at, or merely hold on to, other objects."""

import logging
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, NamedTuple, Optional

from .base import CacheBase
from .exceptions import (
    InvalidKeyError,
    InvalidValueError,
    UnknownSiblingCacheError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)


class AliasRecord(NamedTuple):
    """Pointer to ``target_key`` in the sibling cache named ``cache_name``."""

    cache_name: str
    target_key: str


class ReferentialCache(CacheBase):
    """A cache that stores references into other caches.

    Every entry is an ``AliasRecord``; reads are proxied to the sibling cache
    that actually holds the object. The set of siblings is fixed when the
    cache is constructed.

    Args:
        references: Sibling caches by name
    """

    def __init__(self, references: Mapping[str, CacheBase]) -> None:
        super().__init__()
        self._references: Dict[str, CacheBase] = dict(references)

    @property
    def references(self) -> List[str]:
        return list(self._references)

    def add(self, key: Any, value: Any = None) -> str:
        """Store a pointer.

        ``value`` is either an ``AliasRecord`` or a mapping with the keys
        ``cache`` (the sibling cache name) and ``value`` (the key of the
        object in that cache).

        Raises:
            InvalidKeyError: If ``key`` is empty
            InvalidValueError: If ``value`` doesn't describe a pointer
            UnknownSiblingCacheError: If the named cache isn't a sibling
        """
        if key is None or key == "":
            raise InvalidKeyError(
                self.kind,
                "add",
                "couldn't determine primary key; value can't be added to the cache",
            )
        record = self._to_record(key, value)
        if record.cache_name not in self._references:
            raise UnknownSiblingCacheError(
                self.kind,
                "add",
                f"the cache '{record.cache_name}' is not available as a "
                f"referrable cache for {key} "
                f"(available: {', '.join(self._references) or 'none'})",
            )
        return super().add(key, record)

    def _to_record(self, key: Any, value: Any) -> AliasRecord:
        if isinstance(value, AliasRecord):
            cache_name, target = value
        elif isinstance(value, Mapping):
            cache_name, target = value.get("cache"), value.get("value")
        else:
            raise InvalidValueError(
                self.kind,
                "add",
                f"invalid value type {type(value).__name__} for {key} "
                "(a mapping with 'cache' and 'value' is required)",
            )
        if not cache_name:
            raise InvalidValueError(
                self.kind, "add", f"no 'cache' was given for {key}"
            )
        if target is None or target == "":
            raise InvalidValueError(
                self.kind, "add", f"no 'value' was given for {key}"
            )
        return AliasRecord(str(cache_name), str(target))

    def resolve(self, key: Any) -> AliasRecord:
        """Return the pointer stored under ``key`` without following it."""
        return self._stored(key, "resolve")

    def apply(self, key: Any, fn: Callable[[CacheBase, str], Any]) -> Any:
        """Follow the pointer stored under ``key`` and call ``fn`` on it.

        ``fn`` receives the sibling cache and the key of the object inside
        it, and its result is returned.
        """
        record = self.resolve(key)
        cache = self._references.get(record.cache_name)
        if cache is None:
            raise UnknownSiblingCacheError(
                self.kind,
                "apply",
                f"the cache '{record.cache_name}' referenced by {key} is not referrable",
            )
        return fn(cache, record.target_key)

    def get(self, key: Any) -> Any:
        return self.apply(key, lambda cache, target: cache.get(target))

    def get_value(self, key: Any, field: str) -> Any:
        return self.apply(key, lambda cache, target: cache.get_value(target, field))

    def delete_value(self, key: Any, field: str) -> Any:
        return self.apply(key, lambda cache, target: cache.delete_value(target, field))

    def remove(self, key: Any) -> Optional[AliasRecord]:
        """Drop the pointer. The object it points at is left alone."""
        if not self.has(key):
            return None
        key = str(key)
        self._instructions.pop(key, None)
        logger.debug("%s: dropped reference %s", self.kind, key)
        return self._entries.pop(key)

    def add_indices(self, *names: str) -> None:
        raise UnsupportedOperationError(
            self.kind,
            "add_indices",
            f"referenced values live in other caches; can't index by {', '.join(names)}",
        )


class AliasCache(ReferentialCache):
    """Scenario-wide aliases for created fixtures.

    Table rows may carry an ``@`` column naming the alias for the entity the
    row creates; ``extract_alias_key`` pulls it out before the row is sent to
    the driver.
    """

    ALIAS_KEY = "@"

    @classmethod
    def extract_alias_key(cls, values: MutableMapping[str, Any]) -> Optional[str]:
        """Remove and return the alias field, or None if there is none."""
        if not isinstance(values, MutableMapping):
            raise InvalidValueError(
                cls.__name__,
                "extract_alias_key",
                f"wrong argument type ({type(values).__name__}) passed",
            )
        alias = values.pop(cls.ALIAS_KEY, None)
        return str(alias) if alias not in (None, "") else None


class ContextCache(CacheBase):
    """Scenario-scoped helper objects kept by reference.

    Nothing stored here is deleted externally; cleaning just drops the
    references.
    """

    def remove(self, key: Any) -> Any:
        if not self.has(key):
            return None
        key = str(key)
        self._instructions.pop(key, None)
        return self._entries.pop(key)

    def add_indices(self, *names: str) -> None:
        raise UnsupportedOperationError(
            self.kind, "add_indices", f"does not support indices ({', '.join(names)})"
        )
