"""Secondary indices for fixture caches."""

from typing import Any, Dict, Iterable, List, Mapping

SCALAR_TYPES = (str, int, float, bool)


def is_scalar(value: Any) -> bool:
    """Return True for values that can be used as keys or index values."""
    return isinstance(value, SCALAR_TYPES)


class IndexTable:
    """Maps index names to buckets of primary keys.

    Each declared index name owns a mapping from a field value (in its string
    form) to the ordered list of keys whose record held that value when it was
    added. Buckets are only ever appended to; removing an entry from the owning
    cache does not prune them, only ``reset()`` does.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[str, List[str]]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tables

    def declare(self, names: Iterable[str]) -> None:
        """Create empty tables for names not declared yet."""
        for name in names:
            self._tables.setdefault(name, {})

    def names(self) -> List[str]:
        return list(self._tables)

    def register(self, key: str, record: Mapping[str, Any]) -> List[str]:
        """Append ``key`` to the matching bucket of every declared index.

        Args:
            key: Primary key of the entry being added
            record: The entry's value

        Returns:
            Names of the indices the key was added to
        """
        indexed = []
        for name, buckets in self._tables.items():
            field_value = record.get(name)
            # None and non-scalars can't be looked up by exact value.
            if field_value is None or not is_scalar(field_value):
                continue
            buckets.setdefault(str(field_value), []).append(key)
            indexed.append(name)
        return indexed

    def lookup(self, name: str, field_value: Any) -> List[str]:
        """Return a copy of the bucket, or an empty list if there is none.

        The caller is responsible for checking that ``name`` is declared.
        """
        return list(self._tables[name].get(str(field_value), []))

    def bucket_values(self, name: str) -> List[str]:
        return list(self._tables[name])

    def reset(self) -> None:
        """Drop every bucket but keep the declared index names."""
        for name in self._tables:
            self._tables[name] = {}
