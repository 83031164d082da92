"""Boundary to the content management system under test.

The fixture caches never talk to the site directly; every load, delete and
batch flush goes through an object implementing ``Driver``. The real driver
lives outside this package and is selected with ``--drupal-driver``.
"""

from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

Record = Dict[str, Any]


@runtime_checkable
class Driver(Protocol):
    """Operations the fixture layer needs from the site driver."""

    def create(self, kind: str, values: Mapping[str, Any]) -> Record:
        """Create an entity of ``kind`` and return its saved record."""
        ...

    def load(self, kind: str, key: str) -> Optional[Record]:
        """Load the authoritative record, or None if it no longer exists."""
        ...

    def delete(self, kind: str, record: Mapping[str, Any]) -> None:
        ...

    def alter(self, record: Mapping[str, Any], field_values: Mapping[str, Any]) -> None:
        ...

    def process_batch(self) -> None:
        """Flush any queued deletions."""
        ...

    def run_cron(self) -> None:
        ...

    def clear_cache(self) -> None:
        ...
