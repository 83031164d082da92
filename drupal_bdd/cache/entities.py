"""Caches for the entities a scenario creates on the site.

Each cache keeps the primary keys (and the creation-time record) of the
entities it tracks, reloads the live record through the driver on ``get``
and deletes everything it still holds when the scenario is torn down.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from ..driver import Driver, Record
from .base import CacheBase
from .exceptions import FieldNotFoundError, InvalidKeyError, NotFoundError

logger = logging.getLogger(__name__)


class EntityCache(CacheBase):
    """Base class for caches backed by site entities.

    Subclasses set:
        entity_type: Entity type name passed to the driver
        id_field: Record field holding the primary key
        default_indices: Fields that are always indexed
        flush_batch: Call ``driver.process_batch()`` after deleting
        secret_fields: Fields that can't be recovered by reloading the
            record, kept aside at ``add`` and spliced back into ``get``
    """

    entity_type: str = ""
    id_field: str = ""
    default_indices: Tuple[str, ...] = ()
    flush_batch: bool = False
    secret_fields: Tuple[str, ...] = ()

    def __init__(self, driver: Driver, indices: Iterable[str] = ()) -> None:
        super().__init__()
        self.driver = driver
        self._secrets: Dict[str, Dict[str, Any]] = {}
        names = list(self.default_indices)
        names.extend(name for name in indices if name not in names)
        if names:
            self.add_indices(*names)

    def get_entity_type(self) -> str:
        return self.entity_type

    def add(self, key: Any, value: Any = None) -> str:
        key = super().add(key, value)
        if isinstance(value, Mapping):
            secrets = {name: value[name] for name in self.secret_fields if name in value}
            if secrets:
                self._secrets[key] = secrets
        return key

    def add_entity(self, record: Mapping[str, Any]) -> str:
        """Add a saved record under the value of its id field."""
        if self.id_field not in record:
            raise InvalidKeyError(
                self.kind,
                "add_entity",
                f"the record has no '{self.id_field}' field "
                f"(fields: {', '.join(record)})",
            )
        return self.add(record[self.id_field], record)

    def get(self, key: Any) -> Record:
        """Load the live record for ``key`` from the driver.

        Raises:
            NotFoundError: If the key isn't cached or the entity is gone
        """
        self._stored(key, "get")
        record = self.driver.load(self.entity_type, str(key))
        if record is None:
            raise NotFoundError(
                self.kind,
                "get",
                f"the {self.entity_type} {key} couldn't be loaded",
            )
        return self._splice(str(key), record)

    def _splice(self, key: str, record: Mapping[str, Any]) -> Record:
        record = dict(record)
        record.update(self._secrets.get(key, {}))
        return record

    def delete_value(self, key: Any, field: str) -> Any:
        """Clear one field of the live entity and return its previous value."""
        record = self.get(key)
        if field not in record:
            raise FieldNotFoundError(
                self.kind,
                "delete_value",
                f"the field '{field}' does not exist on the {self.entity_type} {key}",
            )
        previous = record[field]
        self.driver.alter(record, {field: None})
        return previous

    def remove(self, key: Any) -> Any:
        """Forget an entity without deleting it from the site.

        Index buckets are left untouched and keep listing the key until the
        cache is cleaned.

        Returns:
            The record stored at creation time, or None if the key is absent
        """
        if not self.has(key):
            return None
        key = str(key)
        self._secrets.pop(key, None)
        self._instructions.pop(key, None)
        logger.debug("%s: detached %s without deleting it", self.kind, key)
        return self._entries.pop(key)

    def _purge(self, key: str) -> None:
        record = self.driver.load(self.entity_type, key)
        if record is None:
            logger.warning(
                "%s: the %s %s no longer exists, nothing to delete",
                self.kind,
                self.entity_type,
                key,
            )
            return
        self.driver.delete(self.entity_type, self._splice(key, record))

    def _after_purge(self, attempted: int) -> None:
        if self.flush_batch and attempted:
            self.driver.process_batch()

    def _reset(self) -> None:
        super()._reset()
        self._secrets = {}


class IndexedFindMixin:
    """Exact-value lookup across declared indices."""

    def find(self, criteria: Mapping[str, Any]) -> List[Record]:
        """Return the live records matching every ``field=value`` pair.

        Raises:
            IndexNotDeclaredError: If a field in ``criteria`` isn't indexed
        """
        return [self.get(key) for key in self._match_keys(criteria)]


class UserCache(IndexedFindMixin, EntityCache):
    """Users created during a scenario.

    Passwords are only known at creation time, so they are kept aside and
    handed back with every loaded record.
    """

    entity_type = "user"
    id_field = "uid"
    default_indices = ("name", "mail")
    flush_batch = True
    secret_fields = ("pass",)


class NodeCache(IndexedFindMixin, EntityCache):
    """Content created during a scenario."""

    entity_type = "node"
    id_field = "nid"
    default_indices = ("title", "type")


class TermCache(EntityCache):
    entity_type = "taxonomy_term"
    id_field = "tid"
    default_indices = ("name", "vocabulary_machine_name")


class RoleCache(EntityCache):
    entity_type = "role"
    id_field = "rid"
    default_indices = ("name",)


class LanguageCache(EntityCache):
    """Languages enabled during a scenario, keyed by langcode."""

    entity_type = "language"
    id_field = "langcode"
