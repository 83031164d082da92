"""Scenario context: the driver plus the fixture caches of one scenario."""

import logging
from typing import Any, Mapping, Optional

from .cache import (
    NOCLEAN,
    AliasCache,
    CacheRegistry,
    CleanupOrchestrator,
    InvalidKeyError,
    build_scenario_caches,
)
from .config import CacheSettings
from .driver import Driver, Record

logger = logging.getLogger(__name__)


class ScenarioContext:
    """Creates fixtures through the driver and keeps track of them.

    One context is built per scenario; nothing in it is shared between
    scenarios. ``teardown()`` must run when the scenario ends, whether or
    not it passed.
    """

    def __init__(self, driver: Driver, settings: Optional[CacheSettings] = None) -> None:
        self.driver = driver
        self.settings = settings or CacheSettings()
        self.caches: CacheRegistry = build_scenario_caches(driver, self.settings)

    @property
    def aliases(self) -> AliasCache:
        return self.caches.get("aliases")

    def create(
        self,
        entity_type: str,
        values: Mapping[str, Any],
        alias: Optional[str] = None,
    ) -> Record:
        """Create an entity, cache it and optionally bind an alias to it.

        An ``@`` field in ``values`` is used as the alias when ``alias`` is
        not given; it is never sent to the driver.

        Args:
            entity_type: Entity type, e.g. "user" or "node"
            values: Field values for the new entity
            alias: Alias to bind to the created entity

        Returns:
            The live record of the created entity

        Raises:
            InvalidKeyError: If the saved record has no usable id. The entity
                is then on the site but untracked and is logged for manual
                cleanup
            DuplicateKeyError: If the driver returned the id of an entity
                already tracked by this scenario
        """
        values = dict(values)
        row_alias = AliasCache.extract_alias_key(values)
        alias = alias or row_alias

        cache_name = self.caches.entity_cache_name(entity_type)
        cache = self.caches.get(cache_name)
        record = {**values, **self.driver.create(entity_type, values)}
        # The plain text of secret fields is only known here; the saved
        # record may hold a hash or nothing at all.
        record.update({name: values[name] for name in cache.secret_fields if name in values})
        try:
            key = cache.add_entity(record)
        except InvalidKeyError:
            logger.error(
                "The %s created from %s has no usable '%s' and won't be cleaned up; "
                "delete it manually",
                entity_type,
                {name: value for name, value in record.items() if name not in cache.secret_fields},
                cache.id_field,
            )
            raise
        logger.debug("Created %s %s", entity_type, key)

        if alias:
            self.aliases.add(alias, {"cache": cache_name, "value": key})
        return cache.get(key)

    def resolve_alias(self, alias: str) -> Record:
        return self.aliases.get(alias)

    def alias_value(self, alias: str, field: str) -> Any:
        return self.aliases.get_value(alias, field)

    def mark_noclean(self, alias: str) -> None:
        """Keep the aliased entity on the site when the scenario ends."""
        pointer = self.aliases.resolve(alias)
        self.caches.get(pointer.cache_name).add_cache_instruction(
            pointer.target_key, NOCLEAN
        )

    def remember(self, name: str, obj: Any) -> str:
        """Keep a helper object for later steps of the same scenario."""
        return self.caches.get("contexts").add(name, obj)

    def recall(self, name: str) -> Any:
        return self.caches.get("contexts").get(name)

    def clear_cache(self) -> None:
        self.driver.clear_cache()

    def run_cron(self) -> None:
        self.driver.run_cron()

    def teardown(self) -> None:
        """Clean every cache of this scenario.

        Raises:
            CleanupError: If anything failed to clean up; every cache has
                still been cleaned by then
        """
        if self.settings.debug:
            logger.info("Fixture caches before teardown:\n%s", self.caches.describe())
        CleanupOrchestrator(self.caches, self.settings.cleanup_order).run()
