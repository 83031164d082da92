"""The set of caches owned by one scenario, and their teardown."""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Type

from ..config import DEFAULT_CLEANUP_ORDER, CacheSettings
from ..driver import Driver
from .base import CacheBase
from .entities import EntityCache, LanguageCache, NodeCache, RoleCache, TermCache, UserCache
from .exceptions import CleanupError, DuplicateKeyError, NotFoundError
from .referential import AliasCache, ContextCache

logger = logging.getLogger(__name__)

ENTITY_CACHES: Dict[str, Type[EntityCache]] = {
    "users": UserCache,
    "nodes": NodeCache,
    "terms": TermCache,
    "roles": RoleCache,
    "languages": LanguageCache,
}


class CacheRegistry:
    """Named caches known to a scenario."""

    def __init__(self) -> None:
        self._caches: Dict[str, CacheBase] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._caches

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._caches))

    def __len__(self) -> int:
        return len(self._caches)

    def __getitem__(self, name: str) -> CacheBase:
        return self.get(name)

    def register(self, name: str, cache: CacheBase) -> CacheBase:
        if name in self._caches:
            raise DuplicateKeyError(
                "CacheRegistry", "register", f"a cache named {name} is already registered"
            )
        self._caches[name] = cache
        return cache

    def get(self, name: str) -> CacheBase:
        if name not in self._caches:
            raise NotFoundError(
                "CacheRegistry",
                "get",
                f"no cache named {name} (registered: {', '.join(self._caches) or 'none'})",
            )
        return self._caches[name]

    def names(self) -> List[str]:
        return list(self._caches)

    def items(self) -> List[Tuple[str, CacheBase]]:
        return list(self._caches.items())

    def entity_cache_name(self, entity_type: str) -> str:
        """Return the name of the cache holding an entity type, e.g. ``"user"``."""
        for name, cache in self._caches.items():
            if cache.get_entity_type() == entity_type:
                return name
        raise NotFoundError(
            "CacheRegistry",
            "entity_cache_name",
            f"no cache is registered for the entity type {entity_type}",
        )

    def entity_cache(self, entity_type: str) -> EntityCache:
        return self._caches[self.entity_cache_name(entity_type)]

    def describe(self) -> str:
        return "\n".join(cache.describe() for cache in self._caches.values())


def build_scenario_caches(
    driver: Driver, settings: Optional[CacheSettings] = None
) -> CacheRegistry:
    """Construct the standard cache set for one scenario.

    Entity caches get the driver plus any extra indices from ``settings``;
    the alias cache may point into any of them.

    Raises:
        ValueError: If extra indices are configured for an unknown cache
    """
    settings = settings or CacheSettings()
    unknown = sorted(set(settings.extra_indices) - set(ENTITY_CACHES))
    if unknown:
        raise ValueError(
            f"Extra indices configured for unknown caches: {', '.join(unknown)} "
            f"(known: {', '.join(ENTITY_CACHES)})"
        )

    registry = CacheRegistry()
    for name, cache_cls in ENTITY_CACHES.items():
        registry.register(name, cache_cls(driver, settings.extra_indices.get(name, ())))
    registry.register("contexts", ContextCache())
    registry.register(
        "aliases", AliasCache({name: registry.get(name) for name in ENTITY_CACHES})
    )
    return registry


class CleanupOrchestrator:
    """Cleans every registered cache in dependency order.

    Caches named in ``order`` are cleaned first, in that order; the rest
    follow in registration order. Every cache is cleaned even when an
    earlier one fails.
    """

    def __init__(
        self, registry: CacheRegistry, order: Sequence[str] = DEFAULT_CLEANUP_ORDER
    ) -> None:
        self.registry = registry
        self.order = tuple(order)

    def ordered_names(self) -> List[str]:
        names = [name for name in self.order if name in self.registry]
        names.extend(name for name in self.registry if name not in self.order)
        return names

    def run(self) -> List[str]:
        """Clean all caches.

        Returns:
            Names of the caches, in the order they were cleaned

        Raises:
            CleanupError: If any cache reported failures, after all caches
                have been cleaned
        """
        failures = []
        cleaned = []
        for name in self.ordered_names():
            cache = self.registry.get(name)
            try:
                cache.clean()
            except CleanupError as exc:
                failures.extend((f"{name}/{key}", error) for key, error in exc.failures)
            except Exception as exc:  # noqa: BLE001
                logger.error("Cleanup of the %s cache failed: %s", name, exc)
                failures.append((name, exc))
            cleaned.append(name)

        if failures:
            logger.warning("Scenario cleanup finished with %d failure(s)", len(failures))
            raise CleanupError("CleanupOrchestrator", "run", failures)
        logger.info("Scenario cleanup finished: %s", ", ".join(cleaned))
        return cleaned
