"""Fixture caches for BDD scenarios.

Caches:
    CacheBase: Keyed store with indices, cache instructions and teardown
    UserCache, NodeCache, TermCache, RoleCache, LanguageCache: Entities
        created on the site, reloaded and deleted through the driver
    ReferentialCache, AliasCache: Pointers into other caches
    ContextCache: Scenario-scoped helper objects

CacheRegistry holds the caches of one scenario and CleanupOrchestrator
cleans them in dependency order.
"""

from .base import NO_VALUE, NOCLEAN, CacheBase
from .entities import (
    EntityCache,
    LanguageCache,
    NodeCache,
    RoleCache,
    TermCache,
    UserCache,
)
from .exceptions import (
    CacheError,
    CleanupError,
    DuplicateKeyError,
    FieldNotFoundError,
    IndexNotDeclaredError,
    InvalidArgumentError,
    InvalidKeyError,
    InvalidValueError,
    NotFoundError,
    UnknownIndexError,
    UnknownSiblingCacheError,
    UnsupportedOperationError,
)
from .index import IndexTable
from .referential import AliasCache, AliasRecord, ContextCache, ReferentialCache
from .registry import (
    ENTITY_CACHES,
    CacheRegistry,
    CleanupOrchestrator,
    build_scenario_caches,
)

__all__ = [
    "NO_VALUE",
    "NOCLEAN",
    "ENTITY_CACHES",
    "AliasCache",
    "AliasRecord",
    "CacheBase",
    "CacheError",
    "CacheRegistry",
    "CleanupError",
    "CleanupOrchestrator",
    "ContextCache",
    "DuplicateKeyError",
    "EntityCache",
    "FieldNotFoundError",
    "IndexNotDeclaredError",
    "IndexTable",
    "InvalidArgumentError",
    "InvalidKeyError",
    "InvalidValueError",
    "LanguageCache",
    "NodeCache",
    "NotFoundError",
    "ReferentialCache",
    "RoleCache",
    "TermCache",
    "UnknownIndexError",
    "UnknownSiblingCacheError",
    "UnsupportedOperationError",
    "UserCache",
    "build_scenario_caches",
]
