"""Settings for the scenario fixture caches.

Values come from the pytest command line and ini file; the options
themselves are registered in the root ``conftest.py``.
"""

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

DEFAULT_CLEANUP_ORDER: Tuple[str, ...] = (
    "aliases",
    "contexts",
    "nodes",
    "terms",
    "users",
    "roles",
    "languages",
)


@dataclass
class CacheSettings:
    """Scenario fixture cache configuration.

    Attributes:
        cleanup_order: Cache names in the order they are cleaned. Pointer
            caches first, then entities before the entities they depend on
        extra_indices: Additional indexed fields, by cache name
        driver_factory: ``module:attribute`` path of the driver factory
        debug: Log the state of every cache before teardown
    """

    cleanup_order: Tuple[str, ...] = DEFAULT_CLEANUP_ORDER
    extra_indices: Dict[str, List[str]] = field(default_factory=dict)
    driver_factory: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_pytest_config(cls, config: Any) -> "CacheSettings":
        """Build settings from a ``pytest.Config``."""
        order = tuple(config.getini("fixture_cache_cleanup_order")) or DEFAULT_CLEANUP_ORDER
        return cls(
            cleanup_order=order,
            extra_indices=parse_index_specs(config.getini("fixture_cache_indices")),
            driver_factory=config.getoption("drupal_driver"),
            debug=bool(config.getoption("fixture_cache_debug")),
        )


def parse_index_specs(specs: Sequence[str]) -> Dict[str, List[str]]:
    """Parse ``cache:field`` lines into a mapping of extra indexed fields.

    Raises:
        ValueError: If a line isn't of the form ``cache:field``
    """
    indices: Dict[str, List[str]] = {}
    for spec in specs:
        spec = spec.strip()
        if not spec:
            continue
        cache_name, sep, field_name = spec.partition(":")
        if not sep or not cache_name.strip() or not field_name.strip():
            raise ValueError(
                f"Invalid fixture_cache_indices entry {spec!r} (expected cache:field)"
            )
        indices.setdefault(cache_name.strip(), []).append(field_name.strip())
    return indices


def load_driver_factory(path: str) -> Callable[[], Any]:
    """Resolve a ``module:attribute`` path to the driver factory.

    Raises:
        ValueError: If the path isn't of the form ``module:attribute``
        ImportError: If the module can't be imported
        AttributeError: If the module has no such attribute
        TypeError: If the attribute isn't callable
    """
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Invalid driver factory {path!r} (expected module:attribute)")
    module = importlib.import_module(module_name)
    factory = getattr(module, attribute)
    if not callable(factory):
        raise TypeError(f"Driver factory {path!r} is not callable")
    return factory
