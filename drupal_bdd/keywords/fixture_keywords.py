"""Fixture Keywords for Robot Framework.

Keywords for creating site fixtures, binding aliases to them and tearing
them down at the end of a test. Uses @keyword decorator to map clean
function names to scenario step text.

Mirrors: tests/step_defs/fixture_steps.py
"""

from typing import Any, List, Optional

from robot.api import logger
from robot.api.deco import keyword, library

from drupal_bdd.cache import CleanupError
from drupal_bdd.config import CacheSettings, load_driver_factory
from drupal_bdd.context import ScenarioContext


@library(scope="TEST", doc_format="TEXT")
class FixtureCacheKeywords:
    """Keywords for scenario fixtures and their cleanup.

    Arguments:
        driver_factory: ``module:attribute`` path of the site driver factory
    """

    def __init__(self, driver_factory: str) -> None:
        """Initialize FixtureCacheKeywords."""
        self._settings = CacheSettings(driver_factory=driver_factory)
        self._context: Optional[ScenarioContext] = None

    @property
    def context(self) -> ScenarioContext:
        """The scenario context, created on first use."""
        if self._context is None:
            driver = load_driver_factory(self._settings.driver_factory)()
            self._context = ScenarioContext(driver, self._settings)
        return self._context

    # =========================================================================
    # Fixture Creation Keywords
    # =========================================================================

    @keyword("Create fixture")
    def create_fixture(
        self, entity_type: str, alias: Optional[str] = None, **fields: Any
    ) -> dict:
        """Create an entity on the site and track it for cleanup.

        Maps to scenario steps:
        - "Given users:"
        - "Given "<type>" content:"

        Arguments:
            entity_type: Entity type (user, node, taxonomy_term, role, language)
            alias: Optional alias to refer back to the entity
            fields: Field values of the new entity

        Returns:
            The live record of the created entity
        """
        record = self.context.create(entity_type, fields, alias=alias)
        logger.info(f"Created {entity_type} {alias or ''}".rstrip())
        return record

    @keyword("Keep fixture after test")
    def keep_fixture(self, alias: str) -> None:
        """Leave the aliased entity on the site when the test ends.

        Maps to scenario step:
        - "Given the user "<alias>" is kept after the scenario"
        """
        self.context.mark_noclean(alias)

    # =========================================================================
    # Lookup Keywords
    # =========================================================================

    @keyword("Get fixture")
    def get_fixture(self, alias: str) -> dict:
        """Return the live record of an aliased entity."""
        return self.context.resolve_alias(alias)

    @keyword("Fixture field should be")
    def fixture_field_should_be(self, alias: str, field: str, expected: str) -> None:
        """Assert a field of an aliased entity.

        Maps to scenario step:
        - "Then the "<field>" of "<alias>" should be "<expected>""

        Arguments:
            alias: Alias of the entity
            field: Field name
            expected: Expected value, compared as text
        """
        actual = self.context.alias_value(alias, field)
        if str(actual) != str(expected):
            raise AssertionError(
                f"Expected {field} of {alias} to be '{expected}', got '{actual}'"
            )

    @keyword("Find users")
    def find_users(self, **criteria: Any) -> List[dict]:
        """Find created users by exact indexed field values."""
        return self.context.caches.get("users").find(criteria)

    @keyword("Cache should contain")
    def cache_should_contain(self, cache_name: str, count: int) -> None:
        """Assert the number of entries in a named cache."""
        actual = self.context.caches.get(cache_name).count()
        if actual != int(count):
            raise AssertionError(
                f"Expected {count} entries in the {cache_name} cache, found {actual}"
            )

    # =========================================================================
    # Site Keywords
    # =========================================================================

    @keyword("Clear site cache")
    def clear_site_cache(self) -> None:
        """Maps to scenario step: "Given the cache has been cleared"."""
        self.context.clear_cache()

    @keyword("Run cron")
    def run_cron(self) -> None:
        """Maps to scenario step: "Given I run cron"."""
        self.context.run_cron()

    # =========================================================================
    # Cleanup Keywords
    # =========================================================================

    @keyword("Log fixture caches")
    def log_fixture_caches(self) -> None:
        """Write the keys and indices of every cache to the log."""
        logger.info(self.context.caches.describe())

    @keyword("Clean up scenario fixtures")
    def clean_up(self) -> None:
        """Delete every fixture created in this test.

        Use as test teardown so it runs whether or not the test passed.
        A new context is started on the next keyword call.
        """
        if self._context is None:
            return
        try:
            self._context.teardown()
        except CleanupError as e:
            logger.warn(f"Fixture cleanup failed: {e}")
            raise
        finally:
            self._context = None
