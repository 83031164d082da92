"""Unit test conftest for the fixture caches.

This conftest is loaded by pytest when running unit tests from this directory.
It overrides fixtures from the root conftest.py so each unit test builds
exactly the caches it needs around a MockDriver.
"""

import pytest

from drupal_bdd.cache import CacheBase, CacheRegistry, build_scenario_caches
from drupal_bdd.config import CacheSettings
from drupal_bdd.context import ScenarioContext
from tests.unit.mocks import MockDriver


# -- Mock Driver Fixtures --


@pytest.fixture
def drupal_driver() -> MockDriver:
    """Mock site driver fixture."""
    return MockDriver()


@pytest.fixture
def settings() -> CacheSettings:
    return CacheSettings(driver_factory="tests.unit.mocks:MockDriver")


# -- Cache Fixtures --


@pytest.fixture
def cache() -> CacheBase:
    """A bare base cache with no indices."""
    return CacheBase()


@pytest.fixture
def registry(drupal_driver: MockDriver, settings: CacheSettings) -> CacheRegistry:
    """The standard scenario cache set around the mock driver."""
    return build_scenario_caches(drupal_driver, settings)


@pytest.fixture
def context(drupal_driver: MockDriver, settings: CacheSettings) -> ScenarioContext:
    return ScenarioContext(drupal_driver, settings)


# -- Override and Disable Root Autouse Fixtures --
# Unit tests tear down explicitly where they need to; the root cleanup
# fixture would otherwise build a second, unrelated scenario context.


@pytest.fixture(scope="function", autouse=True)
def cleanup_fixtures_after_scenario():
    """Override and disable the scenario cleanup fixture for unit tests."""
    yield  # Allows the test to run
    # No cleanup action is performed
