"""Root conftest.py - Fixture cache options, scenario context and teardown."""

import pytest

from drupal_bdd.config import CacheSettings, load_driver_factory
from drupal_bdd.context import ScenarioContext
from drupal_bdd.driver import Driver

# Step definition modules are loaded as plugins so pytest-bdd can discover
# the step fixtures they define.
pytest_plugins = ["tests.step_defs.fixture_steps"]


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("drupal-bdd", "Drupal BDD fixture caches")
    group.addoption(
        "--drupal-driver",
        dest="drupal_driver",
        default=None,
        help="module:attribute path of the factory that builds the site driver",
    )
    group.addoption(
        "--fixture-cache-debug",
        dest="fixture_cache_debug",
        action="store_true",
        default=False,
        help="log the keys and indices of every fixture cache before teardown",
    )
    parser.addini(
        "fixture_cache_cleanup_order",
        type="linelist",
        default=[],
        help="cache names in the order they are cleaned at the end of a scenario",
    )
    parser.addini(
        "fixture_cache_indices",
        type="linelist",
        default=[],
        help="extra indexed fields, one cache:field per line",
    )


@pytest.fixture
def fixture_cache_settings(pytestconfig: pytest.Config) -> CacheSettings:
    """Fixture cache settings from the command line and ini file."""
    return CacheSettings.from_pytest_config(pytestconfig)


@pytest.fixture
def drupal_driver(fixture_cache_settings: CacheSettings) -> Driver:
    """Site driver built by the factory given with --drupal-driver."""
    if not fixture_cache_settings.driver_factory:
        raise pytest.UsageError(
            "No site driver configured; pass --drupal-driver module:attribute"
        )
    return load_driver_factory(fixture_cache_settings.driver_factory)()


@pytest.fixture
def scenario_context(
    drupal_driver: Driver, fixture_cache_settings: CacheSettings
) -> ScenarioContext:
    """Driver and fixture caches for the current scenario."""
    return ScenarioContext(drupal_driver, fixture_cache_settings)


@pytest.fixture(scope="function", autouse=True)
def cleanup_fixtures_after_scenario(scenario_context: ScenarioContext):
    """Automatically delete the fixtures created by each scenario.

    This fixture runs automatically for every test and ensures cleanup
    happens even if the scenario fails. A cleanup failure is reported as
    an error of the test that created the fixtures.
    """
    # Run the scenario first
    yield

    # Cleanup code - ALWAYS runs, even if scenario fails
    scenario_context.teardown()
