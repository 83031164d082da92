"""Scenario fixture tracking for Drupal BDD tests.

The ``cache`` package holds the fixture caches; ``ScenarioContext`` ties
them to a site driver for the lifetime of one scenario.
"""

from drupal_bdd.config import CacheSettings
from drupal_bdd.context import ScenarioContext
from drupal_bdd.driver import Driver

__all__ = ["CacheSettings", "Driver", "ScenarioContext"]
