"""Robot Framework keyword libraries for Drupal BDD tests.

These libraries mirror the pytest-bdd step definitions in tests/step_defs/.

Usage:
    *** Settings ***
    Library    drupal_bdd.keywords.FixtureCacheKeywords    mysite.testing:SiteDriver
    Test Teardown    Clean up scenario fixtures

    *** Test Cases ***
    Example Test
        Create fixture    user    alias=editor    name=editor    pass=secret
        Fixture field should be    editor    name    editor
"""

from drupal_bdd.keywords.fixture_keywords import FixtureCacheKeywords

__all__ = ["FixtureCacheKeywords"]
