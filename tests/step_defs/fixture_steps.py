"""Fixture step definitions for BDD tests."""

from typing import Dict, List, Tuple

from pytest_bdd import given, parsers, then, when

from drupal_bdd.context import ScenarioContext
from drupal_bdd.driver import Driver

from .helpers import split_list, table_rows


# ============================================================================
# Fixture Creation Steps
# ============================================================================


@given("users:")
def create_users(scenario_context: ScenarioContext, datatable: List[List[str]]) -> None:
    """Create users from a table.

    | @      | name   | mail               | roles          |
    | editor | editor | editor@example.com | editor, writer |

    The optional ``@`` column binds an alias; ``roles`` is assigned after
    the user has been created.
    """
    for row in table_rows(datatable):
        roles = split_list(row.pop("roles", ""))
        row.setdefault("mail", f"{row.get('name', 'user')}@example.com")
        user = scenario_context.create("user", row)
        if roles:
            scenario_context.driver.alter(user, {"roles": roles})


@given(parsers.parse('"{node_type}" content:'))
def create_content(
    scenario_context: ScenarioContext, node_type: str, datatable: List[List[str]]
) -> None:
    """Create content of a given type from a table with a title column."""
    for row in table_rows(datatable):
        row["type"] = node_type
        scenario_context.create("node", row)


@given(parsers.parse('"{vocabulary}" terms:'))
def create_terms(
    scenario_context: ScenarioContext, vocabulary: str, datatable: List[List[str]]
) -> None:
    """Create terms in an existing vocabulary."""
    for row in table_rows(datatable):
        row["vocabulary_machine_name"] = vocabulary
        scenario_context.create("taxonomy_term", row)


@given(parsers.parse('the role "{name}" exists'))
def create_role(scenario_context: ScenarioContext, name: str) -> None:
    """Create a role; the role name doubles as its alias."""
    scenario_context.create("role", {"name": name}, alias=name)


@given("the following languages are available:")
def create_languages(scenario_context: ScenarioContext, datatable: List[List[str]]) -> None:
    """Enable languages listed by langcode in a 'languages' column."""
    for row in table_rows(datatable):
        langcode = row["languages"]
        scenario_context.create("language", {"langcode": langcode}, alias=langcode)


@given(parsers.parse('the {kind} "{alias}" is kept after the scenario'))
def keep_fixture(scenario_context: ScenarioContext, kind: str, alias: str) -> None:
    """Flag an aliased fixture so teardown leaves it on the site."""
    scenario_context.mark_noclean(alias)


# ============================================================================
# Site Steps
# ============================================================================


@given("the cache has been cleared")
def clear_site_cache(scenario_context: ScenarioContext) -> None:
    scenario_context.clear_cache()


@given("I run cron")
def run_cron(scenario_context: ScenarioContext) -> None:
    scenario_context.run_cron()


# ============================================================================
# Teardown Steps
# ============================================================================


@when("the scenario fixtures are cleaned up", target_fixture="cleaned_fixtures")
def clean_up_fixtures(scenario_context: ScenarioContext) -> Dict[str, Tuple[str, str]]:
    """Tear down now and remember what every alias pointed at.

    Returns:
        Alias -> (entity type, key) for every alias bound before teardown
    """
    aliases = scenario_context.aliases
    cleaned = {}
    for alias in aliases.keys():
        pointer = aliases.resolve(alias)
        entity_type = scenario_context.caches.get(pointer.cache_name).get_entity_type()
        cleaned[alias] = (entity_type, pointer.target_key)
    scenario_context.teardown()
    return cleaned


# ============================================================================
# Verification Steps
# ============================================================================


@then(parsers.parse('the "{field}" of "{alias}" should be "{expected}"'))
def field_should_be(
    scenario_context: ScenarioContext, field: str, alias: str, expected: str
) -> None:
    actual = scenario_context.alias_value(alias, field)
    assert str(actual) == expected, (
        f"Expected {field} of {alias} to be '{expected}', got '{actual}'"
    )


@then(parsers.parse('the "{cache_name}" cache should contain {count:d} entries'))
def cache_should_contain(
    scenario_context: ScenarioContext, cache_name: str, count: int
) -> None:
    actual = scenario_context.caches.get(cache_name).count()
    assert actual == count, (
        f"Expected {count} entries in the {cache_name} cache, found {actual}"
    )


@then(parsers.parse('searching users named "{name}" should find {count:d} users'))
def users_found_by_name(scenario_context: ScenarioContext, name: str, count: int) -> None:
    found = scenario_context.caches.get("users").find({"name": name})
    assert len(found) == count, f"Expected {count} users named {name}, found {found}"
    assert all(user["name"] == name for user in found)


@then(parsers.parse('the {entity_type} "{alias}" should no longer exist'))
def fixture_was_deleted(
    drupal_driver: Driver,
    cleaned_fixtures: Dict[str, Tuple[str, str]],
    entity_type: str,
    alias: str,
) -> None:
    kind, key = cleaned_fixtures[alias]
    assert kind == entity_type, f"{alias} is a {kind}, not a {entity_type}"
    assert drupal_driver.load(kind, key) is None, f"The {kind} {alias} was not deleted"


@then(parsers.parse('the {entity_type} "{alias}" should still exist'))
def fixture_was_kept(
    drupal_driver: Driver,
    cleaned_fixtures: Dict[str, Tuple[str, str]],
    entity_type: str,
    alias: str,
) -> None:
    kind, key = cleaned_fixtures[alias]
    assert kind == entity_type, f"{alias} is a {kind}, not a {entity_type}"
    assert drupal_driver.load(kind, key) is not None, f"The {kind} {alias} was deleted"
