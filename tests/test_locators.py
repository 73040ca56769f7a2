"""
Tests for qa:// locator parsing and resolution.
"""

import pytest

from qalens.errors import InvalidLocator, UnknownCategory
from qalens.locators import LocatorResolver


@pytest.fixture
def resolver(config):
    return LocatorResolver.from_config(config)


class TestParse:
    """Locator syntax."""

    def test_simple_file(self, resolver):
        parsed = resolver.parse("qa://cypress/results.json")
        assert parsed.category == "cypress"
        assert parsed.segments == ("results.json",)

    def test_nested_segments(self, resolver):
        parsed = resolver.parse("qa://playwright-results/run-1/output.txt")
        assert parsed.segments == ("run-1", "output.txt")
        assert parsed.relative_path == "run-1/output.txt"

    def test_category_only(self, resolver):
        assert resolver.parse("qa://cypress").segments == ()
        assert resolver.parse("qa://cypress/").segments == ()

    @pytest.mark.parametrize("locator", [
        "",
        "cypress/results.json",
        "http://cypress/results.json",
        "qa://",
        "qa://cypress//results.json",
        "qa://cypress/a\\b.json",
        "qa://cypress/a\x00.json",
    ])
    def test_malformed_rejected(self, resolver, locator):
        with pytest.raises(InvalidLocator):
            resolver.parse(locator)

    def test_unsupported_scheme_reason(self, resolver):
        with pytest.raises(InvalidLocator) as exc_info:
            resolver.parse("file://cypress/x")
        assert "unsupported scheme 'file'" in str(exc_info.value)

    def test_unknown_category(self, resolver):
        with pytest.raises(UnknownCategory) as exc_info:
            resolver.parse("qa://jest/results.json")
        assert str(exc_info.value) == "Unknown category: jest"
        # Unknown categories are still locator errors
        assert isinstance(exc_info.value, InvalidLocator)


class TestResolve:
    """Mapping locators onto category roots."""

    def test_joins_root_and_segments(self, resolver, config):
        path = resolver.resolve("qa://playwright-results/run-1/output.txt")
        assert path == config.categories["playwright-results"].root / "run-1" / "output.txt"

    def test_category_only_is_root(self, resolver, config):
        assert resolver.resolve("qa://playwright-html") == config.categories["playwright-html"].root

    def test_drupal_suffix_appended(self, resolver, config):
        path = resolver.resolve("qa://drupal/user.role.editor")
        assert path == config.categories["drupal"].root / "user.role.editor.yml"

    def test_drupal_suffix_not_doubled(self, resolver, config):
        path = resolver.resolve("qa://drupal/user.role.editor.yml")
        assert path.name == "user.role.editor.yml"

    def test_dotdot_left_for_guard(self, resolver, config):
        """Resolution is lexical; escaping is caught later by the guard."""
        path = resolver.resolve("qa://cypress/../../secret")
        assert ".." in path.parts


class TestLocatorFor:
    def test_round_trip(self, resolver):
        assert resolver.locator_for("cypress", "results.json") == "qa://cypress/results.json"
        assert resolver.locator_for("cypress", "") == "qa://cypress"

    def test_unknown_category(self, resolver):
        with pytest.raises(UnknownCategory):
            resolver.locator_for("nope", "x")
