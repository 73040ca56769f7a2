"""
Locator Resolver - qa:// addressing.

Locator syntax:
    qa://<category>/<segment>/<segment>/...

    qa://cypress/results.json                 -> <cypress root>/results.json
    qa://playwright-results/run-1/results.json
    qa://playwright-html/index.html
    qa://drupal/user.role.editor              -> <config/sync>/user.role.editor.yml
    qa://cypress                              -> <cypress root>

Resolution is purely lexical: the category root is joined with the segments
in order and ``..`` is left in place. Confinement is the PathGuard's job,
not this module's.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from qalens.config_loader import LOCATOR_SCHEME, CategorySpec, GatewayConfig
from qalens.errors import InvalidLocator, UnknownCategory


_PREFIX = f"{LOCATOR_SCHEME}://"
_FORBIDDEN_CHARS = ("\\", "\x00")


@dataclass(frozen=True)
class ParsedLocator:
    """A syntactically valid locator, split into category and segments."""
    locator: str
    category: str
    segments: tuple[str, ...]

    @property
    def relative_path(self) -> str:
        return "/".join(self.segments)


class LocatorResolver:
    """Maps qa:// locators onto category roots. Stateless after construction."""

    def __init__(self, categories: Mapping[str, CategorySpec]):
        self._categories = categories

    @classmethod
    def from_config(cls, config: GatewayConfig) -> LocatorResolver:
        return cls(config.categories)

    def category_for(self, name: str) -> CategorySpec:
        spec = self._categories.get(name)
        if spec is None:
            raise UnknownCategory(name)
        return spec

    def parse(self, locator: str) -> ParsedLocator:
        """Split a locator into category and segments, validating syntax."""
        if not isinstance(locator, str) or not locator:
            raise InvalidLocator(str(locator), "empty locator")
        if not locator.startswith(_PREFIX):
            scheme, sep, _ = locator.partition("://")
            reason = f"unsupported scheme '{scheme}'" if sep else "missing scheme"
            raise InvalidLocator(locator, reason)

        body = locator[len(_PREFIX):]
        parts = body.split("/")
        category = parts[0]
        if not category:
            raise InvalidLocator(locator, "missing category")

        segments = parts[1:]
        # A single trailing slash addresses the category root or a directory.
        if segments and segments[-1] == "":
            segments = segments[:-1]
        for segment in segments:
            if segment == "":
                raise InvalidLocator(locator, "empty path segment")
            if any(ch in segment for ch in _FORBIDDEN_CHARS):
                raise InvalidLocator(locator, f"illegal character in segment {segment!r}")

        if category not in self._categories:
            raise UnknownCategory(category, locator=locator)

        return ParsedLocator(locator=locator, category=category, segments=tuple(segments))

    def resolve(self, locator: str) -> Path:
        """
        Resolve a locator to a path under its category root.

        Raises:
            InvalidLocator: malformed locator or bad segments.
            UnknownCategory: category outside the fixed enumeration.
        """
        parsed = self.parse(locator)
        spec = self._categories[parsed.category]

        segments = list(parsed.segments)
        if spec.suffix and segments and not segments[-1].endswith(spec.suffix):
            segments[-1] = segments[-1] + spec.suffix

        return spec.root.joinpath(*segments)

    def locator_for(self, category: str, relative_path: str) -> str:
        """Inverse of resolve() for a category-relative path (no suffix stripping)."""
        self.category_for(category)
        relative = relative_path.strip("/")
        return f"{_PREFIX}{category}/{relative}" if relative else f"{_PREFIX}{category}"
