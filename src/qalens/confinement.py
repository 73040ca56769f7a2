"""
Path Confinement Guard.

The single security boundary of the gateway: no path may be read, listed or
written unless it is one of the permitted roots or lies beneath one.

Both the candidate and every root are normalized the same way (absolute,
``.``/``..`` collapsed, symlinks followed) and compared by path segments,
never by raw string prefix. Root ``/data/report`` therefore does NOT admit
``/data/report2/x``.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from qalens import logging as qlog
from qalens.errors import AccessDenied


def normalize(path: Path | str) -> Path:
    """Absolute, symlink-free, ``..``-free form used for every comparison."""
    return Path(os.path.abspath(os.fspath(path))).resolve()


def _is_contained(child: Path, parent: Path) -> bool:
    """Segment-aligned containment; child == parent counts."""
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


class PathGuard:
    """
    Confines paths to a fixed set of roots.

    Construction: PathGuard(roots) with the category roots from GatewayConfig.
    The normalized root tuple is computed once and never changes.
    """

    def __init__(self, roots: Iterable[Path | str]):
        normalized = []
        for root in roots:
            norm = normalize(root)
            if norm not in normalized:
                normalized.append(norm)
        if not normalized:
            raise ValueError("PathGuard requires at least one permitted root")
        self._roots: tuple[Path, ...] = tuple(normalized)

    @property
    def roots(self) -> tuple[Path, ...]:
        return self._roots

    def _scope(self, root: Path | str | None) -> tuple[Path, ...]:
        # A scoped check only admits one of the permitted roots
        if root is None:
            return self._roots
        norm = normalize(root)
        return (norm,) if norm in self._roots else ()

    def is_allowed(self, path: Path | str, *, root: Path | str | None = None) -> bool:
        try:
            candidate = normalize(path)
        except (OSError, RuntimeError, ValueError):
            return False
        return any(_is_contained(candidate, r) for r in self._scope(root))

    def assert_allowed(
        self,
        path: Path | str,
        *,
        locator: Optional[str] = None,
        root: Path | str | None = None,
    ) -> Path:
        """
        Return the normalized path if it is confined, else raise AccessDenied.

        With ``root`` the path must lie under that one root (a category's
        own root); without it, under any permitted root. The denial message
        names the locator when one is given (or the bare candidate
        otherwise) but never the roots.
        """
        try:
            candidate = normalize(path)
        except (OSError, RuntimeError, ValueError) as e:
            qlog.warn("guard.deny", "Path could not be normalized", path=str(path), error=str(e))
            raise AccessDenied(locator or str(path)) from e

        if any(_is_contained(candidate, r) for r in self._scope(root)):
            return candidate

        qlog.warn(
            "guard.deny",
            "Path outside permitted roots",
            path=str(candidate),
            locator=locator,
            scoped=root is not None,
        )
        raise AccessDenied(locator or str(path))
