"""
Configuration loader for the QA gateway.

Builds the process-wide, immutable category -> root table from the base
directory (normally the process working directory) plus fixed relative
offsets. An optional YAML file may override individual offsets, the log
directory and the server name.

The resulting GatewayConfig is constructed once at startup and passed
explicitly to every component. Nothing here is a module-level singleton.

Optional config file (``qalens.yaml`` in the base directory, or --config):

    server_name: qa-mcp-server
    log_dir: .qalens/logs
    categories:
      cypress:
        path: tests/cypress/reports
      drupal:
        path: ../config/sync
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml

from qalens.errors import ConfigError

logger = logging.getLogger(__name__)


LOCATOR_SCHEME = "qa"
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
DEFAULT_SERVER_NAME = "qa-mcp-server"
DEFAULT_CONFIG_FILE = "qalens.yaml"
DEFAULT_LOG_DIR = ".qalens/logs"


@dataclass(frozen=True)
class CategoryDefaults:
    """Static description of a category; only the root offset is configurable."""
    name: str
    offset: str
    title: str
    description: str
    mime_type: str
    placeholder: str = "file"
    suffix: Optional[str] = None
    writable: bool = False


# Fixed category enumeration. Order is the order resources and enums are listed.
CATEGORY_DEFAULTS: tuple[CategoryDefaults, ...] = (
    CategoryDefaults(
        name="cypress",
        offset="tests/cypress/reports",
        title="Cypress Test Reports",
        description="Access Cypress test execution reports",
        mime_type="application/json",
    ),
    CategoryDefaults(
        name="playwright-results",
        offset="tests/playwright/test-results",
        title="Playwright Test Results",
        description="Access Playwright test results",
        mime_type="application/json",
    ),
    CategoryDefaults(
        name="playwright-html",
        offset="tests/playwright/html-reports",
        title="Playwright HTML Reports",
        description="Access Playwright HTML reports",
        mime_type="text/html",
    ),
    CategoryDefaults(
        name="playwright-tests",
        offset="tests/playwright/tests",
        title="Playwright Test Specs",
        description="Access saved Playwright spec files",
        mime_type="application/javascript",
        writable=True,
    ),
    CategoryDefaults(
        name="drupal",
        offset="config/sync",
        title="Drupal Configuration",
        description="Access Drupal configuration YAML files",
        mime_type="text/yaml",
        placeholder="name",
        suffix=".yml",
    ),
)

CATEGORY_NAMES: tuple[str, ...] = tuple(c.name for c in CATEGORY_DEFAULTS)


@dataclass(frozen=True)
class CategorySpec:
    """One row of the category table, with its root resolved."""
    name: str
    root: Path
    title: str
    description: str
    mime_type: str
    placeholder: str = "file"
    suffix: Optional[str] = None
    writable: bool = False

    @property
    def locator_template(self) -> str:
        return f"{LOCATOR_SCHEME}://{self.name}/{{{self.placeholder}}}"


@dataclass(frozen=True)
class GatewayConfig:
    """Complete, immutable gateway configuration."""

    base_dir: Path
    categories: Mapping[str, CategorySpec]
    log_dir: Path
    server_name: str = DEFAULT_SERVER_NAME
    max_file_size: int = MAX_FILE_SIZE
    config_path: Optional[Path] = None

    @property
    def permitted_roots(self) -> tuple[Path, ...]:
        return tuple(spec.root for spec in self.categories.values())

    def category(self, name: str) -> Optional[CategorySpec]:
        return self.categories.get(name)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML ({e})") from e
    except OSError as e:
        raise ConfigError(f"{path}: cannot read ({e})") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def _resolve_root(base_dir: Path, raw: Any, where: str) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(f"{where}: path must be a non-empty string")
    candidate = Path(raw).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    try:
        return candidate.resolve()
    except (OSError, RuntimeError) as e:
        raise ConfigError(f"{where}: cannot resolve {raw!r} ({e})") from e


def load_config(
    base_dir: Path | str | None = None,
    config_path: Path | str | None = None,
) -> GatewayConfig:
    """
    Build the gateway configuration.

    Args:
        base_dir: Directory the default offsets are relative to.
            Defaults to the process working directory.
        config_path: Explicit YAML file. When omitted, ``qalens.yaml`` in
            base_dir is used if it exists.

    Raises:
        ConfigError: unknown category keys, malformed values, or a root that
            cannot be resolved. This is fatal; the gateway must not start.
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    try:
        base = base.expanduser().resolve()
    except (OSError, RuntimeError) as e:
        raise ConfigError(f"cannot resolve base directory {base_dir!r} ({e})") from e

    explicit = config_path is not None
    path = Path(config_path) if explicit else base / DEFAULT_CONFIG_FILE
    data: dict[str, Any] = {}
    if path.is_file():
        data = _read_yaml(path)
        logger.debug("Loaded gateway config from %s", path)
    elif explicit:
        raise ConfigError(f"config file not found: {path}")
    else:
        path = None

    overrides = data.get("categories") or {}
    if not isinstance(overrides, dict):
        raise ConfigError("categories: expected a mapping of category name to settings")
    unknown = sorted(set(overrides) - set(CATEGORY_NAMES))
    if unknown:
        raise ConfigError(
            f"unknown categories {unknown}; valid: {', '.join(CATEGORY_NAMES)}"
        )

    categories: dict[str, CategorySpec] = {}
    for defaults in CATEGORY_DEFAULTS:
        override = overrides.get(defaults.name)
        if override is None:
            raw_path = defaults.offset
        elif isinstance(override, dict) and "path" in override:
            raw_path = override["path"]
        else:
            raise ConfigError(f"categories.{defaults.name}: expected a mapping with a 'path' key")

        categories[defaults.name] = CategorySpec(
            name=defaults.name,
            root=_resolve_root(base, raw_path, f"categories.{defaults.name}"),
            title=defaults.title,
            description=defaults.description,
            mime_type=defaults.mime_type,
            placeholder=defaults.placeholder,
            suffix=defaults.suffix,
            writable=defaults.writable,
        )

    server_name = data.get("server_name", DEFAULT_SERVER_NAME)
    if not isinstance(server_name, str) or not server_name.strip():
        raise ConfigError("server_name: must be a non-empty string")

    log_dir = _resolve_root(base, data.get("log_dir", DEFAULT_LOG_DIR), "log_dir")

    for name, spec in categories.items():
        if not spec.root.is_dir():
            logger.debug("Category root for %s does not exist yet: %s", name, spec.root)

    return GatewayConfig(
        base_dir=base,
        categories=MappingProxyType(categories),
        log_dir=log_dir,
        server_name=server_name,
        config_path=path,
    )
