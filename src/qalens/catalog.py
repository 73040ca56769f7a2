"""Resource Catalog: static resource descriptors derived from the category table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from qalens.config_loader import GatewayConfig


@dataclass(frozen=True)
class ResourceDescriptor:
    locator_template: str
    name: str
    description: str
    mime_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "locatorTemplate": self.locator_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


class ResourceCatalog:
    """Built once from the config; list() never touches the file system."""

    def __init__(self, config: GatewayConfig):
        self._descriptors: tuple[ResourceDescriptor, ...] = tuple(
            ResourceDescriptor(
                locator_template=spec.locator_template,
                name=spec.title,
                description=spec.description,
                mime_type=spec.mime_type,
            )
            for spec in config.categories.values()
        )

    def list(self) -> tuple[ResourceDescriptor, ...]:
        return self._descriptors
