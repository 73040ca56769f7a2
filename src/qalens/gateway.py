"""
Gateway - the protocol-neutral request surface.

Wires the immutable configuration into the catalog, resolver, guard, file
access service and tool executor, and exposes the four protocol operations
as plain dict-returning methods. The MCP transport and the CLI are both thin
adapters over this class.

    list_resources()          -> {"resources": [...]}
    read_resource(locator)    -> {"contents": [{locator, mimeType, text}]}
    list_tools()              -> {"tools": [...]}
    call_tool(name, args)     -> {"content": [...], "isError"?: true}

read_resource and call_tool never raise for request-level faults.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from qalens import logging as qlog
from qalens.catalog import ResourceCatalog
from qalens.config_loader import GatewayConfig
from qalens.errors import GatewayError
from qalens.file_access import mime_type_for
from qalens.tools.executor import ToolExecutor, ToolResult
from qalens.tools.qa_tools import ToolContext, build_default_registry
from qalens.tools.registry import ToolRegistry
from qalens.trace import get_trace_context

ERROR_MIME_TYPE = "text/plain"
CONCRETE_RESOURCE_LIMIT = 50


class Gateway:
    def __init__(self, config: GatewayConfig, registry: Optional[ToolRegistry] = None):
        self.config = config
        self.context = ToolContext.from_config(config)
        self.catalog = ResourceCatalog(config)
        self.registry = registry if registry is not None else build_default_registry()
        self.executor = ToolExecutor(self.registry, self.context)

    @classmethod
    def from_config(cls, config: GatewayConfig) -> Gateway:
        return cls(config)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def list_resources(self) -> Dict[str, Any]:
        return {"resources": [d.to_dict() for d in self.catalog.list()]}

    def read_resource(self, locator: str) -> Dict[str, Any]:
        trace = get_trace_context()
        qlog.set_trace_id(trace.trace_id)
        qlog.info("gateway.resource", "Reading resource", locator=locator)
        try:
            result = self.context.read_locator(locator)
        except GatewayError as e:
            qlog.warn("gateway.resource", "Resource read failed", locator=locator, code=e.code)
            return {"contents": [{"locator": locator, "mimeType": ERROR_MIME_TYPE, "text": e.message}]}
        finally:
            qlog.clear_trace_id()

        return {
            "contents": [
                {"locator": locator, "mimeType": result.mime_type, "text": result.content},
            ]
        }

    def list_concrete_resources(self, limit_per_category: int = CONCRETE_RESOURCE_LIMIT) -> List[Dict[str, Any]]:
        """Existing files directly under each category root, capped per category."""
        entries: List[Dict[str, Any]] = []
        for spec in self.config.categories.values():
            if not self.context.guard.is_allowed(spec.root, root=spec.root):
                continue
            try:
                listed = self.context.files.list_directory(spec.root)
            except GatewayError as e:
                qlog.warn("gateway.resource", "Category listing failed", category=spec.name, code=e.code)
                continue
            names = [name for name in listed if (spec.root / name).is_file()]
            for name in names[:limit_per_category]:
                locator = self.context.resolver.locator_for(spec.name, name)
                entries.append({
                    "locator": locator,
                    "name": f"{spec.title}: {name}",
                    "mimeType": mime_type_for(name),
                })
        return entries

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def list_tools(self) -> Dict[str, Any]:
        return {"tools": [d.to_dict() for d in self.registry.list()]}

    def invoke_tool(self, name: str, args: Optional[Mapping[str, Any]] = None) -> ToolResult:
        return self.executor.invoke(name, args)

    def call_tool(self, name: str, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.invoke_tool(name, args).to_protocol()
