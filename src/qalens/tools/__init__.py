"""
qalens.tools - tool contracts, registry, handlers and the executor.
"""
from qalens.tools.executor import ToolExecutor, ToolResult
from qalens.tools.qa_tools import ToolContext, build_default_registry
from qalens.tools.registry import ToolDescriptor, ToolRegistry, ToolSpec

__all__ = [
    "ToolExecutor",
    "ToolResult",
    "ToolContext",
    "build_default_registry",
    "ToolDescriptor",
    "ToolRegistry",
    "ToolSpec",
]
