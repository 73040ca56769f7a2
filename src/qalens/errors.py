"""
Gateway error taxonomy.

Every recoverable failure inside the gateway is one of these exceptions.
They are raised by the resolver, guard, file access service and tool
handlers, and converted to structured error results at the Tool Executor
(tools) or Gateway.read_resource (resources) boundary. Only ConfigError is
fatal, and only at startup.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from qalens.reply_codes import get_message


class GatewayError(Exception):
    """Base class. Carries a registry reply code and structured details."""

    code = "MCP-SYS-E-001"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def to_payload(self) -> Dict[str, Any]:
        """Error payload for the wire: message, code, then details."""
        payload: Dict[str, Any] = {"error": self.message, "code": self.code}
        payload.update(self.details)
        return payload


class InvalidLocator(GatewayError):
    """Malformed locator, unsupported scheme, or bad path segments."""

    code = "WA-RES-I-001"

    def __init__(self, locator: str, reason: str):
        super().__init__(get_message(self.code, locator=locator, reason=reason))
        self.locator = locator
        self.reason = reason


class UnknownCategory(InvalidLocator):
    """Category is not one of the fixed enumeration."""

    code = "WA-RES-I-002"

    def __init__(self, category: str, locator: Optional[str] = None):
        GatewayError.__init__(self, get_message(self.code, category=category))
        self.locator = locator or category
        self.reason = "unknown category"
        self.category = category


class AccessDenied(GatewayError):
    """Resolved path escapes every permitted root."""

    code = "EN-GATE-D-001"

    def __init__(self, target: str):
        super().__init__(get_message(self.code, target=target))
        self.target = target


class NotFound(GatewayError):
    """Resolved path does not exist."""

    code = "WA-READ-I-001"

    def __init__(self, locator: str, expected_path: str, *, label: str = "Resource"):
        super().__init__(
            get_message(self.code, label=label, locator=locator),
            details={"expectedPath": expected_path},
        )
        self.locator = locator
        self.expected_path = expected_path


class FileAccessFailed(GatewayError):
    """The OS rejected a read, listing or write of an approved path."""

    code = "WA-FILE-E-001"

    def __init__(self, action: str, target: str, error: str):
        super().__init__(get_message(self.code, action=action, target=target, error=error))
        self.action = action
        self.target = target


class TooLarge(GatewayError):
    """File exceeds the size ceiling."""

    code = "EN-READ-D-001"

    def __init__(self, size: int, max_size: int):
        super().__init__(
            get_message(
                self.code,
                size_mb=f"{size / 1024 / 1024:.2f}",
                max_mb=f"{max_size // (1024 * 1024)}",
            ),
            details={"size": size, "maxSize": max_size},
        )
        self.size = size
        self.max_size = max_size


class UnknownTool(GatewayError):
    code = "MCP-SYS-I-001"

    def __init__(self, name: str):
        super().__init__(get_message(self.code, name=name))
        self.name = name


class MissingArgument(GatewayError):
    code = "MCP-SYS-I-002"

    def __init__(self, tool: str, missing: list[str]):
        super().__init__(
            get_message(self.code, missing=", ".join(missing)),
            details={"tool": tool, "missing": list(missing)},
        )
        self.missing = list(missing)


class InvalidArguments(GatewayError):
    code = "MCP-SYS-I-003"

    def __init__(self, tool: str, error: str):
        super().__init__(get_message(self.code, name=tool, error=error), details={"tool": tool})


class ConfigError(GatewayError):
    """Unusable startup configuration. Fatal: the gateway must not serve."""

    code = "MCP-CFG-E-001"

    def __init__(self, error: str):
        super().__init__(get_message(self.code, error=error))
