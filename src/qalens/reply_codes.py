"""
Reply Code Registry - Single Source of Truth for gateway reply codes.

Every error payload produced by the gateway carries one of these codes.
Codes are stable identifiers; messages may evolve but codes must not change
meaning. Callers branch on the code (or on ``isError``), never on message text.

Code Format: LAYER-AREA-TYPE-NNN
    Layers: MCP (transport / dispatch), WA (resolution and reads),
            EN (enforcement: confinement and size policy)

Layer ownership rules:
    WA  -> May emit: S, I, E    Must NOT emit: D
    EN  -> May emit: S, D, E    Must NOT emit: I
    MCP -> May emit: I, E       Must NOT emit: S, D
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional


ReplyType = Literal["S", "I", "D", "E"]
Layer = Literal["MCP", "WA", "EN"]

LAYER_ALLOWED_TYPES: Dict[str, tuple[str, ...]] = {
    "WA": ("S", "I", "E"),
    "EN": ("S", "D", "E"),
    "MCP": ("I", "E"),
}


@dataclass(frozen=True)
class ReplyCode:
    """Definition of a reply code in the registry."""
    code: str
    reply_type: ReplyType
    layer: Layer
    semantics: str
    message_template: str

    def format_message(self, **params) -> str:
        """Format the message template with provided parameters."""
        try:
            return self.message_template.format(**params)
        except KeyError:
            return self.message_template


# =============================================================================
# Registry Definition
# =============================================================================

_REGISTRY_LIST: List[ReplyCode] = [
    # =========================================================================
    # MCP / Dispatch
    # =========================================================================
    ReplyCode(
        code="MCP-SYS-I-001",
        reply_type="I",
        layer="MCP",
        semantics="No tool is registered under the requested name.",
        message_template="Unknown tool: {name}",
    ),
    ReplyCode(
        code="MCP-SYS-I-002",
        reply_type="I",
        layer="MCP",
        semantics="Tool refused due to missing required arguments.",
        message_template="Missing required argument: {missing}",
    ),
    ReplyCode(
        code="MCP-SYS-I-003",
        reply_type="I",
        layer="MCP",
        semantics="Tool arguments failed schema validation.",
        message_template="Invalid arguments for {name}: {error}",
    ),
    ReplyCode(
        code="MCP-SYS-E-001",
        reply_type="E",
        layer="MCP",
        semantics="Unhandled exception occurred during tool execution.",
        message_template="{error}",
    ),
    ReplyCode(
        code="MCP-CFG-E-001",
        reply_type="E",
        layer="MCP",
        semantics="Startup configuration is unusable; the gateway cannot serve.",
        message_template="Configuration error: {error}",
    ),

    # =========================================================================
    # WA / Resolution + Reads
    # =========================================================================
    ReplyCode(
        code="WA-SYS-S-001",
        reply_type="S",
        layer="WA",
        semantics="Tool completed successfully.",
        message_template="Tool completed successfully.",
    ),
    ReplyCode(
        code="WA-RES-I-001",
        reply_type="I",
        layer="WA",
        semantics="Locator string is malformed or uses an unsupported scheme.",
        message_template="Invalid qa:// locator: {locator} ({reason})",
    ),
    ReplyCode(
        code="WA-RES-I-002",
        reply_type="I",
        layer="WA",
        semantics="Locator or argument names a category outside the fixed set.",
        message_template="Unknown category: {category}",
    ),
    ReplyCode(
        code="WA-READ-I-001",
        reply_type="I",
        layer="WA",
        semantics="Resolved path does not exist.",
        message_template="{label} not found: {locator}",
    ),
    ReplyCode(
        code="WA-FILE-E-001",
        reply_type="E",
        layer="WA",
        semantics="The filesystem refused an operation on a confined path.",
        message_template="Cannot {action} {target}: {error}",
    ),

    # =========================================================================
    # EN / Enforcement
    # =========================================================================
    ReplyCode(
        code="EN-GATE-D-001",
        reply_type="D",
        layer="EN",
        semantics="Resolved path falls outside every permitted root.",
        message_template="Access denied: {target}",
    ),
    ReplyCode(
        code="EN-READ-D-001",
        reply_type="D",
        layer="EN",
        semantics="File exceeds the size ceiling; content was not loaded.",
        message_template="File too large: {size_mb}MB (max: {max_mb}MB)",
    ),
]


# =============================================================================
# Registry as Dict (for fast lookup)
# =============================================================================

REGISTRY: Dict[str, ReplyCode] = {}


def _build_registry() -> None:
    """Build the registry dict from the list, validating uniqueness."""
    seen_codes: set[str] = set()

    for entry in _REGISTRY_LIST:
        if entry.code in seen_codes:
            raise ValueError(f"Duplicate reply code in registry: {entry.code}")

        parts = entry.code.split("-")
        if len(parts) != 4:
            raise ValueError(f"Invalid code format: {entry.code} (expected LAYER-AREA-TYPE-NNN)")

        if parts[0] != entry.layer:
            raise ValueError(f"Layer mismatch: {entry.code} declared layer '{entry.layer}'")

        code_type = parts[2]
        if code_type != entry.reply_type:
            raise ValueError(
                f"Code type mismatch: {entry.code} has type '{code_type}' "
                f"but reply_type is '{entry.reply_type}'"
            )

        if entry.reply_type not in LAYER_ALLOWED_TYPES[entry.layer]:
            raise ValueError(
                f"Layer {entry.layer} cannot emit type {entry.reply_type} ({entry.code})"
            )

        seen_codes.add(entry.code)
        REGISTRY[entry.code] = entry


def get_code(code: str) -> Optional[ReplyCode]:
    """Get a reply code definition, or None if not found."""
    return REGISTRY.get(code)


def get_message(code: str, **params) -> str:
    """Get formatted message for a code."""
    entry = get_code(code)
    if entry is None:
        return f"Unknown code: {code}"
    return entry.format_message(**params)


# Build registry on import
_build_registry()
