"""
Tool Executor - the single error boundary for tool calls.

invoke(name, args) never raises. Every invocation:

1. Generates a trace_id and sets it for the canonical log
2. Looks the tool up in the frozen registry (unknown -> MCP-SYS-I-001)
3. Checks required arguments: absent, null or "" (-> MCP-SYS-I-002)
4. Validates the mapping into the tool's pydantic model (-> MCP-SYS-I-003)
5. Runs the handler; GatewayError -> its own code, anything else -> MCP-SYS-E-001
6. Emits one canonical tool_end log line with code and duration

Log level of the tool_end line follows the reply type:
    S -> INFO, I -> WARN, D -> WARN, E -> ERROR
"""
from __future__ import annotations

import json
import time
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from qalens import logging as qlog
from qalens.errors import GatewayError, InvalidArguments, MissingArgument, UnknownTool
from qalens.reply_codes import get_code, get_message
from qalens.tools.qa_tools import ToolContext
from qalens.tools.registry import ToolRegistry, ToolSpec
from qalens.trace import TraceContext, get_trace_context


SUCCESS_CODE = "WA-SYS-S-001"
UNHANDLED_CODE = "MCP-SYS-E-001"

_LEVEL_BY_TYPE = {
    "S": qlog.info,
    "I": qlog.warn,
    "D": qlog.warn,
    "E": qlog.error,
}


@dataclass(frozen=True)
class ToolResult:
    payload: Dict[str, Any]
    is_error: bool = False
    code: str = SUCCESS_CODE

    @property
    def text(self) -> str:
        return json.dumps(self.payload, indent=2, ensure_ascii=False)

    def to_protocol(self) -> Dict[str, Any]:
        """Wire shape: one text block with the JSON payload; isError only when set."""
        result: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            result["isError"] = True
        return result

    @classmethod
    def from_error(cls, exc: GatewayError) -> ToolResult:
        return cls(payload=exc.to_payload(), is_error=True, code=exc.code)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ToolExecutor:
    """Dispatches tool calls by name through a frozen registry."""

    def __init__(self, registry: ToolRegistry, context: ToolContext):
        self.registry = registry
        self.context = context

    def invoke(self, name: str, args: Optional[Mapping[str, Any]] = None) -> ToolResult:
        trace = get_trace_context()
        qlog.set_trace_id(trace.trace_id)
        start = time.perf_counter()

        qlog.info("gateway.tool", "Executing tool", tool=name)
        try:
            result = self._dispatch(name, args)
        except GatewayError as e:
            result = ToolResult.from_error(e)
        except Exception as e:
            qlog.error(
                "gateway.tool",
                "Unhandled exception in tool",
                tool=name,
                error=str(e),
                traceback=traceback.format_exc(),
            )
            result = ToolResult(
                payload={"error": get_message(UNHANDLED_CODE, error=str(e)), "code": UNHANDLED_CODE},
                is_error=True,
                code=UNHANDLED_CODE,
            )
        finally:
            duration_ms = (time.perf_counter() - start) * 1000

        self._log_tool_end(name, trace, result, duration_ms)
        qlog.clear_trace_id()
        return result

    def _dispatch(self, name: str, args: Optional[Mapping[str, Any]]) -> ToolResult:
        spec = self.registry.get(name)
        if spec is None:
            raise UnknownTool(name)

        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            raise InvalidArguments(name, f"expected an object, got {type(args).__name__}")

        self._check_required(spec, args)

        try:
            model = spec.args_model.model_validate(dict(args))
        except ValidationError as e:
            raise InvalidArguments(name, _format_validation_error(e)) from e

        payload = spec.handler(self.context, model)
        return ToolResult(payload=payload)

    @staticmethod
    def _check_required(spec: ToolSpec, args: Mapping[str, Any]) -> None:
        missing = []
        for wire_name, attr in spec.required_fields():
            value = args.get(wire_name, args.get(attr))
            if value is None or value == "":
                missing.append(wire_name)
        if missing:
            raise MissingArgument(spec.name, missing)

    @staticmethod
    def _log_tool_end(name: str, trace: TraceContext, result: ToolResult, duration_ms: float) -> None:
        reply = get_code(result.code)
        reply_type = reply.reply_type if reply else ("E" if result.is_error else "S")
        log_fn = _LEVEL_BY_TYPE.get(reply_type, qlog.info)
        log_fn(
            "gateway.tool",
            "tool_end",
            tool=name,
            code=result.code,
            reply_type=reply_type,
            is_error=result.is_error,
            session_id=trace.session_id,
            duration_ms=round(duration_ms, 2),
        )
