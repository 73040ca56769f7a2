"""
Tests for the tool registry and executor error boundary.
"""

import json

import pytest
from pydantic import BaseModel, Field

from qalens import logging as qlog
from qalens.tools import ToolContext, ToolExecutor, ToolRegistry, ToolSpec, build_default_registry
from qalens.tools.contracts import ToolArgs


class EchoArgs(ToolArgs):
    message: str = Field(alias="messageText", description="Text to echo")
    repeat: int = Field(default=1, description="Times to repeat")


def echo(ctx, args):
    return {"echo": args.message * args.repeat}


def explode(ctx, args):
    raise RuntimeError("disk on fire")


@pytest.fixture
def registry():
    reg = ToolRegistry()
    reg.register(ToolSpec("echo", "Echo a message", EchoArgs, echo))
    reg.register(ToolSpec("explode", "Always fails", EchoArgs, explode))
    return reg.freeze()


@pytest.fixture
def executor(registry, config):
    return ToolExecutor(registry, ToolContext.from_config(config))


class TestRegistry:
    def test_descriptor_schema_from_model(self, registry):
        descriptor = registry.get("echo").descriptor
        schema = descriptor.input_schema
        assert schema["type"] == "object"
        assert schema["required"] == ["messageText"]
        assert schema["properties"]["messageText"] == {"type": "string", "description": "Text to echo"}
        assert schema["properties"]["repeat"]["type"] == "integer"

    def test_frozen_refuses_registration(self, registry):
        with pytest.raises(RuntimeError):
            registry.register(ToolSpec("late", "Too late", EchoArgs, echo))

    def test_duplicate_name_refused(self):
        reg = ToolRegistry()
        reg.register(ToolSpec("echo", "Echo", EchoArgs, echo))
        with pytest.raises(ValueError):
            reg.register(ToolSpec("echo", "Echo again", EchoArgs, echo))

    def test_default_registry_tools(self):
        reg = build_default_registry()
        assert reg.frozen
        assert [d.name for d in reg.list()] == [
            "list_qa_resources",
            "triage_test_failures",
            "summarize_test_run",
            "analyze_config_risk",
            "read_qa_resource",
            "analyze_test_failures",
            "save_playwright_test",
        ]

    def test_category_enum_advertised(self):
        schema = build_default_registry().get("list_qa_resources").descriptor.input_schema
        assert schema["properties"]["category"]["enum"] == [
            "cypress",
            "playwright-results",
            "playwright-html",
            "playwright-tests",
            "drupal",
        ]

    def test_wire_names_are_camel_case(self):
        schema = build_default_registry().get("summarize_test_run").descriptor.input_schema
        assert schema["required"] == ["cypressReportLocator", "playwrightReportLocator"]


class TestExecutor:
    def test_success(self, executor):
        result = executor.invoke("echo", {"messageText": "hi", "repeat": 2})
        assert not result.is_error
        assert result.payload == {"echo": "hihi"}
        assert result.code == "WA-SYS-S-001"

    def test_python_field_name_accepted(self, executor):
        result = executor.invoke("echo", {"message": "hi"})
        assert result.payload == {"echo": "hi"}

    def test_unknown_tool(self, executor):
        result = executor.invoke("nope", {})
        assert result.is_error
        assert result.payload["error"] == "Unknown tool: nope"
        assert result.payload["code"] == "MCP-SYS-I-001"

    @pytest.mark.parametrize("args", [{}, None, {"messageText": None}, {"messageText": ""}])
    def test_missing_required(self, executor, args):
        result = executor.invoke("echo", args)
        assert result.is_error
        assert result.payload["code"] == "MCP-SYS-I-002"
        assert result.payload["missing"] == ["messageText"]
        assert "messageText" in result.payload["error"]

    def test_invalid_type(self, executor):
        result = executor.invoke("echo", {"messageText": "hi", "repeat": "many"})
        assert result.is_error
        assert result.payload["code"] == "MCP-SYS-I-003"
        assert "repeat" in result.payload["error"]

    def test_non_mapping_args(self, executor):
        result = executor.invoke("echo", ["hi"])
        assert result.is_error
        assert result.payload["code"] == "MCP-SYS-I-003"

    def test_handler_exception_contained(self, executor):
        result = executor.invoke("explode", {"messageText": "x"})
        assert result.is_error
        assert result.payload == {"error": "disk on fire", "code": "MCP-SYS-E-001"}


class TestToolResult:
    def test_protocol_success_omits_is_error(self, executor):
        protocol = executor.invoke("echo", {"messageText": "hi"}).to_protocol()
        assert "isError" not in protocol
        assert protocol["content"][0]["type"] == "text"
        assert json.loads(protocol["content"][0]["text"]) == {"echo": "hi"}

    def test_protocol_error_flagged(self, executor):
        protocol = executor.invoke("nope").to_protocol()
        assert protocol["isError"] is True

    def test_text_is_indented_json(self, executor):
        text = executor.invoke("echo", {"messageText": "hi"}).text
        assert text == json.dumps({"echo": "hi"}, indent=2)


class TestLogging:
    def test_tool_end_logged(self, executor, isolated_log):
        executor.invoke("echo", {"messageText": "hi"})
        lines = [
            json.loads(line)
            for line in (isolated_log / "qalens-mcp.log").read_text(encoding="utf-8").splitlines()
        ]
        messages = [entry["msg"] for entry in lines]
        assert "Executing tool" in messages
        end = next(entry for entry in lines if entry["msg"] == "tool_end")
        assert end["data"]["tool"] == "echo"
        assert end["data"]["code"] == "WA-SYS-S-001"
        assert end["level"] == "INFO"
        assert end["trace_id"] != "no-trace"

    def test_error_logged_at_warn(self, executor, isolated_log):
        executor.invoke("nope")
        lines = [
            json.loads(line)
            for line in (isolated_log / "qalens-mcp.log").read_text(encoding="utf-8").splitlines()
        ]
        end = next(entry for entry in lines if entry["msg"] == "tool_end")
        assert end["level"] == "WARN"
        assert end["data"]["code"] == "MCP-SYS-I-001"

    def test_trace_cleared_after_invoke(self, executor):
        executor.invoke("echo", {"messageText": "hi"})
        assert qlog.get_trace_id() == "no-trace"

    def test_one_trace_per_invocation(self, executor, isolated_log):
        executor.invoke("echo", {"messageText": "a"})
        executor.invoke("echo", {"messageText": "b"})
        lines = [
            json.loads(line)
            for line in (isolated_log / "qalens-mcp.log").read_text(encoding="utf-8").splitlines()
        ]
        ends = [entry for entry in lines if entry["msg"] == "tool_end"]
        assert len({entry["trace_id"] for entry in ends}) == 2
        assert len({entry["data"]["session_id"] for entry in ends}) == 1

    def test_credentials_redacted_and_long_values_clipped(self, isolated_log):
        qlog.info("test", "scrub", api_token="abc", note="x" * 1500)
        entry = json.loads((isolated_log / "qalens-mcp.log").read_text(encoding="utf-8").splitlines()[-1])
        assert entry["data"]["api_token"] == "***REDACTED***"
        assert entry["data"]["note"].endswith("...[1500 chars]")
