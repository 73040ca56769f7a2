"""
QA tool handlers.

Every handler takes the shared ToolContext and its validated argument model,
and returns a JSON-serializable payload. Handlers raise GatewayError
subclasses for every recoverable failure; the ToolExecutor turns those into
error-flagged results.

File-touching handlers always go locator -> resolver -> guard -> file
access, in that order. No handler reads or writes a path the guard has not
approved.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from qalens import logging as qlog
from qalens.analyzers import (
    RunSummary,
    SourceSummary,
    sample_failure_lines,
    scan_config_risks,
    summarize_source,
    triage_text,
)
from qalens.config_loader import CategorySpec, GatewayConfig
from qalens.confinement import PathGuard, normalize
from qalens.errors import AccessDenied, GatewayError, InvalidLocator, UnknownCategory
from qalens.file_access import FileAccessService, FileReadResult
from qalens.locators import LocatorResolver
from qalens.tools.contracts import (
    AnalyzeConfigRiskArgs,
    AnalyzeTestFailuresArgs,
    ListQaResourcesArgs,
    ReadQaResourceArgs,
    SavePlaywrightTestArgs,
    SummarizeTestRunArgs,
    TriageTestFailuresArgs,
)
from qalens.tools.registry import ToolRegistry


PLAYWRIGHT_TESTS_CATEGORY = "playwright-tests"


@dataclass(frozen=True)
class ToolContext:
    """Immutable collaborators shared by all handlers."""
    config: GatewayConfig
    resolver: LocatorResolver
    guard: PathGuard
    files: FileAccessService

    @classmethod
    def from_config(cls, config: GatewayConfig) -> ToolContext:
        return cls(
            config=config,
            resolver=LocatorResolver.from_config(config),
            guard=PathGuard(config.permitted_roots),
            files=FileAccessService(config.max_file_size),
        )

    def confine(self, locator: str) -> tuple[CategorySpec, Path]:
        """Resolve a locator and confine it to its own category's root."""
        parsed = self.resolver.parse(locator)
        spec = self.resolver.category_for(parsed.category)
        path = self.resolver.resolve(locator)
        return spec, self.guard.assert_allowed(path, locator=locator, root=spec.root)

    def read_locator(self, locator: str, *, label: str = "Resource") -> FileReadResult:
        """Resolve, confine and read; raises on any failure."""
        _, safe_path = self.confine(locator)
        return self.files.read(safe_path, locator=locator).raise_for_status(label=label)

    def write_locator(self, locator: str, content: str) -> tuple[Path, int]:
        """Confine and write; only writable categories accept content."""
        spec, safe_path = self.confine(locator)
        if not spec.writable:
            qlog.warn("guard.deny", "Write to read-only category", locator=locator, category=spec.name)
            raise AccessDenied(locator)
        if safe_path == normalize(spec.root):
            raise InvalidLocator(locator, "filename must name a file")
        if self.files.is_directory(safe_path, locator=locator):
            raise InvalidLocator(locator, "filename names a directory")
        return safe_path, self.files.write_text(safe_path, content, locator=locator)


# =============================================================================
# Handlers
# =============================================================================

def list_qa_resources(ctx: ToolContext, args: ListQaResourcesArgs) -> Dict[str, Any]:
    spec = ctx.config.category(args.category)
    if spec is None:
        raise UnknownCategory(args.category)

    root = ctx.guard.assert_allowed(
        spec.root, locator=ctx.resolver.locator_for(spec.name, ""), root=spec.root,
    )
    files = ctx.files.list_directory(root)
    return {
        "category": spec.name,
        "path": str(root),
        "count": len(files),
        "files": files,
    }


def triage_test_failures(ctx: ToolContext, args: TriageTestFailuresArgs) -> Dict[str, Any]:
    report = ctx.read_locator(args.report_locator, label="Report")
    triage = triage_text(report.content or "")
    return {
        "reportLocator": args.report_locator,
        "category": triage.category,
        "confidence": triage.confidence,
        "filePath": str(report.path),
    }


def _summarize_locator(ctx: ToolContext, locator: str, family: str) -> SourceSummary:
    # A broken source is reported in its own summary, never aborts the run
    try:
        report = ctx.read_locator(locator, label="Report")
    except GatewayError as e:
        qlog.warn("qa.summary", "Report unavailable", family=family, locator=locator, code=e.code)
        return SourceSummary(error=e.message)
    return summarize_source(report.content or "", family)


def summarize_test_run(ctx: ToolContext, args: SummarizeTestRunArgs) -> Dict[str, Any]:
    summary = RunSummary(
        cypress=_summarize_locator(ctx, args.cypress_report_locator, "cypress"),
        playwright=_summarize_locator(ctx, args.playwright_report_locator, "playwright"),
    )
    return summary.to_dict()


def analyze_config_risk(ctx: ToolContext, args: AnalyzeConfigRiskArgs) -> Dict[str, Any]:
    return scan_config_risks(args.config_text).to_dict()


def read_qa_resource(ctx: ToolContext, args: ReadQaResourceArgs) -> Dict[str, Any]:
    result = ctx.read_locator(args.resource_locator)
    return {
        "resourceLocator": args.resource_locator,
        "filePath": str(result.path),
        "mimeType": result.mime_type,
        "size": result.size,
        "content": result.content,
    }


def analyze_test_failures(ctx: ToolContext, args: AnalyzeTestFailuresArgs) -> Dict[str, Any]:
    return sample_failure_lines(args.report_text)


def save_playwright_test(ctx: ToolContext, args: SavePlaywrightTestArgs) -> Dict[str, Any]:
    locator = ctx.resolver.locator_for(PLAYWRIGHT_TESTS_CATEGORY, args.filename)
    path, size = ctx.write_locator(locator, args.content)
    qlog.info("qa.save", "Saved Playwright test", locator=locator, size=size)
    return {
        "success": True,
        "filename": args.filename,
        "locator": locator,
        "path": str(path),
        "size": size,
    }


# =============================================================================
# Registry
# =============================================================================

def build_default_registry() -> ToolRegistry:
    """All QA tools, registered in advertised order and frozen."""
    registry = ToolRegistry()
    registry.tool(
        "list_qa_resources",
        "List available QA reports or config files by category",
        ListQaResourcesArgs,
    )(list_qa_resources)
    registry.tool(
        "triage_test_failures",
        "Analyze a QA report and classify failures by type",
        TriageTestFailuresArgs,
    )(triage_test_failures)
    registry.tool(
        "summarize_test_run",
        "Summarize test results from Cypress and Playwright reports",
        SummarizeTestRunArgs,
    )(summarize_test_run)
    registry.tool(
        "analyze_config_risk",
        "Analyze site configuration text for security and permission risks",
        AnalyzeConfigRiskArgs,
    )(analyze_config_risk)
    registry.tool(
        "read_qa_resource",
        "Read the content of a QA resource file",
        ReadQaResourceArgs,
    )(read_qa_resource)
    registry.tool(
        "analyze_test_failures",
        "Count failure lines in raw report text and return the first samples",
        AnalyzeTestFailuresArgs,
    )(analyze_test_failures)
    registry.tool(
        "save_playwright_test",
        "Save a Playwright test file under the Playwright tests directory",
        SavePlaywrightTestArgs,
    )(save_playwright_test)
    return registry.freeze()
