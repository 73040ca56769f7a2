"""
Tool argument contracts.

One pydantic model per tool. Field names are snake_case in Python and
camelCase on the wire (aliases); both spellings are accepted on input.
The advertised input schema of every tool is derived from these models.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from qalens.config_loader import CATEGORY_NAMES


class ToolArgs(BaseModel):
    """Base for all tool argument models."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ListQaResourcesArgs(ToolArgs):
    # Plain str with an advertised enum: the handler reports unknown
    # categories itself as "Unknown category: <name>".
    category: str = Field(
        description="Resource category to list",
        json_schema_extra={"enum": list(CATEGORY_NAMES)},
    )


class TriageTestFailuresArgs(ToolArgs):
    report_locator: str = Field(
        alias="reportLocator",
        description="qa:// locator of the failure report (e.g. qa://cypress/results.json)",
    )


class SummarizeTestRunArgs(ToolArgs):
    cypress_report_locator: str = Field(
        alias="cypressReportLocator",
        description="qa:// locator of the Cypress report",
    )
    playwright_report_locator: str = Field(
        alias="playwrightReportLocator",
        description="qa:// locator of the Playwright report",
    )


class AnalyzeConfigRiskArgs(ToolArgs):
    config_text: str = Field(
        alias="configText",
        description="Raw site configuration text to scan",
    )


class ReadQaResourceArgs(ToolArgs):
    resource_locator: str = Field(
        alias="resourceLocator",
        description="qa:// locator of the resource to read",
    )


class AnalyzeTestFailuresArgs(ToolArgs):
    report_text: str = Field(
        alias="reportText",
        description="Raw test report text",
    )


class SavePlaywrightTestArgs(ToolArgs):
    filename: str = Field(
        description="Spec file name relative to the Playwright tests directory (e.g. login.spec.js)",
    )
    content: str = Field(description="Test file content")
