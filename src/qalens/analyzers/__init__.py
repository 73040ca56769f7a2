"""
qalens.analyzers - stateless text-pattern analyzers over report and config text.
"""
from qalens.analyzers.risk import RiskReport, scan_config_risks, severity_for
from qalens.analyzers.run_summary import (
    MarkerTally,
    ReportFormatError,
    RunSummary,
    SourceSummary,
    format_pass_rate,
    parse_cypress_report,
    parse_playwright_report,
    summarize_source,
    tally_failure_markers,
)
from qalens.analyzers.triage import TriageResult, sample_failure_lines, triage_text

__all__ = [
    "RiskReport",
    "scan_config_risks",
    "severity_for",
    "MarkerTally",
    "ReportFormatError",
    "RunSummary",
    "SourceSummary",
    "format_pass_rate",
    "parse_cypress_report",
    "parse_playwright_report",
    "summarize_source",
    "tally_failure_markers",
    "TriageResult",
    "sample_failure_lines",
    "triage_text",
]
