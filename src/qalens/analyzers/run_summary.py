"""
Test Run Summary

Two ways of reading a test run:

1. Marker tally - case-insensitive occurrence counts of failure markers
   (failed, error, timeout, 403) across one or two raw report texts. Each
   marker is counted on its own, so "failed with error" counts twice.
   Status is PASS only when the total is zero.

2. Structured summary - parses the JSON report of each family directly:

   Cypress (mochawesome / mocha):
       { results: [ { tests: [...], suites: [ { tests, suites }, ... ] } ] }
       { stats: { tests, passes, failures, pending } }
       { tests: [ { state: "passed" | "failed" | "pending" } ] }

   Playwright (json reporter):
       { suites: [ { specs: [ { tests: [ { results: [ { status } ] } ] } ],
                     suites: [...] } ] }
       { stats: { expected, unexpected, skipped, flaky } }

   Nested suites are walked recursively, one traversal per family. A report
   that is not JSON at all falls back to the marker tally. A stats count
   that is not a whole number marks that source as errored.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from qalens import logging as qlog


FAILURE_MARKERS: tuple[str, ...] = ("failed", "error", "timeout", "403")


# =============================================================================
# Marker tally
# =============================================================================

@dataclass(frozen=True)
class MarkerTally:
    counts: Dict[str, int]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def status(self) -> str:
        return "PASS" if self.total == 0 else "FAIL"


def tally_failure_markers(*texts: str) -> MarkerTally:
    """Count failure markers across one or more report texts."""
    counts = {marker: 0 for marker in FAILURE_MARKERS}
    for text in texts:
        lowered = text.lower()
        for marker in FAILURE_MARKERS:
            counts[marker] += lowered.count(marker)
    return MarkerTally(counts=counts)


# =============================================================================
# Structured summary
# =============================================================================

@dataclass
class SourceSummary:
    """Counts for one report family."""
    failures: int = 0
    passes: int = 0
    pending: int = 0
    skipped: int = 0
    flaky: int = 0
    total: int = 0
    error: Optional[str] = None
    format: str = "json"
    markers: Dict[str, int] = field(default_factory=dict)

    def to_dict(self, family: str) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "failures": self.failures,
            "passes": self.passes,
        }
        if family == "cypress":
            data["pending"] = self.pending
        else:
            data["skipped"] = self.skipped
            data["flaky"] = self.flaky
        data["total"] = self.total
        data["error"] = self.error
        if self.format != "json":
            data["format"] = self.format
            data["markers"] = dict(self.markers)
        return data


class ReportFormatError(ValueError):
    """A report field holds a value of the wrong shape."""


def _stat_count(stats: Dict[str, Any], *keys: str) -> int:
    """First non-empty count among keys, as a non-negative int."""
    for key in keys:
        value = stats.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            raise ReportFormatError(f"stats.{key} is not a count: {value!r}")
        try:
            count = int(value)
        except (TypeError, ValueError):
            raise ReportFormatError(f"stats.{key} is not a count: {value!r}") from None
        if count < 0:
            raise ReportFormatError(f"stats.{key} is negative: {count}")
        if count:
            return count
    return 0


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _count_cypress_test(test: Dict[str, Any], summary: SourceSummary) -> None:
    summary.total += 1
    state = test.get("state")
    if state == "failed" or test.get("fail"):
        summary.failures += 1
    elif state == "passed" or test.get("pass"):
        summary.passes += 1
    elif state == "pending" or test.get("pending"):
        summary.pending += 1


def _walk_cypress_suite(suite: Dict[str, Any], summary: SourceSummary) -> None:
    for test in _as_list(suite.get("tests")):
        if isinstance(test, dict):
            _count_cypress_test(test, summary)
    for child in _as_list(suite.get("suites")):
        if isinstance(child, dict):
            _walk_cypress_suite(child, summary)


def parse_cypress_report(report: Dict[str, Any]) -> SourceSummary:
    summary = SourceSummary()

    if isinstance(report.get("results"), list):
        # Mochawesome: each result is itself a root suite
        for result in report["results"]:
            if isinstance(result, dict):
                _walk_cypress_suite(result, summary)
    elif isinstance(report.get("stats"), dict):
        stats = report["stats"]
        summary.failures = _stat_count(stats, "failures")
        summary.passes = _stat_count(stats, "passes")
        summary.pending = _stat_count(stats, "pending")
        summary.total = _stat_count(stats, "tests")
    elif isinstance(report.get("tests"), list):
        for test in report["tests"]:
            if isinstance(test, dict):
                _count_cypress_test(test, summary)

    return summary


def _walk_playwright_suites(suites: Iterable[Any], summary: SourceSummary) -> None:
    for suite in suites:
        if not isinstance(suite, dict):
            continue
        for spec in _as_list(suite.get("specs")):
            if not isinstance(spec, dict):
                continue
            for test in _as_list(spec.get("tests")):
                if isinstance(test, dict):
                    _count_playwright_test(test, summary)
        _walk_playwright_suites(_as_list(suite.get("suites")), summary)


def _count_playwright_test(test: Dict[str, Any], summary: SourceSummary) -> None:
    results = [r for r in _as_list(test.get("results")) if isinstance(r, dict)]
    for result in results:
        summary.total += 1
        status = result.get("status")
        if status == "passed":
            summary.passes += 1
        elif status in ("failed", "timedOut"):
            summary.failures += 1
        elif status in ("skipped", "interrupted"):
            summary.skipped += 1

    # Retried test that both failed and passed
    if len(results) > 1:
        statuses = {r.get("status") for r in results}
        if "failed" in statuses and "passed" in statuses:
            summary.flaky += 1


def parse_playwright_report(report: Dict[str, Any]) -> SourceSummary:
    summary = SourceSummary()

    if isinstance(report.get("suites"), list):
        _walk_playwright_suites(report["suites"], summary)
    elif isinstance(report.get("stats"), dict):
        stats = report["stats"]
        summary.failures = _stat_count(stats, "unexpected", "failed")
        summary.passes = _stat_count(stats, "expected", "passed")
        summary.skipped = _stat_count(stats, "skipped")
        summary.flaky = _stat_count(stats, "flaky")
        summary.total = summary.failures + summary.passes + summary.skipped

    return summary


_PARSERS = {
    "cypress": parse_cypress_report,
    "playwright": parse_playwright_report,
}


def summarize_source(text: str, family: str) -> SourceSummary:
    """Parse one report text for a family, falling back to the marker tally."""
    parser = _PARSERS[family]
    try:
        report = json.loads(text)
    except json.JSONDecodeError:
        tally = tally_failure_markers(text)
        return SourceSummary(
            failures=tally.total,
            total=tally.total,
            format="text",
            markers=tally.counts,
        )

    if not isinstance(report, dict):
        return SourceSummary(error=f"Unrecognized {family} report structure")
    try:
        return parser(report)
    except ReportFormatError as e:
        qlog.warn("qa.summary", "Malformed report", family=family, error=str(e))
        return SourceSummary(error=f"Malformed {family} report: {e}")


def format_pass_rate(passes: int, total: int) -> str:
    if total <= 0:
        return "N/A"
    return f"{passes / total * 100:.2f}%"


@dataclass(frozen=True)
class RunSummary:
    cypress: SourceSummary
    playwright: SourceSummary

    @property
    def total_failures(self) -> int:
        return self.cypress.failures + self.playwright.failures

    @property
    def total_passes(self) -> int:
        return self.cypress.passes + self.playwright.passes

    @property
    def total_tests(self) -> int:
        return self.cypress.total + self.playwright.total

    @property
    def status(self) -> str:
        if self.cypress.error or self.playwright.error:
            return "ERROR"
        if self.total_failures > 0:
            return "FAIL"
        if self.playwright.flaky > 0:
            return "WARNING"
        return "PASS"

    @property
    def recommendation(self) -> str:
        status = self.status
        if status == "ERROR":
            return "Error parsing one or more reports - check report files"
        if status == "FAIL":
            return f"{self.total_failures} test(s) failed - review failures before release"
        if status == "WARNING":
            return f"{self.playwright.flaky} flaky test(s) detected - monitor stability"
        return "All tests passed - release looks safe"

    def overall(self) -> Dict[str, Any]:
        return {
            "totalFailures": self.total_failures,
            "totalPasses": self.total_passes,
            "totalTests": self.total_tests,
            "passRate": format_pass_rate(self.total_passes, self.total_tests),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "cypress": self.cypress.to_dict("cypress"),
                "playwright": self.playwright.to_dict("playwright"),
            },
            "overall": self.overall(),
            "status": self.status,
            "recommendation": self.recommendation,
        }
