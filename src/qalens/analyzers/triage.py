"""
Failure Triage

Classifies a failure report's root-cause family from its raw text with
literal substring rules. Rules are checked in priority order and the FIRST
match wins, so a report mentioning both a timeout and a 403 is triaged as
timing/async.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class TriageRule:
    """A substring rule; matches if any needle occurs in the lowercased text."""
    category: str
    confidence: str
    needles: Tuple[str, ...]


@dataclass(frozen=True)
class TriageResult:
    category: str
    confidence: str
    matched: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "confidence": self.confidence}


# Priority order matters.
TRIAGE_RULES: Tuple[TriageRule, ...] = (
    TriageRule("timing/async", "high", ("timeout", "timed out")),
    TriageRule("permission/role", "high", ("403", "permission")),
    TriageRule("ui/selector", "medium", ("element not found",)),
)

UNKNOWN = TriageResult(category="unknown", confidence="low")


def triage_text(text: str) -> TriageResult:
    """Classify report text; falls back to unknown/low."""
    lowered = text.lower()
    for rule in TRIAGE_RULES:
        matched = tuple(n for n in rule.needles if n in lowered)
        if matched:
            return TriageResult(rule.category, rule.confidence, matched)
    return UNKNOWN


MAX_FAILURE_SAMPLES = 10


def sample_failure_lines(report_text: str, limit: int = MAX_FAILURE_SAMPLES) -> Dict[str, Any]:
    """Count lines mentioning 'fail' (any case) and keep the first few."""
    failures: List[str] = [
        line for line in report_text.split("\n") if "fail" in line.lower()
    ]
    return {
        "totalFailures": len(failures),
        "samples": failures[:limit],
    }
