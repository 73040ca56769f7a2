"""
Configuration risk scan.

Presence-based keyword scan over raw (case-preserved) site configuration
text. Each keyword contributes at most one risk entry no matter how often it
occurs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class RiskKeyword:
    keyword: str
    message: str


RISK_KEYWORDS: tuple[RiskKeyword, ...] = (
    RiskKeyword("anonymous", "Anonymous access enabled"),
    RiskKeyword("publish", "Content publish permission detected"),
    RiskKeyword("administer", "Admin permissions found"),
)

NO_RISK_RECOMMENDATION = "No obvious security risks detected"
RISK_RECOMMENDATION = "Review permissions and access controls"


def severity_for(risk_count: int) -> str:
    """0 -> low, 1-2 -> medium, 3+ -> high."""
    if risk_count == 0:
        return "low"
    if risk_count <= 2:
        return "medium"
    return "high"


@dataclass(frozen=True)
class RiskReport:
    risks: tuple[str, ...]

    @property
    def risk_count(self) -> int:
        return len(self.risks)

    @property
    def severity(self) -> str:
        return severity_for(self.risk_count)

    @property
    def recommendation(self) -> str:
        return RISK_RECOMMENDATION if self.risks else NO_RISK_RECOMMENDATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risks": list(self.risks),
            "riskCount": self.risk_count,
            "severity": self.severity,
            "recommendation": self.recommendation,
        }


def scan_config_risks(config_text: str) -> RiskReport:
    risks: List[str] = [rk.message for rk in RISK_KEYWORDS if rk.keyword in config_text]
    return RiskReport(risks=tuple(risks))
