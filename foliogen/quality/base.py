"""
base.py — Shared result types and the validator base class.

A validator owns no state between calls: `validate()` builds a fresh
_Checklist, parses its own soup and returns a ValidatorResult.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..assets import AssetCatalog
from ..brief import DesignBrief
from ..profile import PortfolioProfile

SEVERITIES = ("low", "medium", "high", "critical")


@dataclass(frozen=True)
class ValidationIssue:
    type: str
    severity: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "severity": self.severity, "message": self.message}


@dataclass
class ValidatorResult:
    score: int
    issues: List[ValidationIssue] = field(default_factory=list)
    passed: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "passed": list(self.passed),
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class ValidationContext:
    """What the validators may compare the document against."""
    profile: PortfolioProfile
    catalog: AssetCatalog
    brief: Optional[DesignBrief] = None

    @classmethod
    def for_profile(cls, profile: PortfolioProfile, brief: Optional[DesignBrief] = None) -> "ValidationContext":
        return cls(profile=profile, catalog=AssetCatalog.from_profile(profile), brief=brief)


class _Checklist:
    def __init__(self):
        self.passed: List[str] = []
        self.issues: List[ValidationIssue] = []
        self.suggestions: List[str] = []

    def ok(self, message: str) -> None:
        self.passed.append(message)

    def issue(self, type_: str, message: str, severity: str = "medium") -> None:
        if severity not in SEVERITIES:
            raise ValueError(f"unknown severity {severity!r}")
        self.issues.append(ValidationIssue(type_, severity, message))

    def suggest(self, message: str) -> None:
        self.suggestions.append(message)

    def result(self) -> ValidatorResult:
        total = len(self.passed) + len(self.issues)
        score = round(len(self.passed) / total * 100) if total else 0
        return ValidatorResult(
            score=score,
            issues=self.issues,
            passed=self.passed,
            suggestions=self.suggestions,
        )


class BaseValidator:
    name = "base"

    def validate(self, html: str, context: ValidationContext) -> ValidatorResult:
        soup = BeautifulSoup(html or "", "html.parser")
        checks = _Checklist()
        self.check(soup, html or "", context, checks)
        return checks.result()

    def check(self, soup: BeautifulSoup, html: str, context: ValidationContext, checks: _Checklist) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement check()")


def style_text(soup: BeautifulSoup) -> str:
    """All CSS in the document: <style> blocks plus inline style attributes."""
    blocks = [tag.get_text() for tag in soup.find_all("style")]
    inline = [tag.get("style", "") for tag in soup.find_all(style=True)]
    return "\n".join(blocks + inline)


def visible_text(soup: BeautifulSoup) -> str:
    body = soup.body or soup
    chunks = []
    for node in body.find_all(string=True):
        if node.parent is not None and node.parent.name in ("script", "style"):
            continue
        chunks.append(str(node))
    return " ".join(" ".join(chunks).split())
