"""
analyzer.py — Run the four validators side by side and weigh their scores.

Validators parse their own soup and share nothing, so they run in a thread
pool. A validator that blows up does not sink the report: it is scored at
the neutral baseline with a `validator_error` issue instead.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import logging
from rich.console import Console

from ..errors import ValidationFailure
from .accessibility import AccessibilityValidator
from .base import BaseValidator, ValidationContext, ValidationIssue, ValidatorResult
from .content import ContentValidator
from .design import DesignValidator
from .technical import TechnicalValidator

console = Console()
logger = logging.getLogger(__name__)

WEIGHTS: Dict[str, float] = {
    "content": 0.30,
    "design": 0.25,
    "technical": 0.25,
    "accessibility": 0.20,
}

STATUS_BANDS = (
    (90, "excellent"),
    (80, "good"),
    (70, "fair"),
    (60, "poor"),
)


def default_validators() -> List[BaseValidator]:
    return [ContentValidator(), DesignValidator(), TechnicalValidator(), AccessibilityValidator()]


def status_for_score(score: float) -> str:
    for floor, label in STATUS_BANDS:
        if score >= floor:
            return label
    return "critical"


def suggestion_priority(score: float) -> str:
    if score < 60:
        return "high"
    if score < 80:
        return "medium"
    return "low"


@dataclass
class ValidationReport:
    overall_score: int
    status: str
    per_validator: Dict[str, ValidatorResult]
    suggestions: List[Dict[str, str]] = field(default_factory=list)
    auto_fix_applied: bool = False
    fixes_applied: List[str] = field(default_factory=list)

    def score(self, name: str) -> int:
        return self.per_validator[name].score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall": {"score": self.overall_score, "status": self.status},
            "per_validator": {k: v.to_dict() for k, v in self.per_validator.items()},
            "suggestions": list(self.suggestions),
            "auto_fix_applied": self.auto_fix_applied,
            "fixes_applied": list(self.fixes_applied),
        }


class QualityAnalyzer:
    def __init__(
        self,
        validators: Optional[Sequence[BaseValidator]] = None,
        neutral_score: int = 50,
    ):
        self.validators = list(validators) if validators is not None else default_validators()
        self.neutral_score = neutral_score

    def _neutral(self, name: str, exc: BaseException) -> ValidatorResult:
        failure = ValidationFailure(name, str(exc) or type(exc).__name__)
        logger.warning(str(failure))
        return ValidatorResult(
            score=self.neutral_score,
            issues=[ValidationIssue("validator_error", "medium", str(failure))],
        )

    def run_validators(self, html: str, context: ValidationContext) -> Dict[str, ValidatorResult]:
        results: Dict[str, ValidatorResult] = {}
        with ThreadPoolExecutor(max_workers=len(self.validators) or 1) as executor:
            futures = {
                executor.submit(v.validate, html, context): v.name
                for v in self.validators
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    result = future.result()
                    if not 0 <= result.score <= 100:
                        raise ValueError(f"score {result.score} out of range")
                    results[name] = result
                except Exception as exc:
                    results[name] = self._neutral(name, exc)
        # report in the fixed validator order, not completion order
        return {v.name: results[v.name] for v in self.validators}

    def analyze(self, html: str, context: ValidationContext) -> ValidationReport:
        console.print("\n[bold cyan]→ Validating portfolio quality...[/bold cyan]")
        per_validator = self.run_validators(html, context)

        weighted = sum(
            per_validator[name].score * WEIGHTS.get(name, 0.0)
            for name in per_validator
        )
        total_weight = sum(WEIGHTS.get(name, 0.0) for name in per_validator) or 1.0
        overall = int(round(max(0.0, min(100.0, weighted / total_weight))))

        suggestions = [
            {"category": name, "priority": suggestion_priority(result.score), "message": msg}
            for name, result in per_validator.items()
            for msg in result.suggestions
        ]
        report = ValidationReport(
            overall_score=overall,
            status=status_for_score(overall),
            per_validator=per_validator,
            suggestions=suggestions,
        )
        breakdown = "  ".join(f"{n} {r.score}" for n, r in per_validator.items())
        console.print(f"  [dim]quality: {overall}/100 ({report.status}) — {breakdown}[/dim]")
        return report
