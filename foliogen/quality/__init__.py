from .analyzer import QualityAnalyzer, ValidationReport, default_validators, status_for_score
from .autofix import apply_fixes
from .base import BaseValidator, ValidationContext, ValidationIssue, ValidatorResult

__all__ = [
    "BaseValidator",
    "QualityAnalyzer",
    "ValidationContext",
    "ValidationIssue",
    "ValidationReport",
    "ValidatorResult",
    "apply_fixes",
    "default_validators",
    "status_for_score",
]
