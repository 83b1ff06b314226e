"""Consistency validation of attributed goals against recorded scores (read-only)."""

from .consistency import (
    GROUP_BY_CHOICES,
    classify,
    evaluate,
    suggest,
    validate,
    validate_all,
)
from .types import (
    STATUS_CONSISTENT,
    STATUS_INCONSISTENT,
    STATUS_MISSING,
    STATUS_NO_SCORE,
    STATUS_PARTIAL,
    SUGGEST_OVER,
    SUGGEST_SKEW,
    SUGGEST_UNDER,
    CorrectionCandidate,
    MatchValidation,
    ValidationReport,
)

__all__ = [
    "GROUP_BY_CHOICES",
    "STATUS_CONSISTENT",
    "STATUS_INCONSISTENT",
    "STATUS_MISSING",
    "STATUS_NO_SCORE",
    "STATUS_PARTIAL",
    "SUGGEST_OVER",
    "SUGGEST_SKEW",
    "SUGGEST_UNDER",
    "CorrectionCandidate",
    "MatchValidation",
    "ValidationReport",
    "classify",
    "evaluate",
    "suggest",
    "validate",
    "validate_all",
]
