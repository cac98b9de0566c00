"""Data models for the resource-lifecycle leak check."""

from .rule import PairRule, RuleSpec, PatternError
from .result import (
    RuleOutcome,
    ClassificationResult,
    ScanWarning,
    Report,
)

__all__ = [
    "PairRule",
    "RuleSpec",
    "PatternError",
    "RuleOutcome",
    "ClassificationResult",
    "ScanWarning",
    "Report",
]
