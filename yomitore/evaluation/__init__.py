"""
Evaluation parsing and formatting.
"""

from yomitore.evaluation.parser import (
    Field,
    OverallEvaluation,
    ParsedEvaluation,
    classify_line,
    format_evaluation,
    format_evaluation_display,
    parse_evaluation,
)

__all__ = [
    "Field",
    "OverallEvaluation",
    "ParsedEvaluation",
    "classify_line",
    "format_evaluation",
    "format_evaluation_display",
    "parse_evaluation",
]
