"""
yomitore

A reading-comprehension trainer: the model writes a passage, you summarize it,
the model grades the summary, and progress is tracked with streaks, badges
and a buddy that levels up with you.
"""

from yomitore.config import YomitoreConfig
from yomitore.evaluation import (
    OverallEvaluation,
    ParsedEvaluation,
    format_evaluation,
    format_evaluation_display,
    parse_evaluation,
)
from yomitore.exceptions import (
    ApiError,
    ConfigurationError,
    DuplicateFieldError,
    EvaluationParseError,
    InvalidApiKeyError,
    InvalidValueError,
    MissingFieldError,
    NoChoicesError,
    PersistenceError,
    YomitoreError,
)
from yomitore.models import (
    Attempt,
    Badge,
    BadgeKind,
    BadgeType,
    Buddy,
    DailyStats,
    EvaluationSummary,
    ScoreDetail,
    ScoreStats,
    TrainingStats,
    WeeklyStats,
)
from yomitore.session import EvaluationOutcome, TrainingSession
from yomitore.tracker import ProgressTracker

__version__ = "0.4.0"
__all__ = [
    # Models
    "Attempt",
    "Badge",
    "BadgeKind",
    "BadgeType",
    "Buddy",
    "DailyStats",
    "EvaluationSummary",
    "ScoreDetail",
    "ScoreStats",
    "TrainingStats",
    "WeeklyStats",
    # Config
    "YomitoreConfig",
    # Exceptions
    "YomitoreError",
    "EvaluationParseError",
    "DuplicateFieldError",
    "MissingFieldError",
    "InvalidValueError",
    "PersistenceError",
    "ApiError",
    "InvalidApiKeyError",
    "NoChoicesError",
    "ConfigurationError",
    # Evaluation
    "OverallEvaluation",
    "ParsedEvaluation",
    "parse_evaluation",
    "format_evaluation",
    "format_evaluation_display",
    # Tracking
    "ProgressTracker",
    "TrainingSession",
    "EvaluationOutcome",
]
