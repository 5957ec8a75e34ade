"""Core data models for yomitore."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """Current instant as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def to_local(moment: datetime) -> datetime:
    """Convert an instant to local time. Naive values are taken as local."""
    return moment.astimezone()


def _parse_instant(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return to_local(datetime.fromisoformat(str(value)))
    except ValueError:
        logger.warning(f"Ignoring unparseable timestamp: {value!r}")
        return None


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any, default: bool = False) -> bool:
    # Only JSON booleans count; bool("false") would be True
    return value if isinstance(value, bool) else default


def _as_list(value: Any, name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Ignoring non-list {name}: {value!r}")
        return []
    return value


@dataclass(frozen=True)
class ScoreDetail:
    """Scores the model gave a single summary."""

    appropriate: bool
    importance: int
    conciseness: int
    accuracy: int
    improvement1: str = ""
    improvement2: str = ""
    improvement3: str = ""
    overall_passed: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "appropriate": self.appropriate,
            "importance": self.importance,
            "conciseness": self.conciseness,
            "accuracy": self.accuracy,
            "improvement1": self.improvement1,
            "improvement2": self.improvement2,
            "improvement3": self.improvement3,
            "overall_passed": self.overall_passed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ScoreDetail:
        """Create from dictionary, defaulting missing or unreadable fields.

        An unreadable score becomes 0, which score statistics ignore.
        """
        return cls(
            appropriate=_as_bool(data.get("appropriate")),
            importance=_as_int(data.get("importance")),
            conciseness=_as_int(data.get("conciseness")),
            accuracy=_as_int(data.get("accuracy")),
            improvement1=str(data.get("improvement1") or ""),
            improvement2=str(data.get("improvement2") or ""),
            improvement3=str(data.get("improvement3") or ""),
            overall_passed=_as_bool(data.get("overall_passed")),
        )


@dataclass(frozen=True)
class Attempt:
    """One completed generate -> summarize -> evaluate cycle."""

    timestamp: datetime
    passed: bool
    evaluation: Optional[ScoreDetail] = None

    @property
    def local_date(self) -> date:
        return to_local(self.timestamp).date()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "passed": self.passed,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Attempt:
        """Create from dictionary.

        Raises:
            ValueError: If the timestamp is missing or malformed.
        """
        timestamp = datetime.fromisoformat(str(data["timestamp"]))
        evaluation = data.get("evaluation")
        return cls(
            timestamp=to_local(timestamp),
            passed=_as_bool(data.get("passed")),
            evaluation=ScoreDetail.from_dict(evaluation) if isinstance(evaluation, dict) else None,
        )


class BadgeKind(Enum):
    """The two families of achievement badges."""

    CONSECUTIVE_STREAK = "consecutive_streak"
    CUMULATIVE_MILESTONE = "cumulative_milestone"

    @property
    def icon(self) -> str:
        icons = {
            "consecutive_streak": "🔥",
            "cumulative_milestone": "⭐",
        }
        return icons[self.value]

    @classmethod
    def from_string(cls, value: str) -> BadgeKind:
        """Create BadgeKind from its value or its legacy tag name."""
        legacy = {
            "ConsecutiveStreak": cls.CONSECUTIVE_STREAK,
            "CumulativeMilestone": cls.CUMULATIVE_MILESTONE,
        }
        if value in legacy:
            return legacy[value]
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Invalid badge kind: {value}")


@dataclass(frozen=True)
class BadgeType:
    """A badge family plus the threshold reached, e.g. a 10 streak."""

    kind: BadgeKind
    threshold: int

    @classmethod
    def consecutive_streak(cls, threshold: int) -> BadgeType:
        return cls(BadgeKind.CONSECUTIVE_STREAK, threshold)

    @classmethod
    def cumulative_milestone(cls, threshold: int) -> BadgeType:
        return cls(BadgeKind.CUMULATIVE_MILESTONE, threshold)


@dataclass
class Badge:
    """An achievement granted the first time a threshold is crossed."""

    badge_type: BadgeType
    earned_at: datetime

    @property
    def icon(self) -> str:
        """Emoji icon for this badge."""
        return self.badge_type.kind.icon

    @property
    def display_text(self) -> str:
        """Short label, e.g. "5連" or "累積5"."""
        n = self.badge_type.threshold
        if self.badge_type.kind is BadgeKind.CONSECUTIVE_STREAK:
            return f"{n}連"
        return f"累積{n}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "kind": self.badge_type.kind.value,
            "threshold": self.badge_type.threshold,
            "earned_at": self.earned_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Badge:
        """Create from dictionary.

        Accepts both the current flat form and the legacy tagged form
        ``{"badge_type": {"ConsecutiveStreak": 5}, "earned_at": ...}``.

        Raises:
            ValueError: If the entry cannot be interpreted.
        """
        legacy = data.get("badge_type")
        if isinstance(legacy, dict) and len(legacy) == 1:
            ((tag, threshold),) = legacy.items()
            kind = BadgeKind.from_string(tag)
        else:
            kind = BadgeKind.from_string(str(data["kind"]))
            threshold = data["threshold"]

        earned_at = _parse_instant(data.get("earned_at"))
        if earned_at is None:
            raise ValueError(f"Badge without earned_at: {data!r}")

        return cls(badge_type=BadgeType(kind, int(threshold)), earned_at=earned_at)


@dataclass
class Buddy:
    """Leveling companion that grows with correct summaries."""

    level: int = 1
    exp: int = 0

    @property
    def required_exp(self) -> int:
        """Experience needed to leave the current level."""
        return 10 if self.level == 2 else 5

    @property
    def progress(self) -> float:
        """Fraction of the way to the next level."""
        return min(1.0, self.exp / self.required_exp)

    def to_dict(self) -> dict:
        return {"level": self.level, "exp": self.exp}

    @classmethod
    def from_dict(cls, data: dict) -> Buddy:
        return cls(
            level=max(1, int(data.get("level", 1))),
            exp=max(0, int(data.get("exp", 0))),
        )


@dataclass
class DailyStats:
    """Correct/incorrect counts for one calendar day."""

    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect


@dataclass
class WeeklyStats:
    """Correct/incorrect counts for one rolling 7-day window."""

    week_number: int
    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect


@dataclass(frozen=True)
class ScoreStats:
    """Average and median of one score column."""

    average: float
    median: float


@dataclass
class EvaluationSummary:
    """Score statistics over the recent scored attempts."""

    count: int
    importance: Optional[ScoreStats] = None
    conciseness: Optional[ScoreStats] = None
    accuracy: Optional[ScoreStats] = None


@dataclass
class TrainingStats:
    """The persisted aggregate: attempt log, badges, streak and buddy."""

    results: list[Attempt] = field(default_factory=list)
    badges: list[Badge] = field(default_factory=list)
    current_streak: int = 0
    buddy: Buddy = field(default_factory=Buddy)
    last_training_at: Optional[datetime] = None

    @property
    def total_passed(self) -> int:
        """Number of passed attempts in the whole log."""
        return sum(1 for attempt in self.results if attempt.passed)

    def has_badge(self, badge_type: BadgeType) -> bool:
        # Linear scan; the badge set is capped at 30 entries
        return any(badge.badge_type == badge_type for badge in self.badges)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "results": [attempt.to_dict() for attempt in self.results],
            "badges": [badge.to_dict() for badge in self.badges],
            "current_streak": self.current_streak,
            "buddy": self.buddy.to_dict(),
            "last_training_at": (
                self.last_training_at.isoformat() if self.last_training_at else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> TrainingStats:
        """Create from dictionary, tolerating missing, renamed and bad fields."""
        results = []
        for entry in _as_list(data.get("results"), "results"):
            try:
                results.append(Attempt.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable attempt {entry!r}: {e}")

        badges = []
        for entry in _as_list(data.get("badges"), "badges"):
            try:
                badges.append(Badge.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable badge {entry!r}: {e}")

        # "pet" is the name older files used for the buddy
        buddy_data = data.get("buddy") or data.get("pet") or {}
        try:
            buddy = Buddy.from_dict(buddy_data)
        except (TypeError, ValueError, AttributeError):
            logger.warning(f"Resetting unreadable buddy {buddy_data!r}")
            buddy = Buddy()

        try:
            current_streak = int(data.get("current_streak", 0))
        except (TypeError, ValueError):
            current_streak = 0

        return cls(
            results=results,
            badges=badges,
            current_streak=current_streak,
            buddy=buddy,
            last_training_at=_parse_instant(data.get("last_training_at")),
        )
