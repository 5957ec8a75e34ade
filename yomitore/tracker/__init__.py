"""
Progress tracking and gamification.

Attempt log and streak, badges, buddy leveling, reporting rollups and
persistence of the aggregate.
"""

from yomitore.tracker import badges, buddy, record_log, stats
from yomitore.tracker.badges import badges_by_type, rebuild_from_history, sorted_badges
from yomitore.tracker.buddy import apply_decay, gain_exp
from yomitore.tracker.progress_tracker import ProgressTracker
from yomitore.tracker.record_log import append, recompute_streak
from yomitore.tracker.stats import (
    daily_stats,
    recent_evaluation_summary,
    weekly_stats,
)

__all__ = [
    "badges",
    "buddy",
    "record_log",
    "stats",
    # Log and streak
    "append",
    "recompute_streak",
    # Badges
    "badges_by_type",
    "rebuild_from_history",
    "sorted_badges",
    # Buddy
    "apply_decay",
    "gain_exp",
    # Reporting
    "daily_stats",
    "weekly_stats",
    "recent_evaluation_summary",
    # Persistence
    "ProgressTracker",
]
