"""Badge engine - awards streak and milestone badges from the attempt log."""

from __future__ import annotations

import logging
from datetime import datetime

from yomitore.models import Badge, BadgeKind, BadgeType, TrainingStats

logger = logging.getLogger(__name__)

BADGE_STEP = 5
MAX_STREAK_BADGE = 50
MAX_CUMULATIVE_BADGE = 100


def _award(stats: TrainingStats, badge_type: BadgeType, earned_at: datetime) -> bool:
    if stats.has_badge(badge_type):
        return False
    badge = Badge(badge_type=badge_type, earned_at=earned_at)
    stats.badges.append(badge)
    logger.info(f"Badge earned: {badge.icon} {badge.display_text}")
    return True


def award_for_pass(
    stats: TrainingStats,
    streak: int,
    total: int,
    earned_at: datetime,
) -> list[Badge]:
    """
    Award the badges a passed attempt qualifies for.

    Args:
        stats: The aggregate to update.
        streak: Consecutive passes including this one.
        total: Passed attempts in the whole log including this one.
        earned_at: Timestamp recorded on new badges.

    Returns:
        The badges newly added, possibly empty.
    """
    candidates = []
    if streak > 0 and streak % BADGE_STEP == 0 and streak <= MAX_STREAK_BADGE:
        candidates.append(BadgeType.consecutive_streak(streak))
    if total > 0 and total % BADGE_STEP == 0 and total <= MAX_CUMULATIVE_BADGE:
        candidates.append(BadgeType.cumulative_milestone(total))

    awarded = []
    for badge_type in candidates:
        if _award(stats, badge_type, earned_at):
            awarded.append(stats.badges[-1])
    return awarded


def rebuild_from_history(stats: TrainingStats) -> None:
    """
    Replace the badge set with the one the attempt log implies.

    Replays every attempt in order with local counters, so the result equals
    what incremental awarding over the same log would have produced. Each
    badge is dated by the attempt that earned it.

    Args:
        stats: The aggregate to repair.
    """
    before = len(stats.badges)
    stats.badges = []
    streak = 0
    total = 0
    for attempt in stats.results:
        if attempt.passed:
            streak += 1
            total += 1
            award_for_pass(stats, streak, total, attempt.timestamp)
        else:
            streak = 0

    if len(stats.badges) != before:
        logger.info(f"Rebuilt badges from history: {before} -> {len(stats.badges)}")


def sorted_badges(stats: TrainingStats) -> list[Badge]:
    """All badges, most recently earned first."""
    return sorted(stats.badges, key=lambda b: b.earned_at, reverse=True)


def badges_by_type(stats: TrainingStats) -> tuple[list[Badge], list[Badge]]:
    """
    Split badges by family for display.

    Returns:
        (consecutive streak badges, cumulative milestone badges), each sorted
        by earned_at descending.
    """
    ordered = sorted_badges(stats)
    consecutive = [b for b in ordered if b.badge_type.kind is BadgeKind.CONSECUTIVE_STREAK]
    cumulative = [b for b in ordered if b.badge_type.kind is BadgeKind.CUMULATIVE_MILESTONE]
    return consecutive, cumulative
