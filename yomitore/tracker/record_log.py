"""Training record log - the append-only attempt log and its streak counter."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from yomitore.models import Attempt, ScoreDetail, TrainingStats, local_now, to_local
from yomitore.tracker import badges, buddy

logger = logging.getLogger(__name__)


def append(
    stats: TrainingStats,
    passed: bool,
    detail: Optional[ScoreDetail] = None,
    now: Optional[datetime] = None,
) -> Attempt:
    """
    Record one attempt and apply every dependent update.

    Pushes the attempt to the tail of the log, stamps ``last_training_at``,
    moves the streak (+1 on a pass, 0 on a fail) and, for a pass, awards
    badges and credits the buddy. A failure never removes badges.

    Args:
        stats: The aggregate to update.
        passed: Whether the summary passed.
        detail: Scores attached to the attempt, if the evaluation parsed.
        now: Timestamp of the attempt. Defaults to the current local time.

    Returns:
        The appended Attempt.
    """
    timestamp = to_local(now) if now else local_now()
    attempt = Attempt(timestamp=timestamp, passed=passed, evaluation=detail)

    stats.results.append(attempt)
    stats.last_training_at = timestamp

    if passed:
        stats.current_streak += 1
        badges.award_for_pass(stats, stats.current_streak, stats.total_passed, timestamp)
        buddy.gain_exp(stats)
    else:
        stats.current_streak = 0

    logger.debug(
        f"Recorded {'pass' if passed else 'fail'}; streak={stats.current_streak} "
        f"total={len(stats.results)}"
    )
    return attempt


def recompute_streak(stats: TrainingStats) -> int:
    """
    Recalculate the streak from the log, ignoring the stored counter.

    Counts passed attempts backwards from the tail until the first failure.

    Returns:
        The recomputed streak, also written to ``stats.current_streak``.
    """
    streak = 0
    for attempt in reversed(stats.results):
        if not attempt.passed:
            break
        streak += 1

    if streak != stats.current_streak:
        logger.info(f"Corrected stored streak {stats.current_streak} -> {streak}")
    stats.current_streak = streak
    return streak
