"""Buddy progression - levels the companion up on passes, down on idleness."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from yomitore.models import TrainingStats, local_now, to_local

logger = logging.getLogger(__name__)

EXP_PER_PASS = 1
INACTIVITY_DECAY = timedelta(days=3)


def gain_exp(stats: TrainingStats) -> bool:
    """
    Credit the buddy for one passed attempt.

    Promotion is a single step: the gain is always one point, so a single
    event can never cross two thresholds.

    Returns:
        True if the buddy levelled up.
    """
    buddy = stats.buddy
    buddy.exp += EXP_PER_PASS
    if buddy.exp >= buddy.required_exp:
        buddy.level += 1
        buddy.exp = 0
        logger.info(f"Buddy reached level {buddy.level}")
        return True
    return False


def apply_decay(stats: TrainingStats, now: Optional[datetime] = None) -> bool:
    """
    Penalise the buddy after a long break from training.

    If the last attempt is at least three days old the buddy drops one level
    (never below 1) and loses its experience. ``last_training_at`` is moved to
    ``now`` so the same idle period is only penalised once.

    Args:
        stats: The aggregate to update.
        now: Reference instant. Defaults to the current local time.

    Returns:
        True if the decay was applied.
    """
    if stats.last_training_at is None:
        return False

    now = to_local(now) if now else local_now()
    if now - to_local(stats.last_training_at) < INACTIVITY_DECAY:
        return False

    buddy = stats.buddy
    previous = buddy.level
    buddy.level = max(1, buddy.level - 1)
    buddy.exp = 0
    stats.last_training_at = now
    logger.info(f"Buddy decayed after inactivity: level {previous} -> {buddy.level}")
    return True
