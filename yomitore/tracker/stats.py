"""Stats aggregator - daily/weekly rollups and score summaries for reports."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from yomitore.models import (
    DailyStats,
    EvaluationSummary,
    ScoreStats,
    TrainingStats,
    WeeklyStats,
    local_now,
    to_local,
)


def _reference_time(now: Optional[datetime]) -> datetime:
    return to_local(now) if now else local_now()


def daily_stats(
    stats: TrainingStats,
    days: int,
    now: Optional[datetime] = None,
) -> dict[date, DailyStats]:
    """
    Count correct/incorrect attempts per local calendar day.

    Args:
        stats: The aggregate to read.
        days: Number of days ending today, today included.
        now: Reference instant. Defaults to the current local time.

    Returns:
        One DailyStats per date in the window, zero-filled.
    """
    today = _reference_time(now).date()
    buckets = {today - timedelta(days=i): DailyStats() for i in range(days)}

    for attempt in stats.results:
        bucket = buckets.get(attempt.local_date)
        if bucket is None:
            continue
        if attempt.passed:
            bucket.correct += 1
        else:
            bucket.incorrect += 1

    return buckets


def weekly_stats(
    stats: TrainingStats,
    weeks: int,
    now: Optional[datetime] = None,
) -> list[WeeklyStats]:
    """
    Count attempts in rolling 7-day windows ending now.

    Windows are half-open, ``[start, start + 7 days)``, and not aligned to
    calendar weeks. Week 1 is the oldest, week ``weeks`` the newest and ends
    at ``now``.

    Args:
        stats: The aggregate to read.
        weeks: Number of windows.
        now: Reference instant. Defaults to the current local time.

    Returns:
        WeeklyStats ordered oldest first.
    """
    now = _reference_time(now)
    week = timedelta(weeks=1)

    result = []
    for index in range(weeks):
        start = now - week * (weeks - index)
        end = start + week
        bucket = WeeklyStats(week_number=index + 1)
        for attempt in stats.results:
            if start <= attempt.timestamp < end:
                if attempt.passed:
                    bucket.correct += 1
                else:
                    bucket.incorrect += 1
        result.append(bucket)

    return result


def _median(values: list[int]) -> float:
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[middle])
    return (ordered[middle - 1] + ordered[middle]) / 2


def score_stats(values: list[int]) -> Optional[ScoreStats]:
    """Average and median of a score column, or None when it is empty.

    Values outside 1-5 (e.g. defaulted fields of old records) are dropped.
    """
    values = [v for v in values if 1 <= v <= 5]
    if not values:
        return None
    return ScoreStats(average=sum(values) / len(values), median=_median(values))


def recent_evaluation_summary(
    stats: TrainingStats,
    days: int,
    now: Optional[datetime] = None,
) -> EvaluationSummary:
    """
    Summarise the scores of recent graded attempts.

    Only attempts dated on or after ``today - (days - 1)`` that carry a
    ScoreDetail are counted.

    Args:
        stats: The aggregate to read.
        days: Size of the window in days, today included.
        now: Reference instant. Defaults to the current local time.

    Returns:
        EvaluationSummary; with count 0 every score column is None.
    """
    today = _reference_time(now).date()
    cutoff = today - timedelta(days=days - 1)

    scored = [
        attempt.evaluation
        for attempt in stats.results
        if attempt.evaluation is not None and attempt.local_date >= cutoff
    ]
    if not scored:
        return EvaluationSummary(count=0)

    return EvaluationSummary(
        count=len(scored),
        importance=score_stats([s.importance for s in scored]),
        conciseness=score_stats([s.conciseness for s in scored]),
        accuracy=score_stats([s.accuracy for s in scored]),
    )
