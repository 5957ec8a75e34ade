"""Plain-text progress reports: heatmap, weekly bars, badges, buddy and scores."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from yomitore.models import DailyStats, EvaluationSummary, ScoreStats, TrainingStats, WeeklyStats, local_now, to_local
from yomitore.tracker.badges import badges_by_type
from yomitore.tracker.stats import daily_stats, recent_evaluation_summary, weekly_stats

BAR_WIDTH = 20


def heatmap_cell(day: DailyStats) -> str:
    """One heatmap glyph for a day's results."""
    if day.total == 0:
        return "·"
    if day.correct == 0:
        return "x"
    if day.correct == day.total:
        if day.total >= 5:
            return "█"
        if day.total >= 3:
            return "▓"
        return "▒"
    ratio = day.correct / day.total
    if ratio >= 0.7:
        return "▒"
    if ratio >= 0.4:
        return "░"
    return "x"


def render_heatmap(days: dict, now: Optional[datetime] = None) -> str:
    """Render daily stats as rows of seven days, oldest first."""
    today = (to_local(now) if now else local_now()).date()
    count = len(days)
    lines = [f"Last {count} days", ""]
    row = []
    for offset in range(count - 1, -1, -1):
        date = today - timedelta(days=offset)
        row.append(heatmap_cell(days.get(date, DailyStats())))
        if len(row) == 7:
            lines.append(" ".join(row))
            row = []
    if row:
        lines.append(" ".join(row))
    lines.append("")
    lines.append("legend: · none  x mostly wrong  ░ mixed  ▒ good  ▓ great  █ excellent")
    return "\n".join(lines)


def render_weekly(weeks: list[WeeklyStats]) -> str:
    """Render weekly stats as horizontal bars."""
    lines = [f"Last {len(weeks)} weeks", ""]
    peak = max((max(w.correct, w.incorrect) for w in weeks), default=0) or 1
    for week in weeks:
        correct_bar = "█" * int(week.correct / peak * BAR_WIDTH)
        incorrect_bar = "█" * int(week.incorrect / peak * BAR_WIDTH)
        lines.append(f"Week {week.week_number}: ✓ {correct_bar} {week.correct}")
        lines.append(f"        ✗ {incorrect_bar} {week.incorrect}")
    return "\n".join(lines)


def render_badges(stats: TrainingStats) -> str:
    consecutive, cumulative = badges_by_type(stats)
    lines = ["Badges"]
    for title, group in (("Streak", consecutive), ("Milestone", cumulative)):
        shelf = " ".join(f"{b.icon}{b.display_text}" for b in group) or "-"
        lines.append(f"  {title}: {shelf}")
    return "\n".join(lines)


def render_buddy(stats: TrainingStats) -> str:
    buddy = stats.buddy
    filled = int(buddy.progress * 10)
    bar = "■" * filled + "□" * (10 - filled)
    return (
        f"Buddy  Lv.{buddy.level}  [{bar}] {buddy.exp}/{buddy.required_exp}\n"
        f"Current streak: {stats.current_streak}"
    )


def _format_score(name: str, score: Optional[ScoreStats]) -> str:
    if score is None:
        return f"  {name}: -"
    return f"  {name}: avg {score.average:.2f}  median {score.median:.1f}"


def render_summary(summary: EvaluationSummary, days: int) -> str:
    if summary.count == 0:
        return f"Scores (last {days} days): no graded summaries"
    return "\n".join(
        [
            f"Scores (last {days} days, {summary.count} graded)",
            _format_score("Importance", summary.importance),
            _format_score("Conciseness", summary.conciseness),
            _format_score("Accuracy", summary.accuracy),
        ]
    )


def render_report(
    stats: TrainingStats,
    days: int = 30,
    weeks: int = 4,
    summary_days: int = 7,
    now: Optional[datetime] = None,
) -> str:
    """Render the full progress report."""
    now = to_local(now) if now else local_now()
    sections = [
        render_buddy(stats),
        render_badges(stats),
        render_heatmap(daily_stats(stats, days, now=now), now=now),
        render_weekly(weekly_stats(stats, weeks, now=now)),
        render_summary(recent_evaluation_summary(stats, summary_days, now=now), summary_days),
    ]
    return "\n\n".join(sections)
