"""Training session - one generate, summarize, evaluate and record cycle at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Protocol

from yomitore.evaluation.parser import (
    ParsedEvaluation,
    format_evaluation_display,
    parse_evaluation,
)
from yomitore.exceptions import EvaluationParseError, PersistenceError
from yomitore.models import Attempt, Badge, TrainingStats
from yomitore.tracker import record_log
from yomitore.tracker.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)

MALFORMED_RESULT_MESSAGE = "The evaluation result was malformed."


class EvaluationClient(Protocol):
    """What the session needs from the model provider."""

    def generate_text(self, character_count: int) -> str: ...

    def evaluate_summary(self, original_text: str, summary_text: str) -> str: ...


@dataclass
class EvaluationOutcome:
    """What happened when a summary was evaluated."""

    attempt: Attempt
    parsed: Optional[ParsedEvaluation]
    display_text: str
    new_badges: list[Badge] = field(default_factory=list)
    leveled_up: bool = False
    parse_error: Optional[EvaluationParseError] = None
    save_warning: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.attempt.passed


class TrainingSession:
    """
    Owns the training aggregate for the lifetime of the process.

    The aggregate is loaded and reconciled once, mutated in memory by each
    recorded attempt and saved after every attempt.
    """

    def __init__(
        self,
        client: EvaluationClient,
        tracker: ProgressTracker,
        character_count: int = 400,
        now: Optional[datetime] = None,
    ):
        self.client = client
        self.tracker = tracker
        self.character_count = character_count
        self.stats: TrainingStats = tracker.load(now=now)
        self.original_text = ""

    def next_text(self) -> str:
        """Fetch a new practice passage."""
        self.original_text = self.client.generate_text(self.character_count)
        return self.original_text

    def evaluate(self, summary: str, now: Optional[datetime] = None) -> EvaluationOutcome:
        """
        Grade a summary of the current passage and record the attempt.

        A response that cannot be parsed is recorded as a failed attempt with
        no scores attached. Transport errors from the client propagate before
        anything is recorded.

        Args:
            summary: The user's summary.
            now: Timestamp of the attempt. Defaults to the current local time.

        Returns:
            EvaluationOutcome describing the recorded attempt.
        """
        raw = self.client.evaluate_summary(self.original_text, summary)
        return self.record_response(raw, now=now)

    def record_response(self, raw: str, now: Optional[datetime] = None) -> EvaluationOutcome:
        """Parse a raw evaluation response and record the resulting attempt."""
        parse_error = None
        try:
            parsed = parse_evaluation(raw)
        except EvaluationParseError as e:
            logger.warning(f"Malformed evaluation response: {e.message}")
            parsed = None
            parse_error = e

        badge_count = len(self.stats.badges)
        level = self.stats.buddy.level

        if parsed is not None:
            attempt = record_log.append(
                self.stats, parsed.passed, parsed.to_score_detail(), now=now
            )
            display_text = format_evaluation_display(parsed)
        else:
            attempt = record_log.append(self.stats, False, None, now=now)
            display_text = MALFORMED_RESULT_MESSAGE

        outcome = EvaluationOutcome(
            attempt=attempt,
            parsed=parsed,
            display_text=display_text,
            new_badges=self.stats.badges[badge_count:],
            leveled_up=self.stats.buddy.level > level,
            parse_error=parse_error,
        )
        outcome.save_warning = self.save()
        return outcome

    def save(self) -> Optional[str]:
        """
        Save the aggregate.

        Returns:
            None on success, otherwise a warning message. The in-memory
            aggregate stays authoritative and the save is not retried.
        """
        try:
            self.tracker.save(self.stats)
        except PersistenceError as e:
            logger.warning(f"Failed to save stats: {e.message}")
            return f"Warning: failed to save stats: {e.message}"
        return None
