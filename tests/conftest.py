"""Pytest fixtures for yomitore tests."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from pathlib import Path

import pytest

from yomitore.evaluation.parser import OverallEvaluation, ParsedEvaluation
from yomitore.models import TrainingStats
from yomitore.tracker.progress_tracker import ProgressTracker

VALID_RESPONSE = """Here is my evaluation.

- Appropriateness: yes
- Importance: 4
- Conciseness: 3
- Accuracy: 5
- Improvement 1: Mention the second cause.
- Improvement 2: Drop the opening sentence.
- Improvement 3: Keep the original order of events.
- Overall: pass
"""


@pytest.fixture
def now() -> datetime:
    """Noon today, local time, so day arithmetic never crosses midnight."""
    return datetime.combine(datetime.now().date(), time(12)).astimezone()


@pytest.fixture
def yesterday(now: datetime) -> datetime:
    return datetime.combine(now.date() - timedelta(days=1), time(12)).astimezone()


@pytest.fixture
def stats() -> TrainingStats:
    return TrainingStats()


@pytest.fixture
def tracker(tmp_path: Path) -> ProgressTracker:
    return ProgressTracker(storage_path=tmp_path / "yomitore")


@pytest.fixture
def valid_response() -> str:
    return VALID_RESPONSE


@pytest.fixture
def parsed_evaluation() -> ParsedEvaluation:
    return ParsedEvaluation(
        appropriate=True,
        importance=4,
        conciseness=3,
        accuracy=5,
        improvement1="Mention the second cause.",
        improvement2="Drop the opening sentence.",
        improvement3="Keep the original order of events.",
        overall=OverallEvaluation.PASS,
    )


class FakeClient:
    """Evaluation client returning canned responses."""

    def __init__(self, responses: list[str] | None = None, text: str = "本文"):
        self.responses = list(responses or [])
        self.text = text
        self.evaluated: list[tuple[str, str]] = []

    def generate_text(self, character_count: int) -> str:
        return self.text

    def evaluate_summary(self, original_text: str, summary_text: str) -> str:
        self.evaluated.append((original_text, summary_text))
        return self.responses.pop(0)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
