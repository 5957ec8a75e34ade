"""Evaluation parser - turns a free-text model verdict into structured scores.

The model is asked to answer with a bullet list such as::

    - Appropriateness: yes
    - Importance: 4
    - Conciseness: 3
    - Accuracy: 5
    - Improvement 1: Mention the second cause.
    - Improvement 2: Drop the opening sentence.
    - Improvement 3: Keep the original order of events.
    - Overall: pass

Real responses drift from that layout: bullets vary, fields are reordered,
keys come in Japanese, prose is mixed in. Every line therefore goes through
``classify_line`` and only recognised keys are kept.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from yomitore.exceptions import (
    DuplicateFieldError,
    InvalidValueError,
    MissingFieldError,
)
from yomitore.models import ScoreDetail

BULLET_GLYPHS = ("-", "•", "*", "・", "−")

COLONS = (":", "：")

SCORE_MIN = 1
SCORE_MAX = 5

YES_MARKERS = ("yes", "はい")
NO_MARKERS = ("no", "いいえ")
PASS_MARKERS = ("pass", "合格")
FAIL_MARKERS = ("fail", "不合格")

_LEADING_DIGITS = re.compile(r"^\d+")


class Field(Enum):
    """Required fields of an evaluation response, valued by canonical label."""

    APPROPRIATENESS = "Appropriateness"
    IMPORTANCE = "Importance"
    CONCISENESS = "Conciseness"
    ACCURACY = "Accuracy"
    IMPROVEMENT1 = "Improvement 1"
    IMPROVEMENT2 = "Improvement 2"
    IMPROVEMENT3 = "Improvement 3"
    OVERALL = "Overall"

    @property
    def label(self) -> str:
        return self.value


# Normalised key -> field. Keys are compared after _normalise_key.
FIELD_ALIASES: dict[str, Field] = {
    "appropriateness": Field.APPROPRIATENESS,
    "適切さ": Field.APPROPRIATENESS,
    "要約の適切さ": Field.APPROPRIATENESS,
    "importance": Field.IMPORTANCE,
    "重要度": Field.IMPORTANCE,
    "conciseness": Field.CONCISENESS,
    "簡潔さ": Field.CONCISENESS,
    "accuracy": Field.ACCURACY,
    "正確さ": Field.ACCURACY,
    "improvement1": Field.IMPROVEMENT1,
    "改善点1": Field.IMPROVEMENT1,
    "improvement2": Field.IMPROVEMENT2,
    "改善点2": Field.IMPROVEMENT2,
    "improvement3": Field.IMPROVEMENT3,
    "改善点3": Field.IMPROVEMENT3,
    "overall": Field.OVERALL,
    "総合評価": Field.OVERALL,
}


class OverallEvaluation(Enum):
    """The model's final verdict."""

    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class ParsedEvaluation:
    """A validated evaluation response."""

    appropriate: bool
    importance: int
    conciseness: int
    accuracy: int
    improvement1: str
    improvement2: str
    improvement3: str
    overall: OverallEvaluation

    @property
    def passed(self) -> bool:
        return self.overall is OverallEvaluation.PASS

    def to_score_detail(self) -> ScoreDetail:
        """Convert to the ScoreDetail stored with an attempt."""
        return ScoreDetail(
            appropriate=self.appropriate,
            importance=self.importance,
            conciseness=self.conciseness,
            accuracy=self.accuracy,
            improvement1=self.improvement1,
            improvement2=self.improvement2,
            improvement3=self.improvement3,
            overall_passed=self.passed,
        )


def _normalise_key(key: str) -> str:
    key = key.strip().strip("*_").casefold()
    return re.sub(r"[\s_]+", "", key)


def _split_first_colon(line: str) -> Optional[tuple[str, str]]:
    positions = [line.find(colon) for colon in COLONS if colon in line]
    if not positions:
        return None
    idx = min(positions)
    return line[:idx], line[idx + 1 :]


def classify_line(line: str) -> Optional[tuple[Field, str]]:
    """
    Classify one response line.

    Strips surrounding whitespace and a single leading bullet glyph, splits
    at the first colon and looks the key up among the known fields.

    Args:
        line: A raw line of the model response.

    Returns:
        (field, trimmed value) or None when the line is not a field.
    """
    stripped = line.strip()
    for glyph in BULLET_GLYPHS:
        if stripped.startswith(glyph):
            stripped = stripped[len(glyph) :].lstrip()
            break

    parts = _split_first_colon(stripped)
    if parts is None:
        return None
    key, value = parts

    field = FIELD_ALIASES.get(_normalise_key(key))
    if field is None:
        return None
    return field, value.strip()


def _starts_with_any(value: str, markers: tuple[str, ...]) -> bool:
    # Markdown emphasis around a marker (e.g. "**pass**") is not part of it
    folded = value.strip("*").strip().casefold()
    return any(folded.startswith(marker) for marker in markers)


def _parse_yes_no(field: Field, raw: str) -> bool:
    if _starts_with_any(raw, YES_MARKERS):
        return True
    if _starts_with_any(raw, NO_MARKERS):
        return False
    raise InvalidValueError(field.label, raw)


def _parse_score(field: Field, raw: str) -> int:
    match = _LEADING_DIGITS.match(raw.strip("*").strip())
    if not match:
        raise InvalidValueError(field.label, raw)
    score = int(match.group())
    if not SCORE_MIN <= score <= SCORE_MAX:
        raise InvalidValueError(field.label, raw)
    return score


def _parse_verdict(field: Field, raw: str) -> OverallEvaluation:
    if _starts_with_any(raw, FAIL_MARKERS):
        return OverallEvaluation.FAIL
    if _starts_with_any(raw, PASS_MARKERS):
        return OverallEvaluation.PASS
    raise InvalidValueError(field.label, raw)


def parse_evaluation(text: str) -> ParsedEvaluation:
    """
    Parse a model evaluation response.

    Args:
        text: The raw response text.

    Returns:
        ParsedEvaluation with every required field.

    Raises:
        DuplicateFieldError: A field appears twice.
        InvalidValueError: A field value breaks its rule.
        MissingFieldError: A field never appears.
    """
    values: dict[Field, str] = {}
    for line in text.splitlines():
        classified = classify_line(line)
        if classified is None:
            continue
        field, value = classified
        if field in values:
            raise DuplicateFieldError(field.label)
        values[field] = value

    for field in Field:
        if field not in values:
            raise MissingFieldError(field.label)

    return ParsedEvaluation(
        appropriate=_parse_yes_no(Field.APPROPRIATENESS, values[Field.APPROPRIATENESS]),
        importance=_parse_score(Field.IMPORTANCE, values[Field.IMPORTANCE]),
        conciseness=_parse_score(Field.CONCISENESS, values[Field.CONCISENESS]),
        accuracy=_parse_score(Field.ACCURACY, values[Field.ACCURACY]),
        improvement1=values[Field.IMPROVEMENT1],
        improvement2=values[Field.IMPROVEMENT2],
        improvement3=values[Field.IMPROVEMENT3],
        overall=_parse_verdict(Field.OVERALL, values[Field.OVERALL]),
    )


def format_evaluation(parsed: ParsedEvaluation) -> str:
    """Render a ParsedEvaluation as the canonical bullet list."""
    lines = [
        f"- {Field.APPROPRIATENESS.label}: {YES_MARKERS[0] if parsed.appropriate else NO_MARKERS[0]}",
        f"- {Field.IMPORTANCE.label}: {parsed.importance}",
        f"- {Field.CONCISENESS.label}: {parsed.conciseness}",
        f"- {Field.ACCURACY.label}: {parsed.accuracy}",
        f"- {Field.IMPROVEMENT1.label}: {parsed.improvement1}",
        f"- {Field.IMPROVEMENT2.label}: {parsed.improvement2}",
        f"- {Field.IMPROVEMENT3.label}: {parsed.improvement3}",
        f"- {Field.OVERALL.label}: {parsed.overall.value}",
    ]
    return "\n".join(lines)


def format_evaluation_display(parsed: ParsedEvaluation) -> str:
    """Render a ParsedEvaluation for the reader after grading."""
    verdict = "✅ PASS" if parsed.passed else "❌ FAIL"
    appropriate = "yes" if parsed.appropriate else "no"
    lines = [
        f"Result: {verdict}",
        "",
        f"Appropriate summary: {appropriate}",
        f"Importance:  {_stars(parsed.importance)} ({parsed.importance}/{SCORE_MAX})",
        f"Conciseness: {_stars(parsed.conciseness)} ({parsed.conciseness}/{SCORE_MAX})",
        f"Accuracy:    {_stars(parsed.accuracy)} ({parsed.accuracy}/{SCORE_MAX})",
        "",
        "Suggestions:",
    ]
    for i, suggestion in enumerate(
        (parsed.improvement1, parsed.improvement2, parsed.improvement3), start=1
    ):
        lines.append(f"  {i}. {suggestion}")
    return "\n".join(lines)


def _stars(score: int) -> str:
    return "★" * score + "☆" * (SCORE_MAX - score)
