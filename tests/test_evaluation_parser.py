"""Tests for the evaluation response parser."""

from __future__ import annotations

import itertools

import pytest

from yomitore.evaluation.parser import (
    BULLET_GLYPHS,
    Field,
    OverallEvaluation,
    ParsedEvaluation,
    classify_line,
    format_evaluation,
    format_evaluation_display,
    parse_evaluation,
)
from yomitore.exceptions import (
    DuplicateFieldError,
    EvaluationParseError,
    InvalidValueError,
    MissingFieldError,
)

FIELD_LINES = [
    "Appropriateness: yes",
    "Importance: 4",
    "Conciseness: 3",
    "Accuracy: 5",
    "Improvement 1: Mention the second cause.",
    "Improvement 2: Drop the opening sentence.",
    "Improvement 3: Keep the original order of events.",
    "Overall: pass",
]


IMPROVEMENT_TEXTS = [
    "",
    "Use: fewer colons",
    "最後の段落を削る",
    "- keep the dash • and the dot ・ inside",
    "要点：時系列を守る",
    "**Bold** note * with stars",
]


def _round_trip_cases() -> list[ParsedEvaluation]:
    cases = []
    scores = itertools.product(range(1, 6), repeat=3)
    flags = itertools.product([True, False], list(OverallEvaluation))
    for index, ((importance, conciseness, accuracy), (appropriate, overall)) in enumerate(
        itertools.product(scores, flags)
    ):
        cases.append(
            ParsedEvaluation(
                appropriate=appropriate,
                importance=importance,
                conciseness=conciseness,
                accuracy=accuracy,
                improvement1=IMPROVEMENT_TEXTS[index % len(IMPROVEMENT_TEXTS)],
                improvement2=IMPROVEMENT_TEXTS[(index + 2) % len(IMPROVEMENT_TEXTS)],
                improvement3=IMPROVEMENT_TEXTS[(index + 4) % len(IMPROVEMENT_TEXTS)],
                overall=overall,
            )
        )
    return cases


def _response(lines: list[str], glyph: str = "-") -> str:
    return "\n".join(f"{glyph} {line}" for line in lines)


def _replace(field_prefix: str, new_line: str) -> list[str]:
    return [new_line if line.startswith(field_prefix) else line for line in FIELD_LINES]


class TestClassifyLine:
    """Tests for single-line classification."""

    def test_strips_bullet_and_splits_first_colon(self):
        """Only the first colon separates key from value."""
        assert classify_line("- Improvement 1: note: keep it short") == (
            Field.IMPROVEMENT1,
            "note: keep it short",
        )

    def test_full_width_colon(self):
        """Japanese responses use the full-width colon."""
        assert classify_line("・重要度：4") == (Field.IMPORTANCE, "4")

    def test_prose_is_ignored(self):
        assert classify_line("Overall the summary is good") is None
        assert classify_line("") is None
        assert classify_line("Note: this is prose") is None

    def test_markdown_emphasis_on_key(self):
        assert classify_line("**Accuracy**: 5") == (Field.ACCURACY, "5")


class TestParseEvaluation:
    """Tests for parse_evaluation."""

    def test_parses_valid_response(self, valid_response: str, parsed_evaluation: ParsedEvaluation):
        """A well-formed response surrounded by prose parses fully."""
        assert parse_evaluation(valid_response) == parsed_evaluation

    @pytest.mark.parametrize("glyph", BULLET_GLYPHS)
    def test_field_order_and_glyph_do_not_matter(self, glyph: str, parsed_evaluation: ParsedEvaluation):
        """Any permutation of the fields with any bullet yields the same result."""
        for i, order in enumerate(itertools.permutations(FIELD_LINES)):
            if i % 97:
                continue
            assert parse_evaluation(_response(list(order), glyph)) == parsed_evaluation

    def test_no_bullets(self, parsed_evaluation: ParsedEvaluation):
        assert parse_evaluation("\n".join(FIELD_LINES)) == parsed_evaluation

    def test_japanese_keys_and_markers(self):
        text = "\n".join(
            [
                "・要約の適切さ：いいえ",
                "・重要度：2",
                "・簡潔さ：1",
                "・正確さ：3",
                "・改善点1：要点を絞る",
                "・改善点2：結論を書く",
                "・改善点3：語尾を統一する",
                "・総合評価：不合格",
            ]
        )
        parsed = parse_evaluation(text)
        assert parsed.appropriate is False
        assert (parsed.importance, parsed.conciseness, parsed.accuracy) == (2, 1, 3)
        assert parsed.improvement2 == "結論を書く"
        assert parsed.overall is OverallEvaluation.FAIL
        assert parsed.passed is False

    def test_score_takes_leading_digits(self):
        parsed = parse_evaluation(_response(_replace("Importance", "Importance: 4/5 (good)")))
        assert parsed.importance == 4

    def test_markers_are_case_insensitive_prefixes(self):
        lines = _replace("Appropriateness", "Appropriateness: No, it misses the point")
        lines = [l if not l.startswith("Overall") else "Overall: **FAIL**" for l in lines]
        parsed = parse_evaluation(_response(lines))
        assert parsed.appropriate is False
        assert parsed.overall is OverallEvaluation.FAIL

    def test_improvements_are_trimmed(self):
        parsed = parse_evaluation(_response(_replace("Improvement 3", "Improvement 3:    spaced out   ")))
        assert parsed.improvement3 == "spaced out"

    @pytest.mark.parametrize("value", ["6", "0", "abc", ""])
    def test_invalid_score(self, value: str):
        """Scores outside 1-5 or without digits are rejected."""
        with pytest.raises(InvalidValueError) as exc_info:
            parse_evaluation(_response(_replace("Conciseness", f"Conciseness: {value}")))
        assert exc_info.value.key == "Conciseness"
        assert exc_info.value.raw == value

    def test_invalid_appropriateness(self):
        with pytest.raises(InvalidValueError) as exc_info:
            parse_evaluation(_response(_replace("Appropriateness", "Appropriateness: maybe")))
        assert exc_info.value.key == "Appropriateness"

    def test_invalid_verdict(self):
        with pytest.raises(InvalidValueError):
            parse_evaluation(_response(_replace("Overall", "Overall: borderline")))

    def test_duplicate_field(self):
        with pytest.raises(DuplicateFieldError) as exc_info:
            parse_evaluation(_response(FIELD_LINES + ["Accuracy: 2"]))
        assert exc_info.value.key == "Accuracy"

    @pytest.mark.parametrize("missing", range(len(FIELD_LINES)))
    def test_missing_field(self, missing: int):
        lines = FIELD_LINES[:missing] + FIELD_LINES[missing + 1 :]
        with pytest.raises(MissingFieldError) as exc_info:
            parse_evaluation(_response(lines))
        assert exc_info.value.key == list(Field)[missing].label

    def test_errors_share_a_base_class(self):
        with pytest.raises(EvaluationParseError):
            parse_evaluation("the model refused to answer")


class TestFormatEvaluation:
    """Tests for the canonical and display formatters."""

    def test_round_trip(self, parsed_evaluation: ParsedEvaluation):
        assert parse_evaluation(format_evaluation(parsed_evaluation)) == parsed_evaluation

    def test_round_trip_failing_result_with_empty_improvements(self):
        parsed = ParsedEvaluation(
            appropriate=False,
            importance=1,
            conciseness=5,
            accuracy=2,
            improvement1="",
            improvement2="Use: fewer colons",
            improvement3="最後の段落を削る",
            overall=OverallEvaluation.FAIL,
        )
        assert parse_evaluation(format_evaluation(parsed)) == parsed

    @pytest.mark.parametrize("parsed", _round_trip_cases())
    def test_round_trip_grid(self, parsed: ParsedEvaluation):
        assert parse_evaluation(format_evaluation(parsed)) == parsed

    def test_canonical_layout(self, parsed_evaluation: ParsedEvaluation):
        lines = format_evaluation(parsed_evaluation).splitlines()
        assert lines[0] == "- Appropriateness: yes"
        assert lines[-1] == "- Overall: pass"
        assert len(lines) == 8

    def test_display_text(self, parsed_evaluation: ParsedEvaluation):
        text = format_evaluation_display(parsed_evaluation)
        assert "PASS" in text
        assert "★★★★☆ (4/5)" in text
        assert "1. Mention the second cause." in text

    def test_to_score_detail(self, parsed_evaluation: ParsedEvaluation):
        detail = parsed_evaluation.to_score_detail()
        assert detail.overall_passed is True
        assert detail.accuracy == 5
        assert detail.improvement3 == "Keep the original order of events."
