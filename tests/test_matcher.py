"""Tests for pattern matching and context excerpts."""

from __future__ import annotations

import logging

import pytest

from contract_risk.matcher import PatternMatcher, get_context
from contract_risk.models import Pattern, PatternType


@pytest.fixture
def matcher() -> PatternMatcher:
    return PatternMatcher()


# ---------------------------------------------------------------------------
# Context excerpts
# ---------------------------------------------------------------------------


class TestGetContext:
    """Tests for get_context."""

    def test_short_text_not_clipped(self) -> None:
        assert get_context("short text", 3, 200) == "short text"

    def test_clipped_on_both_sides(self) -> None:
        text = "a" * 50 + "MATCH" + "b" * 50
        context = get_context(text, 50, 20)
        assert context == "..." + "a" * 10 + "MATCH" + "b" * 5 + "..."

    def test_clipped_only_at_end(self) -> None:
        text = "MATCH" + "x" * 100
        assert get_context(text, 0, 20) == "MATCH" + "x" * 5 + "..."

    def test_clipped_only_at_start(self) -> None:
        text = "x" * 100 + "END"
        assert get_context(text, 100, 20) == "..." + "x" * 10 + "END"


# ---------------------------------------------------------------------------
# Literal patterns
# ---------------------------------------------------------------------------


class TestLiteralPatterns:
    """Tests for keyword and phrase patterns."""

    def test_keyword_every_occurrence_case_insensitive(self, matcher: PatternMatcher) -> None:
        text = "Indemnify the Provider. The Client shall INDEMNIFY all parties."
        matches = matcher.match(Pattern(PatternType.KEYWORD, ("indemnify",)), text)
        assert [m.position for m in matches] == [0, 41]
        assert [m.text for m in matches] == ["Indemnify", "INDEMNIFY"]

    def test_phrase_with_special_characters_is_literal(self, matcher: PatternMatcher) -> None:
        text = "Fees (non-refundable) are due."
        matches = matcher.match(Pattern(PatternType.PHRASE, ("(non-refundable)",)), text)
        assert [m.position for m in matches] == [5]

    def test_multiple_values_scanned_in_order(self, matcher: PatternMatcher) -> None:
        text = "nonrefundable and non-refundable"
        pattern = Pattern(PatternType.KEYWORD, ("non-refundable", "nonrefundable"))
        assert [m.position for m in matcher.match(pattern, text)] == [18, 0]

    def test_custom_context_length(self, matcher: PatternMatcher) -> None:
        text = "x" * 100 + "renew" + "y" * 100
        match = matcher.match(Pattern(PatternType.KEYWORD, ("renew",), context=10), text)[0]
        assert match.context == "..." + "x" * 5 + "renew" + "..."

    def test_empty_text(self, matcher: PatternMatcher) -> None:
        assert matcher.match(Pattern(PatternType.KEYWORD, ("fee",)), "") == []


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------


class TestRegexPatterns:
    """Tests for regular-expression patterns."""

    def test_regex_case_insensitive(self, matcher: PatternMatcher) -> None:
        text = "This agreement shall AUTOMATICALLY RENEW each year."
        pattern = Pattern(PatternType.REGEX, (r"auto(?:matic(?:ally)?)?[-\s]?renew",))
        matches = matcher.match(pattern, text)
        assert len(matches) == 1
        assert matches[0].text == "AUTOMATICALLY RENEW"
        assert matches[0].position == 21

    def test_invalid_regex_skipped(
        self, matcher: PatternMatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="contract_risk.matcher"):
            matches = matcher.match(Pattern(PatternType.REGEX, ("renew(",)), "auto renew")
        assert matches == []
        assert "invalid regular expression" in caplog.text

    def test_zero_width_matches_ignored(self, matcher: PatternMatcher) -> None:
        assert matcher.match(Pattern(PatternType.REGEX, (r"x*",)), "abc") == []


# ---------------------------------------------------------------------------
# Proximity patterns
# ---------------------------------------------------------------------------


class TestProximityPatterns:
    """Tests for two-term proximity patterns."""

    def test_second_term_within_distance(self, matcher: PatternMatcher) -> None:
        text = "Customer shall indemnify and hold harmless the Provider."
        pattern = Pattern(PatternType.PROXIMITY, ("indemnify", "hold harmless"), proximity=20)
        matches = matcher.match(pattern, text)
        assert [m.text for m in matches] == ["indemnify"]
        assert matches[0].position == 15

    def test_second_term_before_first_counts(self, matcher: PatternMatcher) -> None:
        text = "Hold harmless and indemnify."
        pattern = Pattern(PatternType.PROXIMITY, ("indemnify", "hold harmless"), proximity=20)
        assert len(matcher.match(pattern, text)) == 1

    def test_second_term_too_far(self, matcher: PatternMatcher) -> None:
        text = "indemnify" + " filler" * 30 + " hold harmless"
        pattern = Pattern(PatternType.PROXIMITY, ("indemnify", "hold harmless"), proximity=50)
        assert matcher.match(pattern, text) == []

    def test_default_distance_is_100(self, matcher: PatternMatcher) -> None:
        near = "waive" + " " * 80 + "class action"
        far = "waive" + " " * 110 + "class action"
        pattern = Pattern(PatternType.PROXIMITY, ("waive", "class action"))
        assert len(matcher.match(pattern, near)) == 1
        assert matcher.match(pattern, far) == []

    @pytest.mark.parametrize("values", [("indemnify",), ("a", "b", "c"), ("indemnify", "")])
    def test_requires_exactly_two_terms(self, matcher: PatternMatcher, values: tuple) -> None:
        pattern = Pattern(PatternType.PROXIMITY, values)
        assert matcher.match(pattern, "indemnify a b c") == []
