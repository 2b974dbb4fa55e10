"""Fallback scoring engine tests — keyword law, transcript bonus, ranking, axis winners, summary."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ideajudge.constants import KeywordCategory
from ideajudge.schemas.topic_schema import Idea
from ideajudge.services.scoring_engine import (
    aggregate_score,
    compute_axis_winners,
    fallback_judgment,
    is_usable_evaluation,
    rank_ideas,
    score_evaluation,
    summarize_transcript,
    transcript_bonus,
)

AXES = ["cost", "feasibility"]


def _idea(idea_id, name, **evaluations):
    return Idea(id=idea_id, name=name, evaluations=evaluations)


# ---------------------------------------------------------------------------
# Keyword law
# ---------------------------------------------------------------------------

class TestScoreEvaluation:
    def test_neutral_text_scores_base(self):
        assert score_evaluation("it depends on the team") == 50

    def test_one_positive_one_negative(self):
        assert score_evaluation("good, low cost") == 55

    def test_single_negative(self):
        assert score_evaluation("difficult but possible") == 40

    def test_case_insensitive(self):
        assert score_evaluation("EXCELLENT") == 65

    def test_repeated_term_counts_once(self):
        assert score_evaluation("good good good") == 65

    def test_distinct_terms_stack(self):
        assert score_evaluation("excellent and strong") == 80

    def test_clamped_at_zero(self):
        assert score_evaluation("bad, weak, small, low, problem, issue") == 0

    def test_clamped_at_hundred(self):
        text = "excellent good high large effective valid appropriate strong"
        assert score_evaluation(text) == 100

    def test_japanese_terms(self):
        assert score_evaluation("効果的だが課題もある") == 55

    def test_custom_table(self):
        table = [KeywordCategory(category="positive", terms=frozenset({"shiny"}), weight=30)]
        assert score_evaluation("shiny", table) == 80


class TestUsableEvaluation:
    def test_sentinels(self):
        assert not is_usable_evaluation("unknown")
        assert not is_usable_evaluation(" Unknown ")
        assert not is_usable_evaluation("不明")

    def test_blank_and_missing(self):
        assert not is_usable_evaluation("")
        assert not is_usable_evaluation("   ")
        assert not is_usable_evaluation(None)

    def test_text(self):
        assert is_usable_evaluation("fine")


# ---------------------------------------------------------------------------
# Transcript bonus
# ---------------------------------------------------------------------------

class TestTranscriptBonus:
    def test_counts_case_insensitive_mentions(self):
        assert transcript_bonus("Solar", "solar panels. SOLAR wins. solar") == 6

    def test_capped(self):
        assert transcript_bonus("Solar", "solar " * 8) == 10

    def test_no_transcript(self):
        assert transcript_bonus("Solar", None) == 0
        assert transcript_bonus("Solar", "") == 0

    def test_regex_characters_are_literal(self):
        assert transcript_bonus("C++ (v2)", "we like C++ (v2) and c++ (v2)") == 4


# ---------------------------------------------------------------------------
# Aggregation and ranking
# ---------------------------------------------------------------------------

class TestRanking:
    def test_documented_scenario(self):
        a = _idea("a", "Idea A", cost="good, low cost", feasibility="difficult but possible")
        b = _idea("b", "Idea B", cost="unknown", feasibility="unknown")

        assert aggregate_score(a, AXES) == 47.5
        assert aggregate_score(b, AXES) == 0

        ranking = rank_ideas([a, b], AXES)
        assert [r.idea_id for r in ranking] == ["a", "b"]
        assert [r.score for r in ranking] == [47.5, 0]

    def test_missing_axes_are_ignored_in_mean(self):
        idea = _idea("a", "Idea A", cost="excellent")
        assert aggregate_score(idea, AXES) == 65

    def test_transcript_bonus_can_exceed_hundred(self):
        idea = _idea("a", "Wind", cost="excellent good high large effective valid appropriate strong")
        assert aggregate_score(idea, ["cost"], "wind " * 5) == 110

    def test_ties_keep_input_order(self):
        ideas = [_idea(str(i), f"Idea {i}", cost="fine") for i in range(5)]
        assert [r.idea_id for r in rank_ideas(ideas, ["cost"])] == ["0", "1", "2", "3", "4"]

    def test_transcript_reorders(self):
        a = _idea("a", "Alpha", cost="fine")
        b = _idea("b", "Beta", cost="fine")
        ranking = rank_ideas([a, b], ["cost"], "Beta was popular. Everyone agreed on Beta.")
        assert ranking[0].idea_id == "b"
        assert ranking[0].score == 54


class TestAxisWinners:
    def test_highest_keyword_score_wins(self):
        a = _idea("a", "Idea A", cost="weak")
        b = _idea("b", "Idea B", cost="strong")
        winners = compute_axis_winners([a, b], ["cost"])
        assert winners["cost"].id == "b"
        assert "strong" in winners["cost"].reason

    def test_first_idea_wins_ties(self):
        a = _idea("a", "Idea A", cost="fine")
        b = _idea("b", "Idea B", cost="also fine")
        assert compute_axis_winners([a, b], ["cost"])["cost"].id == "a"

    def test_axis_without_usable_evaluation_is_omitted(self):
        a = _idea("a", "Idea A", cost="fine", feasibility="unknown")
        winners = compute_axis_winners([a], AXES)
        assert list(winners) == ["cost"]


# ---------------------------------------------------------------------------
# Transcript summary and full judgment
# ---------------------------------------------------------------------------

class TestSummary:
    def test_first_three_sentences(self):
        assert summarize_transcript("一文目。二文目！三文目？四文目。") == "一文目。二文目。三文目。"

    def test_empty(self):
        assert summarize_transcript("") == ""
        assert summarize_transcript(None) == ""
        assert summarize_transcript("。。") == ""

    def test_text_without_terminators(self):
        assert summarize_transcript("just one line") == "just one line。"


class TestFallbackJudgment:
    def test_invariants(self):
        ideas = [
            _idea("a", "Idea A", cost="good, low cost", feasibility="difficult but possible"),
            _idea("b", "Idea B", cost="unknown", feasibility="unknown"),
            _idea("c", "Idea C", cost="fine"),
        ]
        result = fallback_judgment(AXES, ideas)

        assert sorted(r.idea_id for r in result.ranking) == ["a", "b", "c"]
        assert result.winner.id == result.ranking[0].idea_id
        assert result.used_axes == AXES
        assert set(result.axis_winners) <= set(AXES)
        assert result.transcript_summary is None
        assert "[Per-axis evaluation]" in result.reasoning

    def test_transcript_summary_included(self):
        ideas = [_idea("a", "Idea A", cost="fine")]
        result = fallback_judgment(["cost"], ideas, "Idea A is great。We agree。")
        assert result.transcript_summary == "Idea A is great。We agree。"
        assert "[Considerations from the meeting transcript]" in result.reasoning

    def test_no_ideas(self):
        result = fallback_judgment(AXES, [])
        assert result.ranking == []
        assert result.winner.id == ""

    def test_deterministic(self):
        ideas = [_idea("a", "Idea A", cost="good"), _idea("b", "Idea B", cost="strong")]
        assert fallback_judgment(["cost"], ideas) == fallback_judgment(["cost"], ideas)
