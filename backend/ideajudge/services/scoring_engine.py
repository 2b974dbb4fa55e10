"""Deterministic Fallback Scoring Engine.

Ranks ideas and picks per-axis winners from free-text evaluations when the
LLM path is unavailable, or backstops partial LLM output.

Rules
-----
- NO API calls
- NO persistence
- NO randomness
- Bag-of-keywords only: hits stack additively, no negation handling
- Never raises for any idea / axis / transcript shape
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional, Sequence

from ..constants import (
    BASE_EVALUATION_SCORE,
    KEYWORD_TABLE,
    MAX_EVALUATION_SCORE,
    MIN_EVALUATION_SCORE,
    SENTENCE_JOINER,
    SENTENCE_TERMINATORS,
    SUMMARY_SENTENCE_COUNT,
    TRANSCRIPT_BONUS_CAP,
    TRANSCRIPT_MENTION_POINTS,
    UNKNOWN_EVALUATIONS,
    KeywordCategory,
)
from ..schemas.judge_schema import AxisWinner, IdeaRef, JudgeResult, RankingEntry
from ..schemas.topic_schema import Idea

_SENTENCE_SPLIT_RE = re.compile(f"[{re.escape(SENTENCE_TERMINATORS)}]")


def _clamp(value: float, lo: float = MIN_EVALUATION_SCORE, hi: float = MAX_EVALUATION_SCORE) -> float:
    """Clamp *value* to [lo, hi]."""
    return max(lo, min(hi, value))


def is_usable_evaluation(evaluation: Optional[str]) -> bool:
    """True when the text is present, non-blank and not an "unknown" sentinel."""
    if not evaluation or not evaluation.strip():
        return False
    return evaluation.strip().lower() not in UNKNOWN_EVALUATIONS


def score_evaluation(
    evaluation: str,
    table: Iterable[KeywordCategory] = KEYWORD_TABLE,
) -> float:
    """Map an evaluation text to 0-100.

    Starts at 50 and adds each category's weight once per distinct term
    found in the text (case-insensitive substring), then clamps.
    """
    text = (evaluation or "").lower()
    score = float(BASE_EVALUATION_SCORE)
    for category in table:
        hits = sum(1 for term in category.terms if term.lower() in text)
        score += category.weight * hits
    return _clamp(score)


def transcript_bonus(idea_name: str, transcript: Optional[str]) -> float:
    """``min(2 * mentions, 10)`` where mentions is a literal, case-insensitive count."""
    if not transcript or not idea_name or not idea_name.strip():
        return 0.0
    mentions = transcript.lower().count(idea_name.lower())
    return float(min(mentions * TRANSCRIPT_MENTION_POINTS, TRANSCRIPT_BONUS_CAP))


def aggregate_score(idea: Idea, axes: Sequence[str], transcript: Optional[str] = None) -> float:
    """Mean keyword score over usable axes plus the transcript bonus.

    An idea with no usable evaluation averages 0. The sum is not reclamped
    and can exceed 100.
    """
    scores = [
        score_evaluation(idea.evaluations[axis])
        for axis in axes
        if is_usable_evaluation(idea.evaluations.get(axis))
    ]
    average = sum(scores) / len(scores) if scores else 0.0
    return average + transcript_bonus(idea.name, transcript)


def rank_ideas(ideas: Sequence[Idea], axes: Sequence[str], transcript: Optional[str] = None) -> list[RankingEntry]:
    """Rank by aggregate score, descending. Ties keep input order."""
    entries = [
        RankingEntry(idea_id=idea.id, idea_name=idea.name, score=aggregate_score(idea, axes, transcript))
        for idea in ideas
    ]
    # sorted() is stable
    return sorted(entries, key=lambda e: e.score, reverse=True)


def axis_reason(evaluation: str) -> str:
    return f'highest score on this axis based on evaluation text: "{evaluation}"'


def usable_axes(ideas: Sequence[Idea], axes: Sequence[str]) -> list[str]:
    """Axes where at least one idea has a usable evaluation."""
    return [
        axis for axis in axes
        if any(is_usable_evaluation(idea.evaluations.get(axis)) for idea in ideas)
    ]


def compute_axis_winners(ideas: Sequence[Idea], axes: Sequence[str]) -> dict[str, AxisWinner]:
    """Top idea per axis by keyword score alone (no transcript bonus).

    Axes with no usable evaluation are left out of the result.
    """
    winners: dict[str, AxisWinner] = {}
    for axis in axes:
        candidates = [idea for idea in ideas if is_usable_evaluation(idea.evaluations.get(axis))]
        if not candidates:
            continue
        best = max(candidates, key=lambda idea: score_evaluation(idea.evaluations[axis]))
        winners[axis] = AxisWinner(
            id=best.id,
            name=best.name,
            reason=axis_reason(best.evaluations[axis]),
        )
    return winners


def summarize_transcript(transcript: Optional[str]) -> str:
    """First three non-empty sentences, split on full-width terminators."""
    if not transcript:
        return ""
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(transcript) if s.strip()]
    head = sentences[:SUMMARY_SENTENCE_COUNT]
    if not head:
        return ""
    return SENTENCE_JOINER.join(head) + SENTENCE_JOINER


def build_reasoning(
    winner_name: str,
    axes: Sequence[str],
    axis_winners: Mapping[str, AxisWinner],
    transcript_summary: Optional[str] = None,
) -> str:
    lines = [
        f'Based on the selected axes "{", ".join(axes)}", "{winner_name}" was chosen as the strongest idea overall.',
        "",
        "[Per-axis evaluation]",
    ]
    for axis in axes:
        axis_winner = axis_winners.get(axis)
        if axis_winner is not None:
            lines.append(f"- {axis}: {axis_winner.name} ranked first ({axis_winner.reason})")

    if transcript_summary:
        lines += ["", "[Considerations from the meeting transcript]", transcript_summary]

    lines += ["", f'Overall, "{winner_name}" was judged the most balanced and outstanding idea.']
    return "\n".join(lines)


def fallback_judgment(
    axes: Sequence[str],
    ideas: Sequence[Idea],
    transcript: Optional[str] = None,
) -> JudgeResult:
    """Full rule-based judgment.

    ``ideas`` is expected non-empty (requests are validated upstream); an
    empty list still yields a result with a blank winner.
    """
    ranking = rank_ideas(ideas, axes, transcript)
    axis_winners = compute_axis_winners(ideas, axes)
    summary = summarize_transcript(transcript) or None

    if ranking:
        winner = IdeaRef(id=ranking[0].idea_id, name=ranking[0].idea_name)
    else:
        winner = IdeaRef(id="", name="")

    return JudgeResult(
        winner=winner,
        ranking=ranking,
        axis_winners=axis_winners,
        used_axes=list(axes),
        reasoning=build_reasoning(winner.name, axes, axis_winners, summary),
        transcript_summary=summary,
    )
