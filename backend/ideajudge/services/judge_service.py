"""Judgment service — LLM ranking with a rule-based backstop.

Flow:
  1. No OPENAI_API_KEY → fallback engine only
  2. Build a transcript-first prompt and call the LLM once
  3. Unparseable reply or LLM failure → fallback engine
  4. Otherwise reconcile the reply field by field; anything missing or
     inconsistent with the judged ideas is replaced by fallback output

Whatever path is taken the result satisfies: one ranking entry per idea,
winner == ranking[0], axis winners only for axes with usable evaluations.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..schemas.judge_schema import AxisWinner, IdeaRef, JudgeResult, RankingEntry
from ..schemas.topic_schema import Idea
from .openai_client import LLMUnavailableError, Unparseable, call_llm_json, is_llm_configured
from .scoring_engine import fallback_judgment, summarize_transcript, usable_axes

logger = logging.getLogger(__name__)

_JUDGE_MAX_TOKENS = 3000
_DEFAULT_REASONING = "The LLM judgment completed."
_NOT_EVALUATED = "not evaluated"

_SYSTEM_PROMPT = (
    "You are an expert in meeting decision support. Weigh what participants "
    "actually said above mechanical fairness, and reply with a single JSON object only."
)


def build_judge_prompt(axes: Sequence[str], ideas: Sequence[Idea], transcript: Optional[str]) -> str:
    parts: list[str] = []

    if transcript:
        parts.append(
            "[MOST IMPORTANT] Meeting discussion\n"
            f"{transcript}\n\n"
            "This discussion is the core of the judgment. Analyse in detail which ideas "
            "participants supported and what concerns or arguments in favour were raised."
        )

    idea_blocks = []
    for i, idea in enumerate(ideas, start=1):
        evaluations = "\n".join(
            f"   - {axis}: {idea.evaluations.get(axis) or _NOT_EVALUATED}" for axis in axes
        )
        idea_blocks.append(
            f"{i}. **{idea.name}** (id: {idea.id})\n"
            f"   Description: {idea.description or 'none'}\n"
            f"   Evaluations:\n{evaluations}"
        )
    parts.append("[Ideas to judge]\n" + "\n\n".join(idea_blocks))

    parts.append("[Axes to use]\n" + "\n".join(f"{i}. {axis}" for i, axis in enumerate(axes, start=1)))

    parts.append(
        "[Priorities]\n"
        "1. Support for or opposition to each idea in the discussion (most important)\n"
        "2. Degree of agreement among participants\n"
        "3. Specific concerns raised in the discussion\n"
        "4. How often and how passionately ideas were discussed\n"
        "5. Individual evaluations per axis"
    )

    summary_hint = "Summary of the discussion and how the decision was reached" if transcript else ""
    parts.append(
        "[Output] Reply with JSON of exactly this shape, ranking EVERY idea once using its id:\n"
        "{\n"
        '  "winner": {"id": "<idea id>", "name": "<idea name>"},\n'
        '  "ranking": [{"ideaId": "<idea id>", "ideaName": "<idea name>", "score": <0-100>}],\n'
        '  "axisWinners": {"<axis>": {"id": "<idea id>", "name": "<idea name>", "reason": "<why, citing the discussion>"}},\n'
        '  "reasoning": "<judgment rationale quoting participants where possible>",\n'
        f'  "transcriptSummary": "{summary_hint}"\n'
        "}"
    )
    return "\n\n".join(parts)


# ---------------------------------------------------------------------------
# Reconciliation of LLM output
# ---------------------------------------------------------------------------

def _coerce_ranking(raw: Any, ideas: Sequence[Idea]) -> Optional[list[RankingEntry]]:
    """Accept the LLM ranking only if it names every idea exactly once."""
    if not isinstance(raw, list) or len(raw) != len(ideas):
        return None

    by_id = {idea.id: idea for idea in ideas}
    seen: set[str] = set()
    ranking: list[RankingEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            return None
        idea_id = str(item.get("ideaId", ""))
        idea = by_id.get(idea_id)
        if idea is None or idea_id in seen:
            return None
        score = item.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return None
        seen.add(idea_id)
        ranking.append(RankingEntry(idea_id=idea.id, idea_name=idea.name, score=float(score)))
    return ranking


def _coerce_axis_winners(
    raw: Any,
    ideas: Sequence[Idea],
    axes: Sequence[str],
) -> dict[str, AxisWinner]:
    if not isinstance(raw, dict):
        return {}

    by_id = {idea.id: idea for idea in ideas}
    allowed = set(usable_axes(ideas, axes))
    winners: dict[str, AxisWinner] = {}
    for axis, item in raw.items():
        if axis not in allowed or not isinstance(item, dict):
            continue
        idea = by_id.get(str(item.get("id", "")))
        if idea is None:
            continue
        winners[axis] = AxisWinner(id=idea.id, name=idea.name, reason=str(item.get("reason") or ""))
    return winners


def reconcile_llm_judgment(
    llm: dict[str, Any],
    axes: Sequence[str],
    ideas: Sequence[Idea],
    transcript: Optional[str],
) -> JudgeResult:
    """Merge a parsed LLM reply with fallback output field by field."""
    fallback = fallback_judgment(axes, ideas, transcript)

    ranking = _coerce_ranking(llm.get("ranking"), ideas)
    if ranking is None:
        logger.warning("[JUDGE] LLM ranking missing or inconsistent — using fallback ranking")
        ranking = fallback.ranking

    axis_winners = dict(fallback.axis_winners)
    axis_winners.update(_coerce_axis_winners(llm.get("axisWinners"), ideas, axes))
    # keep the requested axis order
    axis_winners = {axis: axis_winners[axis] for axis in axes if axis in axis_winners}

    reasoning = llm.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = _DEFAULT_REASONING

    summary: Optional[str] = None
    if transcript:
        llm_summary = llm.get("transcriptSummary")
        if isinstance(llm_summary, str) and llm_summary.strip():
            summary = llm_summary
        else:
            summary = summarize_transcript(transcript) or None

    return JudgeResult(
        winner=IdeaRef(id=ranking[0].idea_id, name=ranking[0].idea_name),
        ranking=ranking,
        axis_winners=axis_winners,
        used_axes=list(axes),
        reasoning=reasoning,
        transcript_summary=summary,
    )


async def perform_judgment(
    axes: Sequence[str],
    ideas: Sequence[Idea],
    transcript: Optional[str] = None,
) -> JudgeResult:
    """Judge ``ideas`` on ``axes``. Never raises for LLM problems."""
    if not is_llm_configured():
        logger.info("[JUDGE] OPENAI_API_KEY not set — using fallback judgment")
        return fallback_judgment(axes, ideas, transcript)

    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_judge_prompt(axes, ideas, transcript)},
    ]

    try:
        result = await call_llm_json(messages=messages, max_completion_tokens=_JUDGE_MAX_TOKENS, context="JUDGE")
    except LLMUnavailableError as exc:
        logger.warning("[JUDGE] LLM unavailable (%s) — using fallback judgment", exc)
        return fallback_judgment(axes, ideas, transcript)

    if isinstance(result, Unparseable):
        logger.warning("[JUDGE] LLM reply unparseable (%s) — using fallback judgment", result.reason)
        return fallback_judgment(axes, ideas, transcript)
    if not isinstance(result.value, dict):
        logger.warning("[JUDGE] LLM reply is not a JSON object — using fallback judgment")
        return fallback_judgment(axes, ideas, transcript)

    return reconcile_llm_judgment(result.value, axes, ideas, transcript)
