"""Auto-evaluation — one short evaluation text per axis for an idea.

The LLM reply is mapped back onto the requested axes: exact key first,
then a case-insensitive partial match, then a fallback template.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..constants import (
    AUTO_EVALUATION_TEMPLATES,
    AXIS_FAMILY_KEYWORDS,
    DEFAULT_AUTO_EVALUATION_FAMILY,
)
from .choice_policy import ChoicePolicy
from .openai_client import LLMUnavailableError, Unparseable, call_llm_json, is_llm_configured

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = "You are an expert idea evaluator. Reply with a single JSON object only."


def axis_family(axis: str, families: Sequence[str]) -> Optional[str]:
    """Template family whose keywords appear in ``axis``, if any."""
    lowered = axis.lower()
    for family, keywords in AXIS_FAMILY_KEYWORDS.items():
        if family in families and any(k in lowered for k in keywords):
            return family
    return None


def fallback_evaluation(idea_name: str, axis: str, policy: ChoicePolicy) -> str:
    family = axis_family(axis, tuple(AUTO_EVALUATION_TEMPLATES)) or DEFAULT_AUTO_EVALUATION_FAMILY
    return policy.choose(AUTO_EVALUATION_TEMPLATES[family]).format(idea=idea_name)


def fallback_evaluations(idea_name: str, axes: Sequence[str], policy: ChoicePolicy) -> dict[str, str]:
    return {axis: fallback_evaluation(idea_name, axis, policy) for axis in axes}


def build_auto_evaluate_prompt(
    idea_name: str,
    description: Optional[str],
    axes: Sequence[str],
    topic_name: Optional[str],
    topic_goal: Optional[str],
) -> str:
    lines = [
        "Evaluate the following idea against each axis.",
        "",
        f"[Topic]: {topic_name or 'not set'}",
    ]
    if topic_goal:
        lines.append(f"[Goal of the discussion]: {topic_goal}")
    lines += ["", "[Idea]", f"Name: {idea_name}"]
    if description:
        lines.append(f"Description: {description}")
    lines += ["", "[Axes]:"]
    lines += [f"{i}. {axis}" for i, axis in enumerate(axes, start=1)]
    lines += [
        "",
        "Rules:",
        "1. Each evaluation is a concrete 1-3 sentence statement",
        "2. Tie the idea's characteristics to the axis perspective",
        "3. Be practical and constructive",
        "4. Cover both strengths and caveats",
        "5. Stay aligned with the goal of the discussion",
        "",
        "Reply as JSON using the axis names exactly as keys:",
        '{"<axis 1>": "<evaluation>", "<axis 2>": "<evaluation>"}',
    ]
    return "\n".join(lines)


def match_evaluations(
    raw: dict[str, Any],
    idea_name: str,
    axes: Sequence[str],
    policy: ChoicePolicy,
) -> dict[str, str]:
    """Map LLM keys onto ``axes``; unmatched axes get a fallback template."""
    evaluations: dict[str, str] = {}
    for axis in axes:
        value = raw.get(axis)
        if not isinstance(value, str) or not value.strip():
            lowered = axis.lower()
            value = next(
                (
                    v for k, v in raw.items()
                    if isinstance(v, str) and v.strip() and (lowered in k.lower() or k.lower() in lowered)
                ),
                None,
            )
        evaluations[axis] = value if value else fallback_evaluation(idea_name, axis, policy)
    return evaluations


async def auto_evaluate(
    idea_name: str,
    axes: Sequence[str],
    policy: ChoicePolicy,
    *,
    description: Optional[str] = None,
    topic_name: Optional[str] = None,
    topic_goal: Optional[str] = None,
) -> dict[str, str]:
    """Return ``{axis: evaluation}`` for every axis in ``axes``."""
    if not is_llm_configured():
        logger.info("[AUTO-EVAL] OPENAI_API_KEY not set — using fallback evaluations")
        return fallback_evaluations(idea_name, axes, policy)

    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {
            "role": "user",
            "content": build_auto_evaluate_prompt(idea_name, description, axes, topic_name, topic_goal),
        },
    ]
    try:
        result = await call_llm_json(messages=messages, context="AUTO-EVAL")
    except LLMUnavailableError as exc:
        logger.warning("[AUTO-EVAL] LLM unavailable (%s) — using fallback evaluations", exc)
        return fallback_evaluations(idea_name, axes, policy)

    if isinstance(result, Unparseable):
        logger.warning("[AUTO-EVAL] Unparseable reply (%s) — using fallback evaluations", result.reason)
        return fallback_evaluations(idea_name, axes, policy)
    if not isinstance(result.value, dict):
        logger.warning("[AUTO-EVAL] Reply is not a JSON object — using fallback evaluations")
        return fallback_evaluations(idea_name, axes, policy)

    return match_evaluations(result.value, idea_name, axes, policy)
