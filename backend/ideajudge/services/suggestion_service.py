"""AI suggestions for new evaluation axes and new ideas.

Both calls return at most three items. Items the model returns in the
wrong shape are dropped; when nothing usable is left a static catalogue,
filtered against what the topic already has, is used instead.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Type, TypeVar

from pydantic import ValidationError

from ..constants import (
    FALLBACK_AXES,
    FALLBACK_IDEA_SUFFIX,
    FALLBACK_IDEAS,
    MAX_SUGGESTIONS,
    PROMPT_TRANSCRIPT_MAX_CHARS,
)
from ..schemas.common import CamelModel
from ..schemas.suggestion_schema import IdeaBrief, SuggestedAxis, SuggestedIdea
from .openai_client import LLMUnavailableError, Unparseable, call_llm_json, is_llm_configured

logger = logging.getLogger(__name__)

_SUGGEST_MAX_TOKENS = 1200
_SYSTEM_PROMPT = "You are an expert in decision support and creative ideation. Reply with a single JSON object only."

M = TypeVar("M", bound=CamelModel)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------

def transcript_excerpt(transcript: Optional[str]) -> str:
    if not transcript:
        return ""
    if len(transcript) > PROMPT_TRANSCRIPT_MAX_CHARS:
        return transcript[:PROMPT_TRANSCRIPT_MAX_CHARS] + "..."
    return transcript


def _bullets(items: Sequence[str], empty: str) -> str:
    return "\n".join(f"- {item}" for item in items) if items else f"- {empty}"


def _idea_lines(ideas: Sequence[IdeaBrief]) -> list[str]:
    return [f"{i.name}: {i.description}" if i.description else i.name for i in ideas]


def _context_block(topic_name: str, goal: Optional[str], transcript: Optional[str]) -> tuple[list[str], str]:
    lines = [f"[Topic]: {topic_name}"]
    if goal:
        lines.append(f"[Goal of the discussion]: {goal}")
    return lines, transcript_excerpt(transcript)


def build_axes_prompt(
    topic_name: str,
    goal: Optional[str],
    existing_axes: Sequence[str],
    transcript: Optional[str],
    ideas: Sequence[IdeaBrief],
) -> str:
    head, excerpt = _context_block(topic_name, goal, transcript)
    lines = [
        f"Propose {MAX_SUGGESTIONS} new evaluation axes suited to judging this discussion.",
        "",
        *head,
        "",
        "[Existing axes]:",
        _bullets(existing_axes, "none yet"),
        "",
        "[Ideas under consideration]:",
        _bullets(_idea_lines(ideas), "no ideas yet"),
    ]
    if excerpt:
        lines += ["", "[Meeting notes]:", excerpt]
    lines += [
        "",
        "Each axis must not duplicate an existing axis, must suit the topic, be concrete and "
        "measurable, reflect the discussion, and help the actual decision.",
        "",
        'Reply as JSON: {"suggestions": [{"name": "<axis name>", "reason": "<why, under 100 characters>"}]}',
    ]
    return "\n".join(lines)


def build_ideas_prompt(
    topic_name: str,
    goal: Optional[str],
    axes: Sequence[str],
    transcript: Optional[str],
    existing_ideas: Sequence[IdeaBrief],
) -> str:
    head, excerpt = _context_block(topic_name, goal, transcript)
    lines = [
        f"Propose {MAX_SUGGESTIONS} new ideas that would move this discussion forward.",
        "",
        *head,
        "",
        "[Axes]:",
        _bullets(axes, "none yet"),
        "",
        "[Existing ideas]:",
        _bullets(_idea_lines(existing_ideas), "no ideas yet"),
    ]
    if excerpt:
        lines += ["", "[Meeting notes]:", excerpt]
    lines += [
        "",
        "Each idea must not duplicate an existing one, must suit the topic, be feasible, "
        "reflect the discussion, be comparable on the axes, and be creative and valuable.",
        "",
        'Reply as JSON: {"suggestions": [{"name": "<under 30 characters>", '
        '"description": "<under 100 characters>", "reason": "<under 80 characters>"}]}',
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def _suggestion_items(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in ("suggestions", "axes", "ideas"):
            if isinstance(value.get(key), list):
                return value[key]
    return []


def coerce_suggestions(value: Any, model: Type[M]) -> list[M]:
    """Validate reply items against ``model``, dropping bad ones, capped at 3."""
    suggestions: list[M] = []
    for item in _suggestion_items(value):
        try:
            suggestions.append(model.model_validate(item))
        except ValidationError:
            logger.debug("[SUGGEST] Dropping malformed item: %r", item)
            continue
        if len(suggestions) >= MAX_SUGGESTIONS:
            break
    return suggestions


# ---------------------------------------------------------------------------
# Fallback catalogues
# ---------------------------------------------------------------------------

def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return bool(a) and bool(b) and (a in b or b in a)


def fallback_axes(existing_axes: Sequence[str]) -> list[SuggestedAxis]:
    available = [
        SuggestedAxis(**axis)
        for axis in FALLBACK_AXES
        if not any(_overlaps(existing, axis["name"]) for existing in existing_axes)
    ]
    return available[:MAX_SUGGESTIONS]


def fallback_ideas(existing_ideas: Sequence[IdeaBrief]) -> list[SuggestedIdea]:
    available = []
    for idea in FALLBACK_IDEAS:
        stem = idea["name"].removesuffix(FALLBACK_IDEA_SUFFIX)
        if any(_overlaps(existing.name, stem) or _overlaps(existing.name, idea["name"]) for existing in existing_ideas):
            continue
        available.append(SuggestedIdea(**idea))
    return available[:MAX_SUGGESTIONS]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def _ask_llm(prompt: str, model: Type[M], context: str) -> list[M]:
    """Return validated suggestions, or [] when the LLM gives nothing usable."""
    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
    try:
        result = await call_llm_json(messages=messages, max_completion_tokens=_SUGGEST_MAX_TOKENS, context=context)
    except LLMUnavailableError as exc:
        logger.warning("[%s] LLM unavailable (%s) — using fallback catalogue", context, exc)
        return []

    if isinstance(result, Unparseable):
        logger.warning("[%s] Unparseable reply (%s) — using fallback catalogue", context, result.reason)
        return []
    return coerce_suggestions(result.value, model)


async def suggest_axes(
    topic_name: str,
    *,
    goal: Optional[str] = None,
    existing_axes: Sequence[str] = (),
    transcript: Optional[str] = None,
    ideas: Sequence[IdeaBrief] = (),
) -> list[SuggestedAxis]:
    if is_llm_configured():
        prompt = build_axes_prompt(topic_name, goal, existing_axes, transcript, ideas)
        suggestions = await _ask_llm(prompt, SuggestedAxis, "SUGGEST-AXES")
        if suggestions:
            return suggestions
    return fallback_axes(existing_axes)


async def suggest_ideas(
    topic_name: str,
    *,
    goal: Optional[str] = None,
    axes: Sequence[str] = (),
    transcript: Optional[str] = None,
    existing_ideas: Sequence[IdeaBrief] = (),
) -> list[SuggestedIdea]:
    if is_llm_configured():
        prompt = build_ideas_prompt(topic_name, goal, axes, transcript, existing_ideas)
        suggestions = await _ask_llm(prompt, SuggestedIdea, "SUGGEST-IDEAS")
        if suggestions:
            return suggestions
    return fallback_ideas(existing_ideas)
