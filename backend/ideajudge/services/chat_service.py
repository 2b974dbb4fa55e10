"""Axis Evaluation Chat — turn-based dialogue that settles one axis at a time.

Flow:
  1. First turn (no user messages yet): propose an initial evaluation of
     the idea on the current axis and ask for feedback
  2. Later turns: respond to the user; once agreement is reached reply
     with done=true plus the final evaluation and an idea summary
  3. No API key or LLM failure: template-driven fallback dialogue

LLM Config:
  - JSON object mode
  - max_tokens: 900
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..constants import (
    CHAT_EVALUATION_TEMPLATES,
    CHAT_FOLLOW_UPS,
    DEFAULT_CHAT_EVALUATIONS,
    DEFAULT_CHAT_REASONINGS,
)
from ..schemas.chat_schema import ChatMessage, ChatReply
from .choice_policy import ChoicePolicy
from .evaluation_service import axis_family
from .openai_client import LLMUnavailableError, Unparseable, call_llm_json, is_llm_configured

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_CHAT_MAX_TOKENS = 900
_DONE_AFTER_USER_TURNS = 2

_SYSTEM_PROMPT = (
    "You are an expert idea evaluator guiding a user through evaluating one idea "
    "on one axis at a time. Keep replies short and concrete. "
    "Always reply with a single JSON object: "
    '{"done": bool, "message": str, "evaluation": str (only when done), '
    '"ideaSummary": str (only when done)}.'
)


def _user_messages(messages: Sequence[ChatMessage]) -> list[ChatMessage]:
    return [m for m in messages if m.role == "user"]


def _initial_message(idea_name: str, axis: str, evaluation: str, reasoning: str) -> str:
    return (
        f'I made an initial AI evaluation of "{idea_name}" on {axis}.\n\n'
        f"[Initial AI evaluation]: {evaluation}\n\n"
        f"[Rationale]: {reasoning}\n\n"
        "What do you think of this evaluation? Let me know of any corrections or opinions."
    )


def build_chat_prompt(
    messages: Sequence[ChatMessage],
    idea_name: str,
    current_axis: str,
    axes: Sequence[str],
) -> str:
    user_messages = _user_messages(messages)
    header = (
        f"[Idea]: {idea_name}\n"
        f"[Axis being evaluated]: {current_axis}\n"
        f"[All axes]: {', '.join(axes)}\n"
    )

    if not user_messages:
        return header + (
            "\nThis is the opening turn. Analyse the idea from the perspective of the current axis, "
            "present an initial evaluation with a short rationale, and ask the user for feedback.\n"
            "Set done to false. Keep message under 300 characters. Use this layout:\n"
            f'"I made an initial AI evaluation of \\"{idea_name}\\" on {current_axis}.\n\n'
            "[Initial AI evaluation]: ...\n\n[Rationale]: ...\n\n"
            'What do you think of this evaluation? Let me know of any corrections or opinions."'
        )

    history = "\n".join(f"User: {m.content}" for m in user_messages)
    return header + (
        f"[Conversation so far]:\n{history}\n\n"
        f"[Latest user message]: {user_messages[-1].content}\n\n"
        "Rules:\n"
        "1. If the discussion has settled the evaluation for this axis, set done to true\n"
        "2. Otherwise set done to false and respond with a revision or follow-up question\n"
        "3. Keep message under 200 characters\n"
        "4. When done, put the concise final evaluation in evaluation and a summary of the idea in ideaSummary\n\n"
        "The discussion is settled when the user agrees, when a requested correction has been "
        "accepted, when the user signals they are finished, or after two or more exchanges "
        "where the evaluation has firmed up."
    )


def fallback_reply(
    messages: Sequence[ChatMessage],
    idea_name: str,
    current_axis: str,
    policy: ChoicePolicy,
) -> ChatReply:
    """Template-driven dialogue used without an LLM."""
    count = len(_user_messages(messages))
    family = axis_family(current_axis, tuple(CHAT_EVALUATION_TEMPLATES))

    if count == 0:
        if family is not None:
            evaluation, reasoning = policy.choose(CHAT_EVALUATION_TEMPLATES[family])
        else:
            i = policy.index(len(DEFAULT_CHAT_EVALUATIONS))
            evaluation = DEFAULT_CHAT_EVALUATIONS[i]
            reasoning = DEFAULT_CHAT_REASONINGS[i].format(idea=idea_name, axis=current_axis)
        return ChatReply(done=False, message=_initial_message(idea_name, current_axis, evaluation, reasoning))

    if count >= _DONE_AFTER_USER_TURNS:
        if family is not None:
            evaluation = policy.choose(CHAT_EVALUATION_TEMPLATES[family])[0]
        else:
            evaluation = policy.choose(DEFAULT_CHAT_EVALUATIONS)
        return ChatReply(
            done=True,
            message=f"Thank you for your thoughts on {current_axis}. Let me wrap up the evaluation.",
            evaluation=evaluation,
            idea_summary=f"{idea_name} was reviewed from the {current_axis} perspective.",
        )

    follow_up = CHAT_FOLLOW_UPS[count % len(CHAT_FOLLOW_UPS)]
    return ChatReply(done=False, message=follow_up.format(axis=current_axis))


def _ask_for_more(idea_name: str, current_axis: str) -> str:
    return f'Could you tell me a little more about "{idea_name}" in terms of {current_axis}?'


def _reply_from_llm(value: object, idea_name: str, current_axis: str) -> ChatReply:
    fallback_message = _ask_for_more(idea_name, current_axis)
    if not isinstance(value, dict):
        return ChatReply(done=False, message=fallback_message)

    message = value.get("message")
    done = value.get("done") is True
    evaluation = value.get("evaluation")
    summary = value.get("ideaSummary")
    return ChatReply(
        done=done,
        message=message if isinstance(message, str) and message.strip() else fallback_message,
        evaluation=evaluation if done and isinstance(evaluation, str) else None,
        idea_summary=summary if done and isinstance(summary, str) else None,
    )


async def evaluation_chat(
    messages: Sequence[ChatMessage],
    idea_name: str,
    current_axis: str,
    axes: Sequence[str],
    policy: ChoicePolicy,
) -> ChatReply:
    """Produce the next assistant turn of the axis evaluation dialogue."""
    if not is_llm_configured():
        logger.info("[CHAT] OPENAI_API_KEY not set — using fallback dialogue")
        return fallback_reply(messages, idea_name, current_axis, policy)

    prompt_messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": build_chat_prompt(messages, idea_name, current_axis, axes)},
    ]

    try:
        result = await call_llm_json(messages=prompt_messages, max_completion_tokens=_CHAT_MAX_TOKENS, context="CHAT")
    except LLMUnavailableError as exc:
        logger.warning("[CHAT] LLM unavailable (%s) — using fallback dialogue", exc)
        return fallback_reply(messages, idea_name, current_axis, policy)

    if isinstance(result, Unparseable):
        # Show whatever the model said rather than dropping the turn.
        text = result.raw_text.strip()
        return ChatReply(
            done=False,
            message=text or _ask_for_more(idea_name, current_axis),
        )

    return _reply_from_llm(result.value, idea_name, current_axis)
