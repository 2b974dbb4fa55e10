"""Centralized constants shared across services and routes.

This module is the SINGLE SOURCE OF TRUTH for the keyword scoring table,
the "unknown" evaluation sentinels and the static fallback catalogues used
when the LLM is unavailable. Reused by:
  - Scoring engine (fallback judgment)
  - Judge, evaluation, chat and suggestion services
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# ── Keyword scoring table ───────────────────────────────────────────────
# One row per category. Each distinct term found in an evaluation adds
# ``weight`` once. Terms are matched as lowercase substrings.


@dataclass(frozen=True)
class KeywordCategory:
    category: Literal["positive", "negative"]
    terms: frozenset[str]
    weight: int


BASE_EVALUATION_SCORE: int = 50
MIN_EVALUATION_SCORE: int = 0
MAX_EVALUATION_SCORE: int = 100

KEYWORD_TABLE: tuple[KeywordCategory, ...] = (
    KeywordCategory(
        category="positive",
        terms=frozenset({
            "excellent", "good", "high", "large", "effective", "valid", "appropriate", "strong",
            "優れている", "良い", "高い", "大きい", "効果的", "有効", "適切", "強い",
        }),
        weight=15,
    ),
    KeywordCategory(
        category="negative",
        terms=frozenset({
            "bad", "low", "small", "difficult", "problem", "issue", "weak", "inappropriate",
            "悪い", "低い", "小さい", "困難", "問題", "課題", "弱い", "不適切",
        }),
        weight=-10,
    ),
)

# Evaluations equal to one of these (trimmed, case-insensitive) are unusable.
UNKNOWN_EVALUATIONS: frozenset[str] = frozenset({"unknown", "不明"})

UNKNOWN_SPEAKER: str = "unknown"

# ── Transcript heuristics ───────────────────────────────────────────────
TRANSCRIPT_MENTION_POINTS: int = 2
TRANSCRIPT_BONUS_CAP: int = 10
SUMMARY_SENTENCE_COUNT: int = 3
SENTENCE_TERMINATORS: str = "。！？"
SENTENCE_JOINER: str = "。"

TRANSCRIPT_SUMMARY_WINDOW: int = 10      # most recent entries
TRANSCRIPT_SUMMARY_MAX_CHARS: int = 100
PROMPT_TRANSCRIPT_MAX_CHARS: int = 1000  # excerpt sent to suggestion prompts

# Placeholder confidence range for manually added transcript entries.
CONFIDENCE_RANGE: tuple[float, float] = (0.8, 1.0)

MAX_SUGGESTIONS: int = 3

# ── Fallback catalogues ─────────────────────────────────────────────────

FALLBACK_AXES: list[dict[str, str]] = [
    {"name": "Cost efficiency", "reason": "Weighs cost against benefit to find the best option within budget"},
    {"name": "Feasibility", "reason": "Judges whether the option can be delivered technically and organisationally"},
    {"name": "Impact", "reason": "Estimates the size of the expected outcome"},
    {"name": "Low risk", "reason": "Surfaces potential risks and problems before committing"},
    {"name": "Urgency", "reason": "Accounts for priority and time constraints"},
    {"name": "Sustainability", "reason": "Assesses long-term effect and whether it can be kept up"},
    {"name": "Usability", "reason": "Puts the ease of use and satisfaction of end users first"},
    {"name": "Scalability", "reason": "Checks how well the option copes with future growth and change"},
]

FALLBACK_IDEAS: list[dict[str, str]] = [
    {
        "name": "Process improvement plan",
        "description": "Review the current workflow and streamline it",
        "reason": "Optimising what already exists gives dependable results",
    },
    {
        "name": "Technology adoption plan",
        "description": "Introduce a new tool or technology to solve the problem",
        "reason": "New technology can unlock a large improvement",
    },
    {
        "name": "Organisation change plan",
        "description": "Restructure the team or operating model to address the issue",
        "reason": "Reallocating people allows a flexible response",
    },
    {
        "name": "External partnership plan",
        "description": "Work with outside partners or specialist services",
        "reason": "Borrowing expertise and capacity gets there efficiently",
    },
    {
        "name": "Phased rollout plan",
        "description": "Deliver a large change in stages to reduce risk",
        "reason": "A realistic approach that reaches the goal while containing risk",
    },
]

# Suffix ignored when checking a catalogue idea against existing ideas.
FALLBACK_IDEA_SUFFIX: str = " plan"

# Auto-evaluate templates, keyed by axis family. ``{idea}`` is the idea name.
AUTO_EVALUATION_TEMPLATES: dict[str, list[str]] = {
    "feasibility": [
        "\"{idea}\" is technically feasible but needs careful planning and execution.",
        "\"{idea}\" needs time and resources, but a phased approach makes it achievable.",
        "\"{idea}\" looks highly achievable with today's technology.",
    ],
    "cost": [
        "\"{idea}\" needs upfront investment, but long-term savings are expected.",
        "\"{idea}\" offers good value for money with a clear return on investment.",
        "\"{idea}\" needs a careful cost-benefit review, but it delivers reasonable value.",
    ],
    "difficulty": [
        "\"{idea}\" is of standard difficulty and manageable with the right skill set.",
        "\"{idea}\" includes technical challenges but can be built with a planned approach.",
        "\"{idea}\" is complex to implement but achievable through incremental development.",
    ],
}
DEFAULT_AUTO_EVALUATION_FAMILY: str = "feasibility"

# Chat fallback: (evaluation, reasoning) pairs per axis family.
CHAT_EVALUATION_TEMPLATES: dict[str, list[tuple[str, str]]] = {
    "cost": [
        ("Low cost", "Existing infrastructure and tools can be reused, so extra investment is minimal"),
        ("Moderate cost", "Some upfront investment is needed, but a long-term return is likely"),
        ("High cost but worth it", "The investment is large, yet justified by the value and effect it brings"),
    ],
    "feasibility": [
        ("Easy to achieve", "Existing technology and resources cover it with no major technical hurdles"),
        ("Achievable", "There are some technical challenges, but proper planning makes it achievable"),
        ("Hard but possible", "It needs advanced skills, but a staged approach makes it possible"),
    ],
    "impact": [
        ("Large impact", "Broad improvements are expected with a large effect on the whole organisation"),
        ("Moderate impact", "Clear improvements in a specific area justify the investment"),
        ("Limited but useful", "The effect is limited, but it reliably improves the target area"),
    ],
    "difficulty": [
        ("Easy to implement", "It integrates easily with existing systems using a standard process"),
        ("Standard implementation", "Common techniques work, with sound design and quality control"),
        ("Advanced implementation needed", "It needs strong skills and planning, but can be built in stages"),
    ],
}
DEFAULT_CHAT_EVALUATIONS: list[str] = ["Good", "Average", "Needs improvement"]
DEFAULT_CHAT_REASONINGS: list[str] = [
    "\"{idea}\" came out positively when analysed from the {axis} perspective",
    "\"{idea}\" sits at a standard level from the {axis} perspective",
    "\"{idea}\" has room for improvement from the {axis} perspective",
]

CHAT_FOLLOW_UPS: list[str] = [
    "Thank you for your input. Is there anything else to consider for the {axis} evaluation?",
    "I see. I will adjust the evaluation with that in mind. Any other thoughts?",
]

# Axis-name fragments that select a template family (checked in order).
AXIS_FAMILY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "cost": ("cost", "price", "budget", "コスト", "費用"),
    "difficulty": ("difficulty", "implementation", "complexity", "難易度", "実装"),
    "impact": ("impact", "effect", "benefit", "効果"),
    "feasibility": ("feasib", "viab", "実現"),
}
