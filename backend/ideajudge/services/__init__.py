from .storage import JsonFileTopicRepository, TopicRepository, get_topic_repository
from .choice_policy import ChoicePolicy, get_choice_policy
from .scoring_engine import fallback_judgment, score_evaluation
from .judge_service import perform_judgment
from .evaluation_service import auto_evaluate
from .chat_service import evaluation_chat
from .suggestion_service import suggest_axes, suggest_ideas
from .speech_service import speech_to_text
from .transcript_service import add_entry, delete_entry, get_transcript
from .report_service import build_markdown_report, render_pdf

__all__ = [
    "JsonFileTopicRepository",
    "TopicRepository",
    "get_topic_repository",
    "ChoicePolicy",
    "get_choice_policy",
    "fallback_judgment",
    "score_evaluation",
    "perform_judgment",
    "auto_evaluate",
    "evaluation_chat",
    "suggest_axes",
    "suggest_ideas",
    "speech_to_text",
    "add_entry",
    "delete_entry",
    "get_transcript",
    "build_markdown_report",
    "render_pdf",
]
