# Schemas package
from .common import ApiResponse, CamelModel
from .topic_schema import Idea, Topic, TopicCreateInput, TopicDetail, TopicUpdateInput
from .transcript_schema import TranscriptData, TranscriptDeleteInput, TranscriptEntry, TranscriptEntryInput
from .judge_schema import AxisWinner, ExportPdfRequest, IdeaRef, JudgeRequest, JudgeResult, RankingEntry
from .chat_schema import ChatMessage, ChatReply, ChatRequest
from .suggestion_schema import (
    IdeaBrief,
    SuggestAxesRequest,
    SuggestedAxis,
    SuggestedIdea,
    SuggestIdeasRequest,
)
from .evaluation_schema import AutoEvaluateRequest
from .speech_schema import SpeakerLine, SpeechToTextRequest, SpeechToTextResult

__all__ = [
    "ApiResponse",
    "CamelModel",
    "Idea",
    "Topic",
    "TopicCreateInput",
    "TopicDetail",
    "TopicUpdateInput",
    "TranscriptData",
    "TranscriptDeleteInput",
    "TranscriptEntry",
    "TranscriptEntryInput",
    "AxisWinner",
    "ExportPdfRequest",
    "IdeaRef",
    "JudgeRequest",
    "JudgeResult",
    "RankingEntry",
    "ChatMessage",
    "ChatReply",
    "ChatRequest",
    "IdeaBrief",
    "SuggestAxesRequest",
    "SuggestedAxis",
    "SuggestedIdea",
    "SuggestIdeasRequest",
    "AutoEvaluateRequest",
    "SpeakerLine",
    "SpeechToTextRequest",
    "SpeechToTextResult",
]
