from typing import Optional

from pydantic import Field

from .common import CamelModel
from .topic_schema import Idea


class JudgeRequest(CamelModel):
    topic_id: Optional[str] = None
    selected_axes: Optional[list[str]] = None
    transcript: Optional[str] = None
    ideas: Optional[list[Idea]] = None


class IdeaRef(CamelModel):
    id: str
    name: str


class RankingEntry(CamelModel):
    idea_id: str
    idea_name: str
    score: float


class AxisWinner(CamelModel):
    id: str
    name: str
    reason: str


class JudgeResult(CamelModel):
    """Derived judgment; never persisted.

    ``ranking`` holds exactly one entry per judged idea and ``winner`` is
    always ``ranking[0]``. ``axis_winners`` only has keys for axes where at
    least one idea carried a usable evaluation.
    """

    winner: IdeaRef
    ranking: list[RankingEntry]
    axis_winners: dict[str, AxisWinner] = Field(default_factory=dict)
    used_axes: list[str] = Field(default_factory=list)
    reasoning: str = ""
    transcript_summary: Optional[str] = None


class ExportPdfRequest(CamelModel):
    topic_id: Optional[str] = None
    judge_result: Optional[JudgeResult] = None
