from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel
from .transcript_schema import TranscriptData


class Idea(CamelModel):
    """A candidate option within a topic.

    ``evaluations`` maps axis name to free text. A missing axis means the
    idea has not been evaluated on it; keys are never checked against the
    topic's axes.
    """

    id: str
    name: str
    description: Optional[str] = None
    evaluations: dict[str, str] = Field(default_factory=dict)

    @field_validator("evaluations", mode="before")
    @classmethod
    def _drop_null_evaluations(cls, value):
        # null means not evaluated yet
        if isinstance(value, dict):
            return {axis: text for axis, text in value.items() if text is not None}
        return value


class Topic(CamelModel):
    """Index entry for a decision-making session."""

    id: str
    name: str
    goal: Optional[str] = None
    axes: list[str] = Field(default_factory=list)


class TopicDetail(Topic):
    """Whole aggregate persisted per topic."""

    ideas: list[Idea] = Field(default_factory=list)
    transcript: Optional[TranscriptData] = None


class TopicCreateInput(CamelModel):
    name: Optional[str] = None
    goal: Optional[str] = None
    axes: Optional[list[str]] = None


class TopicUpdateInput(CamelModel):
    """Fields replaced on PUT. Unset fields keep their stored value."""

    name: Optional[str] = None
    goal: Optional[str] = None
    axes: Optional[list[str]] = None
    ideas: Optional[list[Idea]] = None
    transcript: Optional[TranscriptData] = None
