from typing import Optional

from pydantic import Field

from .common import CamelModel


class IdeaBrief(CamelModel):
    name: str
    description: Optional[str] = None


class SuggestAxesRequest(CamelModel):
    topic_name: Optional[str] = None
    goal: Optional[str] = None
    existing_axes: list[str] = Field(default_factory=list)
    transcript: Optional[str] = None
    ideas: list[IdeaBrief] = Field(default_factory=list)


class SuggestIdeasRequest(CamelModel):
    topic_name: Optional[str] = None
    goal: Optional[str] = None
    axes: list[str] = Field(default_factory=list)
    transcript: Optional[str] = None
    existing_ideas: list[IdeaBrief] = Field(default_factory=list)


class SuggestedAxis(CamelModel):
    name: str = Field(..., min_length=1)
    reason: str = ""


class SuggestedIdea(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    reason: str = ""
