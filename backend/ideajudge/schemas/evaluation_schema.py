from typing import Optional

from pydantic import Field

from .common import CamelModel


class AutoEvaluateRequest(CamelModel):
    idea_name: Optional[str] = None
    description: Optional[str] = None
    axes: list[str] = Field(default_factory=list)
    topic_name: Optional[str] = None
    topic_goal: Optional[str] = None
