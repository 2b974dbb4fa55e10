from typing import Optional

from pydantic import Field

from .common import CamelModel


class ChatMessage(CamelModel):
    role: str = Field(..., description="\"user\" or \"assistant\"")
    content: str = ""


class ChatRequest(CamelModel):
    messages: Optional[list[ChatMessage]] = None
    idea_name: Optional[str] = None
    current_axis: Optional[str] = None
    axes: list[str] = Field(default_factory=list)


class ChatReply(CamelModel):
    """One assistant turn of the axis evaluation dialogue."""

    done: bool = False
    message: str
    evaluation: Optional[str] = Field(default=None, description="Final evaluation, only when done")
    idea_summary: Optional[str] = Field(default=None, description="Idea summary, only when done")
