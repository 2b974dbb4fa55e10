from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import CamelModel


class TranscriptEntry(CamelModel):
    id: str
    timestamp: datetime
    speaker: Optional[str] = None
    text: str
    confidence: Optional[float] = Field(
        default=None,
        description="Synthetic placeholder, not a real recognition confidence",
    )


class TranscriptData(CamelModel):
    """Append-only utterance log of one topic."""

    entries: list[TranscriptEntry] = Field(default_factory=list)
    summary: Optional[str] = None
    last_updated: datetime


class TranscriptEntryInput(CamelModel):
    topic_id: Optional[str] = None
    text: Optional[str] = None
    speaker: Optional[str] = None


class TranscriptDeleteInput(CamelModel):
    topic_id: Optional[str] = None
    entry_id: Optional[str] = None
