from typing import Optional

from .common import CamelModel


class SpeechToTextRequest(CamelModel):
    audio: Optional[str] = None  # base64
    mime_type: Optional[str] = None


class SpeakerLine(CamelModel):
    speaker: str
    text: str


class SpeechToTextResult(CamelModel):
    entries: list[SpeakerLine]
    full_transcript: str
