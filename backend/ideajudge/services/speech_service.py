"""Speech-to-text with speaker segmentation.

The audio arrives base64-encoded, goes to the OpenAI transcription
endpoint once, and the returned text is split into speaker-attributed
lines with a heuristic "Speaker: text" parser.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional

import openai

from ..constants import UNKNOWN_SPEAKER
from ..errors import BadRequestError, UpstreamServiceError
from ..schemas.speech_schema import SpeakerLine, SpeechToTextResult
from .openai_client import LLMUnavailableError, transcribe_audio

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "audio/webm"

_TRANSCRIBE_PROMPT = (
    "This is a recording of a meeting with several participants. "
    "Where possible, prefix each utterance with the speaker, e.g. \"Speaker A: ...\"."
)

# Labels accepted before a ":" (ASCII or full-width) at the start of a line.
_SPEAKER_LINE_RE = re.compile(
    r"^(Speaker\s?[A-Z0-9]+"
    r"|話者[A-Z0-9]+"
    r"|Moderator|司会|モデレーター"
    r"|Participant\s?[0-9]*|参加者[0-9]*"
    r"|[A-Z][A-Za-z]*"
    r"|[ぁ-んァ-ヶー一-龯]+)"
    r"\s*[:：]\s*(.+)$"
)


def parse_transcript_by_speaker(text: str) -> list[SpeakerLine]:
    """Split transcribed text into speaker lines.

    Lines without a speaker label continue the previous entry; before any
    label they start an entry for the unknown speaker. When nothing can
    be attributed the whole text becomes one unknown-speaker entry.
    """
    entries: list[SpeakerLine] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        match = _SPEAKER_LINE_RE.match(line)
        if match:
            entries.append(SpeakerLine(speaker=match.group(1).strip(), text=match.group(2).strip()))
        elif entries:
            entries[-1].text = f"{entries[-1].text} {line}"
        else:
            entries.append(SpeakerLine(speaker=UNKNOWN_SPEAKER, text=line))

    if not entries and text.strip():
        entries.append(SpeakerLine(speaker=UNKNOWN_SPEAKER, text=text.strip()))
    return entries


def decode_audio(audio_b64: str) -> bytes:
    """Decode the request payload, accepting an optional ``data:`` URL prefix."""
    if audio_b64.startswith("data:") and "," in audio_b64:
        audio_b64 = audio_b64.split(",", 1)[1]
    try:
        audio = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise BadRequestError("Invalid audio data") from exc
    if not audio:
        raise BadRequestError("Invalid audio data")
    return audio


def _upstream_message(exc: openai.APIError) -> str:
    if isinstance(exc, openai.AuthenticationError):
        return "OpenAI API key is invalid"
    if isinstance(exc, openai.RateLimitError):
        return "OpenAI API rate limit exceeded. Please try again later"
    if isinstance(exc, openai.BadRequestError):
        return "Unsupported audio format or corrupted audio data"
    return "Speech recognition failed"


async def speech_to_text(audio_b64: str, mime_type: Optional[str] = None) -> SpeechToTextResult:
    """Transcribe base64 audio and segment it by speaker.

    Raises ``BadRequestError`` for undecodable audio and
    ``UpstreamServiceError`` for a missing key or any transcription failure.
    """
    audio = decode_audio(audio_b64)
    mime_type = mime_type or DEFAULT_MIME_TYPE

    try:
        text = await transcribe_audio(audio, mime_type, prompt=_TRANSCRIBE_PROMPT)
    except LLMUnavailableError as exc:
        logger.error("[SPEECH] %s", exc)
        raise UpstreamServiceError("OpenAI API key is not configured") from exc
    except openai.APIError as exc:
        logger.error("[SPEECH] Transcription failed: %s", exc)
        raise UpstreamServiceError(_upstream_message(exc)) from exc

    entries = parse_transcript_by_speaker(text)
    logger.info("[SPEECH] %d characters, %d speaker lines", len(text), len(entries))
    return SpeechToTextResult(entries=entries, full_transcript=text)
