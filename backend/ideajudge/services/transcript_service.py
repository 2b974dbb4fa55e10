"""Per-topic meeting transcript: read, append, delete entries.

Each change reads the whole topic, edits its transcript, recomputes the
rolling summary and writes the topic back through the repository.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..constants import (
    CONFIDENCE_RANGE,
    TRANSCRIPT_SUMMARY_MAX_CHARS,
    TRANSCRIPT_SUMMARY_WINDOW,
    UNKNOWN_SPEAKER,
)
from ..errors import BadRequestError, TopicNotFoundError
from ..schemas.topic_schema import TopicDetail
from ..schemas.transcript_schema import TranscriptData, TranscriptEntry
from .choice_policy import ChoicePolicy
from .storage import TopicRepository

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def empty_transcript() -> TranscriptData:
    return TranscriptData(entries=[], summary=None, last_updated=_now())


def rolling_summary(entries: Sequence[TranscriptEntry]) -> Optional[str]:
    """Text of the last few entries, truncated with an ellipsis."""
    if not entries:
        return None
    text = " ".join(e.text for e in entries[-TRANSCRIPT_SUMMARY_WINDOW:])
    if len(text) > TRANSCRIPT_SUMMARY_MAX_CHARS:
        return text[:TRANSCRIPT_SUMMARY_MAX_CHARS] + "..."
    return text


def _load_topic(repo: TopicRepository, topic_id: str) -> TopicDetail:
    topic = repo.get_topic(topic_id)
    if topic is None:
        raise TopicNotFoundError(topic_id)
    return topic


def get_transcript(repo: TopicRepository, topic_id: str) -> TranscriptData:
    """Stored transcript, or an empty one when the topic has none yet."""
    topic = _load_topic(repo, topic_id)
    return topic.transcript or empty_transcript()


def add_entry(
    repo: TopicRepository,
    topic_id: str,
    text: str,
    policy: ChoicePolicy,
    speaker: Optional[str] = None,
) -> TranscriptData:
    """Append one utterance and return the updated transcript."""
    if not text or not text.strip():
        raise BadRequestError("Text is required")

    topic = _load_topic(repo, topic_id)
    transcript = topic.transcript or empty_transcript()

    entry = TranscriptEntry(
        id=str(uuid.uuid4()),
        timestamp=_now(),
        speaker=(speaker or "").strip() or UNKNOWN_SPEAKER,
        text=text.strip(),
        confidence=policy.uniform(*CONFIDENCE_RANGE),
    )
    transcript.entries.append(entry)
    transcript.summary = rolling_summary(transcript.entries)
    transcript.last_updated = entry.timestamp

    topic.transcript = transcript
    repo.save_topic(topic)
    logger.info("[TRANSCRIPT] Added entry %s to topic %s", entry.id, topic_id)
    return transcript


def delete_entry(repo: TopicRepository, topic_id: str, entry_id: str) -> TranscriptData:
    """Remove an entry by id. Unknown ids leave the entries unchanged."""
    topic = _load_topic(repo, topic_id)
    transcript = topic.transcript or empty_transcript()

    transcript.entries = [e for e in transcript.entries if e.id != entry_id]
    transcript.summary = rolling_summary(transcript.entries)
    transcript.last_updated = _now()

    topic.transcript = transcript
    repo.save_topic(topic)
    logger.info("[TRANSCRIPT] Deleted entry %s from topic %s", entry_id, topic_id)
    return transcript
