"""Topic repository — whole-aggregate read/write by topic id.

Layout of ``JsonFileTopicRepository`` under its data directory:

  topics.json          index of ``Topic`` records, newest first
  topic_<id>.json      one ``TopicDetail`` per topic

Every call reads or rewrites a whole file. There is no locking: two
writers updating the same topic race and the last write wins. Callers
must read-modify-write the full ``TopicDetail``.
"""

from __future__ import annotations

import abc
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..config import get_settings
from ..schemas.topic_schema import Topic, TopicDetail

logger = logging.getLogger(__name__)

_INDEX_FILE = "topics.json"
# Top-level fields mirrored into the index when a topic is updated.
_INDEX_FIELDS = ("name", "goal", "axes")


class TopicRepository(abc.ABC):
    """Storage capability used by routes and services."""

    @abc.abstractmethod
    def list_topics(self) -> list[Topic]:
        ...

    @abc.abstractmethod
    def get_topic(self, topic_id: str) -> Optional[TopicDetail]:
        ...

    @abc.abstractmethod
    def create_topic(self, name: str, goal: Optional[str], axes: list[str]) -> Topic:
        ...

    @abc.abstractmethod
    def update_topic(self, topic_id: str, updates: dict[str, Any]) -> Optional[TopicDetail]:
        """Merge top-level ``updates`` over the stored detail and persist it.

        Returns None when the topic does not exist.
        """

    @abc.abstractmethod
    def delete_topic(self, topic_id: str) -> bool:
        ...

    def save_topic(self, detail: TopicDetail) -> Optional[TopicDetail]:
        """Persist a whole detail object obtained from ``get_topic``."""
        return self.update_topic(detail.id, detail.model_dump(exclude={"id"}))


class JsonFileTopicRepository(TopicRepository):
    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    # ── File helpers ─────────────────────────────────────────────────────

    @property
    def _index_path(self) -> Path:
        return self.data_dir / _INDEX_FILE

    def _detail_path(self, topic_id: str) -> Path:
        return self.data_dir / f"topic_{topic_id}.json"

    def _ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self._index_path.exists():
            self._index_path.write_text("[]", encoding="utf-8")

    def _write_json(self, path: Path, payload: Any) -> None:
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def _write_index(self, topics: list[Topic]) -> None:
        self._write_json(
            self._index_path,
            [t.model_dump(mode="json", by_alias=True, exclude_none=True) for t in topics],
        )

    def _write_detail(self, detail: TopicDetail) -> None:
        self._write_json(
            self._detail_path(detail.id),
            detail.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    # ── Repository API ───────────────────────────────────────────────────

    def list_topics(self) -> list[Topic]:
        self._ensure_data_dir()
        try:
            raw = json.loads(self._index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("[STORAGE] Failed to read topic index: %s", exc)
            return []
        if not isinstance(raw, list):
            logger.error("[STORAGE] Topic index is not a list")
            return []

        topics: list[Topic] = []
        for item in raw:
            try:
                topics.append(Topic.model_validate(item))
            except ValidationError as exc:
                logger.error("[STORAGE] Skipping invalid index record: %s", exc)
        return topics

    def get_topic(self, topic_id: str) -> Optional[TopicDetail]:
        topic = next((t for t in self.list_topics() if t.id == topic_id), None)
        if topic is None:
            return None

        detail_path = self._detail_path(topic_id)
        if detail_path.exists():
            try:
                return TopicDetail.model_validate_json(detail_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                logger.error("[STORAGE] Failed to read detail for topic %s: %s", topic_id, exc)

        # Detail file missing or unreadable: rebuild from the index entry.
        return TopicDetail(id=topic.id, name=topic.name, goal=topic.goal, axes=topic.axes, ideas=[])

    def create_topic(self, name: str, goal: Optional[str], axes: list[str]) -> Topic:
        topics = self.list_topics()
        topic = Topic(id=str(uuid.uuid4()), name=name, goal=goal or None, axes=list(axes))

        topics.insert(0, topic)
        self._write_index(topics)
        self._write_detail(
            TopicDetail(id=topic.id, name=topic.name, goal=topic.goal, axes=topic.axes, ideas=[])
        )

        logger.info("[STORAGE] Created topic %s (%d axes)", topic.id, len(topic.axes))
        return topic

    def update_topic(self, topic_id: str, updates: dict[str, Any]) -> Optional[TopicDetail]:
        current = self.get_topic(topic_id)
        if current is None:
            return None

        merged = current.model_dump()
        merged.update({k: v for k, v in updates.items() if k != "id"})
        updated = TopicDetail.model_validate(merged)
        self._write_detail(updated)

        if any(k in updates for k in _INDEX_FIELDS):
            topics = self.list_topics()
            for i, topic in enumerate(topics):
                if topic.id == topic_id:
                    topics[i] = Topic(id=topic_id, name=updated.name, goal=updated.goal, axes=updated.axes)
                    self._write_index(topics)
                    break

        return updated

    def delete_topic(self, topic_id: str) -> bool:
        topics = self.list_topics()
        remaining = [t for t in topics if t.id != topic_id]
        if len(remaining) == len(topics):
            return False

        self._write_index(remaining)
        self._detail_path(topic_id).unlink(missing_ok=True)
        logger.info("[STORAGE] Deleted topic %s", topic_id)
        return True


def get_topic_repository() -> TopicRepository:
    """FastAPI dependency returning the configured repository."""
    return JsonFileTopicRepository(get_settings().data_dir)
