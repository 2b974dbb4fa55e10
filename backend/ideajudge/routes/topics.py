"""Topic CRUD routes.

Endpoints:
  GET    /topics        — list topics, newest first
  POST   /topics        — create a topic
  GET    /topics/{id}   — topic with ideas and transcript
  PUT    /topics/{id}   — replace top-level fields
  DELETE /topics/{id}   — delete a topic
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from ..errors import BadRequestError, TopicNotFoundError
from ..schemas.common import ApiResponse
from ..schemas.topic_schema import Topic, TopicCreateInput, TopicDetail, TopicUpdateInput
from ..services.storage import TopicRepository, get_topic_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/topics",
    tags=["Topics"],
)


@router.get(
    "",
    response_model=ApiResponse[list[Topic]],
    response_model_exclude_none=True,
    summary="List topics",
)
def list_topics(repo: TopicRepository = Depends(get_topic_repository)):
    return ApiResponse(success=True, data=repo.list_topics())


@router.post(
    "",
    response_model=ApiResponse[Topic],
    response_model_exclude_none=True,
    summary="Create topic",
)
def create_topic(
    body: TopicCreateInput,
    repo: TopicRepository = Depends(get_topic_repository),
):
    if not body.name or not body.name.strip() or body.axes is None:
        raise BadRequestError("Invalid request body. Name and axes are required.")

    topic = repo.create_topic(body.name.strip(), body.goal, body.axes)
    return ApiResponse(success=True, data=topic)


@router.get(
    "/{topic_id}",
    response_model=ApiResponse[TopicDetail],
    response_model_exclude_none=True,
    summary="Get topic detail",
)
def get_topic(topic_id: str, repo: TopicRepository = Depends(get_topic_repository)):
    topic = repo.get_topic(topic_id)
    if topic is None:
        raise TopicNotFoundError(topic_id)
    return ApiResponse(success=True, data=topic)


@router.put(
    "/{topic_id}",
    response_model=ApiResponse[TopicDetail],
    response_model_exclude_none=True,
    summary="Update topic",
)
def update_topic(
    topic_id: str,
    body: TopicUpdateInput,
    repo: TopicRepository = Depends(get_topic_repository),
):
    try:
        updated = repo.update_topic(topic_id, body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        logger.info("[TOPICS] Rejected update for %s: %s", topic_id, exc)
        raise BadRequestError("Failed to update topic") from exc
    if updated is None:
        raise TopicNotFoundError(topic_id)
    logger.info("[TOPICS] Updated topic %s", topic_id)
    return ApiResponse(success=True, data=updated)


@router.delete(
    "/{topic_id}",
    response_model=ApiResponse[bool],
    response_model_exclude_none=True,
    summary="Delete topic",
)
def delete_topic(topic_id: str, repo: TopicRepository = Depends(get_topic_repository)):
    if not repo.delete_topic(topic_id):
        raise TopicNotFoundError(topic_id)
    return ApiResponse(success=True, data=True)
