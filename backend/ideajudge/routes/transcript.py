"""Meeting transcript routes.

Endpoints:
  GET    /transcript?topicId=  — transcript of a topic
  POST   /transcript           — append an utterance
  DELETE /transcript           — remove an utterance by id
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..errors import BadRequestError
from ..schemas.common import ApiResponse
from ..schemas.transcript_schema import TranscriptData, TranscriptDeleteInput, TranscriptEntryInput
from ..services import transcript_service
from ..services.choice_policy import ChoicePolicy, get_choice_policy
from ..services.storage import TopicRepository, get_topic_repository

router = APIRouter(
    prefix="/transcript",
    tags=["Transcript"],
)


@router.get(
    "",
    response_model=ApiResponse[TranscriptData],
    response_model_exclude_none=True,
    summary="Get transcript",
)
def get_transcript(
    topic_id: Optional[str] = Query(default=None, alias="topicId"),
    repo: TopicRepository = Depends(get_topic_repository),
):
    if not topic_id:
        raise BadRequestError("Topic ID is required")
    return ApiResponse(success=True, data=transcript_service.get_transcript(repo, topic_id))


@router.post(
    "",
    response_model=ApiResponse[TranscriptData],
    response_model_exclude_none=True,
    summary="Add transcript entry",
)
def add_transcript_entry(
    body: TranscriptEntryInput,
    repo: TopicRepository = Depends(get_topic_repository),
    policy: ChoicePolicy = Depends(get_choice_policy),
):
    if not body.topic_id or not body.text or not body.text.strip():
        raise BadRequestError("Topic ID and text are required")

    transcript = transcript_service.add_entry(repo, body.topic_id, body.text, policy, speaker=body.speaker)
    return ApiResponse(success=True, data=transcript)


@router.delete(
    "",
    response_model=ApiResponse[TranscriptData],
    response_model_exclude_none=True,
    summary="Delete transcript entry",
)
def delete_transcript_entry(
    body: TranscriptDeleteInput,
    repo: TopicRepository = Depends(get_topic_repository),
):
    if not body.topic_id or not body.entry_id:
        raise BadRequestError("Topic ID and entry ID are required")

    transcript = transcript_service.delete_entry(repo, body.topic_id, body.entry_id)
    return ApiResponse(success=True, data=transcript)
