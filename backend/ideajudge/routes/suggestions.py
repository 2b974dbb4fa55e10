"""AI suggestion routes.

Endpoints:
  POST /suggest-axes  — up to three new evaluation axes
  POST /suggest-ideas — up to three new ideas
"""

from __future__ import annotations

from fastapi import APIRouter

from ..errors import BadRequestError
from ..schemas.common import ApiResponse
from ..schemas.suggestion_schema import (
    SuggestAxesRequest,
    SuggestedAxis,
    SuggestedIdea,
    SuggestIdeasRequest,
)
from ..services.suggestion_service import suggest_axes, suggest_ideas

router = APIRouter(tags=["Suggestions"])

_TOPIC_NAME_REQUIRED = "Topic name is required"


@router.post(
    "/suggest-axes",
    response_model=ApiResponse[list[SuggestedAxis]],
    response_model_exclude_none=True,
    summary="Suggest evaluation axes",
)
async def suggest_axes_route(body: SuggestAxesRequest):
    if not body.topic_name:
        raise BadRequestError(_TOPIC_NAME_REQUIRED)

    suggestions = await suggest_axes(
        body.topic_name,
        goal=body.goal,
        existing_axes=body.existing_axes,
        transcript=body.transcript,
        ideas=body.ideas,
    )
    return ApiResponse(success=True, data=suggestions)


@router.post(
    "/suggest-ideas",
    response_model=ApiResponse[list[SuggestedIdea]],
    response_model_exclude_none=True,
    summary="Suggest ideas",
)
async def suggest_ideas_route(body: SuggestIdeasRequest):
    if not body.topic_name:
        raise BadRequestError(_TOPIC_NAME_REQUIRED)

    suggestions = await suggest_ideas(
        body.topic_name,
        goal=body.goal,
        axes=body.axes,
        transcript=body.transcript,
        existing_ideas=body.existing_ideas,
    )
    return ApiResponse(success=True, data=suggestions)
