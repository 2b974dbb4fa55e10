"""Judgment route.

Endpoints:
  POST /judge — rank ideas on the selected axes, optionally weighing a
                meeting transcript
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from ..errors import BadRequestError
from ..schemas.common import ApiResponse
from ..schemas.judge_schema import JudgeRequest, JudgeResult
from ..services.judge_service import perform_judgment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Judgment"])


@router.post(
    "/judge",
    response_model=ApiResponse[JudgeResult],
    response_model_exclude_none=True,
    summary="Judge ideas",
    response_description="Winner, full ranking and per-axis winners",
)
async def judge(body: JudgeRequest):
    """Rank every idea once. Falls back to keyword scoring without an LLM."""
    if not body.topic_id or not body.selected_axes:
        raise BadRequestError("Invalid request body. Topic ID and selected axes are required.")
    if not body.ideas:
        raise BadRequestError("Invalid request body. Ideas are required.")

    logger.info(
        "[JUDGE] Topic %s: %d ideas on %d axes (transcript: %s)",
        body.topic_id,
        len(body.ideas),
        len(body.selected_axes),
        "yes" if body.transcript else "no",
    )
    result = await perform_judgment(body.selected_axes, body.ideas, body.transcript)
    return ApiResponse(success=True, data=result)
