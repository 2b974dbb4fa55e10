"""Axis evaluation chat route.

Endpoints:
  POST /chat — next assistant turn for evaluating one idea on one axis
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..errors import BadRequestError
from ..schemas.chat_schema import ChatReply, ChatRequest
from ..schemas.common import ApiResponse
from ..services.chat_service import evaluation_chat
from ..services.choice_policy import ChoicePolicy, get_choice_policy

router = APIRouter(tags=["Chat"])


@router.post(
    "/chat",
    response_model=ApiResponse[ChatReply],
    response_model_exclude_none=True,
    summary="Evaluation chat turn",
)
async def chat(
    body: ChatRequest,
    policy: ChoicePolicy = Depends(get_choice_policy),
):
    """Reply with ``done=true`` plus the final evaluation once the axis is settled."""
    if body.messages is None or not body.idea_name or not body.current_axis:
        raise BadRequestError("Invalid request body")

    reply = await evaluation_chat(body.messages, body.idea_name, body.current_axis, body.axes, policy)
    return ApiResponse(success=True, data=reply)
