"""Auto-evaluation route.

Endpoints:
  POST /auto-evaluate — draft one evaluation per axis for an idea
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..errors import BadRequestError
from ..schemas.common import ApiResponse
from ..schemas.evaluation_schema import AutoEvaluateRequest
from ..services.choice_policy import ChoicePolicy, get_choice_policy
from ..services.evaluation_service import auto_evaluate

router = APIRouter(tags=["Evaluation"])


@router.post(
    "/auto-evaluate",
    response_model=ApiResponse[dict[str, str]],
    response_model_exclude_none=True,
    summary="Auto-evaluate idea",
    response_description="Mapping of axis name to evaluation text",
)
async def auto_evaluate_idea(
    body: AutoEvaluateRequest,
    policy: ChoicePolicy = Depends(get_choice_policy),
):
    if not body.idea_name or not body.axes:
        raise BadRequestError("Idea name and axes are required")

    evaluations = await auto_evaluate(
        body.idea_name,
        body.axes,
        policy,
        description=body.description,
        topic_name=body.topic_name,
        topic_goal=body.topic_goal,
    )
    return ApiResponse(success=True, data=evaluations)
