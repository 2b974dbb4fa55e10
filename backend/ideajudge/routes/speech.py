"""Speech-to-text route.

Endpoints:
  POST /speech-to-text — transcribe base64 audio into speaker lines
"""

from __future__ import annotations

from fastapi import APIRouter

from ..errors import BadRequestError
from ..schemas.common import ApiResponse
from ..schemas.speech_schema import SpeechToTextRequest, SpeechToTextResult
from ..services.speech_service import speech_to_text

router = APIRouter(tags=["Speech"])


@router.post(
    "/speech-to-text",
    response_model=ApiResponse[SpeechToTextResult],
    response_model_exclude_none=True,
    summary="Transcribe audio",
)
async def transcribe(body: SpeechToTextRequest):
    if not body.audio:
        raise BadRequestError("Audio data is required")

    result = await speech_to_text(body.audio, body.mime_type)
    return ApiResponse(success=True, data=result)
