"""Report export route.

Endpoints:
  POST /export-pdf — judgment report for a topic as a PDF download
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..config import get_settings
from ..errors import BadRequestError, TopicNotFoundError
from ..schemas.judge_schema import ExportPdfRequest
from ..services.report_service import build_markdown_report, pdf_filename, render_pdf
from ..services.storage import TopicRepository, get_topic_repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Export"])


@router.post(
    "/export-pdf",
    summary="Export judgment as PDF",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_pdf(
    body: ExportPdfRequest,
    repo: TopicRepository = Depends(get_topic_repository),
):
    if not body.topic_id:
        raise BadRequestError("Topic ID is required")

    topic = repo.get_topic(body.topic_id)
    if topic is None:
        raise TopicNotFoundError(body.topic_id)

    markdown = build_markdown_report(topic, body.judge_result)
    pdf = await render_pdf(markdown, get_settings())
    logger.info("[EXPORT] Rendered %d byte PDF for topic %s", len(pdf), topic.id)

    filename = pdf_filename(topic.name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
