"""Judgment report export: Markdown generation and PDF conversion.

The PDF is produced by an external converter (``pandoc`` by default),
configured through ``IDEAJUDGE_PDF_COMMAND`` as a template containing
``{markdown}`` and ``{pdf}`` placeholders.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import uuid
from datetime import date
from pathlib import Path
from typing import Optional

from ..config import Settings
from ..errors import UpstreamServiceError
from ..schemas.judge_schema import JudgeResult
from ..schemas.topic_schema import TopicDetail
from ..timing import async_timer

logger = logging.getLogger(__name__)

_NO_DATA = "No data"
_EMPTY_CELL = "-"


class PdfExportError(UpstreamServiceError):
    """The converter could not be run or produced no output."""

    def __init__(self, detail: str) -> None:
        super().__init__("PDF export failed")
        self.detail = detail


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def build_markdown_report(
    topic: TopicDetail,
    judge_result: Optional[JudgeResult] = None,
    today: Optional[date] = None,
) -> str:
    today = today or date.today()
    lines = [
        "# AI Decision Support Report",
        "",
        f"**Topic**: {topic.name}  ",
    ]
    if topic.goal:
        lines.append(f"**Goal**: {topic.goal}  ")
    lines += [f"**Date**: {today.isoformat()}", "", "---", "", "## Judgment", ""]

    lines += ["### Overall winner", f"**{judge_result.winner.name if judge_result else _NO_DATA}**", ""]

    lines.append("### Ranking")
    if judge_result:
        for i, entry in enumerate(judge_result.ranking, start=1):
            lines.append(f"{i}. **{entry.idea_name}** (score: {entry.score:g})")
    lines.append("")

    lines.append("### Winner per axis")
    if judge_result:
        for axis, winner in judge_result.axis_winners.items():
            lines.append(f"- **{axis}**: {winner.name}")
    lines.append("")

    lines += ["### Reasoning", (judge_result.reasoning if judge_result and judge_result.reasoning else _NO_DATA), ""]

    if judge_result and judge_result.transcript_summary:
        lines += ["### Meeting summary", judge_result.transcript_summary, ""]

    lines += ["---", "", "## Ideas", ""]
    if topic.axes:
        lines.append("| Idea | " + " | ".join(_cell(a) for a in topic.axes) + " |")
        lines.append("|------|" + "|".join("------" for _ in topic.axes) + "|")
        for idea in topic.ideas:
            cells = [_cell(idea.evaluations.get(axis) or _EMPTY_CELL) for axis in topic.axes]
            lines.append(f"| {_cell(idea.name)} | " + " | ".join(cells) + " |")
    else:
        lines += [f"- {idea.name}" for idea in topic.ideas]
    lines.append("")

    if topic.transcript and topic.transcript.entries:
        lines += ["---", "", "## Meeting transcript", ""]
        for i, entry in enumerate(topic.transcript.entries, start=1):
            speaker = f" {entry.speaker}" if entry.speaker else ""
            lines += [f"### {i}. {entry.timestamp.isoformat()}{speaker}", entry.text, ""]

    lines += ["---", "", "## Axes used"]
    if judge_result:
        lines += [f"- {axis}" for axis in judge_result.used_axes]
    lines += ["", "---", "", "*This report was generated automatically by the AI decision support tool.*", ""]
    return "\n".join(lines)


def pdf_filename(topic_name: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"judgment_{topic_name}_{today.isoformat()}.pdf"


def _converter_args(template: str, markdown_path: Path, pdf_path: Path) -> list[str]:
    try:
        return [
            part.format(markdown=str(markdown_path), pdf=str(pdf_path))
            for part in shlex.split(template)
        ]
    except (KeyError, IndexError, ValueError) as exc:
        raise PdfExportError(f"invalid converter command: {exc!r}") from exc


async def render_pdf(markdown: str, settings: Settings) -> bytes:
    """Convert ``markdown`` to PDF bytes with the configured converter.

    Temporary files live under ``settings.temp_dir`` and are removed
    whether or not the conversion succeeds.
    """
    settings.temp_dir.mkdir(parents=True, exist_ok=True)
    stem = f"report_{uuid.uuid4().hex}"
    markdown_path = settings.temp_dir / f"{stem}.md"
    pdf_path = settings.temp_dir / f"{stem}.pdf"

    try:
        markdown_path.write_text(markdown, encoding="utf-8")
        args = _converter_args(settings.pdf_command, markdown_path, pdf_path)
        logger.info("[PDF] Running %s", args[0] if args else "<empty command>")

        async with async_timer("PDF", "CONVERT"):
            try:
                process = await asyncio.create_subprocess_exec(
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except (OSError, ValueError, IndexError) as exc:
                raise PdfExportError(f"could not start converter: {exc}") from exc

            try:
                _, stderr = await asyncio.wait_for(process.communicate(), timeout=settings.pdf_timeout)
            except asyncio.TimeoutError as exc:
                process.kill()
                await process.wait()
                raise PdfExportError(f"converter timed out after {settings.pdf_timeout:g}s") from exc

        if process.returncode != 0:
            raise PdfExportError(
                f"converter exited with {process.returncode}: {stderr.decode(errors='replace').strip()}"
            )
        if not pdf_path.exists():
            raise PdfExportError("converter produced no output")
        return pdf_path.read_bytes()
    except PdfExportError as exc:
        logger.error("[PDF] %s", exc.detail)
        raise
    finally:
        markdown_path.unlink(missing_ok=True)
        pdf_path.unlink(missing_ok=True)
