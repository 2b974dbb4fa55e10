"""Centralized OpenAI client.

All services MUST use `call_llm_json()` for chat completions and
`transcribe_audio()` for speech. This ensures:
  - Model, temperature, timeout, and token limits are read from env.
  - Replies are parsed into a tagged result: ``Parsed`` or ``Unparseable``.
  - Transport failures raise ``LLMUnavailableError`` so callers fall back.
  - A single attempt per call; nothing is retried.
  - Consistent logging across services.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx
from openai import AsyncOpenAI

from ..config import env_float, env_int
from ..timing import async_timer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants — all read from environment with safe defaults
# ---------------------------------------------------------------------------
_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


class LLMUnavailableError(Exception):
    """The LLM is not configured or the request did not complete."""


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class Unparseable:
    raw_text: str
    reason: str


LLMResult = Union[Parsed, Unparseable]


def get_openai_key() -> str:
    """Read OPENAI_API_KEY from the environment. Raises LLMUnavailableError if missing."""
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise LLMUnavailableError("OPENAI_API_KEY environment variable not set")
    return key


def is_llm_configured() -> bool:
    return bool(os.getenv("OPENAI_API_KEY", "").strip())


def get_openai_model() -> str:
    return os.getenv("OPENAI_MODEL", "gpt-4.1").strip()


def get_transcribe_model() -> str:
    return os.getenv("OPENAI_TRANSCRIBE_MODEL", "whisper-1").strip()


def _get_temperature() -> float:
    return env_float("OPENAI_TEMPERATURE", 0.7)


def _get_timeout() -> float:
    return env_float("OPENAI_REQUEST_TIMEOUT", 40.0)


def _get_default_max_tokens() -> int:
    return env_int("OPENAI_MAX_COMPLETION_TOKENS", 2000)


# ---------------------------------------------------------------------------
# JSON sanitizer — extracts valid JSON from LLM output
# ---------------------------------------------------------------------------
def sanitize_json(raw: str) -> str:
    """Extract a JSON object or array from raw LLM output.

    Handles:
      - Markdown fences (```json ... ```)
      - Leading/trailing whitespace and BOM
      - Prose before/after JSON
      - Trailing commas before } or ]

    Raises ValueError if no JSON value is found.
    """
    text = _FENCE_RE.sub("", raw.strip().lstrip("\ufeff")).strip()

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        raise ValueError("LLM did not return JSON — no '{' or '[' found")
    start = min(starts)
    closer = "}" if text[start] == "{" else "]"

    end = text.rfind(closer)
    if end < start:
        raise ValueError(f"LLM did not return JSON — no closing '{closer}' found")
    text = text[start : end + 1]

    return _TRAILING_COMMA_RE.sub(r"\1", text)


def parse_llm_json(raw: str) -> LLMResult:
    """Turn raw model text into ``Parsed`` or ``Unparseable``. Never raises."""
    if not raw or not raw.strip():
        return Unparseable(raw_text=raw or "", reason="empty response")
    try:
        return Parsed(json.loads(sanitize_json(raw)))
    except ValueError as exc:  # includes json.JSONDecodeError
        return Unparseable(raw_text=raw, reason=str(exc))


def build_payload(
    *,
    model: str,
    messages: List[Dict[str, str]],
    max_completion_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    """Build an OpenAI chat completions payload with JSON object output."""
    return {
        "model": model,
        "messages": messages,
        "max_tokens": max_completion_tokens,
        "temperature": temperature,
        "response_format": {"type": "json_object"},
    }


async def call_llm_json(
    *,
    messages: List[Dict[str, str]],
    max_completion_tokens: int = 0,
    context: str = "OPENAI",
) -> LLMResult:
    """Call OpenAI chat completions once and return the tagged parse result.

    Parameters
    ----------
    messages : list[dict]
        The messages array (system + user).
    max_completion_tokens : int
        Token limit for the response. 0 = use env default.
    context : str
        Log tag of the calling service.

    Raises
    ------
    LLMUnavailableError
        Missing API key, non-200 status, timeout or transport error.
    """
    api_key = get_openai_key()
    model = get_openai_model()
    if max_completion_tokens <= 0:
        max_completion_tokens = _get_default_max_tokens()

    payload = build_payload(
        model=model,
        messages=messages,
        max_completion_tokens=max_completion_tokens,
        temperature=_get_temperature(),
    )
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    logger.info("[%s] Calling %s (max_tokens=%d)", context, model, max_completion_tokens)
    try:
        async with async_timer(context, "LLM CALL"):
            async with httpx.AsyncClient(timeout=_get_timeout()) as client:
                response = await client.post(_OPENAI_API_URL, headers=headers, json=payload)
    except httpx.TimeoutException as exc:
        logger.warning("[%s] OpenAI request timed out", context)
        raise LLMUnavailableError("OpenAI request timed out") from exc
    except httpx.HTTPError as exc:
        logger.warning("[%s] OpenAI request failed: %s", context, exc)
        raise LLMUnavailableError(f"OpenAI request failed: {exc}") from exc

    if response.status_code != 200:
        logger.warning("[%s] OpenAI HTTP %d: %s", context, response.status_code, response.text[:400])
        raise LLMUnavailableError(f"OpenAI returned HTTP {response.status_code}")

    try:
        data = response.json()
        raw_content = (data["choices"][0]["message"]["content"] or "").strip()
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        logger.warning("[%s] Malformed completion envelope: %s", context, exc)
        return Unparseable(raw_text=response.text, reason="malformed completion envelope")

    usage = data.get("usage") or {}
    logger.info(
        "[%s] Tokens used: prompt=%s, completion=%s, total=%s",
        context,
        usage.get("prompt_tokens", "?"),
        usage.get("completion_tokens", "?"),
        usage.get("total_tokens", "?"),
    )

    result = parse_llm_json(raw_content)
    if isinstance(result, Unparseable):
        logger.warning("[%s] JSON parse failed: %s — raw (first 300 chars): %s", context, result.reason, raw_content[:300])
    return result


# ---------------------------------------------------------------------------
# Speech to text
# ---------------------------------------------------------------------------
_MIME_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "m4a",
    "audio/m4a": "m4a",
    "audio/x-m4a": "m4a",
}


def _audio_filename(mime_type: str) -> str:
    base = mime_type.split(";", 1)[0].strip().lower()
    return f"recording.{_MIME_EXTENSIONS.get(base, 'webm')}"


async def transcribe_audio(
    audio: bytes,
    mime_type: str,
    *,
    prompt: Optional[str] = None,
) -> str:
    """Send an audio blob to the transcription endpoint and return its text.

    OpenAI SDK errors (``openai.APIError`` subclasses) propagate so the
    caller can map them to a user-facing message.
    """
    client = AsyncOpenAI(api_key=get_openai_key(), timeout=_get_timeout())
    model = get_transcribe_model()
    logger.info("[SPEECH] Transcribing %d bytes (%s) with %s", len(audio), mime_type, model)

    async with async_timer("SPEECH", "TRANSCRIBE"):
        result = await client.audio.transcriptions.create(
            model=model,
            file=(_audio_filename(mime_type), audio, mime_type),
            prompt=prompt or "",
        )
    return (getattr(result, "text", "") or "").strip()
