"""LLM gateway tests — JSON sanitising, tagged parse results, configuration."""

import asyncio
import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ideajudge.services.openai_client import (
    LLMUnavailableError,
    Parsed,
    Unparseable,
    _audio_filename,
    build_payload,
    call_llm_json,
    get_openai_key,
    is_llm_configured,
    parse_llm_json,
    sanitize_json,
)


class TestSanitizeJson:
    def test_strips_markdown_fence(self):
        assert sanitize_json('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_prose(self):
        assert sanitize_json('Here you go: {"a": 1} hope it helps') == '{"a": 1}'

    def test_strips_bom(self):
        assert sanitize_json("\ufeff" '{"a": 1}') == '{"a": 1}'

    def test_removes_trailing_commas(self):
        assert sanitize_json('{"a": [1, 2,], }') == '{"a": [1, 2]}'

    def test_accepts_array(self):
        assert sanitize_json('[{"name": "x"}]') == '[{"name": "x"}]'

    def test_no_json_raises(self):
        with pytest.raises(ValueError):
            sanitize_json("no json here")


class TestParseLlmJson:
    def test_parsed(self):
        assert parse_llm_json('{"winner": {"id": "a"}}') == Parsed({"winner": {"id": "a"}})

    def test_empty_is_unparseable(self):
        result = parse_llm_json("   ")
        assert isinstance(result, Unparseable)
        assert result.reason == "empty response"

    def test_broken_json_is_unparseable(self):
        result = parse_llm_json('{"winner": ')
        assert isinstance(result, Unparseable)
        assert result.raw_text == '{"winner": '


class TestConfiguration:
    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert not is_llm_configured()
        with pytest.raises(LLMUnavailableError):
            get_openai_key()

    def test_blank_key_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "   ")
        assert not is_llm_configured()

    def test_payload_requests_json_object(self):
        payload = build_payload(model="m", messages=[], max_completion_tokens=10, temperature=0.2)
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["max_tokens"] == 10

    def test_audio_filename(self):
        assert _audio_filename("audio/webm;codecs=opus") == "recording.webm"
        assert _audio_filename("audio/mpeg") == "recording.mp3"
        assert _audio_filename("application/unknown") == "recording.webm"


# ---------------------------------------------------------------------------
# call_llm_json with a mocked transport
# ---------------------------------------------------------------------------

def _mock_client(response=None, error=None):
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.post = AsyncMock(return_value=response, side_effect=error)
    return client


def _completion(content, status_code=200):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"content": content}}], "usage": {"total_tokens": 5}},
        request=request,
    )


class TestCallLlmJson:
    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    def _call(self):
        return asyncio.run(call_llm_json(messages=[{"role": "user", "content": "hi"}], context="TEST"))

    def test_parsed_reply(self):
        with patch("ideajudge.services.openai_client.httpx.AsyncClient", return_value=_mock_client(_completion('{"ok": true}'))):
            assert self._call() == Parsed({"ok": True})

    def test_unparseable_reply(self):
        with patch("ideajudge.services.openai_client.httpx.AsyncClient", return_value=_mock_client(_completion("sorry, no"))):
            result = self._call()
        assert isinstance(result, Unparseable)
        assert result.raw_text == "sorry, no"

    def test_http_error_status(self):
        with patch("ideajudge.services.openai_client.httpx.AsyncClient", return_value=_mock_client(_completion("{}", 429))):
            with pytest.raises(LLMUnavailableError):
                self._call()

    def test_timeout(self):
        client = _mock_client(error=httpx.ReadTimeout("slow"))
        with patch("ideajudge.services.openai_client.httpx.AsyncClient", return_value=client):
            with pytest.raises(LLMUnavailableError):
                self._call()

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")
        with pytest.raises(LLMUnavailableError):
            self._call()
