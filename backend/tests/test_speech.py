"""Speech-to-text tests — speaker parsing, audio decoding, upstream error mapping."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import base64
from unittest.mock import AsyncMock, patch

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from ideajudge.errors import BadRequestError
from ideajudge.main import app
from ideajudge.services.speech_service import decode_audio, parse_transcript_by_speaker

client = TestClient(app)

TRANSCRIBE = "ideajudge.services.speech_service.transcribe_audio"
AUDIO_B64 = base64.b64encode(b"fake-webm-bytes").decode()


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


def _lines(text):
    return [(e.speaker, e.text) for e in parse_transcript_by_speaker(text)]


class TestParseTranscript:
    def test_labelled_lines(self):
        text = "Speaker A: Let's start.\nSpeaker B: Agreed."
        assert _lines(text) == [("Speaker A", "Let's start."), ("Speaker B", "Agreed.")]

    def test_continuation_appends_to_previous(self):
        assert _lines("Alice: first part\nsecond part\nBob: hi") == [
            ("Alice", "first part second part"),
            ("Bob", "hi"),
        ]

    def test_leading_unlabelled_line(self):
        assert _lines("hello there\nModerator: welcome") == [
            ("unknown", "hello there"),
            ("Moderator", "welcome"),
        ]

    def test_full_width_colon(self):
        assert _lines("司会：始めます\n参加者1：はい") == [("司会", "始めます"), ("参加者1", "はい")]

    def test_no_labels(self):
        assert _lines("just talking") == [("unknown", "just talking")]

    def test_blank_text(self):
        assert _lines("  \n ") == []


class TestDecodeAudio:
    def test_plain_base64(self):
        assert decode_audio(AUDIO_B64) == b"fake-webm-bytes"

    def test_data_url(self):
        assert decode_audio(f"data:audio/webm;base64,{AUDIO_B64}") == b"fake-webm-bytes"

    def test_invalid(self):
        with pytest.raises(BadRequestError):
            decode_audio("!!not base64!!")


def _openai_error(cls, status):
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    return cls("upstream", response=httpx.Response(status, request=request), body=None)


class TestSpeechApi:
    def test_audio_required(self):
        resp = client.post("/speech-to-text", json={})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Audio data is required"}

    def test_invalid_base64(self):
        resp = client.post("/speech-to-text", json={"audio": "!!not base64!!"})
        assert resp.status_code == 400

    def test_missing_key(self):
        resp = client.post("/speech-to-text", json={"audio": AUDIO_B64})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "OpenAI API key is not configured"}

    def test_transcribed(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        text = "Speaker A: Downtown is best.\nSpeaker B: Too expensive."
        with patch(TRANSCRIBE, AsyncMock(return_value=text)) as mock_transcribe:
            resp = client.post("/speech-to-text", json={"audio": AUDIO_B64, "mimeType": "audio/ogg"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["fullTranscript"] == text
        assert data["entries"] == [
            {"speaker": "Speaker A", "text": "Downtown is best."},
            {"speaker": "Speaker B", "text": "Too expensive."},
        ]
        args = mock_transcribe.await_args.args
        assert args == (b"fake-webm-bytes", "audio/ogg")

    @pytest.mark.parametrize(
        "error, message",
        [
            (_openai_error(openai.AuthenticationError, 401), "OpenAI API key is invalid"),
            (_openai_error(openai.RateLimitError, 429), "OpenAI API rate limit exceeded. Please try again later"),
            (_openai_error(openai.BadRequestError, 400), "Unsupported audio format or corrupted audio data"),
            (_openai_error(openai.InternalServerError, 500), "Speech recognition failed"),
        ],
    )
    def test_upstream_errors(self, monkeypatch, error, message):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch(TRANSCRIBE, AsyncMock(side_effect=error)):
            resp = client.post("/speech-to-text", json={"audio": AUDIO_B64})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": message}
