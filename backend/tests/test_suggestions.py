"""Axis and idea suggestion tests — catalogue fallback filtering, LLM reply coercion."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from ideajudge.main import app
from ideajudge.schemas.suggestion_schema import IdeaBrief, SuggestedAxis
from ideajudge.services.openai_client import Parsed, Unparseable
from ideajudge.services.suggestion_service import (
    coerce_suggestions,
    fallback_axes,
    fallback_ideas,
    transcript_excerpt,
)

client = TestClient(app)

SUGGEST_LLM = "ideajudge.services.suggestion_service.call_llm_json"


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


class TestFallbackCatalogue:
    def test_axes_skip_overlapping_names(self):
        names = [a.name for a in fallback_axes(["cost", "Impact"])]
        assert names == ["Feasibility", "Low risk", "Urgency"]

    def test_axes_without_existing(self):
        assert len(fallback_axes([])) == 3

    def test_ideas_ignore_plan_suffix(self):
        names = [i.name for i in fallback_ideas([IdeaBrief(name="Process improvement")])]
        assert names == ["Technology adoption plan", "Organisation change plan", "External partnership plan"]

    def test_everything_taken(self):
        existing = ["Cost efficiency", "Feasibility", "Impact", "Low risk", "Urgency",
                    "Sustainability", "Usability", "Scalability"]
        assert fallback_axes(existing) == []


class TestCoerceSuggestions:
    def test_drops_malformed_and_caps(self):
        value = {"suggestions": [
            {"name": "A", "reason": "r"},
            {"name": ""},
            {"bogus": 1},
            "text",
            {"name": "B"},
            {"name": "C"},
            {"name": "D"},
        ]}
        assert [s.name for s in coerce_suggestions(value, SuggestedAxis)] == ["A", "B", "C"]

    def test_bare_list(self):
        assert [s.name for s in coerce_suggestions([{"name": "A"}], SuggestedAxis)] == ["A"]

    def test_unexpected_shape(self):
        assert coerce_suggestions("nope", SuggestedAxis) == []


class TestTranscriptExcerpt:
    def test_truncated(self):
        excerpt = transcript_excerpt("x" * 1500)
        assert excerpt == "x" * 1000 + "..."

    def test_short_kept(self):
        assert transcript_excerpt("short") == "short"
        assert transcript_excerpt(None) == ""


class TestSuggestAxesApi:
    def test_topic_name_required(self):
        resp = client.post("/suggest-axes", json={"existingAxes": []})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Topic name is required"}

    def test_fallback(self):
        resp = client.post("/suggest-axes", json={"topicName": "Office move", "existingAxes": ["Feasibility"]})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [a["name"] for a in data] == ["Cost efficiency", "Impact", "Low risk"]
        assert all(a["reason"] for a in data)

    def test_llm_suggestions(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        reply = {"suggestions": [{"name": "Commute time", "reason": "Staff travel daily"}]}
        with patch(SUGGEST_LLM, AsyncMock(return_value=Parsed(reply))) as mock_call:
            data = client.post(
                "/suggest-axes",
                json={"topicName": "Office move", "transcript": "we talked", "ideas": [{"name": "Downtown"}]},
            ).json()["data"]
        assert data == [{"name": "Commute time", "reason": "Staff travel daily"}]
        prompt = mock_call.await_args.kwargs["messages"][1]["content"]
        assert "Downtown" in prompt
        assert "we talked" in prompt

    def test_unparseable_reply_uses_catalogue(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch(SUGGEST_LLM, AsyncMock(return_value=Unparseable(raw_text="?", reason="no json"))):
            data = client.post("/suggest-axes", json={"topicName": "Office move"}).json()["data"]
        assert data[0]["name"] == "Cost efficiency"


class TestSuggestIdeasApi:
    def test_topic_name_required(self):
        assert client.post("/suggest-ideas", json={}).status_code == 400

    def test_fallback(self):
        resp = client.post(
            "/suggest-ideas",
            json={"topicName": "Office move", "existingIdeas": [{"name": "technology adoption"}]},
        )
        names = [i["name"] for i in resp.json()["data"]]
        assert names == ["Process improvement plan", "Organisation change plan", "External partnership plan"]

    def test_llm_items_without_name_dropped(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        reply = [{"description": "nameless"}, {"name": "Remote first", "description": "Go remote", "reason": "Saves rent"}]
        with patch(SUGGEST_LLM, AsyncMock(return_value=Parsed(reply))):
            data = client.post("/suggest-ideas", json={"topicName": "Office move"}).json()["data"]
        assert data == [{"name": "Remote first", "description": "Go remote", "reason": "Saves rent"}]
