"""Axis evaluation chat and auto-evaluation tests — fallbacks, LLM replies, validation."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from ideajudge.constants import AUTO_EVALUATION_TEMPLATES, CHAT_EVALUATION_TEMPLATES
from ideajudge.main import app
from ideajudge.services.choice_policy import ChoicePolicy, get_choice_policy
from ideajudge.services.evaluation_service import axis_family, match_evaluations
from ideajudge.services.openai_client import LLMUnavailableError, Parsed, Unparseable

client = TestClient(app)

CHAT_LLM = "ideajudge.services.chat_service.call_llm_json"
EVAL_LLM = "ideajudge.services.evaluation_service.call_llm_json"


@pytest.fixture(autouse=True)
def setup(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    app.dependency_overrides[get_choice_policy] = lambda: ChoicePolicy(seed=42)
    yield
    app.dependency_overrides.pop(get_choice_policy, None)


def _chat(messages, axis="cost", idea="Shared bikes"):
    return client.post(
        "/chat",
        json={"messages": messages, "ideaName": idea, "currentAxis": axis, "axes": ["cost", "impact"]},
    )


def _user(text):
    return {"role": "user", "content": text}


def _assistant(text):
    return {"role": "assistant", "content": text}


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

class TestChatFallback:
    def test_opening_turn(self):
        resp = _chat([])
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["done"] is False
        assert '"Shared bikes"' in data["message"]
        assert "[Initial AI evaluation]" in data["message"]
        assert "evaluation" not in data
        evaluations = [e for e, _ in CHAT_EVALUATION_TEMPLATES["cost"]]
        assert any(e in data["message"] for e in evaluations)

    def test_follow_up_turn(self):
        data = _chat([_assistant("initial"), _user("Seems cheap")]).json()["data"]
        assert data["done"] is False
        assert data["message"].startswith("I see.")

    def test_done_after_two_user_messages(self):
        data = _chat([_user("ok"), _assistant("more?"), _user("that's all")]).json()["data"]
        assert data["done"] is True
        assert data["evaluation"] in [e for e, _ in CHAT_EVALUATION_TEMPLATES["cost"]]
        assert "Shared bikes" in data["ideaSummary"]

    def test_unknown_axis_family_uses_defaults(self):
        data = _chat([], axis="Team morale").json()["data"]
        assert "Team morale" in data["message"]

    def test_seeded_policy_is_reproducible(self):
        assert _chat([]).json() == _chat([]).json()


class TestChatValidation:
    def test_missing_idea_name(self):
        resp = client.post("/chat", json={"messages": [], "currentAxis": "cost"})
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Invalid request body"}

    def test_missing_messages(self):
        resp = client.post("/chat", json={"ideaName": "x", "currentAxis": "cost"})
        assert resp.status_code == 400


class TestChatLlm:
    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    def test_done_reply(self):
        reply = {"done": True, "message": "Settled.", "evaluation": "Affordable", "ideaSummary": "Bikes."}
        with patch(CHAT_LLM, AsyncMock(return_value=Parsed(reply))):
            data = _chat([_user("agree")]).json()["data"]
        assert data == {"done": True, "message": "Settled.", "evaluation": "Affordable", "ideaSummary": "Bikes."}

    def test_evaluation_dropped_when_not_done(self):
        reply = {"done": False, "message": "Tell me more.", "evaluation": "premature"}
        with patch(CHAT_LLM, AsyncMock(return_value=Parsed(reply))):
            data = _chat([_user("hmm")]).json()["data"]
        assert data == {"done": False, "message": "Tell me more."}

    def test_unparseable_reply_shown_as_text(self):
        with patch(CHAT_LLM, AsyncMock(return_value=Unparseable(raw_text="Plain answer", reason="no json"))):
            data = _chat([_user("hmm")]).json()["data"]
        assert data == {"done": False, "message": "Plain answer"}

    def test_missing_message_asks_for_more(self):
        with patch(CHAT_LLM, AsyncMock(return_value=Parsed({"done": False}))):
            data = _chat([_user("hmm")]).json()["data"]
        assert "Shared bikes" in data["message"]

    def test_llm_unavailable_uses_fallback(self):
        with patch(CHAT_LLM, AsyncMock(side_effect=LLMUnavailableError("down"))):
            data = _chat([]).json()["data"]
        assert "[Initial AI evaluation]" in data["message"]


# ---------------------------------------------------------------------------
# Auto-evaluate
# ---------------------------------------------------------------------------

def _auto(axes, idea="Shared bikes"):
    return client.post("/auto-evaluate", json={"ideaName": idea, "axes": axes, "topicName": "Commuting"})


class TestAutoEvaluateFallback:
    def test_one_evaluation_per_axis(self):
        data = _auto(["Cost", "Implementation difficulty", "Morale"]).json()["data"]
        assert list(data) == ["Cost", "Implementation difficulty", "Morale"]
        cost_templates = [t.format(idea="Shared bikes") for t in AUTO_EVALUATION_TEMPLATES["cost"]]
        assert data["Cost"] in cost_templates
        default_templates = [t.format(idea="Shared bikes") for t in AUTO_EVALUATION_TEMPLATES["feasibility"]]
        assert data["Morale"] in default_templates

    def test_validation(self):
        assert _auto([]).status_code == 400
        resp = client.post("/auto-evaluate", json={"axes": ["cost"]})
        assert resp.json() == {"success": False, "error": "Idea name and axes are required"}


class TestAutoEvaluateLlm:
    def test_keys_matched_exact_then_partial(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        reply = {"Cost": "Cheap to run.", "feasibility score": "Doable."}
        with patch(EVAL_LLM, AsyncMock(return_value=Parsed(reply))):
            data = _auto(["Cost", "Feasibility", "Impact"]).json()["data"]
        assert data["Cost"] == "Cheap to run."
        assert data["Feasibility"] == "Doable."
        assert "Shared bikes" in data["Impact"]

    def test_non_object_reply_falls_back(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with patch(EVAL_LLM, AsyncMock(return_value=Parsed(["x"]))):
            data = _auto(["Cost"]).json()["data"]
        assert "Shared bikes" in data["Cost"]


class TestHelpers:
    def test_axis_family(self):
        families = tuple(AUTO_EVALUATION_TEMPLATES)
        assert axis_family("Running cost", families) == "cost"
        assert axis_family("実現可能性", families) == "feasibility"
        assert axis_family("Impact", families) is None

    def test_match_evaluations_ignores_blank_values(self):
        result = match_evaluations({"Cost": "  "}, "Bikes", ["Cost"], ChoicePolicy(seed=1))
        assert "Bikes" in result["Cost"]
