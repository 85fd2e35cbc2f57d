from __future__ import annotations

import json
from datetime import date
from types import SimpleNamespace

import httpx
import openai
import pytest
from google.api_core import exceptions as google_exceptions

from planner.core.errors import OracleError
from planner.oracle.context_utils import build_context_lines, minutes_to_label
from planner.oracle.gemini_adapter import GeminiProposalOracle
from planner.oracle.openai_adapter import OpenAIProposalOracle

TODAY = date(2026, 10, 19)

SNAPSHOT = {
    "preferences": {"workBlockMins": 50, "maxBlocksPerDay": 3, "startHour": 6, "endHour": 22},
    "busyBlocks": [{"id": "busy_1", "day": "Mon", "startMin": 540, "endMin": 600, "label": "Class"}],
    "tasks": [
        {"id": "task_1", "title": "Essay", "dueDate": "2026-10-23", "priority": "high", "estimateMins": 120, "done": False},
        {"id": "task_2", "title": "Old lab", "dueDate": "2026-10-10", "priority": "low", "estimateMins": 60, "done": True},
    ],
}

REPLY = {
    "preview": "Adds gym on Tuesday evenings.",
    "action": {"addBusyBlocks": [{"day": "Tue", "startMin": 1080, "endMin": 1140, "label": "Gym"}]},
    "confirmationToken": "tok_abc",
}


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _openai_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class FakeGeminiModel:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, prompt, **kwargs):
        self.prompts.append((prompt, kwargs))
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def test_context_summary_skips_done_tasks():
    lines = build_context_lines(SNAPSHOT)
    assert lines[0] == "Preferences: day 6:00-22:00, blocks of 50 min, max 3 blocks/day"
    assert lines[1] == "Busy: Mon 9:00 AM-10:00 AM Class"
    assert lines[2] == "Open tasks: Essay [due 2026-10-23, high, 120 min]"
    assert minutes_to_label(0) == "12:00 AM"
    assert minutes_to_label(1320) == "10:00 PM"


def test_openai_proposal_defaults_replan():
    completions = FakeCompletions(content=json.dumps(REPLY))
    oracle = OpenAIProposalOracle(api_key="sk-test", client=_openai_client(completions))

    proposal = oracle.propose("gym tuesdays 6pm", SNAPSHOT, TODAY)

    assert proposal.preview == REPLY["preview"]
    assert proposal.action.replan is True
    assert proposal.action.add_busy_blocks[0].label == "Gym"
    assert proposal.confirmation_token == "tok_abc"
    request = completions.requests[0]
    assert request["response_format"]["type"] == "json_schema"
    assert "2026-10-19" in request["messages"][0]["content"]
    assert "USER_MESSAGE: gym tuesdays 6pm" in request["messages"][1]["content"]


def test_openai_keeps_explicit_replan_and_fills_missing_token():
    reply = {"preview": "Only adds a task.", "action": {"replan": False, "addTasks": [{"title": "Read", "dueDate": "2026-10-22"}]}}
    oracle = OpenAIProposalOracle(
        api_key="sk-test", client=_openai_client(FakeCompletions(content=json.dumps(reply)))
    )

    proposal = oracle.propose("add reading", SNAPSHOT, TODAY)

    assert proposal.action.replan is False
    assert proposal.confirmation_token


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        json.dumps(["a", "list"]),
        json.dumps({"preview": "x", "action": {"addBusyBlocks": [{"day": "Someday", "startMin": 1, "endMin": 2}]}}),
        "",
    ],
)
def test_openai_bad_replies_raise_oracle_error(content):
    oracle = OpenAIProposalOracle(
        api_key="sk-test", client=_openai_client(FakeCompletions(content=content))
    )
    with pytest.raises(OracleError):
        oracle.propose("anything", SNAPSHOT, TODAY)


def test_openai_timeout_is_an_oracle_error():
    error = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    oracle = OpenAIProposalOracle(
        api_key="sk-test", client=_openai_client(FakeCompletions(error=error))
    )
    with pytest.raises(OracleError, match="unavailable"):
        oracle.propose("anything", SNAPSHOT, TODAY)


def test_missing_api_keys_raise_oracle_error(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(OracleError, match="not configured"):
        OpenAIProposalOracle(api_key=None).propose("hi", SNAPSHOT, TODAY)
    with pytest.raises(OracleError, match="not configured"):
        GeminiProposalOracle(api_key=None).propose("hi", SNAPSHOT, TODAY)


def test_gemini_extracts_json_from_fenced_reply():
    model = FakeGeminiModel(text="```json\n" + json.dumps(REPLY) + "\n```")
    oracle = GeminiProposalOracle(api_key="test", client=model)

    proposal = oracle.propose("gym tuesdays 6pm", SNAPSHOT, TODAY)

    assert proposal.action.add_busy_blocks[0].start_min == 1080
    prompt, kwargs = model.prompts[0]
    assert "Use today's date: 2026-10-19." in prompt
    assert kwargs["generation_config"] == {"response_mime_type": "application/json"}
    assert kwargs["request_options"] == {"timeout": 30.0}


@pytest.mark.parametrize(
    "model",
    [
        FakeGeminiModel(error=google_exceptions.DeadlineExceeded("deadline")),
        FakeGeminiModel(error=ValueError("blocked")),
        FakeGeminiModel(text="I cannot help with that."),
    ],
)
def test_gemini_failures_raise_oracle_error(model):
    oracle = GeminiProposalOracle(api_key="test", client=model)
    with pytest.raises(OracleError):
        oracle.propose("anything", SNAPSHOT, TODAY)
