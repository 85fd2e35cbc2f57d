from __future__ import annotations

from datetime import date, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from planner.api.deps import get_oracle
from planner.core.errors import OracleError
from planner.db.base import Base
from planner.db.session import get_db
from planner.main import app
from planner.oracle.adapter import ProposalOracle
from planner.schemas.action import PlanProposal


def _essay_action() -> dict[str, Any]:
    return {
        "preferences": {"workBlockMins": 50, "maxBlocksPerDay": 3},
        "addBusyBlocks": [{"day": "Mon", "startMin": 540, "endMin": 600, "label": "Class"}],
        "addTasks": [
            {
                "title": "Essay",
                "dueDate": (date.today() + timedelta(days=3)).isoformat(),
                "priority": "high",
                "estimateMins": 100,
            }
        ],
    }


class StubOracle(ProposalOracle):
    def __init__(self):
        self.action = _essay_action()
        self.fail = False
        self.calls: list[dict[str, Any]] = []

    def propose(self, message, snapshot, today=None):
        self.calls.append({"message": message, "snapshot": snapshot})
        if self.fail:
            raise OracleError("The assistant is unavailable right now. Please try again.")
        return PlanProposal.model_validate(
            {
                "preview": "Adds a class on Monday and schedules your essay.",
                "action": self.action,
                "confirmationToken": f"tok_{len(self.calls)}",
            }
        )


@pytest.fixture()
def oracle():
    return StubOracle()


@pytest.fixture()
def client(oracle):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_oracle] = lambda: oracle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    engine.dispose()


def _propose(client: TestClient, session: str = "alice") -> dict[str, Any]:
    response = client.post(
        "/assistant/plan",
        json={"message": "I have class Monday 9-10, plan my essay"},
        headers={"X-Session-Id": session},
    )
    assert response.status_code == 200
    return response.json()


def _apply(client: TestClient, proposal: dict[str, Any], text: str, session: str = "alice", **overrides):
    body = {
        "confirmationToken": proposal["confirmationToken"],
        "action": proposal["action"],
        "userConfirmationText": text,
    }
    body.update(overrides)
    return client.post("/assistant/apply", json=body, headers={"X-Session-Id": session})


def test_propose_does_not_touch_state(client: TestClient, oracle: StubOracle):
    before = client.get("/state").json()
    proposal = _propose(client)

    assert proposal["preview"].startswith("Adds a class")
    assert proposal["action"]["addTasks"][0]["title"] == "Essay"
    assert proposal["confirmationToken"]
    assert client.get("/state").json() == before
    assert oracle.calls[0]["snapshot"]["preferences"]["workBlockMins"] == 50
    assert "plannedBlocks" not in oracle.calls[0]["snapshot"]

    pending = client.get("/assistant/pending", headers={"X-Session-Id": "alice"})
    assert pending.status_code == 200
    assert pending.json()["confirmationToken"] == proposal["confirmationToken"]


def test_unrecognized_confirmation_keeps_pending_proposal(client: TestClient):
    before = client.get("/state").json()
    proposal = _propose(client)

    response = _apply(client, proposal, "nope")

    assert response.status_code == 400
    assert "confirmo" in response.json()["error"]
    assert client.get("/state").json() == before
    assert client.get("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 200


def test_confirmed_apply_merges_and_replans(client: TestClient):
    proposal = _propose(client)

    response = _apply(client, proposal, "Confirmo")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["unscheduled"] == []
    state = body["state"]
    assert [b["label"] for b in state["busyBlocks"]] == ["Class"]
    assert len(state["tasks"]) == 1
    task = state["tasks"][0]
    assert task["done"] is False
    assert task["estimateMins"] == 100
    planned = [(b["day"], b["startMin"], b["endMin"], b["label"]) for b in state["plannedBlocks"]]
    assert planned == [
        ("Mon", 360, 410, "Essay (Part 1/2)"),
        ("Mon", 410, 460, "Essay (Part 2/2)"),
    ]
    assert all(b["taskId"] == task["id"] for b in state["plannedBlocks"])
    assert client.get("/state").json() == state
    assert client.get("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 404


def test_second_apply_is_rejected(client: TestClient):
    proposal = _propose(client)
    assert _apply(client, proposal, "ok").status_code == 200

    response = _apply(client, proposal, "ok")

    assert response.status_code == 409
    assert len(client.get("/tasks").json()) == 1


def test_missing_token_is_rejected(client: TestClient):
    proposal = _propose(client)

    response = _apply(client, proposal, "confirmo", confirmationToken=None)

    assert response.status_code == 400
    assert client.get("/tasks").json() == []
    assert client.get("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 200


def test_token_does_not_authorize_a_different_action(client: TestClient):
    proposal = _propose(client)
    tampered = dict(proposal["action"])
    tampered["addTasks"] = [dict(tampered["addTasks"][0], estimateMins=1440)]

    response = _apply(client, proposal, "confirmo", action=tampered)

    assert response.status_code == 409
    assert client.get("/tasks").json() == []
    assert client.get("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 200


def test_newer_proposal_supersedes_the_pending_one(client: TestClient):
    first = _propose(client)
    second = _propose(client)
    assert first["confirmationToken"] != second["confirmationToken"]

    assert _apply(client, first, "confirmo").status_code == 409
    assert _apply(client, second, "confirmo").status_code == 200


def test_oracle_failure_leaves_no_pending_proposal(client: TestClient, oracle: StubOracle):
    _propose(client)
    oracle.fail = True

    response = client.post(
        "/assistant/plan", json={"message": "plan again"}, headers={"X-Session-Id": "alice"}
    )

    assert response.status_code == 502
    assert "error" in response.json()
    assert client.get("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 404


def test_pending_proposals_are_per_session(client: TestClient):
    proposal = _propose(client, session="alice")

    assert client.get("/assistant/pending", headers={"X-Session-Id": "bob"}).status_code == 404
    assert _apply(client, proposal, "confirmo", session="bob").status_code == 409
    assert _apply(client, proposal, "confirmo", session="alice").status_code == 200


def test_discarding_pending_proposal(client: TestClient):
    proposal = _propose(client)

    assert client.delete("/assistant/pending", headers={"X-Session-Id": "alice"}).status_code == 204
    assert _apply(client, proposal, "confirmo").status_code == 409


def test_conflicting_preferences_do_not_lose_saved_state(client: TestClient, oracle: StubOracle):
    created = client.post("/tasks", json={"title": "Existing", "dueDate": date.today().isoformat()})
    assert created.status_code == 201
    oracle.action = {**_essay_action(), "preferences": {"startHour": 23}}

    response = _apply(client, _propose(client), "ok")
    assert response.status_code == 200

    after = client.get("/state").json()
    assert [t["title"] for t in after["tasks"]] == ["Essay", "Existing"]
    assert (after["preferences"]["startHour"], after["preferences"]["endHour"]) == (6, 22)
    assert after["plannedBlocks"]
