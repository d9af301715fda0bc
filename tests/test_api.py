"""
Tests for the HTTP API

Run with: pytest -q
"""
import asyncio

import pytest
from fastapi.testclient import TestClient

from plan_engine.api.app import create_app
from plan_engine.executor import PlanStepType


def _plan(plan_id="p1", steps=None):
    return {
        "id": plan_id,
        "title": "Edit and verify",
        "steps": steps or [
            {"type": "THINK", "thought": "Update a.ts"},
            {"type": "EDIT_FILE", "filePath": "/a.ts", "content": "x"},
            {"type": "RUN_COMMAND", "command": "echo ok"},
        ],
    }


class FailingCommand:
    def __init__(self):
        self.fail = True

    async def __call__(self, step):
        if self.fail:
            raise RuntimeError("boom")


class TestHealth:
    """Tests for service endpoints."""

    @pytest.fixture
    def client(self, service):
        return TestClient(create_app(service=service))

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["active_plans"] == 0
        assert "EDIT_FILE" in data["handlers"]

    def test_request_id_header(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 8


class TestPlansAPI:
    """Tests for /plans endpoints."""

    @pytest.fixture
    def client(self, service):
        return TestClient(create_app(service=service))

    @pytest.fixture
    def drain(self, deferral):
        """Run queued auto-advances to completion."""
        def _drain():
            return asyncio.run(deferral.run_all())
        return _drain

    @pytest.fixture
    def failing(self, service):
        handler = FailingCommand()
        service.handlers.register(PlanStepType.RUN_COMMAND, handler, required_fields=["command"])
        return handler

    def test_start_manual(self, client):
        response = client.post("/plans/executions", json={
            "plan": _plan(),
            "options": {"auto_proceed": False},
        })

        assert response.status_code == 201
        data = response.json()
        assert data["registered"] is True
        assert data["is_executing"] is True
        assert data["plan"]["status"] == "running"
        assert data["plan"]["steps"][1]["file_path"] == "/a.ts"
        assert data["options"] == {"auto_proceed": False, "pause_on_error": True, "dry_run": False}

    def test_start_duplicate(self, client):
        client.post("/plans/executions", json={"plan": _plan()})

        response = client.post("/plans/executions", json={"plan": _plan()})

        assert response.status_code == 409
        assert "already being executed" in response.json()["detail"]

    def test_start_invalid_draft(self, client):
        assert client.post("/plans/executions", json={"plan": _plan(steps=[])}).status_code == 422
        assert client.post(
            "/plans/executions",
            json={"plan": _plan(steps=[{"type": "DEPLOY"}])},
        ).status_code == 422

    def test_auto_run_completes(self, client, drain):
        client.post("/plans/executions", json={"plan": _plan()})

        drain()

        assert client.get("/plans/p1/execution").status_code == 404

    def test_get_missing(self, client):
        assert client.get("/plans/missing/execution").status_code == 404

    def test_list_executions(self, client):
        client.post("/plans/executions", json={"plan": _plan("a"), "options": {"auto_proceed": False}})
        client.post("/plans/executions", json={"plan": _plan("b"), "options": {"auto_proceed": False}})

        response = client.get("/plans/executions")

        assert response.status_code == 200
        assert sorted(s["plan"]["id"] for s in response.json()) == ["a", "b"]

    def test_single_stepping(self, client):
        client.post("/plans/executions", json={
            "plan": _plan(steps=[{"type": "THINK"}, {"type": "READ_FILE", "file_path": "/a.ts"}]),
            "options": {"auto_proceed": False},
        })

        first = client.post("/plans/p1/execution/next").json()
        assert first["current_step_index"] == 1
        assert first["plan"]["steps"][0]["status"] == "completed"
        assert first["plan"]["progress"] == 0.5
        assert first["registered"] is True

        second = client.post("/plans/p1/execution/next").json()
        assert second["plan"]["status"] == "completed"
        assert second["registered"] is False

    def test_next_missing(self, client):
        assert client.post("/plans/missing/execution/next").status_code == 404

    def test_failure_pauses(self, client, drain, failing):
        client.post("/plans/executions", json={"plan": _plan()})
        drain()

        data = client.get("/plans/p1/execution").json()

        assert data["plan"]["status"] == "error"
        assert data["plan"]["error"] == "boom"
        assert data["is_paused"] is True
        assert data["current_step_index"] == 2
        assert data["plan"]["steps"][2]["status"] == "error"

    def test_retry(self, client, drain, failing):
        client.post("/plans/executions", json={"plan": _plan()})
        drain()

        failing.fail = False
        response = client.post("/plans/p1/execution/steps/2/retry")

        assert response.status_code == 200
        data = response.json()
        assert data["plan"]["steps"][2]["status"] == "completed"
        assert data["plan"]["status"] == "completed"
        assert data["registered"] is False

    def test_retry_errors(self, client, drain, failing):
        client.post("/plans/executions", json={"plan": _plan()})
        drain()

        assert client.post("/plans/p1/execution/steps/7/retry").status_code == 422
        assert client.post("/plans/missing/execution/steps/0/retry").status_code == 404

    def test_pause_resume_stop(self, client, drain):
        client.post("/plans/executions", json={"plan": _plan()})

        paused = client.post("/plans/p1/execution/pause").json()
        assert paused["is_paused"] is True
        assert paused["plan"]["status"] == "paused"

        drain()

        resumed = client.post("/plans/p1/execution/resume").json()
        assert resumed["is_paused"] is False
        assert resumed["plan"]["status"] == "running"

        stopped = client.post("/plans/p1/execution/stop").json()
        assert stopped["registered"] is False
        assert stopped["plan"]["status"] == "paused"

        assert client.get("/plans/p1/execution").status_code == 404
        assert client.post("/plans/p1/execution/stop").status_code == 404

    def test_dry_run(self, client, drain, failing):
        client.post("/plans/executions", json={
            "plan": _plan(),
            "options": {"dry_run": True, "auto_proceed": False},
        })

        for _ in range(3):
            data = client.post("/plans/p1/execution/next").json()

        assert data["plan"]["status"] == "completed"
