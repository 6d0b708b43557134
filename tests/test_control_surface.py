"""
tests/test_control_surface.py

Request/response mapping of the run control surface and its HTTP routes.

Coverage
--------
- 400 on missing or empty identifiers and invalid bodies
- 202 on accepted start, with defaults and legacy field names
- 409 while a run is active
- Status, rows, logs and health payload shapes
- Routes served through FastAPI with the surface overridden
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from seller_scraper.api.routers import runs_router
from seller_scraper.services.control_surface import (
    MISSING_IDENTIFIERS_MESSAGE,
    RunControlSurface,
    get_run_control_surface,
    isoformat_utc,
)
from seller_scraper.services.run_orchestrator import RunOrchestrator
from tests.fakes import DeferredExecutor, ScriptedEngine, SteppingClock, static_settings


class _Monotonic:
    def __init__(self) -> None:
        self.value = 100.0

    def __call__(self) -> float:
        return self.value


@pytest.fixture()
def executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture()
def engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest.fixture()
def monotonic() -> _Monotonic:
    return _Monotonic()


@pytest.fixture()
def surface(engine, executor, monotonic) -> RunControlSurface:
    orchestrator = RunOrchestrator(engine=engine, executor=executor, clock=SteppingClock())
    return RunControlSurface(
        orchestrator=orchestrator,
        settings=static_settings(default_delay_ms=1500),
        monotonic=monotonic,
    )


# ---------------------------------------------------------------------------
# Start
# ---------------------------------------------------------------------------


class TestStartRun:
    @pytest.mark.parametrize(
        "body",
        [None, [], "X1", {}, {"identifiers": []}, {"identifiers": ["  "]}, {"marketplaces": ["UK"]}],
    )
    def test_missing_identifiers(self, surface, body) -> None:
        response = surface.start_run(body)

        assert response.status_code == 400
        assert response.payload == {"error": MISSING_IDENTIFIERS_MESSAGE}

    def test_invalid_field_type(self, surface) -> None:
        response = surface.start_run({"identifiers": ["X1"], "delayMs": "soon"})

        assert response.status_code == 400
        assert response.payload["error"].startswith("Invalid run request")

    def test_accepted_with_defaults(self, surface, engine, executor) -> None:
        response = surface.start_run({"identifiers": ["X1", " X2 "]})

        assert response.status_code == 202
        assert response.payload == {"status": "started", "startedAt": "2025-03-01T09:30:01.000Z"}

        executor.run_pending()
        run_input = engine.inputs[0]
        assert run_input.identifiers == ["X1", "X2"]
        assert run_input.max_count == 0
        assert run_input.marketplaces == []
        assert run_input.delay_ms == 1500
        assert run_input.skip_platform_only is True

    def test_legacy_field_names(self, surface, engine, executor) -> None:
        response = surface.start_run(
            {
                "asins": ["X1"],
                "maxAsins": 1,
                "marketplaces": ["DE"],
                "delayBetweenRequests": 500,
                "skipAmazonSellers": False,
            }
        )

        assert response.status_code == 202
        executor.run_pending()
        run_input = engine.inputs[0]
        assert run_input.identifiers == ["X1"]
        assert run_input.max_count == 1
        assert run_input.marketplaces == ["DE"]
        assert run_input.delay_ms == 500
        assert run_input.skip_platform_only is False

    def test_conflict_while_running(self, surface, executor) -> None:
        surface.start_run({"identifiers": ["X1"]})

        response = surface.start_run({"identifiers": ["X2"]})

        assert response.status_code == 409
        assert response.payload == {
            "error": "A run is already in progress",
            "startedAt": "2025-03-01T09:30:01.000Z",
        }
        assert len(executor.tasks) == 1


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------


class TestObservers:
    def test_idle_status(self, surface) -> None:
        response = surface.status()

        assert response.status_code == 200
        assert response.payload == {"status": "idle", "message": "No runs yet"}

    def test_running_then_completed_status(self, surface, executor) -> None:
        surface.start_run({"identifiers": ["X1"]})

        running = surface.status().payload
        assert running["status"] == "running"
        assert running["startedAt"] == "2025-03-01T09:30:01.000Z"
        assert running["completedAt"] is None

        executor.run_pending()

        completed = surface.status().payload
        assert completed == {
            "status": "completed",
            "startedAt": "2025-03-01T09:30:01.000Z",
            "completedAt": "2025-03-01T09:30:04.000Z",
            "rowCount": 1,
            "logCount": 2,
            "error": None,
        }

    def test_rows_and_logs(self, surface, executor) -> None:
        assert surface.rows().payload == {"status": "idle", "rows": []}

        surface.start_run({"identifiers": ["X1"]})
        executor.run_pending()

        rows = surface.rows().payload
        assert rows["status"] == "completed"
        assert rows["rows"][0]["identifier"] == "X1"
        assert rows["rows"][0]["source"] == "not_found"
        logs = surface.logs().payload
        assert logs["logs"][-1] == "[09:30:03] DONE — 1 rows"

    def test_health(self, surface, monotonic) -> None:
        monotonic.value = 107.5

        response = surface.health()

        assert response.status_code == 200
        assert response.payload == {"service": "amazon-seller-scraper", "status": "idle", "uptime": 7.5}


def test_isoformat_utc_uses_milliseconds() -> None:
    assert isoformat_utc(datetime(2025, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)) == "2025-01-02T03:04:05.678Z"
    assert isoformat_utc(None) is None


# ---------------------------------------------------------------------------
# HTTP routes
# ---------------------------------------------------------------------------


@pytest.fixture()
def client(surface) -> TestClient:
    app = FastAPI()
    app.include_router(runs_router)
    app.dependency_overrides[get_run_control_surface] = lambda: surface
    return TestClient(app)


class TestRoutes:
    def test_start_and_poll(self, client, executor) -> None:
        started = client.post("/run", json={"identifiers": ["X1"]})
        assert started.status_code == 202

        conflict = client.post("/run", json={"identifiers": ["X1"]})
        assert conflict.status_code == 409

        executor.run_pending()

        assert client.get("/status").json()["status"] == "completed"
        assert client.get("/results").json() == client.get("/rows").json()
        assert len(client.get("/logs").json()["logs"]) == 2

    def test_malformed_json_body(self, client) -> None:
        response = client.post("/run", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"error": MISSING_IDENTIFIERS_MESSAGE}

    def test_health_route(self, client) -> None:
        body = client.get("/").json()

        assert body["service"] == "amazon-seller-scraper"
        assert body["status"] == "idle"
        assert body["uptime"] >= 0
