"""
tests/test_run_orchestrator.py

Run lifecycle tests with a scripted engine and a deferred executor.

Coverage
--------
- Start is accepted and the run is visible as running before it executes
- A second start while running is rejected without touching the active run
- Completion and failure are terminal; partial rows and logs survive failure
- A new run may start once the previous one is terminal
- Empty identifier lists are rejected
- The APScheduler executor runs a real engine in the background; observers see a growing log
"""

from __future__ import annotations

import json
import logging
import time

import pytest

from seller_scraper.domain.runs import RunInput, RunStatus
from seller_scraper.scraping.engine import SellerScrapingEngine
from seller_scraper.services.run_orchestrator import (
    InvalidRunRequest,
    RunOrchestrator,
    SchedulerTaskExecutor,
)
from tests.fakes import (
    PLATFORM_ONLY_PRODUCT_HTML,
    UK_PRODUCT_URL,
    DeferredExecutor,
    DictFetcher,
    ScriptedEngine,
    SteppingClock,
    quiet_pacer,
    static_browser_factory,
    static_settings,
)


@pytest.fixture()
def executor() -> DeferredExecutor:
    return DeferredExecutor()


def _orchestrator(engine: ScriptedEngine, executor: DeferredExecutor) -> RunOrchestrator:
    return RunOrchestrator(engine=engine, executor=executor, clock=SteppingClock())


def test_idle_before_any_run(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)

    assert orchestrator.snapshot().status is RunStatus.IDLE
    assert orchestrator.rows() == (RunStatus.IDLE, [])
    assert orchestrator.logs() == (RunStatus.IDLE, [])


def test_start_returns_before_run_executes(executor) -> None:
    engine = ScriptedEngine()
    orchestrator = _orchestrator(engine, executor)

    outcome = orchestrator.start(RunInput(identifiers=["X1"]))

    assert outcome.accepted is True
    assert engine.inputs == []
    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.RUNNING
    assert snapshot.started_at == outcome.started_at
    assert snapshot.completed_at is None


def test_second_start_while_running_is_rejected_without_mutation(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)
    first = orchestrator.start(RunInput(identifiers=["X1"]))

    second = orchestrator.start(RunInput(identifiers=["X2", "X3"]))

    assert second.accepted is False
    assert second.started_at == first.started_at
    assert len(executor.tasks) == 1

    executor.run_pending()
    _, rows = orchestrator.rows()
    assert [row.identifier for row in rows] == ["X1"]


def test_completed_run_keeps_rows_and_timestamped_logs(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)
    orchestrator.start(RunInput(identifiers=["X1"]))

    executor.run_pending()

    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.COMPLETED
    assert snapshot.completed_at is not None
    assert snapshot.completed_at > snapshot.started_at
    assert snapshot.row_count == 1
    assert snapshot.error is None
    status, lines = orchestrator.logs()
    assert status is RunStatus.COMPLETED
    assert lines == ["[09:30:02] Config: 1 ASINs × 1 marketplaces", "[09:30:03] DONE — 1 rows"]


def test_failed_run_keeps_partial_results(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(fail_with=RuntimeError("browser crashed")), executor)
    orchestrator.start(RunInput(identifiers=["X1"]))

    executor.run_pending()

    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.FAILED
    assert snapshot.error == "browser crashed"
    assert snapshot.completed_at is not None
    assert orchestrator.rows()[1][0].identifier == "X1"
    assert len(orchestrator.logs()[1]) == 1


def test_new_run_replaces_terminal_run(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)
    first = orchestrator.start(RunInput(identifiers=["X1"]))
    executor.run_pending()

    second = orchestrator.start(RunInput(identifiers=["X2"]))

    assert second.accepted is True
    assert second.started_at > first.started_at
    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.RUNNING
    assert snapshot.row_count == 0
    assert snapshot.log_count == 0


def test_empty_identifiers_are_rejected(executor) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)

    with pytest.raises(InvalidRunRequest):
        orchestrator.start(RunInput(identifiers=[" ", ""]))

    assert orchestrator.snapshot().status is RunStatus.IDLE
    assert executor.tasks == []


def test_scheduling_failure_marks_run_failed() -> None:
    class _RejectingExecutor:
        def submit(self, task, *args, **kwargs) -> None:
            raise RuntimeError("scheduler stopped")

    orchestrator = RunOrchestrator(
        engine=ScriptedEngine(),
        executor=_RejectingExecutor(),
        clock=SteppingClock(),
    )

    with pytest.raises(RuntimeError):
        orchestrator.start(RunInput(identifiers=["X1"]))

    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.FAILED
    assert "scheduler stopped" in snapshot.error


# ---------------------------------------------------------------------------
# Background scheduler, real engine
# ---------------------------------------------------------------------------


def _wait_until_terminal(orchestrator: RunOrchestrator, observed_logs: list[list[str]]) -> None:
    deadline = time.monotonic() + 10.0
    while time.monotonic() < deadline:
        status, lines = orchestrator.logs()
        observed_logs.append(lines)
        if status in {RunStatus.COMPLETED, RunStatus.FAILED}:
            return
        time.sleep(0.01)
    pytest.fail("run did not reach a terminal status")


def test_scheduler_executor_runs_platform_only_listing_end_to_end() -> None:
    settings = static_settings(
        product_settle_seconds=0.0,
        profile_settle_seconds=0.0,
        offers_settle_seconds=0.0,
        panel_close_settle_seconds=0.0,
    )
    engine = SellerScrapingEngine(
        settings=settings,
        browser_factory=static_browser_factory(DictFetcher({UK_PRODUCT_URL: PLATFORM_ONLY_PRODUCT_HTML})),
        pacer=quiet_pacer(),
    )
    executor = SchedulerTaskExecutor()
    orchestrator = RunOrchestrator(engine=engine, executor=executor)

    try:
        outcome = orchestrator.start(RunInput(identifiers=["X1"], marketplaces=["UK"], delay_ms=0))
        observed_logs: list[list[str]] = []
        _wait_until_terminal(orchestrator, observed_logs)
    finally:
        orchestrator.shutdown()

    assert outcome.accepted is True
    snapshot = orchestrator.snapshot()
    assert snapshot.status is RunStatus.COMPLETED
    assert snapshot.error is None

    _, rows = orchestrator.rows()
    assert [(row.source.value, row.seller_name, row.seller_id) for row in rows] == [("buy_box", "Amazon", "")]

    _, final_logs = orchestrator.logs()
    assert final_logs[-2].endswith("DONE — 1 rows")
    for lines in observed_logs:
        assert final_logs[: len(lines)] == lines


def test_start_logs_accepted_input(executor, caplog) -> None:
    orchestrator = _orchestrator(ScriptedEngine(), executor)

    with caplog.at_level(logging.INFO, logger="seller_scraper.services.run_orchestrator"):
        orchestrator.start(RunInput(identifiers=["X1"], marketplaces=["DE"], delay_ms=750))

    started = [json.loads(record.getMessage()) for record in caplog.records if "run_started" in record.getMessage()]
    assert started[0]["run_input"] == {
        "identifiers": ["X1"],
        "maxCount": 0,
        "marketplaces": ["DE"],
        "delayMs": 750,
        "skipPlatformOnly": True,
    }
