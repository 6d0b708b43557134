"""
seller_scraper/services/run_orchestrator.py

Single-run orchestration: exclusivity, background dispatch and run state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol

from apscheduler.schedulers.background import BackgroundScheduler

from seller_scraper.config import get_scraper_settings
from seller_scraper.domain.runs import Run, RunInput, RunSnapshot, RunStatus
from seller_scraper.domain.sellers import OutputRow
from seller_scraper.scraping.browser import create_browser_factory
from seller_scraper.scraping.engine import SellerScrapingEngine
from seller_scraper.scraping.logging_utils import format_run_line, log_event

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InvalidRunRequest(ValueError):
    """
    The start request cannot be accepted as given.
    """


class RunTaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class SchedulerTaskExecutor:
    """
    Hands tasks to an APScheduler background scheduler as one-shot jobs.
    """

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._lock = threading.Lock()

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if not self._scheduler.running:
                self._scheduler.start()
        # No trigger: the job runs once, as soon as a worker is free.
        self._scheduler.add_job(
            task,
            args=args,
            kwargs=kwargs,
            misfire_grace_time=None,
            coalesce=False,
        )

    def shutdown(self, *, wait: bool = False) -> None:
        with self._lock:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=wait)


@dataclass(frozen=True)
class StartOutcome:
    """
    Result of a start request: accepted, or rejected because a run is active.
    """

    accepted: bool
    started_at: datetime


class _RunRecorder:
    """
    Sink that appends engine output to the run record as it happens.
    """

    def __init__(self, *, run: Run, lock: threading.Lock, clock: Clock) -> None:
        self._run = run
        self._lock = lock
        self._clock = clock

    def log(self, message: str) -> None:
        line = format_run_line(message, now=self._clock())
        logger.info(line)
        with self._lock:
            self._run.log_lines.append(line)

    def add_rows(self, rows: list[OutputRow]) -> None:
        with self._lock:
            self._run.rows.extend(rows)


class RunOrchestrator:
    """
    Owns the single active run record and its lifecycle.

    `start` performs an atomic check-and-set and returns immediately; the run
    itself executes on the task executor. Observers poll snapshots.
    """

    def __init__(
        self,
        *,
        engine: SellerScrapingEngine,
        executor: RunTaskExecutor,
        clock: Clock = _utc_now,
    ) -> None:
        self._engine = engine
        self._executor = executor
        self._clock = clock
        self._lock = threading.Lock()
        self._run: Run | None = None

    def start(self, run_input: RunInput) -> StartOutcome:
        if not [identifier for identifier in run_input.identifiers if identifier.strip()]:
            raise InvalidRunRequest("Missing 'identifiers' array in request body")

        with self._lock:
            active = self._run
            if active is not None and active.status is RunStatus.RUNNING:
                return StartOutcome(accepted=False, started_at=active.started_at)
            run = Run(input=run_input, started_at=self._clock())
            self._run = run

        log_event(
            logger,
            logging.INFO,
            "run_started",
            run_input=run_input.to_dict(),
            started_at=run.started_at.isoformat(),
        )

        try:
            self._executor.submit(self._execute, run)
        except Exception as exc:
            self._finish(run, error=f"Failed to schedule run: {exc}")
            raise

        return StartOutcome(accepted=True, started_at=run.started_at)

    def snapshot(self) -> RunSnapshot:
        with self._lock:
            run = self._run
            if run is None:
                return RunSnapshot(status=RunStatus.IDLE)
            return RunSnapshot(
                status=run.status,
                started_at=run.started_at,
                completed_at=run.completed_at,
                row_count=len(run.rows),
                log_count=len(run.log_lines),
                error=run.error,
            )

    def rows(self) -> tuple[RunStatus, list[OutputRow]]:
        with self._lock:
            if self._run is None:
                return RunStatus.IDLE, []
            return self._run.status, list(self._run.rows)

    def logs(self) -> tuple[RunStatus, list[str]]:
        with self._lock:
            if self._run is None:
                return RunStatus.IDLE, []
            return self._run.status, list(self._run.log_lines)

    def shutdown(self) -> None:
        shutdown = getattr(self._executor, "shutdown", None)
        if callable(shutdown):
            shutdown(wait=False)

    def _execute(self, run: Run) -> None:
        recorder = _RunRecorder(run=run, lock=self._lock, clock=self._clock)
        try:
            self._engine.run(run.input, recorder)
        except Exception as exc:
            logger.exception("Run failed started_at=%s", run.started_at.isoformat())
            self._finish(run, error=str(exc) or type(exc).__name__)
            return
        self._finish(run)

    def _finish(self, run: Run, *, error: str | None = None) -> None:
        with self._lock:
            run.status = RunStatus.FAILED if error is not None else RunStatus.COMPLETED
            run.error = error
            run.completed_at = self._clock()
            row_count = len(run.rows)

        log_event(
            logger,
            logging.ERROR if error is not None else logging.INFO,
            "run_finished",
            status=run.status.value,
            rows=row_count,
            error=error,
        )


@lru_cache(maxsize=1)
def get_run_orchestrator() -> RunOrchestrator:
    """
    Build and cache the process-wide run orchestrator.
    """

    settings = get_scraper_settings()
    engine = SellerScrapingEngine(
        settings=settings,
        browser_factory=create_browser_factory(settings),
    )
    return RunOrchestrator(engine=engine, executor=SchedulerTaskExecutor())
