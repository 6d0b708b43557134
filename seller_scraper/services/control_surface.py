"""
seller_scraper/services/control_surface.py

Transport-independent request/response mapping over the run orchestrator.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from seller_scraper.config import ScraperSettings, get_scraper_settings
from seller_scraper.domain.runs import RunInput, RunStatus
from seller_scraper.schemas.runs import (
    ErrorResponse,
    HealthResponse,
    IdleStatusResponse,
    RunConflictResponse,
    RunLogsResponse,
    RunRowsResponse,
    RunStartedResponse,
    RunStatusResponse,
    StartRunRequest,
)
from seller_scraper.services.run_orchestrator import (
    InvalidRunRequest,
    RunOrchestrator,
    get_run_orchestrator,
)

HTTP_OK = 200
HTTP_ACCEPTED = 202
HTTP_BAD_REQUEST = 400
HTTP_CONFLICT = 409

MISSING_IDENTIFIERS_MESSAGE = "Missing 'identifiers' array in request body"


def isoformat_utc(value: datetime | None) -> str | None:
    """
    Render a timestamp as `YYYY-MM-DDTHH:MM:SS.mmmZ`.
    """

    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class ControlResponse:
    status_code: int
    payload: dict[str, Any]


class RunControlSurface:
    """
    Maps start/status/rows/logs/health requests onto the orchestrator.
    """

    def __init__(
        self,
        *,
        orchestrator: RunOrchestrator,
        settings: ScraperSettings,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._orchestrator = orchestrator
        self._settings = settings
        self._monotonic = monotonic
        self._booted_at = monotonic()

    def start_run(self, body: Any) -> ControlResponse:
        if not isinstance(body, dict):
            return self._bad_request(MISSING_IDENTIFIERS_MESSAGE)
        try:
            request = StartRunRequest.model_validate(body)
        except ValidationError as exc:
            return self._bad_request(f"Invalid run request: {exc.errors()[0]['msg']}")

        identifiers = [item.strip() for item in request.identifiers or [] if item and item.strip()]
        if not identifiers:
            return self._bad_request(MISSING_IDENTIFIERS_MESSAGE)

        run_input = RunInput(
            identifiers=identifiers,
            max_count=request.max_count,
            marketplaces=list(request.marketplaces or []),
            delay_ms=(
                request.delay_ms if request.delay_ms is not None else self._settings.default_delay_ms
            ),
            skip_platform_only=(
                request.skip_platform_only
                if request.skip_platform_only is not None
                else self._settings.skip_platform_only
            ),
        )

        try:
            outcome = self._orchestrator.start(run_input)
        except InvalidRunRequest as exc:
            return self._bad_request(str(exc))

        started_at = isoformat_utc(outcome.started_at) or ""
        if not outcome.accepted:
            return ControlResponse(
                HTTP_CONFLICT,
                RunConflictResponse(started_at=started_at).to_payload(),
            )
        return ControlResponse(
            HTTP_ACCEPTED,
            RunStartedResponse(started_at=started_at).to_payload(),
        )

    def status(self) -> ControlResponse:
        snapshot = self._orchestrator.snapshot()
        if snapshot.status is RunStatus.IDLE:
            return ControlResponse(HTTP_OK, IdleStatusResponse().to_payload())
        return ControlResponse(
            HTTP_OK,
            RunStatusResponse(
                status=snapshot.status.value,
                started_at=isoformat_utc(snapshot.started_at),
                completed_at=isoformat_utc(snapshot.completed_at),
                row_count=snapshot.row_count,
                log_count=snapshot.log_count,
                error=snapshot.error,
            ).to_payload(),
        )

    def rows(self) -> ControlResponse:
        status, rows = self._orchestrator.rows()
        return ControlResponse(
            HTTP_OK,
            RunRowsResponse(status=status.value, rows=[row.to_dict() for row in rows]).to_payload(),
        )

    def logs(self) -> ControlResponse:
        status, lines = self._orchestrator.logs()
        return ControlResponse(
            HTTP_OK,
            RunLogsResponse(status=status.value, logs=lines).to_payload(),
        )

    def health(self) -> ControlResponse:
        return ControlResponse(
            HTTP_OK,
            HealthResponse(
                service=self._settings.service_name,
                status=self._orchestrator.snapshot().status.value,
                uptime=max(0.0, self._monotonic() - self._booted_at),
            ).to_payload(),
        )

    @staticmethod
    def _bad_request(message: str) -> ControlResponse:
        return ControlResponse(HTTP_BAD_REQUEST, ErrorResponse(error=message).to_payload())


@lru_cache(maxsize=1)
def get_run_control_surface() -> RunControlSurface:
    """
    Build and cache the control surface over the process-wide orchestrator.
    """

    return RunControlSurface(
        orchestrator=get_run_orchestrator(),
        settings=get_scraper_settings(),
    )
