"""
seller_scraper/domain/runs.py

Domain models for scrape run lifecycle tracking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from seller_scraper.domain.sellers import OutputRow


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RunInput:
    """
    Accepted parameters of one scrape run.
    """

    identifiers: list[str]
    max_count: int = 0
    marketplaces: list[str] = field(default_factory=list)
    delay_ms: int = 3000
    skip_platform_only: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifiers": list(self.identifiers),
            "maxCount": self.max_count,
            "marketplaces": list(self.marketplaces),
            "delayMs": self.delay_ms,
            "skipPlatformOnly": self.skip_platform_only,
        }


@dataclass
class Run:
    """
    In-memory record of the active or most recent run.

    Mutated only by the orchestrator while running; treated as read-only once
    it reaches a terminal status.
    """

    input: RunInput
    started_at: datetime
    status: RunStatus = RunStatus.RUNNING
    completed_at: datetime | None = None
    rows: list[OutputRow] = field(default_factory=list)
    log_lines: list[str] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class RunSnapshot:
    """
    Point-in-time copy of a run for observers.
    """

    status: RunStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    row_count: int = 0
    log_count: int = 0
    error: str | None = None
