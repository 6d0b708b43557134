"""
seller_scraper/services package marker.
"""

from seller_scraper.services.control_surface import (
    ControlResponse,
    RunControlSurface,
    get_run_control_surface,
)
from seller_scraper.services.run_orchestrator import (
    InvalidRunRequest,
    RunOrchestrator,
    SchedulerTaskExecutor,
    StartOutcome,
    get_run_orchestrator,
)

__all__ = [
    "ControlResponse",
    "InvalidRunRequest",
    "RunControlSurface",
    "RunOrchestrator",
    "SchedulerTaskExecutor",
    "StartOutcome",
    "get_run_control_surface",
    "get_run_orchestrator",
]
