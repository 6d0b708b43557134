"""
seller_scraper/schemas package exports.
"""

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

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "IdleStatusResponse",
    "RunConflictResponse",
    "RunLogsResponse",
    "RunRowsResponse",
    "RunStartedResponse",
    "RunStatusResponse",
    "StartRunRequest",
]
