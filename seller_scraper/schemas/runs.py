"""
seller_scraper/schemas/runs.py

Request and response schemas for the run control endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class StartRunRequest(BaseModel):
    """
    Body of a start request. Legacy field names (`asins`, `maxAsins`,
    `delayBetweenRequests`, `skipAmazonSellers`) are accepted as aliases.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    identifiers: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("identifiers", "asins"),
    )
    max_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("maxCount", "maxAsins", "max_count"),
    )
    marketplaces: list[str] | None = None
    delay_ms: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("delayMs", "delayBetweenRequests", "delay_ms"),
    )
    skip_platform_only: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("skipPlatformOnly", "skipAmazonSellers", "skip_platform_only"),
    )


class _CamelResponse(BaseModel):
    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=False)


class RunStartedResponse(_CamelResponse):
    status: str = "started"
    started_at: str = Field(serialization_alias="startedAt")


class RunConflictResponse(_CamelResponse):
    error: str = "A run is already in progress"
    started_at: str = Field(serialization_alias="startedAt")


class ErrorResponse(_CamelResponse):
    error: str


class RunStatusResponse(_CamelResponse):
    status: str
    started_at: str | None = Field(default=None, serialization_alias="startedAt")
    completed_at: str | None = Field(default=None, serialization_alias="completedAt")
    row_count: int = Field(default=0, ge=0, serialization_alias="rowCount")
    log_count: int = Field(default=0, ge=0, serialization_alias="logCount")
    error: str | None = None


class IdleStatusResponse(_CamelResponse):
    status: str = "idle"
    message: str = "No runs yet"


class RunRowsResponse(_CamelResponse):
    status: str
    rows: list[dict[str, Any]] = Field(default_factory=list)


class RunLogsResponse(_CamelResponse):
    status: str
    logs: list[str] = Field(default_factory=list)


class HealthResponse(_CamelResponse):
    service: str
    status: str
    uptime: float = Field(..., ge=0.0)
