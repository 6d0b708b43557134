"""
seller_scraper/api/routers/runs.py

Run control endpoints. Routing only; behaviour lives in RunControlSurface.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from seller_scraper.services.control_surface import (
    ControlResponse,
    RunControlSurface,
    get_run_control_surface,
)

router = APIRouter(tags=["runs"])


def _respond(response: ControlResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.payload)


@router.post("/run")
async def start_run(
    request: Request,
    control: RunControlSurface = Depends(get_run_control_surface),
) -> JSONResponse:
    """
    Start a scrape run in the background; poll /status for progress.
    """

    try:
        body = await request.json()
    except ValueError:
        body = None
    return _respond(control.start_run(body))


@router.get("/status")
def get_status(control: RunControlSurface = Depends(get_run_control_surface)) -> JSONResponse:
    return _respond(control.status())


@router.get("/results")
def get_results(control: RunControlSurface = Depends(get_run_control_surface)) -> JSONResponse:
    return _respond(control.rows())


@router.get("/rows")
def get_rows(control: RunControlSurface = Depends(get_run_control_surface)) -> JSONResponse:
    return _respond(control.rows())


@router.get("/logs")
def get_logs(control: RunControlSurface = Depends(get_run_control_surface)) -> JSONResponse:
    return _respond(control.logs())


@router.get("/")
def health(control: RunControlSurface = Depends(get_run_control_surface)) -> JSONResponse:
    return _respond(control.health())
