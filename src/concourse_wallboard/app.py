"""FastAPI application serving the wallboard."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, Response

from .client import ConcourseClient
from .config import DashboardConfig, parse_jobs
from .exceptions import (
    ConcourseApiError,
    ConcourseAuthError,
    ConcourseError,
    MalformedResponseError,
    NetworkError,
)
from .matrix import build_matrix
from .models.targets import Target
from .renderer import render_matrix, render_message

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "You are not authorized. Please log in first."

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499
ANNOUNCE_DELAY_SECONDS = 1.0

router = APIRouter()


def _get_client(request: Request) -> ConcourseClient:
    return request.app.state.client


def _get_config(request: Request) -> DashboardConfig:
    return request.app.state.config


def _err(error: Exception, refresh_seconds: int) -> HTMLResponse:
    if isinstance(error, ConcourseAuthError):
        status_code, title, message = 401, "Unauthorized", UNAUTHORIZED_MESSAGE
    elif isinstance(error, ConcourseApiError):
        status_code, title = 502, "Concourse API error"
        message = f"Concourse answered HTTP {error.status_code} {error.status_text}: {error.body}"
    elif isinstance(error, NetworkError):
        status_code, title, message = 502, "Concourse unreachable", str(error)
    elif isinstance(error, MalformedResponseError):
        status_code, title, message = 502, "Unexpected response from Concourse", str(error)
    elif isinstance(error, asyncio.TimeoutError):
        status_code, title = 504, "Concourse timed out"
        message = "Concourse did not answer in time; retrying on the next refresh."
    else:
        status_code, title, message = 500, "Internal error", str(error)
    return HTMLResponse(render_message(title, message, refresh_seconds), status_code=status_code)


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def _dashboard(
    request: Request, team: str, pipeline: str, resource: str, jobs: list[str]
) -> Response:
    config = _get_config(request)
    fetch = asyncio.ensure_future(
        asyncio.wait_for(
            build_matrix(
                _get_client(request),
                team,
                pipeline,
                resource,
                jobs,
                limit=config.version_limit,
            ),
            timeout=config.timeout,
        )
    )
    watch = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({fetch, watch}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (fetch, watch):
            task.cancel()
        await asyncio.gather(fetch, watch, return_exceptions=True)

    if fetch not in done:
        logger.info("Client disconnected; dropped board for %s/%s", pipeline, resource)
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    try:
        matrix = fetch.result()
    except ConcourseAuthError as e:
        logger.warning("Token rejected for team %s: %s", team, e)
        return _err(e, config.refresh_seconds)
    except (ConcourseError, asyncio.TimeoutError) as e:
        logger.error("Failed to build matrix for %s/%s: %r", pipeline, resource, e)
        return _err(e, config.refresh_seconds)
    return HTMLResponse(render_matrix(matrix, config.refresh_seconds))


@router.get("/", response_class=HTMLResponse)
async def index(request: Request, jobs: str | None = None) -> Response:
    """Dashboard for the pipeline and resource given on the command line."""
    config = _get_config(request)
    target: Target = request.app.state.target
    job_list = parse_jobs(jobs) if jobs is not None else config.jobs
    return await _dashboard(request, target.team, config.pipeline, config.resource, job_list)


@router.get(
    "/api/v1/teams/{team}/pipelines/{pipeline}/resources/{resource}/progress",
    response_class=HTMLResponse,
)
async def progress(
    request: Request, team: str, pipeline: str, resource: str, jobs: str | None = None
) -> Response:
    """Dashboard for any pipeline resource; ``jobs`` is pipe-separated."""
    job_list = parse_jobs(jobs) if jobs is not None else _get_config(request).jobs
    return await _dashboard(request, team, pipeline, resource, job_list)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


def create_app(
    config: DashboardConfig,
    target: Target,
    client: ConcourseClient | None = None,
    announce: Callable[[], None] | None = None,
) -> FastAPI:
    """Create the FastAPI application; the API client is shared by all requests.

    *announce* runs once, ANNOUNCE_DELAY_SECONDS after startup, unless the
    server shuts down first (for example because the port is taken).
    """
    client = client or ConcourseClient(target, timeout=config.timeout)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Serving %s/%s for team %s", config.pipeline, config.resource, target.team)
        handle = None
        if announce is not None:
            handle = asyncio.get_running_loop().call_later(ANNOUNCE_DELAY_SECONDS, announce)
        try:
            yield
        finally:
            if handle is not None:
                handle.cancel()
            await client.close()

    app = FastAPI(title="Concourse Wallboard", lifespan=lifespan)
    app.state.config = config
    app.state.target = target
    app.state.client = client
    app.include_router(router)
    return app
