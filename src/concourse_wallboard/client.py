"""Concourse API client using httpx."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from .exceptions import (
    ConcourseApiError,
    ConcourseAuthError,
    MalformedResponseError,
    NetworkError,
)
from .models.builds import Build, ResourceVersion
from .models.targets import Target

logger = logging.getLogger(__name__)

_VERSIONS = TypeAdapter(list[ResourceVersion])
_BUILDS = TypeAdapter(list[Build])


class ConcourseClient:
    """Async, bearer-authenticated HTTP client for the Concourse REST API v1.

    Read-only; no retries. One instance is shared by all requests of a process.
    """

    def __init__(self, target: Target, timeout: int = 30) -> None:
        self.target = target
        self._client = httpx.AsyncClient(
            base_url=target.api_url,
            headers={
                "Authorization": target.authorization,
                "Accept": "application/json",
            },
            timeout=timeout,
            verify=not target.insecure,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ConcourseClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── HTTP helpers ──────────────────────────────────────────────

    @staticmethod
    def _encode(segment: str | int) -> str:
        return quote(str(segment), safe="")

    def _resource_path(self, team: str, pipeline: str, resource: str) -> str:
        return (
            f"/teams/{self._encode(team)}"
            f"/pipelines/{self._encode(pipeline)}"
            f"/resources/{self._encode(resource)}"
        )

    async def _request(
        self, method: str, path: str, *, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request and return parsed JSON (``None`` for an empty body)."""
        logger.debug("%s %s%s params=%s", method, self.target.api_url, path, params)
        try:
            resp = await self._client.request(method, path, params=params)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e
        logger.debug("Response Code: %s", resp.status_code)

        if resp.status_code == 401:
            raise ConcourseAuthError(resp.text[:500])
        if not resp.is_success:
            raise ConcourseApiError(resp.status_code, resp.reason_phrase or "", resp.text[:500])

        if resp.status_code == 204 or not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError(f"JSON parse error for {path}: {e}") from e

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    # ── Resource versions ─────────────────────────────────────────

    async def list_recent_versions(
        self, team: str, pipeline: str, resource: str, limit: int = 5
    ) -> list[ResourceVersion]:
        path = f"{self._resource_path(team, pipeline, resource)}/versions"
        data = await self.get(path, params={"limit": limit})
        return _validate(_VERSIONS, data, path)

    async def list_builds_consuming_version(
        self, team: str, pipeline: str, resource: str, version_id: int
    ) -> list[Build]:
        path = f"{self._resource_path(team, pipeline, resource)}/versions/{version_id}/input_to"
        data = await self.get(path)
        return _validate(_BUILDS, data, path)


def _validate(adapter: TypeAdapter, data: Any, path: str) -> list:
    if data is None:
        return []
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected response shape for {path}: {e}") from e
