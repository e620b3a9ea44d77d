"""Tests for the matrix builder."""

from __future__ import annotations

import logging

import httpx
import pytest

from concourse_wallboard.exceptions import (
    ConcourseApiError,
    ConcourseAuthError,
    MalformedResponseError,
)
from concourse_wallboard.matrix import StatusMatrix, build_matrix
from concourse_wallboard.models.builds import ResourceVersion, StatusKind

VERSIONS = "/teams/main/pipelines/app/resources/repo/versions"


def _versions(*ids: int) -> list[dict]:
    return [{"id": i, "version": {"ref": f"sha{i}"}} for i in ids]


class TestStatusMatrix:
    def test_missing_cell_is_unknown(self):
        matrix = StatusMatrix(
            resource="repo", versions=[ResourceVersion(id=1, version={"ref": "a"})], jobs=["x"]
        )
        assert matrix.status('{"ref":"a"}', "x") is StatusKind.UNKNOWN
        assert list(matrix.rows()) == [(matrix.versions[0], [StatusKind.UNKNOWN])]

    def test_empty(self):
        assert StatusMatrix(resource="repo").is_empty


class TestBuildMatrix:
    async def test_no_versions(self, client, mock_api, caplog):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=[]))
        with caplog.at_level(logging.INFO):
            matrix = await build_matrix(client, "main", "app", "repo", ["build"])
        assert matrix.is_empty
        assert matrix.jobs == ["build"]
        assert "No versioned resources" in caplog.text

    async def test_dense_matrix(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=_versions(17)))
        mock_api.get(f"{VERSIONS}/17/input_to").mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"job_name": "build", "status": "succeeded"},
                    {"job_name": "build", "status": "failed"},
                ],
            )
        )
        matrix = await build_matrix(client, "main", "app", "repo", ["build", "deploy"])
        [(version, statuses)] = list(matrix.rows())
        assert version.id == 17
        assert statuses == [StatusKind.SUCCEEDED, StatusKind.UNKNOWN]

    async def test_order_preserved(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=_versions(3, 1, 2)))
        for i, status in ((3, "succeeded"), (1, "failed"), (2, "started")):
            mock_api.get(f"{VERSIONS}/{i}/input_to").mock(
                return_value=httpx.Response(200, json=[{"job_name": "deploy", "status": status}])
            )
        matrix = await build_matrix(client, "main", "app", "repo", ["deploy"])
        assert [v.id for v in matrix.versions] == [3, 1, 2]
        assert [s for _, [s] in matrix.rows()] == [
            StatusKind.SUCCEEDED,
            StatusKind.FAILED,
            StatusKind.STARTED,
        ]

    async def test_unknown_jobs_dropped(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=_versions(1)))
        mock_api.get(f"{VERSIONS}/1/input_to").mock(
            return_value=httpx.Response(200, json=[{"job_name": "lint", "status": "failed"}])
        )
        matrix = await build_matrix(client, "main", "app", "repo", ["build"])
        assert matrix.cells == {}
        assert matrix.status(matrix.versions[0].key, "lint") is StatusKind.UNKNOWN

    async def test_excess_versions_trimmed(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=_versions(5, 4, 3)))
        for i in (5, 4):
            mock_api.get(f"{VERSIONS}/{i}/input_to").mock(return_value=httpx.Response(200, json=[]))
        matrix = await build_matrix(client, "main", "app", "repo", ["build"], limit=2)
        assert [v.id for v in matrix.versions] == [5, 4]

    async def test_limit_passed_to_server(self, client, mock_api):
        route = mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=[]))
        await build_matrix(client, "main", "app", "repo", ["build"], limit=3)
        assert route.calls.last.request.url.params["limit"] == "3"

    async def test_duplicate_versions_rejected(self, client, mock_api):
        mock_api.get(VERSIONS).mock(
            return_value=httpx.Response(
                200,
                json=[{"id": 1, "version": {"ref": "a"}}, {"id": 2, "version": {"ref": "a"}}],
            )
        )
        with pytest.raises(MalformedResponseError):
            await build_matrix(client, "main", "app", "repo", ["build"])

    async def test_versions_error_is_fatal(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(401))
        with pytest.raises(ConcourseAuthError):
            await build_matrix(client, "main", "app", "repo", ["build"])

    async def test_single_version_error_is_fatal(self, client, mock_api):
        mock_api.get(VERSIONS).mock(return_value=httpx.Response(200, json=_versions(1, 2)))
        mock_api.get(f"{VERSIONS}/1/input_to").mock(return_value=httpx.Response(200, json=[]))
        mock_api.get(f"{VERSIONS}/2/input_to").mock(return_value=httpx.Response(500))
        with pytest.raises(ConcourseApiError) as exc_info:
            await build_matrix(client, "main", "app", "repo", ["build"])
        assert exc_info.value.status_code == 500
