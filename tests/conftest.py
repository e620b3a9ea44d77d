"""Shared test fixtures for concourse-wallboard."""

from __future__ import annotations

import pytest
import respx

from concourse_wallboard.client import ConcourseClient
from concourse_wallboard.config import DashboardConfig
from concourse_wallboard.credentials import CredentialStore
from concourse_wallboard.models.targets import Target

TEST_URL = "https://ci.example.com"
TEST_TOKEN = "test-token"
API = f"{TEST_URL}/api/v1"


@pytest.fixture
def target() -> Target:
    return Target(
        base_url=TEST_URL, team="main", token_type="Bearer", token_value=TEST_TOKEN, name="ci"
    )


@pytest.fixture
def config() -> DashboardConfig:
    return DashboardConfig(pipeline="app", resource="repo", jobs=["build", "deploy"])


@pytest.fixture
async def client(target: Target) -> ConcourseClient:
    async with ConcourseClient(target) as c:
        yield c


@pytest.fixture
def store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "flyrc")


@pytest.fixture
def mock_api() -> respx.MockRouter:
    with respx.mock(base_url=API) as router:
        yield router
