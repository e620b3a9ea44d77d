"""Tests for wallboard configuration."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from concourse_wallboard.config import DashboardConfig, parse_jobs
from concourse_wallboard.exceptions import ConfigError


def test_config_from_env():
    env = {"PORT": "9000", "WALLBOARD_TIMEOUT": "10", "WALLBOARD_REFRESH": "60"}
    with patch.dict(os.environ, env, clear=False):
        config = DashboardConfig.from_env(pipeline="app", resource="repo")
    assert config.port == 9000
    assert config.timeout == 10
    assert config.refresh_seconds == 60
    assert config.pipeline == "app"
    assert config.version_limit == 5


def test_config_defaults():
    with patch.dict(os.environ, {}, clear=True):
        config = DashboardConfig.from_env()
    assert config.port == 8080
    assert config.timeout == 30
    assert config.refresh_seconds == 30


def test_config_overrides_win_over_env():
    with patch.dict(os.environ, {"PORT": "9000"}, clear=False):
        config = DashboardConfig.from_env(port=7000)
    assert config.port == 7000


def test_config_bad_port():
    with patch.dict(os.environ, {"PORT": "not-a-port"}, clear=False):
        with pytest.raises(ValueError):
            DashboardConfig.from_env()


def test_bind_address_local():
    config = DashboardConfig(local=True, port=9000)
    assert config.host == "127.0.0.1"
    assert config.bind_port == 12345
    assert config.url == "http://127.0.0.1:12345"


def test_bind_address_port():
    config = DashboardConfig(port=9000)
    assert config.host == "0.0.0.0"
    assert config.bind_port == 9000
    assert config.url == "http://localhost:9000"


def test_config_validate_missing_pipeline():
    with pytest.raises(ConfigError, match="--pipeline"):
        DashboardConfig(resource="repo").validate()


def test_config_validate_missing_resource():
    with pytest.raises(ConfigError, match="--resource"):
        DashboardConfig(pipeline="app").validate()


def test_config_validate_limit():
    with pytest.raises(ConfigError, match="limit"):
        DashboardConfig(pipeline="app", resource="repo", version_limit=0).validate()


def test_parse_jobs_pipes():
    assert parse_jobs("build| unit ||deploy") == ["build", "unit", "deploy"]


def test_parse_jobs_lines():
    assert parse_jobs("build\ndeploy\n\n", sep="\n") == ["build", "deploy"]
