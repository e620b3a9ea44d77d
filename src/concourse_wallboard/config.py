"""Wallboard configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .exceptions import ConfigError

LOCAL_HOST = "127.0.0.1"
LOCAL_PORT = 12345


def parse_jobs(raw: str, sep: str = "|") -> list[str]:
    """Split a job list, dropping blanks and surrounding whitespace."""
    return [job.strip() for job in raw.split(sep) if job.strip()]


@dataclass
class DashboardConfig:
    """Settings for one wallboard process, passed explicitly to request handlers."""

    pipeline: str = ""
    resource: str = ""
    jobs: list[str] = field(default_factory=list)
    version_limit: int = 5
    timeout: int = 30
    refresh_seconds: int = 30
    local: bool = False
    port: int = 8080

    @classmethod
    def from_env(cls, **overrides) -> DashboardConfig:
        port = int(os.getenv("PORT", "8080"))
        timeout = int(os.getenv("WALLBOARD_TIMEOUT", "30"))
        refresh_seconds = int(os.getenv("WALLBOARD_REFRESH", "30"))

        values = {"port": port, "timeout": timeout, "refresh_seconds": refresh_seconds}
        values.update(overrides)
        return cls(**values)

    @property
    def host(self) -> str:
        return LOCAL_HOST if self.local else "0.0.0.0"

    @property
    def bind_port(self) -> int:
        return LOCAL_PORT if self.local else self.port

    @property
    def url(self) -> str:
        host = self.host if self.local else "localhost"
        return f"http://{host}:{self.bind_port}"

    def validate(self) -> None:
        if not self.pipeline:
            msg = "--pipeline is required"
            raise ConfigError(msg)
        if not self.resource:
            msg = "--resource is required"
            raise ConfigError(msg)
        if self.version_limit < 1:
            msg = "Version limit must be at least 1"
            raise ConfigError(msg)
        if self.timeout < 1:
            msg = "WALLBOARD_TIMEOUT must be a positive number of seconds"
            raise ConfigError(msg)
