"""Saved target and credential models."""

from __future__ import annotations

from dataclasses import dataclass

from .base import ConcourseModel


class TargetToken(ConcourseModel):
    type: str = "Bearer"
    value: str = ""


class Credential(ConcourseModel):
    """One entry of the credential file, keyed by target name."""

    model_config = {"extra": "allow", "populate_by_name": True}

    api: str
    team: str = "main"
    insecure: bool = False
    token: TargetToken | None = None


@dataclass(frozen=True)
class Target:
    """An authenticated connection to one Concourse server and team."""

    base_url: str
    team: str
    token_type: str
    token_value: str
    insecure: bool = False
    name: str = ""

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/v1"

    @property
    def authorization(self) -> str:
        return f"{self.token_type} {self.token_value}"

    def __repr__(self) -> str:
        return (
            f"Target(name={self.name!r}, base_url={self.base_url!r}, "
            f"team={self.team!r}, insecure={self.insecure!r})"
        )
