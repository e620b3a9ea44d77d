"""Resource version and build models."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from .base import ConcourseModel


class StatusKind(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    STARTED = "started"
    ERRORED = "errored"
    ABORTED = "aborted"
    PENDING = "pending"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> StatusKind:
        """Map a raw API status onto a known kind; anything unrecognised is UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


class ResourceVersion(ConcourseModel):
    id: int
    version: dict[str, str] = {}

    @property
    def key(self) -> str:
        """Printable, injective key for the version mapping (canonical JSON)."""
        return json.dumps(self.version, sort_keys=True, separators=(",", ":"))


class Build(ConcourseModel):
    job_name: str = Field(default="", validation_alias=AliasChoices("job_name", "jobName"))
    status: StatusKind = StatusKind.UNKNOWN

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> StatusKind:
        return StatusKind.parse(value)
