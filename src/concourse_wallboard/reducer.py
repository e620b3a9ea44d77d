"""Collapse the builds fed by one version into one status per job."""

from __future__ import annotations

from collections.abc import Iterable

from .models.builds import Build, StatusKind


def reduce_statuses(builds: Iterable[Build]) -> dict[str, StatusKind]:
    """Return the status of each job seen in *builds*.

    A success is sticky: once a job has succeeded for this version, later
    builds of that job do not change its status. Between two non-success
    builds the later one in *builds* wins.
    """
    statuses: dict[str, StatusKind] = {}
    for build in builds:
        if statuses.get(build.job_name) == StatusKind.SUCCEEDED:
            continue
        statuses[build.job_name] = build.status
    return statuses
