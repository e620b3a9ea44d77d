"""Build the (version x job) status matrix for one pipeline resource."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .client import ConcourseClient
from .exceptions import MalformedResponseError
from .models.builds import ResourceVersion, StatusKind
from .reducer import reduce_statuses

logger = logging.getLogger(__name__)


@dataclass
class StatusMatrix:
    """Statuses of the requested jobs for the latest versions of a resource.

    ``versions`` is newest first, in the order the server returned them.
    """

    resource: str
    versions: list[ResourceVersion] = field(default_factory=list)
    jobs: list[str] = field(default_factory=list)
    cells: dict[tuple[str, str], StatusKind] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.versions

    def status(self, version_key: str, job: str) -> StatusKind:
        return self.cells.get((version_key, job), StatusKind.UNKNOWN)

    def rows(self) -> Iterator[tuple[ResourceVersion, list[StatusKind]]]:
        for version in self.versions:
            yield version, [self.status(version.key, job) for job in self.jobs]


def _check_unique(versions: list[ResourceVersion]) -> None:
    keys = [v.key for v in versions]
    ids = [v.id for v in versions]
    if len(set(keys)) != len(keys) or len(set(ids)) != len(ids):
        msg = "Server returned duplicate resource versions"
        raise MalformedResponseError(msg)


async def build_matrix(
    client: ConcourseClient,
    team: str,
    pipeline: str,
    resource: str,
    jobs: list[str],
    limit: int = 5,
) -> StatusMatrix:
    """Fetch the latest *limit* versions and the status of each job per version.

    Any API error aborts the whole matrix. An empty matrix means the resource
    has no versions yet.
    """
    matrix = StatusMatrix(resource=resource, jobs=list(jobs))

    versions = await client.list_recent_versions(team, pipeline, resource, limit=limit)
    if not versions:
        logger.info("No versioned resources for %s/%s", pipeline, resource)
        return matrix
    versions = versions[:limit]
    _check_unique(versions)

    # At most `limit` queries in flight; gather keeps the version order.
    build_lists = await asyncio.gather(
        *(
            client.list_builds_consuming_version(team, pipeline, resource, version.id)
            for version in versions
        )
    )

    wanted = set(matrix.jobs)
    for version, builds in zip(versions, build_lists):
        for job, status in reduce_statuses(builds).items():
            if job in wanted:
                matrix.cells[(version.key, job)] = status

    matrix.versions = versions
    logger.debug(
        "Built %dx%d matrix for %s/%s", len(versions), len(matrix.jobs), pipeline, resource
    )
    return matrix
