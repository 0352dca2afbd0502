"""Read-once snapshot of live metadata.

Every cleanup run starts here. The snapshot is pure query; if any part of it
cannot be read the run must stop before any listing or deletion happens.
"""

from __future__ import annotations

import logging
from typing import Protocol

from storagegc.core.errors import FatalSnapshotError
from storagegc.core.models import CubeInstance, Job, MetadataSnapshot

logger = logging.getLogger(__name__)


class MetadataStore(Protocol):
    """Interface for reading jobs and cubes from the metadata store."""

    def list_jobs(self) -> list[Job]:
        """Return every job with its current state and parameters."""
        ...

    def list_cubes(self) -> list[CubeInstance]:
        """Return every cube with its current segments."""
        ...


def read_snapshot(store: MetadataStore) -> MetadataSnapshot:
    """
    Read jobs and cubes from the metadata store.

    Args:
        store: Metadata store adapter.

    Returns:
        An immutable MetadataSnapshot.

    Raises:
        FatalSnapshotError: If either listing fails for any reason.
    """
    try:
        jobs = tuple(store.list_jobs())
        cubes = tuple(store.list_cubes())
    except Exception as exc:  # noqa: BLE001
        raise FatalSnapshotError(f"Could not read live metadata: {exc}") from exc

    working = [job.id for job in jobs if not job.state.is_final]
    logger.info(
        "Metadata snapshot: %d job(s), %d working, %d cube(s), %d segment(s)",
        len(jobs),
        len(working),
        len(cubes),
        sum(len(c.segments) for c in cubes),
    )
    logger.debug("Working job ids: %s", working)
    return MetadataSnapshot(jobs=jobs, cubes=cubes)
