"""Core metadata models for storage cleanup.

This module defines the job and cube structures read from the OLAP metadata
store. They are intentionally free of HTTP/SDK types and CLI concerns so the
reconciliation logic can be exercised with plain in-memory data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class JobState(str, Enum):
    """
    Lifecycle state of a build/merge job.

    Values:
        READY: The job has been created but not scheduled yet.
        PENDING: The job is waiting for an executor.
        RUNNING: The job is executing.
        ERROR: The job failed but can still be resumed.
        STOPPED: The job was paused by an operator and can be resumed.
        SUCCEED: The job completed successfully.
        DISCARDED: The job was abandoned and will never run again.
        UNKNOWN: The state could not be determined.
    """

    READY = "READY"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    ERROR = "ERROR"
    STOPPED = "STOPPED"
    SUCCEED = "SUCCEED"
    DISCARDED = "DISCARDED"
    UNKNOWN = "UNKNOWN"

    @property
    def is_final(self) -> bool:
        """Return True if the job can no longer touch any storage artifact."""
        return self in (JobState.SUCCEED, JobState.DISCARDED)

    @classmethod
    def parse(cls, raw: str | None) -> JobState:
        """Map a state string from the metadata API onto a JobState.

        Unrecognized values become UNKNOWN, which is treated as non-final.
        """
        if not raw:
            return cls.UNKNOWN
        value = str(raw).strip().upper()
        value = _STATE_ALIASES.get(value, value)
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


_STATE_ALIASES = {
    "NEW": "READY",
    "FINISHED": "SUCCEED",
    "SUCCEEDED": "SUCCEED",
}


@dataclass(frozen=True)
class Job:
    """
    Represents a job known to the metadata store.

    Attributes:
        id: Opaque job identifier (a UUID for build jobs).
        state: Current lifecycle state.
        params: Job parameters; build jobs carry a `segmentId`.
    """

    id: str
    state: JobState
    params: Mapping[str, str] = field(default_factory=dict)

    @property
    def segment_id(self) -> str | None:
        """Return the segment this job builds, or None for non-build jobs."""
        value = self.params.get("segmentId")
        return value or None


@dataclass(frozen=True)
class CubeSegment:
    """A segment of a cube, backed by one columnar table."""

    uuid: str
    name: str = ""
    storage_location_identifier: str | None = None
    last_build_job_id: str | None = None


@dataclass(frozen=True)
class CubeInstance:
    """A cube with its current segments."""

    name: str
    status: str | None = None
    segments: tuple[CubeSegment, ...] = ()


@dataclass(frozen=True)
class MetadataSnapshot:
    """Jobs and cubes as read once at the start of a cleanup run."""

    jobs: tuple[Job, ...]
    cubes: tuple[CubeInstance, ...]

    def working_jobs(self) -> list[Job]:
        """Return jobs that are still able to produce or use storage."""
        return [job for job in self.jobs if not job.state.is_final]

    def segment_to_job(self) -> dict[str, str]:
        """Index build jobs by the segment they build (later jobs win)."""
        index: dict[str, str] = {}
        for job in self.jobs:
            # some jobs are not build jobs
            if job.segment_id is not None:
                index[job.segment_id] = job.id
        return index
