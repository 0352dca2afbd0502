"""Cleanup pass for job working directories on the shared filesystem."""

from __future__ import annotations

import logging
from typing import Protocol

from storagegc.core.deleter import PassResult, delete_each
from storagegc.core.models import MetadataSnapshot
from storagegc.core.naming import JOB_DIR_PREFIX, child_path, job_working_dir

logger = logging.getLogger(__name__)

DOMAIN = "filesystem"


class FileStore(Protocol):
    """Interface for the filesystem holding job working directories."""

    def list_children(self, root: str) -> list[str]:
        """Return the names (not paths) of the immediate children of root."""
        ...

    def exists(self, path: str) -> bool: ...

    def delete(self, path: str, recursive: bool = True) -> None: ...


def list_candidates(fs: FileStore, root: str) -> list[str]:
    """Return `<root>/<name>` for every job directory under root."""
    return [
        child_path(root, name)
        for name in fs.list_children(root)
        if name.startswith(JOB_DIR_PREFIX)
    ]


def exclude_live(
    candidates: list[str], snapshot: MetadataSnapshot, root: str
) -> list[str]:
    """
    Remove working directories still needed.

    A directory is kept when it belongs to a non-final job, or to the last
    build job of any current segment (even a finished one).
    """
    remaining = list(candidates)

    for job in snapshot.working_jobs():
        path = job_working_dir(root, job.id)
        if path in remaining:
            remaining.remove(path)
            logger.info(
                "Skip %s from deletion list, as the path belongs to job %s "
                "with status %s",
                path,
                job.id,
                job.state.value,
            )

    for cube in snapshot.cubes:
        for seg in cube.segments:
            if not seg.last_build_job_id:
                continue
            path = job_working_dir(root, seg.last_build_job_id)
            if path in remaining:
                remaining.remove(path)
                logger.info(
                    "Skip %s from deletion list, as the path belongs to "
                    "segment %s of cube %s",
                    path,
                    seg.name or seg.uuid,
                    cube.name,
                )

    return remaining


def delete_path(fs: FileStore, path: str) -> bool:
    """Recursively delete a path; a missing path is a no-op."""
    logger.info("Deleting path %s", path)
    if not fs.exists(path):
        logger.info("Path %s does not exist", path)
        return False
    fs.delete(path, recursive=True)
    logger.info("Deleted path %s", path)
    return True


def clean_job_paths(
    fs: FileStore,
    snapshot: MetadataSnapshot,
    *,
    root: str,
    delete: bool = False,
) -> PassResult:
    """List, filter and (optionally) delete unreferenced job directories."""
    candidates = exclude_live(list_candidates(fs, root), snapshot, root)
    logger.info("Job paths to delete: %d", len(candidates))
    if not delete:
        return PassResult(domain=DOMAIN, candidates=candidates)

    results = delete_each(candidates, lambda path: delete_path(fs, path))
    return PassResult(domain=DOMAIN, candidates=candidates, results=results)
