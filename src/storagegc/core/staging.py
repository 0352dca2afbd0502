"""Cleanup pass for intermediate (staging) tables.

Staging tables are named `kylin_intermediate_<...>_<segment uuid>` with the
UUID's hyphens written as underscores. A table is in use while a non-final job
builds its segment. Dropping a table also removes its external data directory
under the owning job's working directory, when the owning job is known.
"""

from __future__ import annotations

import logging
from typing import Protocol

from storagegc.core.deleter import DeleteResult, PassResult, delete_each
from storagegc.core.models import MetadataSnapshot
from storagegc.core.naming import (
    STAGING_TABLE_PREFIX,
    UUID_LENGTH,
    child_path,
    job_working_dir,
    staging_table_segment_id,
)
from storagegc.core.paths import FileStore, delete_path

logger = logging.getLogger(__name__)

DOMAIN = "staging"


class StagingDatabaseClient(Protocol):
    """Interface for the database holding staging tables."""

    def list_tables(self, database: str) -> list[str]:
        """Return table names in the database."""
        ...

    def execute_batch(self, statements: list[str]) -> None:
        """Execute statements in order; raise StagingStatementError on failure."""
        ...


def list_candidates(
    db: StagingDatabaseClient, database: str, prefix: str = STAGING_TABLE_PREFIX
) -> list[str]:
    """Return staging tables in the database."""
    return [name for name in db.list_tables(database) if name and name.startswith(prefix)]


def live_segment_ids(snapshot: MetadataSnapshot) -> set[str]:
    """Return the segments currently owned by a non-final job."""
    return {
        job.segment_id
        for job in snapshot.working_jobs()
        if job.segment_id is not None
    }


def select_droppable(
    candidates: list[str],
    snapshot: MetadataSnapshot,
    *,
    force: bool = False,
    prefix: str = STAGING_TABLE_PREFIX,
) -> list[str]:
    """
    Decide which staging tables can be dropped.

    With `force`, every prefixed table is dropped. Otherwise a table is kept
    unless its name ends with a well-formed segment UUID that no working job
    is building.
    """
    in_use = live_segment_ids(snapshot)
    logger.info("Working jobs hold %d segment(s): %s", len(in_use), sorted(in_use))
    if force:
        logger.warning(
            "FORCE: all %d intermediate table(s) with prefix %s will be dropped, "
            "regardless of running jobs!",
            len([c for c in candidates if c.startswith(prefix)]),
            prefix,
        )

    droppable: list[str] = []
    for name in candidates:
        if not name.startswith(prefix):
            continue
        logger.debug("Checking table %s", name)

        if force:
            droppable.append(name)
            continue

        if len(name) - len(prefix) < UUID_LENGTH:
            logger.info("Skip deleting %s because length not qualified", name)
            continue

        segment_id = staging_table_segment_id(name, prefix)
        if segment_id is None:
            logger.info("Skip deleting %s because not match pattern", name)
            continue

        if segment_id in in_use:
            logger.info(
                "Skip deleting %s because the table is in use by segment %s",
                name,
                segment_id,
            )
            continue

        droppable.append(name)
    return droppable


def drop_statements(database: str, tables: list[str]) -> list[str]:
    """Build the batch that drops tables in the staging database."""
    statements = [f"USE {database}"]
    statements.extend(f"DROP TABLE IF EXISTS {table}" for table in tables)
    return statements


def external_data_paths(
    tables: list[str],
    segment_to_job: dict[str, str],
    root: str,
    prefix: str = STAGING_TABLE_PREFIX,
) -> list[str]:
    """Return `<job working dir>/<table>` for each table whose owner job is known."""
    paths: list[str] = []
    for table in tables:
        segment_id = staging_table_segment_id(table, prefix)
        job_id = segment_to_job.get(segment_id) if segment_id else None
        if job_id is None:
            logger.warning(
                "Staging table %s's job ID not found, its external path is left "
                "in place",
                table,
            )
            continue
        paths.append(child_path(job_working_dir(root, job_id), table))
    return paths


def clean_staging_tables(
    db: StagingDatabaseClient,
    fs: FileStore,
    snapshot: MetadataSnapshot,
    *,
    database: str,
    root: str,
    delete: bool = False,
    force: bool = False,
) -> PassResult:
    """
    List, filter and (optionally) drop unused staging tables.

    Tables are dropped in a single batch. If the batch fails for any reason
    (statement error or transport error), the pass is marked degraded and
    external data paths are not touched.
    """
    droppable = select_droppable(
        list_candidates(db, database), snapshot, force=force
    )
    logger.info("Staging tables to drop: %d", len(droppable))
    if not delete or not droppable:
        return PassResult(
            domain=DOMAIN, candidates=droppable, results=[] if delete else None
        )

    for table in droppable:
        logger.info("Remove %s from staging tables", table)
    try:
        db.execute_batch(drop_statements(database, droppable))
    except Exception as e:  # noqa: BLE001
        logger.error(
            "Dropping %d staging table(s) failed, external paths are kept: %s",
            len(droppable),
            e,
        )
        failed = [
            DeleteResult(target=table, deleted=False, error=str(e))
            for table in droppable
        ]
        return PassResult(
            domain=DOMAIN, candidates=droppable, results=failed, degraded=True
        )

    results = [DeleteResult(target=table, deleted=True) for table in droppable]
    paths = external_data_paths(droppable, snapshot.segment_to_job(), root)
    results.extend(delete_each(paths, lambda path: delete_path(fs, path)))
    return PassResult(domain=DOMAIN, candidates=droppable, results=results)
