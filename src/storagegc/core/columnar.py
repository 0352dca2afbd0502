"""Cleanup pass for columnar-store tables.

A table is ours when its name carries the storage prefix and its owner tag
matches this deployment's identity. It is live when any segment of any cube
(whatever the cube status) uses it as its storage location.
"""

from __future__ import annotations

import logging
from typing import Protocol

from storagegc.core.deleter import BoundedDeleter, PassResult
from storagegc.core.models import MetadataSnapshot
from storagegc.core.naming import COLUMNAR_TABLE_PREFIX

logger = logging.getLogger(__name__)

DOMAIN = "columnar"


class ColumnarStoreClient(Protocol):
    """Interface for listing and dropping columnar-store tables."""

    def list_tables(self, prefix: str) -> list[tuple[str, str | None]]:
        """Return (table name, owner tag) for tables whose name starts with prefix."""
        ...

    def table_exists(self, name: str) -> bool: ...

    def is_enabled(self, name: str) -> bool: ...

    def disable(self, name: str) -> None: ...

    def drop(self, name: str) -> None: ...


def list_candidates(
    client: ColumnarStoreClient,
    deployment_identity: str,
    prefix: str = COLUMNAR_TABLE_PREFIX,
) -> list[str]:
    """Return prefixed tables created by this deployment."""
    want = deployment_identity.lower()
    out: list[str] = []
    for name, owner in client.list_tables(prefix):
        if not name.startswith(prefix):
            continue
        # tables of other deployments sharing the cluster are not ours
        if (owner or "").lower() != want:
            logger.debug("Ignore table %s owned by %r", name, owner)
            continue
        out.append(name)
    return out


def exclude_live(candidates: list[str], snapshot: MetadataSnapshot) -> list[str]:
    """Remove tables referenced by a segment of any cube."""
    live: set[str] = set()
    for cube in snapshot.cubes:
        for seg in cube.segments:
            table = seg.storage_location_identifier
            if table and table in candidates and table not in live:
                live.add(table)
                logger.info(
                    "Exclude table %s from drop list, as the table belongs to "
                    "cube %s with status %s",
                    table,
                    cube.name,
                    cube.status,
                )
    return [name for name in candidates if name not in live]


def drop_table(client: ColumnarStoreClient, name: str) -> bool:
    """Disable (if needed) and drop one table; a missing table is a no-op."""
    logger.info("Deleting columnar table %s", name)
    if not client.table_exists(name):
        logger.info("Columnar table %s does not exist", name)
        return False
    if client.is_enabled(name):
        client.disable(name)
    client.drop(name)
    logger.info("Deleted columnar table %s", name)
    return True


def clean_columnar_tables(
    client: ColumnarStoreClient,
    snapshot: MetadataSnapshot,
    *,
    deployment_identity: str,
    delete: bool = False,
    timeout_seconds: float = 600.0,
) -> PassResult:
    """
    List, filter and (optionally) drop unreferenced columnar tables.

    Each drop runs under `timeout_seconds`; a timed-out drop is abandoned and
    the remaining tables are still processed.
    """
    candidates = exclude_live(
        list_candidates(client, deployment_identity), snapshot
    )
    logger.info("Columnar tables to drop: %d", len(candidates))
    if not delete:
        return PassResult(domain=DOMAIN, candidates=candidates)

    with BoundedDeleter(timeout_seconds) as deleter:
        results = deleter.delete_all(
            candidates, lambda name: drop_table(client, name)
        )
    return PassResult(domain=DOMAIN, candidates=candidates, results=results)
