"""Cleanup driver.

Reads live metadata once, then runs the staging, filesystem and columnar
passes in that order. The passes are independent; they share only the
snapshot. The driver is free of CLI concerns: it returns a CleanupReport and
leaves printing to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from storagegc.core import columnar, paths, staging
from storagegc.core.columnar import ColumnarStoreClient
from storagegc.core.config import CleanupConfig
from storagegc.core.deleter import PassResult
from storagegc.core.models import MetadataSnapshot
from storagegc.core.paths import FileStore
from storagegc.core.snapshot import MetadataStore, read_snapshot
from storagegc.core.staging import StagingDatabaseClient

logger = logging.getLogger(__name__)

DOMAINS = (staging.DOMAIN, paths.DOMAIN, columnar.DOMAIN)


@dataclass(frozen=True)
class CleanupReport:
    """Per-domain outcome of a cleanup run."""

    delete: bool
    force: bool
    snapshot: MetadataSnapshot
    passes: list[PassResult] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return any(p.degraded or p.failures for p in self.passes)

    def candidates(self, domain: str) -> list[str]:
        for p in self.passes:
            if p.domain == domain:
                return p.candidates
        return []


def select_domains(only: Iterable[str] | None) -> list[str]:
    """Return the requested domains in run order (all of them by default)."""
    if not only:
        return list(DOMAINS)
    wanted = {d.lower() for d in only}
    unknown = wanted - set(DOMAINS)
    if unknown:
        raise ValueError(
            f"Unknown domain(s): {', '.join(sorted(unknown))}. "
            f"Choose from: {', '.join(DOMAINS)}."
        )
    return [d for d in DOMAINS if d in wanted]


def _isolated(domain: str, run_pass: Callable[[], PassResult]) -> PassResult:
    """Run one pass; a failure marks it degraded instead of ending the run."""
    try:
        return run_pass()
    except Exception as e:  # noqa: BLE001
        logger.error("The %s pass failed and was skipped: %s", domain, e)
        return PassResult(domain=domain, candidates=[], degraded=True, error=str(e))


def run_cleanup(
    config: CleanupConfig,
    *,
    metadata: MetadataStore,
    columnar_store: ColumnarStoreClient,
    file_store: FileStore,
    staging_db: StagingDatabaseClient,
    delete: bool = False,
    force: bool = False,
    only: Iterable[str] | None = None,
) -> CleanupReport:
    """
    Run one cleanup over the selected storage domains.

    Args:
        config: Resolved cleanup configuration.
        metadata: Metadata store adapter (read once).
        columnar_store: Columnar-store adapter.
        file_store: Filesystem adapter (job dirs and staging external data).
        staging_db: Staging database adapter.
        delete: Actually delete; otherwise only report candidates.
        force: Drop every staging table regardless of running jobs.
        only: Optional subset of domains to process.

    Returns:
        A CleanupReport with one PassResult per processed domain. A pass that
        fails while listing is recorded as degraded and the next pass runs.

    Raises:
        FatalSnapshotError: If live metadata cannot be read. Nothing is
            listed or deleted in that case.
        ValueError: If `only` names an unknown domain.
    """
    domains = select_domains(only)
    logger.info("delete option value: %s", delete)
    logger.info("force option value: %s", force)

    snapshot = read_snapshot(metadata)
    report = CleanupReport(delete=delete, force=force, snapshot=snapshot)

    if staging.DOMAIN in domains:
        report.passes.append(
            _isolated(
                staging.DOMAIN,
                lambda: staging.clean_staging_tables(
                    staging_db,
                    file_store,
                    snapshot,
                    database=config.staging_database,
                    root=config.working_dir,
                    delete=delete,
                    force=force,
                ),
            )
        )
    if paths.DOMAIN in domains:
        report.passes.append(
            _isolated(
                paths.DOMAIN,
                lambda: paths.clean_job_paths(
                    file_store, snapshot, root=config.working_dir, delete=delete
                ),
            )
        )
    if columnar.DOMAIN in domains:
        report.passes.append(
            _isolated(
                columnar.DOMAIN,
                lambda: columnar.clean_columnar_tables(
                    columnar_store,
                    snapshot,
                    deployment_identity=config.metadata_url_prefix,
                    delete=delete,
                    timeout_seconds=config.delete_timeout_seconds,
                ),
            )
        )

    if report.degraded:
        logger.warning("Cleanup finished with failures; see the results above.")
    return report
