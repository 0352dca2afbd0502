"""Commands for reporting and deleting unused warehouse storage."""

from __future__ import annotations

import typer

from storagegc.cli.common.context import build_cleanup_context, build_snapshot_context
from storagegc.cli.common.exits import die, exit_from_exc, ok_exit
from storagegc.cli.common.options import (
    DeleteOpt,
    ForceOpt,
    OnlyOpt,
    ProfileOpt,
    YesOpt,
)
from storagegc.cli.common.output import out
from storagegc.core.errors import FatalSnapshotError
from storagegc.core.reconcile import CleanupReport, run_cleanup, select_domains
from storagegc.core.snapshot import read_snapshot


def _print_report(report: CleanupReport) -> None:
    """Print candidate blocks (report mode) or result tables (delete mode)."""
    for p in report.passes:
        if p.error:
            out.error(f"{p.domain}: pass skipped: {p.error}")
            continue
        if not report.delete:
            out.candidates_block(p.domain, p.candidates)
            continue
        if p.results:
            out.delete_results_table(p.results, title=f"{p.domain} delete results")
        else:
            out.info(f"{p.domain}: nothing to delete")
        if p.degraded:
            out.error(f"{p.domain}: batch drop failed; external paths were kept.")


def cleanup(
    profile: str | None = ProfileOpt,
    delete: bool = DeleteOpt,
    force: bool = ForceOpt,
    yes: bool = YesOpt,
    only: list[str] = OnlyOpt,
):
    """
    Find storage no longer referenced by live metadata; delete it with --delete.
    """
    try:
        domains = select_domains(only)
    except ValueError as exc:
        die(str(exc), code=2)
    appctx = build_cleanup_context(profile, delete=delete, domains=domains)

    if force:
        out.warn("FORCE: every intermediate staging table will be dropped.")
    if delete and not yes:
        if not out.confirm("Delete unreferenced storage in the selected backends?"):
            ok_exit("Cancelled.")

    status_msg = "Deleting unused storage..." if delete else "Scanning storage..."
    try:
        with out.status(status_msg):
            report = run_cleanup(
                appctx.config,
                metadata=appctx.metadata,
                columnar_store=appctx.columnar_store,
                file_store=appctx.file_store,
                staging_db=appctx.staging_db,
                delete=delete,
                force=force,
                only=domains,
            )
    except FatalSnapshotError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    _print_report(report)

    total = sum(len(p.candidates) for p in report.passes)
    if not delete:
        out.success(f"Report complete: {total} artifact(s) would be deleted.")
    elif report.degraded:
        out.warn(f"Cleanup finished with failures ({total} candidate(s)).")
    else:
        out.success(f"Cleanup complete: {total} artifact(s) processed.")


def snapshot(profile: str | None = ProfileOpt):
    """Show the live jobs and segments that protect storage from cleanup."""
    appctx = build_snapshot_context(profile)

    try:
        with out.status("Loading metadata..."):
            snap = read_snapshot(appctx.metadata)
    except FatalSnapshotError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    working = snap.working_jobs()
    out.header("Metadata snapshot")
    out.kv(
        {
            "Jobs": len(snap.jobs),
            "Working jobs": len(working),
            "Cubes": len(snap.cubes),
            "Segments": sum(len(c.segments) for c in snap.cubes),
        }
    )
    if working:
        out.jobs_table(working, title="Working jobs")
    if any(c.segments for c in snap.cubes):
        out.segments_table(snap.cubes, title="Segments")
    if not working and not snap.cubes:
        typer.echo("Nothing is protected: no working jobs and no cubes.")
