"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from storagegc.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

BLOCK_TITLES = {
    "staging": "Intermediate Staging Tables To Be Dropped",
    "filesystem": "Job Paths To Be Deleted",
    "columnar": "Columnar Tables To Be Dropped",
}


def block_lines(title: str, items: Iterable[str]) -> list[str]:
    """Return a candidate list framed by dashed delimiter lines."""
    head = f"--------------- {title} ---------------"
    return [head, *items, "-" * len(head)]


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask for a y/n confirmation before a destructive action."""
        console.print("[meta]Use y/n then Enter[/]")
        prompt = questionary.confirm(
            f"[STORAGEGC] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def candidates_block(self, domain: str, candidates: Iterable[str]) -> None:
        """
        Print drop candidates of one domain as a plain delimited block.

        Printed without markup or wrapping so the block can be piped.
        """
        title = BLOCK_TITLES.get(domain, domain)
        for line in block_lines(title, candidates):
            console.print(line, markup=False, highlight=False, soft_wrap=True)

    def delete_results_table(self, results: Iterable[Any], title: str) -> None:
        """
        Render per-artifact deletion results.

        Expects objects with `.target`, `.deleted`, `.timed_out`, `.error`.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Target", style="ok")
        t.add_column("Deleted")
        t.add_column("Error", style="err")

        for r in results:
            deleted = "yes" if getattr(r, "deleted", False) else "no"
            err = str(getattr(r, "error", "") or "")
            if getattr(r, "timed_out", False):
                err = f"timeout: {err}"
            t.add_row(str(getattr(r, "target", "")), deleted, err)

        console.print(t)

    def jobs_table(self, jobs: Iterable[Any], title: str = "Jobs") -> None:
        """Expects objects with .id .state .segment_id (like storagegc.core.models.Job)"""
        t = Table(title=title, show_lines=False)
        t.add_column("Job ID", style="ok", no_wrap=True)
        t.add_column("State")
        t.add_column("Segment", style="meta")

        for j in jobs:
            state = getattr(j.state, "value", str(j.state))
            t.add_row(str(j.id), state, j.segment_id or "")

        console.print(t)

    def segments_table(self, cubes: Iterable[Any], title: str = "Segments") -> None:
        """Render one row per segment with its cube, storage table and last build job."""
        t = Table(title=title, show_lines=False)
        t.add_column("Cube", style="ok")
        t.add_column("Status", style="meta")
        t.add_column("Segment")
        t.add_column("Storage table")
        t.add_column("Last build job", style="meta")

        for cube in cubes:
            for seg in cube.segments:
                t.add_row(
                    cube.name,
                    str(cube.status or ""),
                    seg.name or seg.uuid,
                    seg.storage_location_identifier or "",
                    seg.last_build_job_id or "",
                )

        console.print(t)


out = Out()
