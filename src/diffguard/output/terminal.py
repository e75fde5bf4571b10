"""Rich terminal reporter — classified findings table and run summary."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from diffguard.findings.models import AnnotationResult, Bucket, SplitResult

_BUCKET_STYLE = {
    Bucket.IN_DIFF_CURRENT: "bold white on red",
    Bucket.IN_DIFF_PREVIOUS: "bold black on yellow",
    Bucket.OUTSIDE_DIFF: "dim",
}

_BUCKET_LABEL = {
    Bucket.IN_DIFF_CURRENT: "NEW",
    Bucket.IN_DIFF_PREVIOUS: "PREVIOUS",
    Bucket.OUTSIDE_DIFF: "OUTSIDE",
}


def _bucket_pill(bucket: Bucket) -> Text:
    return Text(f" {_BUCKET_LABEL[bucket]} ", style=_BUCKET_STYLE[bucket])


def _add_rows(table: Table, split: SplitResult, kind: str) -> None:
    for item in split.current + split.previous + split.outside:
        table.add_row(
            _bucket_pill(item.bucket),
            kind,
            item.file,
            str(item.line),
            item.message,
        )


def render(
    result: AnnotationResult,
    *,
    dry_run: bool = False,
    console: Optional[Console] = None,
) -> None:
    """Print annotation results to the terminal using Rich."""
    console = console or Console(stderr=True)

    total = sum(
        len(s.current) + len(s.previous) + len(s.outside)
        for s in (result.errors, result.warnings)
    )
    if total == 0:
        console.print("[bold green]✅ No findings reported for this pull request.[/bold green]")
        return

    table = Table(
        title="diffguard findings",
        show_lines=True,
        title_style="bold",
        border_style="dim",
    )
    table.add_column("Status", justify="center", width=12)
    table.add_column("Kind", style="cyan")
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Message", min_width=20)

    _add_rows(table, result.errors, "error")
    _add_rows(table, result.warnings, "warning")
    console.print(table)

    verb = "Would post" if dry_run else "Posted"
    console.print()
    console.print(f"[dim]{verb} error comments:[/dim]      {result.new_comments}")
    console.print(f"[dim]{verb} suggestions:[/dim]         {result.new_suggestions}")
    console.print(f"[dim]Unaddressed from earlier:[/dim]  {result.unaddressed_comments}")
