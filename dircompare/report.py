from __future__ import annotations

import csv
from collections import Counter
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from dircompare.models import Difference, Status


ABSENT = "Missing"
CSV_HEADER = ("Path", "Size A", "Size B", "Modified A", "Modified B", "Reason", "Status")
STATUS_STYLES = {
    Status.MISSING_IN_A: "cyan",
    Status.MISSING_IN_B: "yellow",
    Status.DIFFERENT: "red",
}


def format_size(size: int | None) -> str:
    return ABSENT if size is None else str(size)


def format_mtime(mtime_ns: int | None) -> str:
    if mtime_ns is None:
        return ABSENT
    # Nanosecond fraction kept: Date differences are decided on exact st_mtime_ns.
    seconds, fraction = divmod(mtime_ns, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds).isoformat(sep=" ", timespec="seconds")
    return f"{stamp}.{fraction:09d}"


def display_path(path: str) -> str:
    """Show undecodable file-name bytes as backslash escapes."""
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def difference_row(difference: Difference) -> tuple[str, ...]:
    return (
        difference.path,
        format_size(difference.size_a),
        format_size(difference.size_b),
        format_mtime(difference.mtime_a_ns),
        format_mtime(difference.mtime_b_ns),
        difference.reason.value,
        difference.status.value,
    )


def summarize(differences: list[Difference]) -> dict[Status, int]:
    """Count differences per status, in status order, omitting zero counts."""
    counts = Counter(difference.status for difference in differences)
    return {status: counts[status] for status in sorted(counts, key=lambda s: s.value)}


def write_csv(differences: list[Difference], output_file: Path) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    # Undecodable file names come back as the original bytes.
    with output_file.open("w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(CSV_HEADER)
        for difference in differences:
            writer.writerow(difference_row(difference))
    return output_file


def render_table(console: Console, differences: list[Difference], *, title: str = "Differences") -> None:
    if not differences:
        return

    table = Table(title=title)
    table.add_column("Path")
    table.add_column("Size A", justify="right")
    table.add_column("Size B", justify="right")
    table.add_column("Modified A")
    table.add_column("Modified B")
    table.add_column("Reason")
    table.add_column("Status")

    for difference in differences:
        row = difference_row(difference)
        style = STATUS_STYLES[difference.status]
        table.add_row(Text(display_path(row[0])), *row[1:-1], Text(row[-1], style=style))

    console.print(table)


def render_summary(
    console: Console,
    differences: list[Difference],
    *,
    files_a: int,
    files_b: int,
) -> None:
    console.print(f"Scanned: {files_a} file(s) in A | {files_b} file(s) in B")
    counts = summarize(differences)
    if not counts:
        console.print("[green]No differences found.[/green]")
        return

    table = Table(title="Summary")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for status, count in counts.items():
        style = STATUS_STYLES[status]
        table.add_row(f"[{style}]{status.value}[/{style}]", str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{len(differences)}[/bold]")
    console.print(table)
