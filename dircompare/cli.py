from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from dircompare.compare_service import compare
from dircompare.compare_ui import CompareProgressUI
from dircompare.config import DirCompareConfig, config_path, load_config, save_config
from dircompare.report import render_summary, render_table, write_csv
from dircompare.scanner import InventoryError, build_inventories, validate_root


EXIT_OK = 0
EXIT_PRECONDITION = 1
EXIT_TRAVERSAL = 2
EXIT_DIFFERENCES = 3
EXIT_INTERRUPTED = 130

app = typer.Typer(help="Compare two folder trees by size, modification time and checksum.")
console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
) -> None:
    """Compare two folder trees by size, modification time and checksum."""
    _configure_logging(verbose)


def _run_compare(
    folder_a: Path,
    folder_b: Path,
    *,
    config_file: Path | None,
    overrides: dict[str, object],
    output_file: Path | None,
    show_progress: bool,
    fail_on_diff: bool,
) -> int:
    try:
        config = load_config(config_file).with_overrides(**overrides)
        options = config.to_options()
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return EXIT_PRECONDITION

    try:
        root_a = validate_root(folder_a)
        root_b = validate_root(folder_b)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return EXIT_PRECONDITION

    console.print(f"Comparing [bold]{escape(str(root_a))}[/bold] with [bold]{escape(str(root_b))}[/bold] ...")
    started = time.perf_counter()
    try:
        inventory_a, inventory_b = build_inventories(
            root_a,
            root_b,
            path_filter=config.path_filter,
            console=console,
        )
        if show_progress and inventory_a:
            with CompareProgressUI(console) as progress:
                differences = compare(inventory_a, inventory_b, options, on_progress=progress.update)
        else:
            differences = compare(inventory_a, inventory_b, options)
    except InventoryError as exc:
        console.print(f"[red]Scan failed:[/red] {escape(str(exc))}")
        return EXIT_TRAVERSAL
    except KeyboardInterrupt:
        console.print("[yellow]Comparison interrupted.[/yellow] No report was produced.")
        return EXIT_INTERRUPTED
    logger.debug("Comparison finished in %.2fs", time.perf_counter() - started)

    if output_file is not None:
        try:
            written = write_csv(differences, output_file)
        except OSError as exc:
            console.print(f"[red]Cannot write report:[/red] {escape(str(exc))}")
            return EXIT_PRECONDITION
        console.print(f"Report written to [bold]{escape(str(written))}[/bold]")
    else:
        render_table(console, differences)

    render_summary(console, differences, files_a=len(inventory_a), files_b=len(inventory_b))
    if fail_on_diff and differences:
        return EXIT_DIFFERENCES
    return EXIT_OK


@app.command("compare")
def compare_folders(
    folder_a: Path = typer.Argument(..., help="Reference folder (side A)."),
    folder_b: Path = typer.Argument(..., help="Folder compared against A (side B)."),
    check_content: bool | None = typer.Option(
        None,
        "--check-content/--no-check-content",
        help="Checksum files whose size and modification time already match.",
    ),
    include_missing_from_a: bool | None = typer.Option(
        None,
        "--include-missing-from-a/--no-include-missing-from-a",
        help="Also report files that only exist in B.",
    ),
    hash_algorithm: str | None = typer.Option(
        None,
        "--hash-algorithm",
        help="Checksum used by --check-content: md5 (default) or sha256.",
    ),
    time_tolerance: float | None = typer.Option(
        None,
        "--time-tolerance",
        help="Seconds two modification times may differ and still match. Default 0 (exact).",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        help="Threads used to checksum files. 1 disables parallel hashing.",
    ),
    include: list[str] | None = typer.Option(
        None,
        "--include",
        help="Include glob pattern(s) for relative paths to compare (repeatable).",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        help="Exclude glob pattern(s) for relative paths to skip (repeatable).",
    ),
    output_file: Path | None = typer.Option(
        None,
        "--output-file",
        "-o",
        help="Write the differences to this CSV file instead of printing a table.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        help="JSON config file. Defaults to ./.dircompare.json when present.",
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show a progress bar."),
    fail_on_diff: bool = typer.Option(
        False,
        "--fail-on-diff",
        help=f"Exit with code {EXIT_DIFFERENCES} when any difference is found.",
    ),
) -> None:
    """Report files missing from either side or differing in size, date or content."""
    overrides = {
        "check_content": check_content,
        "include_missing_from_a": include_missing_from_a,
        "hash_algorithm": hash_algorithm,
        "time_tolerance": time_tolerance,
        "workers": workers,
        "include": list(include) if include else None,
        "exclude": list(exclude) if exclude else None,
    }
    raise typer.Exit(
        code=_run_compare(
            folder_a,
            folder_b,
            config_file=config_file,
            overrides=overrides,
            output_file=output_file,
            show_progress=progress,
            fail_on_diff=fail_on_diff,
        )
    )


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file."),
) -> None:
    """Write a default .dircompare.json in the current directory."""
    root = Path.cwd().resolve()
    path = config_path(root)
    if path.exists() and not force:
        console.print(f"[red]Config already exists: {escape(str(path))}[/red] Use --force to overwrite.")
        raise typer.Exit(code=EXIT_PRECONDITION)
    save_config(DirCompareConfig(), root)
    console.print(f"[green]Wrote default config[/green] to {escape(str(path))}")
