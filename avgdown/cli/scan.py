"""Scan command for avgdown CLI.

Scans portfolio positions for losses beyond a threshold.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from avgdown.cli.common import get_config, get_source, print_error, print_failure
from avgdown.engine.positions import scan_positions
from avgdown.engine.sizing import validate_target
from avgdown.models import Failure, ScanReport

console = Console()


def follow_up_command(ticker: str, threshold: float) -> str:
    """Command that sizes a purchase for a matched position."""
    return f"avgdown calc --page {ticker}.html --target {threshold:g}"


def build_table(report: ScanReport) -> Table:
    """Build the results table for matching positions, in input order."""
    table = Table(
        title=f"Positions beyond -{report.threshold_percent:g}% ({len(report.matches)} of {report.total})",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Ticker", style="bold")
    table.add_column("Change", justify="right")
    table.add_column("Shares", justify="right")
    table.add_column("Follow-up", style="cyan")

    for position in report.matches:
        table.add_row(
            escape(position.ticker),
            f"[red]{position.percent_change:.2f}%[/red]",
            f"{position.share_count:g}",
            escape(follow_up_command(position.ticker, report.threshold_percent)),
        )

    return table


@click.command()
@click.option(
    "-p", "--page",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Saved portfolio page (HTML) to scan.",
)
@click.option(
    "-j", "--json", "json_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with a list of positions.",
)
@click.option(
    "-t", "--threshold",
    type=float,
    help="Loss threshold percentage (default: saved preference).",
)
@click.option(
    "--save",
    is_flag=True,
    help="Save the threshold as the default for future scans.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    page: Optional[Path],
    json_path: Optional[Path],
    threshold: Optional[float],
    save: bool,
) -> None:
    """Scan positions for losses beyond a threshold.

    Lists every position whose percent change is below the negative
    threshold, in the order the source lists them. A position exactly at
    the threshold is not listed.

    \b
    Examples:
      avgdown scan --page portfolio.html              # Saved threshold
      avgdown scan --page portfolio.html -t 15        # Losses worse than -15%
      avgdown scan -j positions.json -t 20 --save
    """
    from avgdown.config import ConfigError, get_preference, save_preference
    from avgdown.sources.base import SourceError

    if threshold is None:
        threshold = get_preference("monitor_target_loss", get_config(ctx))

    failure = validate_target(threshold)
    if failure is not None:
        print_failure(failure)

    try:
        source = get_source(page, json_path)
        if source is None:
            raise click.UsageError("Provide --page or --json to scan.")
        entries = source.get_positions_data()
    except SourceError as e:
        print_error(str(e), title="Source Error")
        raise SystemExit(1)

    if save:
        try:
            path = save_preference("monitor_target_loss", threshold)
        except ConfigError as e:
            print_error(str(e), title="Config Error")
            raise SystemExit(1)
        console.print(f"[dim]Saved monitor threshold {threshold:g}% to {path}[/dim]")

    report = scan_positions(entries, threshold)
    if isinstance(report, Failure):
        print_failure(report)

    if report.skipped:
        console.print(
            f"[yellow]Skipped {len(report.skipped)} malformed "
            f"{'entry' if len(report.skipped) == 1 else 'entries'}.[/yellow]"
        )

    if not report.matches:
        console.print(Panel(
            "✅ No positions found exceeding your target loss!\n\n"
            f"[dim]{report.total} positions scanned.[/dim]",
            title="[bold]No Results[/bold]",
            border_style="green",
        ))
        return

    console.print(build_table(report))
    console.print(
        "\n[dim]Save each position's stock page as <TICKER>.html and run its "
        "follow-up command to size a purchase.[/dim]"
    )
