"""Calc command for avgdown CLI.

Works out how many shares to buy to bring a losing position to a target
loss percentage.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from avgdown.cli.common import get_config, get_source, print_error, print_failure
from avgdown.engine.sizing import compute, validate_target
from avgdown.models import Failure, SizingResult

console = Console()


def _color(value: float) -> str:
    return "green" if value >= 0 else "red"


def format_result(result: SizingResult) -> str:
    """Render a sizing result as rich markup."""
    loss_color = _color(result.current_loss_amount)

    text = (
        "[bold]Current Position[/bold]\n\n"
        f"Current Price:   ${result.current_price:,.2f}\n"
        f"Average Cost:    ${result.average_cost:,.2f}\n"
        f"Shares:          {result.share_count:,.2f}\n"
        f"Current Loss:    [{loss_color}]${result.current_loss_amount:,.2f} "
        f"({result.current_loss_percent:.2f}%)[/{loss_color}]\n"
        f"{'─' * 30}\n"
        f"[bold]Target Loss:     -{result.target_loss_percent:g}%[/bold]\n"
    )

    if result.target_met:
        text += "Shares to Buy:   [green]Already at or below target![/green]"
        return text

    new_color = _color(result.new_loss_percent)
    text += (
        f"Shares to Buy:   [bold yellow]{result.shares_to_buy}[/bold yellow]"
        f" [dim](${result.purchase_cost:,.2f})[/dim]\n"
        f"{'─' * 30}\n"
        "[bold]After Purchase[/bold]\n\n"
        f"Total Shares:    {result.new_share_count:,.2f}\n"
        f"New Avg Cost:    ${result.new_average_cost:,.2f}\n"
        f"New Loss:        [{new_color}]{result.new_loss_percent:.2f}%[/{new_color}]"
    )
    return text


@click.command()
@click.option(
    "-p", "--page",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Saved stock detail page (HTML) to read the holding from.",
)
@click.option(
    "-j", "--json", "json_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with currentPrice, avgCost and numShares.",
)
@click.option("--price", type=float, help="Current price per share.")
@click.option("--avg-cost", type=float, help="Average cost per share.")
@click.option("--shares", type=float, help="Shares currently held.")
@click.option(
    "-t", "--target",
    type=float,
    help="Target loss percentage after buying (default: saved preference).",
)
@click.option(
    "--save",
    is_flag=True,
    help="Save the target as the default for future runs.",
)
@click.pass_context
def calc(
    ctx: click.Context,
    page: Optional[Path],
    json_path: Optional[Path],
    price: Optional[float],
    avg_cost: Optional[float],
    shares: Optional[float],
    target: Optional[float],
    save: bool,
) -> None:
    """Calculate shares to buy to reach a target loss.

    Reads the holding from a saved page, a JSON file, or the
    --price/--avg-cost/--shares options, and shows how many shares to
    buy at the current price so the position sits at the target loss.

    \b
    Examples:
      avgdown calc --page AAPL.html --target 20
      avgdown calc --price 50 --avg-cost 100 --shares 10 -t 20
      avgdown calc -j holding.json -t 15 --save
    """
    from avgdown.config import ConfigError, get_preference, save_preference
    from avgdown.sources.base import SourceError

    manual = {"current_price": price, "average_cost": avg_cost, "share_count": shares}
    has_manual = any(value is not None for value in manual.values())

    if has_manual and (page or json_path):
        raise click.UsageError("Use either a source file or --price/--avg-cost/--shares.")

    if target is None:
        target = get_preference("target_loss", get_config(ctx))

    failure = validate_target(target)
    if failure is not None:
        print_failure(failure)

    try:
        source = get_source(page, json_path)
        if source is not None:
            holding_data = source.get_holding_data()
        elif has_manual:
            holding_data = manual
        else:
            raise click.UsageError(
                "Provide --page, --json, or --price/--avg-cost/--shares."
            )
    except SourceError as e:
        print_error(str(e), title="Source Error")
        raise SystemExit(1)

    if save:
        try:
            path = save_preference("target_loss", target)
        except ConfigError as e:
            print_error(str(e), title="Config Error")
            raise SystemExit(1)
        console.print(f"[dim]Saved target loss {target:g}% to {path}[/dim]")

    result = compute(holding_data, target)
    if isinstance(result, Failure):
        print_failure(result)

    console.print(Panel(
        format_result(result),
        title="[bold cyan]Average Down[/bold cyan]",
        border_style="cyan",
    ))
