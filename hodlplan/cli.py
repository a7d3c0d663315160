"""
Command-Line Interface for HodlPlan.

Purpose
-------
Provides a CLI for computing withdrawal plans from request files, listing
the available payout strategies, and validating request files without
writing Python code.

Commands
--------
- plan: Compute and display a withdrawal plan from a request file
- strategies: List payout strategies and their defaults
- periods: Count withdrawal periods until a target date
- config validate: Validate a request file

Example Usage
-------------
    # Compute a plan, overriding the reference instant for reproducibility
    $ hodlplan plan --config plan.json --now 2024-01-01T00:00:00

    # Try another strategy on the same request and save the result
    $ hodlplan plan -c plan.json --strategy declining -o results/declining.json

    # Validate a request file
    $ hodlplan config validate plan.json

    # Show version
    $ hodlplan --version
"""

from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import AppSettings
from .constants import STRATEGY_IDS
from .exceptions import HodlPlanError, TimeIndexError
from .log_config import setup as setup_logging
from .periods import periods_until, to_datetime
from .utils import format_currency, format_quantity

# Version
__version__ = "0.1.0"


def _parse_now(value: Optional[str]):
    if value is None:
        return None
    parsed = to_datetime(value)
    if parsed is None:
        raise TimeIndexError(f"Could not parse reference instant {value!r}")
    return parsed


@click.group()
@click.version_option(version=__version__, prog_name="hodlplan")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, quiet: bool, verbose: bool) -> None:
    """
    HodlPlan - Withdrawal planner for a volatile asset.

    Plans periodic withdrawals of a fixed asset quantity until a target date
    under one of eight payout strategies, valued at the current price and at
    a projected price.

    Use 'hodlplan COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    setup_logging(settings.effective_log_level, verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["settings"] = settings
    ctx.obj["console"] = Console()


@main.command()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to plan request file (JSON)"
)
@click.option(
    "--strategy",
    type=click.Choice(STRATEGY_IDS),
    default=None,
    help="Override the request's strategy (uses that strategy's defaults)"
)
@click.option(
    "--now",
    type=str,
    default=None,
    help="Reference instant, ISO-8601 (default: request value or current time)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Save the plan result to this JSON file"
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the plan result as JSON instead of a table"
)
@click.pass_context
def plan(
    ctx: click.Context,
    config: Path,
    strategy: Optional[str],
    now: Optional[str],
    output: Optional[Path],
    as_json: bool,
) -> None:
    """
    Compute a withdrawal plan.

    Loads a plan request, runs the selected strategy and shows the dated
    schedule with its valuations.

    Example:
        hodlplan plan -c plan.json --strategy milestone
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .plan import compute_withdraw_plan
    from .serialization import load_request, result_to_dict, save_result

    try:
        request = load_request(config)
        reference = _parse_now(now)
    except HodlPlanError as e:
        click.echo(f"Error loading request: {e}", err=True)
        sys.exit(1)

    if strategy is not None and strategy != request.strategy:
        request = dataclasses.replace(request, strategy=strategy, strategy_config=None)
    if reference is not None:
        request = dataclasses.replace(request, reference_instant=reference)

    result = compute_withdraw_plan(request)

    if as_json:
        click.echo(json.dumps(result_to_dict(result), indent=2))
    elif quiet:
        click.echo(f"Periods: {result.periods}")
        click.echo(f"Total quantity: {format_quantity(result.totals.quantity)}")
        click.echo(f"Valid: {result.is_valid}")
    else:
        _render_plan(console, result)

    if output:
        save_result(result, output)
        if not quiet and not as_json:
            click.echo(f"Result saved to {output}")


def _render_plan(console: Console, result) -> None:
    if not result.is_valid:
        console.print(Panel(
            f"No plan possible.\n"
            f"Periods: {result.periods}\n"
            f"Withdrawable: {format_quantity(result.withdrawable)}",
            title="Withdrawal Plan",
            border_style="red",
        ))
        return

    table = Table(title=f"Withdrawal Plan ({result.strategy}, {result.cadence})", show_header=True)
    table.add_column("Period", style="cyan")
    table.add_column("Date")
    table.add_column("Quantity", justify="right")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Projected", style="magenta", justify="right")
    table.add_column("Remaining", justify="right")

    for event in result.schedule:
        table.add_row(
            event.label,
            event.date.isoformat(),
            format_quantity(event.quantity),
            format_currency(event.actual_value),
            format_currency(event.projected_value),
            format_quantity(event.remaining_quantity),
        )
    console.print(table)

    summary = Table(title="Summary", show_header=True)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Quantity", justify="right")
    summary.add_column("Value", style="green", justify="right")
    summary.add_column("Projected", style="magenta", justify="right")
    for name, amounts in (
        ("Total", result.totals),
        ("Per period", result.per_period_average),
        ("Per month", result.monthly_normalized_average),
    ):
        summary.add_row(
            name,
            format_quantity(amounts.quantity),
            format_currency(amounts.actual_value),
            format_currency(amounts.projected_value),
        )
    console.print(summary)

    console.print(f"Withdrawable: {format_quantity(result.withdrawable)} over {result.periods} periods")
    if result.monthly_target_coverage is not None:
        console.print(f"Monthly target coverage: {result.monthly_target_coverage * 100:.1f}%")


@main.command()
@click.pass_context
def strategies(ctx: click.Context) -> None:
    """
    List the available payout strategies.

    Shows each strategy's identifier, label, description and defaults.
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)
    settings = ctx.obj.get("settings")

    from .strategies import STRATEGY_DEFINITIONS

    if quiet:
        for definition in STRATEGY_DEFINITIONS:
            click.echo(definition.id)
        return

    table = Table(title="Payout Strategies", show_header=True)
    table.add_column("Id", style="cyan")
    table.add_column("Label")
    table.add_column("Description")
    table.add_column("Defaults", style="green")

    for definition in STRATEGY_DEFINITIONS:
        defaults = ", ".join(f"{k}={v}" for k, v in definition.defaults.items()) or "-"
        marker = " *" if definition.id == settings.default_strategy else ""
        table.add_row(definition.id + marker, definition.label, definition.description, defaults)

    console.print(table)


@main.command()
@click.argument("target_date", type=str)
@click.option(
    "--cadence",
    type=click.Choice(["weekly", "monthly"]),
    default=None,
    help="Withdrawal cadence (default: HODLPLAN_DEFAULT_CADENCE or monthly)"
)
@click.option("--now", type=str, default=None, help="Reference instant, ISO-8601")
@click.pass_context
def periods(ctx: click.Context, target_date: str, cadence: Optional[str], now: Optional[str]) -> None:
    """
    Count withdrawal periods until TARGET_DATE.

    Example:
        hodlplan periods 2025-12-31 --cadence weekly
    """
    settings = ctx.obj.get("settings")
    try:
        reference = _parse_now(now)
    except TimeIndexError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    count = periods_until(target_date, cadence or settings.default_cadence, reference)
    click.echo(str(count))


@main.group()
def config() -> None:
    """
    Request file commands.

    Validate plan request files.
    """
    pass


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, config_file: Path) -> None:
    """
    Validate a plan request file.

    Checks that the file is valid JSON and conforms to the request schema.

    Example:
        hodlplan config validate plan.json
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .serialization import load_request

    try:
        request = load_request(config_file)
    except HodlPlanError as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    if quiet:
        click.echo("Configuration is valid")
        return

    info = (
        "[bold]Plan Request Valid[/bold]\n\n"
        f"[cyan]Strategy:[/cyan] {request.strategy}\n"
        f"[cyan]Cadence:[/cyan] {request.cadence}\n"
        f"[cyan]Target date:[/cyan] {request.target_date}\n"
        f"[cyan]Withdrawable:[/cyan] {format_quantity(request.withdrawable)}\n"
    )
    console.print(Panel(info, title="Configuration Summary", border_style="green"))


if __name__ == "__main__":
    main()
