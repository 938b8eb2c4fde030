"""award-pairs CLI - find bookable award round trips for a points balance."""

import asyncio
import json
import logging
from datetime import date
from typing import Annotated, Optional

import typer

from .budget import CARD_MULTIPLIER, card_multiplier, miles_from_points
from .cache import SummaryCache
from .config import get_settings
from .errors import AwardPairsError
from .formatter import (
    cards_to_csv,
    console,
    format_miles,
    print_cards,
    print_options,
    print_result_json,
    result_to_dict,
)
from .narrative import NarrativeGenerator
from .providers import SeatsClient
from .resolver import DestinationResolver
from .search import (
    OptionsRequest,
    find_date_pair_cards,
    find_reachable_options,
    month_to_date_range,
)

app = typer.Typer(
    name="award-pairs",
    help="✈ Find which award round trips your points can actually book",
    rich_markup_mode="rich",
)

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _seats_client() -> SeatsClient:
    settings = get_settings()
    return SeatsClient(
        api_key=settings.seats_api_key,
        base_url=settings.seats_base_url,
        timeout=settings.http_timeout,
    )


def _fail(err: AwardPairsError) -> None:
    console.print(f"[red]{err.message}[/red]")
    if err.detail:
        console.print(f"[dim]{err.detail}[/dim]")
    raise typer.Exit(1)


def _check_cabin(cabin: str) -> str:
    cabin = cabin.lower()
    if cabin not in ("economy", "business"):
        console.print("[red]Invalid cabin. Choose: economy, business[/red]")
        raise typer.Exit(1)
    return cabin


@app.command()
def pairs(
    origin: Annotated[str, typer.Argument(help="Origin airport code (e.g. BLR)")],
    destination: Annotated[str, typer.Argument(help="Destination airport code (e.g. BKK)")],
    month: Annotated[Optional[str], typer.Argument(help="Travel month, e.g. 2026-02 or 'February 2026'")] = None,
    start: Annotated[Optional[str], typer.Option(help="Start date (YYYY-MM-DD), instead of a month")] = None,
    end: Annotated[Optional[str], typer.Option(help="End date (YYYY-MM-DD), instead of a month")] = None,
    min_nights: Annotated[int, typer.Option("--min-nights", help="Shortest stay")] = 3,
    max_nights: Annotated[int, typer.Option("--max-nights", help="Longest stay")] = 10,
    cabin: Annotated[str, typer.Option("--class", "-c", help="Preferred cabin: economy, business")] = "economy",
    budget: Annotated[Optional[int], typer.Option("--budget", "-b", help="Max partner miles per leg")] = None,
    points: Annotated[Optional[float], typer.Option("--points", help="Card points balance (needs --card)")] = None,
    card: Annotated[Optional[str], typer.Option("--card", help="Card display name (see `award-pairs cards`)")] = None,
    output: Annotated[Optional[str], typer.Option("-o", help="Output file path (.json or .csv)")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
):
    """
    📅 Find up to five round-trip date pairs with award space both ways.

    Examples:

      award-pairs pairs BLR BKK 2026-02

      award-pairs pairs DEL LHR "March 2026" --class business --min-nights 5 --max-nights 14

      award-pairs pairs BOM SIN 2026-02 --points 200000 --card "Magnus Credit Card (Standard)"
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    cabin = _check_cabin(cabin)

    try:
        if start and end:
            start_date = date.fromisoformat(start)
            end_date = date.fromisoformat(end)
        else:
            start_date, end_date = month_to_date_range(month)
    except ValueError:
        console.print("[red]Invalid date. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(1)
    except AwardPairsError as e:
        _fail(e)

    if points is not None:
        if not card:
            console.print("[red]--points needs --card to convert points to miles[/red]")
            raise typer.Exit(1)
        budget = miles_from_points(points, card_multiplier(card))
        console.print(f"[dim]Budget: {format_miles(budget)} partner miles per leg[/dim]")

    async def run():
        async with _seats_client() as seats:
            return await find_date_pair_cards(
                seats, origin, destination, start_date, end_date,
                min_nights=min_nights, max_nights=max_nights,
                cabin_pref=cabin, budget_miles=budget,
            )

    console.print(f"[dim]Searching {origin.upper()} ⇄ {destination.upper()} {start_date} → {end_date}...[/dim]")
    try:
        result = asyncio.run(run())
    except AwardPairsError as e:
        _fail(e)

    if output:
        if output.endswith(".csv"):
            with open(output, "w") as fp:
                fp.write(cards_to_csv(result.cards))
            console.print(f"[green]Results saved to {output} (CSV)[/green]")
        else:
            with open(output, "w") as fp:
                json.dump(result_to_dict(result), fp, indent=2, ensure_ascii=False)
            console.print(f"[green]Results saved to {output} (JSON)[/green]")
    elif as_json:
        print_result_json(result)
    else:
        print_cards(result)


@app.command()
def options(
    points: Annotated[float, typer.Argument(help="Card points balance")],
    origin: Annotated[str, typer.Argument(help="Origin city or airport (e.g. Delhi, BLR)")],
    destination: Annotated[str, typer.Argument(help="Destination: city, country, region or airport")],
    month: Annotated[str, typer.Argument(help="Travel month, e.g. 2026-02")],
    card: Annotated[str, typer.Option("--card", help="Card display name (see `award-pairs cards`)")] = "Magnus Credit Card (Standard)",
    cabin: Annotated[str, typer.Option("--class", "-c", help="Economy, Business, Premium Economy, First")] = "Economy",
    direct: Annotated[bool, typer.Option("--direct", help="Only non-stop availability")] = False,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Trip length for the summaries")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
):
    """
    🌍 List one-way redemptions your points can reach in a month.

    Examples:

      award-pairs options 500000 Delhi "Southeast Asia" 2026-02

      award-pairs options 120000 BLR Japan "March 2026" --card "Reserve Credit Card" --class Business
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = get_settings()
    request = OptionsRequest(
        points=points,
        origin=origin,
        destination=destination,
        travel_month=month,
        cabin=cabin.title(),
        card_name=card,
        only_direct=direct,
        trip_duration=days,
    )

    async def run():
        resolver = DestinationResolver.from_api_key(settings.openai_api_key, settings.openai_model)
        narrator = NarrativeGenerator.from_api_key(settings.openai_api_key, SummaryCache(), settings.openai_model)
        async with _seats_client() as seats:
            return await find_reachable_options(seats, request, resolver, narrator)

    try:
        result = asyncio.run(run())
    except AwardPairsError as e:
        _fail(e)

    if as_json:
        print_result_json(result)
    else:
        print_options(result)


@app.command()
def trips(
    availability_id: Annotated[str, typer.Argument(help="seats.aero availability ID")],
):
    """🔎 Dump the raw flight-level trips behind one availability ID."""
    async def run():
        async with _seats_client() as seats:
            return await seats.get_trips(availability_id)

    try:
        data = asyncio.run(run())
    except AwardPairsError as e:
        _fail(e)
    print(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def summary(
    destination: Annotated[str, typer.Argument(help="Destination name (e.g. Bangkok)")],
    nights: Annotated[int, typer.Option("--nights", "-n", help="Trip length")] = 3,
):
    """📝 Generate a short trip summary for a destination."""
    settings = get_settings()
    narrator = NarrativeGenerator.from_api_key(settings.openai_api_key, SummaryCache(), settings.openai_model)
    bullets = asyncio.run(narrator.generate(destination, nights))
    console.print(f"\n[bold]{destination}[/bold] ({nights} nights)")
    for line in bullets:
        console.print(f"  • {line}")


@app.command()
def cards():
    """💳 List supported cards and their points-to-miles multipliers."""
    from rich.table import Table
    from rich import box as rich_box

    table = Table(box=rich_box.ROUNDED, header_style="bold cyan")
    table.add_column("Card")
    table.add_column("Multiplier", justify="right")
    for name, multiplier in sorted(CARD_MULTIPLIER.items(), key=lambda kv: (-kv[1], kv[0])):
        table.add_row(name, f"{multiplier:g}")
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
