"""Output formatting for date-pair cards and redemption options."""

import csv
import dataclasses
import io
import json
from datetime import date
from typing import Any, Optional

from rich.console import Console
from rich.table import Table
from rich import box
from rich.text import Text

from .models import Card, OptionSearchResult, PairSearchResult, TripSummary, cabin_display

console = Console()

CABIN_STYLES = {
    "economy": "green",
    "business": "yellow",
}

CAPABILITY_STYLES = {
    "LIVE_RELIABLE": "green",
    "LIMITED_RELIABLE": "yellow",
}


def format_miles(miles: Optional[float]) -> str:
    """Format miles/points with comma separator."""
    if miles is None:
        return "–"
    return f"{miles:,.0f}"


def format_time(iso: str) -> str:
    """'2026-02-03T09:15:00Z' -> '02-03 09:15'."""
    if len(iso) >= 16:
        return f"{iso[5:10]} {iso[11:16]}"
    return iso or "–"


def format_stops(stops: Optional[int]) -> Text:
    if stops is None:
        return Text("?", style="dim")
    if stops == 0:
        return Text("Direct", style="green")
    return Text(f"{stops} stop{'s' if stops != 1 else ''}", style="yellow" if stops == 1 else "red")


def _leg_cells(summary: Optional[TripSummary]) -> list:
    if summary is None:
        return [Text("no matching itinerary", style="dim"), "", "", "", ""]
    return [
        summary.flight_numbers or "–",
        f"{summary.origin}→{summary.destination}",
        f"{format_time(summary.departs_at)} → {format_time(summary.arrives_at)}",
        format_stops(summary.stops),
        format_miles(summary.mileage_cost),
    ]


def print_cards(result: PairSearchResult) -> None:
    """Print date-pair cards as a rich table, one row per leg."""
    if not result.cards:
        console.print(
            f"[dim]{result.message or 'No date pairs found.'}[/dim]"
        )
        return

    title = (
        f"✈  {result.origin} ⇄ {result.destination}  |  "
        f"{result.start_date} → {result.end_date}  |  "
        f"{result.min_nights}–{result.max_nights} nights"
    )
    console.print(f"\n[bold blue]{title}[/bold blue]")

    table = Table(
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        show_lines=True,
        pad_edge=True,
    )
    table.add_column("Dates", no_wrap=True)
    table.add_column("Nights", justify="right")
    table.add_column("Cabin", justify="center")
    table.add_column("Flight", no_wrap=True)
    table.add_column("Route", no_wrap=True)
    table.add_column("Times", no_wrap=True)
    table.add_column("Stops", justify="center")
    table.add_column("Miles", justify="right")
    table.add_column("Total", justify="right", style="bold")

    for card in result.cards:
        cabin_label = cabin_display(card.cabin) + (" *" if card.was_fallback else "")
        cabin_text = Text(cabin_label, style=CABIN_STYLES.get(card.cabin, "white"))
        table.add_row(
            f"{card.depart_date:%b %d} → {card.return_date:%b %d}",
            str(card.nights),
            cabin_text,
            *_leg_cells(card.outbound_summary),
            format_miles(card.total_points),
        )
        table.add_row("", "", "", *_leg_cells(card.return_summary), "")

    console.print(table)
    if any(c.was_fallback for c in result.cards):
        console.print("[dim]* preferred cabin had no return space; other cabin used[/dim]")
    total = len(result.cards)
    console.print(f"[dim]{total} date pair{'s' if total != 1 else ''} found.[/dim]\n")


def print_options(result: OptionSearchResult) -> None:
    """Print single-direction redemption options."""
    console.print(
        f"\n[bold blue]✈  {result.origin_airport} → {result.destination_airport}  |  "
        f"{result.start_date:%B %Y}[/bold blue]"
    )
    console.print(
        f"[dim]{format_miles(result.points)} points × {result.multiplier} "
        f"= {format_miles(result.partner_miles)} partner miles ({result.card_name})[/dim]"
    )

    if not result.options:
        console.print("[dim]No redemptions fit this budget.[/dim]")
        return

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold cyan")
    table.add_column("Destination")
    table.add_column("Date", no_wrap=True)
    table.add_column("Program")
    table.add_column("Cabin", justify="center")
    table.add_column("Stops", justify="center")
    table.add_column("Miles", justify="right")
    table.add_column("Points", justify="right", style="bold")

    for opt in result.options:
        program = Text(opt.program, style=CAPABILITY_STYLES.get(opt.capability, "white"))
        table.add_row(
            opt.destination_name or opt.destination or "–",
            str(opt.date) if opt.date else "–",
            program,
            opt.cabin,
            format_stops(opt.stops),
            format_miles(opt.mileage_cost),
            format_miles(opt.points_required),
        )
    console.print(table)

    disclaimers = {o.program: o.disclaimer for o in result.options if o.disclaimer}
    for program, text in disclaimers.items():
        console.print(f"[yellow]⚠ {program}: {text}[/yellow]")

    shown = set()
    for opt in result.options:
        key = opt.destination_name or opt.destination
        if key in shown or not opt.trip_summary:
            continue
        shown.add(key)
        console.print(f"\n[bold]{key}[/bold]")
        for line in opt.trip_summary:
            console.print(f"  • {line}")


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def result_to_dict(result: Any) -> dict:
    """Plain-JSON view of a PairSearchResult or OptionSearchResult."""
    return _jsonable(dataclasses.asdict(result))


def print_result_json(result: Any) -> None:
    print(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))


def cards_to_csv(cards: list[Card]) -> str:
    """Convert cards to CSV, one row per leg."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "depart_date", "return_date", "nights", "cabin", "fallback", "leg",
        "flight_numbers", "origin", "destination", "departs_at", "arrives_at",
        "stops", "program", "miles", "total_points",
    ])

    for card in cards:
        for leg, summary in (("outbound", card.outbound_summary), ("return", card.return_summary)):
            writer.writerow([
                card.depart_date.isoformat(),
                card.return_date.isoformat(),
                card.nights,
                card.cabin,
                card.was_fallback,
                leg,
                summary.flight_numbers if summary else "",
                summary.origin if summary else "",
                summary.destination if summary else "",
                summary.departs_at if summary else "",
                summary.arrives_at if summary else "",
                summary.stops if summary else "",
                summary.program_name if summary else "",
                summary.mileage_cost if summary else "",
                card.total_points,
            ])

    return output.getvalue()
