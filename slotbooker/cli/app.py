"""
Main CLI application using Typer.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..api.codec import decode_booking_request
from ..api.server import create_app
from ..bootstrap import build_service, configure_logging
from ..config import AppConfig, load_config
from ..domain.exceptions import ConfigurationError, RequestDecodeError
from ..domain.models import TimeSlot
from ..domain.outcomes import (
    Available,
    AvailabilityResult,
    Confirmed,
    Failed,
    InvalidRequest,
    MalformedRequest,
    NoSlots,
    Offered,
    Unavailable,
)
from ..services.booking import BookingService

app = typer.Typer(
    name="slotbooker",
    help="Offer and book demo slots against a Google Calendar",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use mock calendar data and skip Google credentials.")]
CountOption = Annotated[Optional[int], typer.Option("--count", "-n", min=1, help="Number of slots to offer")]


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        config = load_config(config_file)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    configure_logging(config.log_level)
    return config


def _service(config: AppConfig, mock: bool) -> BookingService:
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using test calendar data[/yellow]\n")
    try:
        return build_service(config, mock=mock)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _slot_table(title: str, slots: list[TimeSlot]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim")
    table.add_column("Slot", style="bold yellow")
    table.add_column("Start (ISO)", style="dim")

    for idx, slot in enumerate(slots, 1):
        table.add_row(str(idx), slot.label(), slot.start.to_iso8601_string())

    return table


def _render(result: AvailabilityResult) -> None:
    """Print an outcome and exit non-zero for errors."""
    console.print()

    if isinstance(result, Confirmed):
        logged = "" if result.record_logged else "\n[yellow]Booking log could not be updated.[/yellow]"
        console.print(Panel.fit(
            f"[bold green]✓ Booked {result.slot.label()}[/bold green]\n\n"
            f"[bold]Event:[/bold] {result.external_reference}\n"
            f"[bold]Link:[/bold] {result.link or 'N/A'}{logged}",
            title="✓ Confirmed"
        ))
        return

    if isinstance(result, Offered):
        console.print(_slot_table(f"{len(result.slots)} available slot(s)", result.slots))
        return

    if isinstance(result, Available):
        console.print(f"[bold green]✓ {result.slot.label()} is available.[/bold green]")
        return

    if isinstance(result, NoSlots):
        console.print(
            "[yellow]⚠ No available slots found.[/yellow]\n"
            "Try again later or widen the search horizon."
        )
        return

    if isinstance(result, Unavailable):
        console.print(f"[yellow]⚠ {result.slot.label()} is not available.[/yellow]")
    elif isinstance(result, InvalidRequest):
        console.print(f"[yellow]⚠ {result.message}[/yellow] ({result.reason})")
    elif isinstance(result, MalformedRequest):
        missing = f" Missing: {', '.join(result.missing)}" if result.missing else ""
        console.print(f"[bold red]Error:[/bold red] {result.message}.{missing}")
    elif isinstance(result, Failed):
        console.print(f"[bold red]Error:[/bold red] {result.message}")

    if result.alternatives:
        console.print(_slot_table("Alternatives", result.alternatives))

    if isinstance(result, (MalformedRequest, Failed)):
        raise typer.Exit(1)


@app.command()
def slots(
    count: CountOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the next available demo slots.

    Examples:

        slotbooker slots
        slotbooker slots --count 5 --mock
    """
    config = _load(config_file)
    _render(_service(config, mock).next_available(count))


@app.command()
def near(
    start_time: Annotated[str, typer.Argument(help="Preferred time, ISO 8601 (e.g. 2025-02-11T14:00)")],
    count: CountOption = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the free slots closest to a preferred time.
    """
    config = _load(config_file)
    _render(_service(config, mock).slots_near(start_time, count))


@app.command()
def check(
    start_time: Annotated[str, typer.Argument(help="Requested start, ISO 8601")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Check whether one slot can be booked.
    """
    config = _load(config_file)
    _render(_service(config, mock).check_availability(start_time))


@app.command()
def book(
    start_time: Annotated[str, typer.Argument(help="Requested start, ISO 8601")],
    full_name: Annotated[str, typer.Option("--name", help="Full name of the attendee")] = "",
    email: Annotated[str, typer.Option("--email", help="Attendee email")] = "",
    phone: Annotated[str, typer.Option("--phone", help="Attendee phone number")] = "",
    business_type: Annotated[str, typer.Option("--business-type", help="Kind of business")] = "",
    notes: Annotated[str, typer.Option("--notes", help="Free-form notes")] = "",
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Book a demo slot.

    Examples:

        slotbooker book 2025-02-11T14:00 --name "Ada Lovelace" --email ada@example.com --phone 555-0100 --mock
    """
    config = _load(config_file)
    service = _service(config, mock)

    try:
        request = decode_booking_request({
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "business_type": business_type,
            "notes": notes,
            "start_time": start_time,
        })
    except RequestDecodeError as e:
        _render(service.reject_malformed(e))
        return

    _render(service.book(request))


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "0.0.0.0",
    port: Annotated[int, typer.Option("--port", "-p", envvar="PORT", help="Port to listen on")] = 3000,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Run the HTTP server for the voice agent tools.
    """
    config = _load(config_file)
    service = _service(config, mock)
    console.print(f"[bold cyan]slotbooker[/bold cyan] listening on {host}:{port}")
    uvicorn.run(create_app(config, service), host=host, port=port, log_config=None)


@app.command()
def show_config(config_file: ConfigOption = None):
    """
    Show the resolved scheduling configuration (secrets hidden).
    """
    config = _load(config_file)
    sched = config.scheduling

    table = Table(title="Scheduling configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="bold yellow")
    table.add_column("Value")

    table.add_row("Timezone", sched.timezone)
    table.add_row("Business hours", f"{sched.work_start_hour}:00 - {sched.work_end_hour}:00, Mon-Fri")
    table.add_row("Lead time", f"{sched.min_lead_minutes} min")
    table.add_row("Duration", f"{sched.duration_minutes} min")
    table.add_row("Granularity", f"{sched.step_minutes} min")
    table.add_row("Horizon", f"{sched.search_days} days")
    table.add_row("Alternatives", str(sched.alternatives_count))
    table.add_row("Calendar", config.calendar.calendar_id)
    table.add_row("Calendar token", "set" if config.calendar.access_token else "[red]missing[/red]")
    table.add_row("Sheet", config.sheets.spreadsheet_id or "[red]missing[/red]")
    table.add_row("Voice agent", config.voice.agent_id or "[red]missing[/red]")

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
