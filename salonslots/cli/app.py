"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityCalculator
from ..domain.exceptions import BookingFetchError
from ..adapters.appointments_client import AppointmentsClient
from ..adapters.mock_appointments_client import MockAppointmentsClient
from ..services.availability_query import AvailabilityQuery, AvailabilityState

app = typer.Typer(
    name="salonslots",
    help="Show bookable appointment times for salon professionals",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_date(value: Optional[str], tz: str):
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _parse_now(value: Optional[str], tz: str):
    if not value:
        return None
    try:
        moment = pendulum.parse(value, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse --now '{value}': {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(moment, pendulum.DateTime):
        console.print(f"[red]--now must be a date and time, got '{value}'[/red]")
        raise typer.Exit(1)
    return moment


@app.command()
def slots(
    professional: Annotated[str, typer.Argument(help="Professional name or id from the config")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    day: Annotated[Optional[str], typer.Option("--date", help="Day to check (YYYY-MM-DD), defaults to today")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    step: Annotated[Optional[int], typer.Option("--step", help="Minutes between candidate start times")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Pretend the current time is this ISO timestamp")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock appointments instead of the API")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """
    Show available appointment times for a professional.

    Examples:
        salonslots slots ana
        salonslots slots 2 --date 2025-11-14 --duration 60
        salonslots slots ana --mock --now 2025-11-14T10:30
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    tz = config.timezone

    try:
        selected = config.resolve_professional(professional)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    selected_date = _parse_date(day, tz)
    service_duration = duration if duration is not None else config.defaults.service_duration_minutes
    fixed_now = _parse_now(now, tz)

    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled appointments[/yellow]")
        try:
            source = MockAppointmentsClient(timezone=tz)
        except BookingFetchError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)
    else:
        source = AppointmentsClient(
            base_url=config.api_base_url,
            api_token=config.api_token,
            timeout=config.request_timeout_seconds,
            timezone=tz,
        )

    calculator = AvailabilityCalculator(
        timezone=tz,
        step_minutes=step if step is not None else config.defaults.slot_step_minutes,
    )
    query = AvailabilityQuery(
        booking_source=source,
        calculator=calculator,
        clock=(lambda: fixed_now) if fixed_now is not None else None,
    )

    with console.status("Loading appointments..."):
        result = asyncio.run(
            query.refresh(
                selected_date=selected_date,
                professional=selected,
                service_duration_minutes=service_duration,
            )
        )

    if result.state is AvailabilityState.ERROR:
        console.print(f"[bold red]Error:[/bold red] {result.error}")
        raise typer.Exit(1)

    console.print(
        f"\n[bold cyan]{selected.name}[/bold cyan] · {selected_date.isoformat()} · "
        f"{service_duration} min"
    )

    if not result.slots:
        console.print("[yellow]⚠ No available times for this day.[/yellow]\n")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold green")
    table.add_column("End", style="dim")
    for slot in result.slots:
        table.add_row(slot.label, slot.end.format("HH:mm"))

    console.print(table)
    console.print(f"[green]✓ {len(result.slots)} available time(s)[/green]\n")


@app.command()
def professionals(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List all configured professionals.
    """
    config = _load_config(config_file)

    if not config.professionals:
        console.print("[yellow]No professionals defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured professionals",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold yellow")
    table.add_column("Working hours")
    table.add_column("Lunch")

    def _span(start, end) -> str:
        if start is None or end is None:
            return "-"
        return f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}"

    for professional in config.professionals:
        table.add_row(
            str(professional.id),
            professional.name,
            _span(professional.work_start_time, professional.work_end_time),
            _span(professional.lunch_start_time, professional.lunch_end_time),
        )

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    app()
