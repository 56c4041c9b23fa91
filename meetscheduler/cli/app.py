"""
Main CLI application using Typer.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Annotated

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..adapters.availability_client import AvailabilityClient
from ..adapters.booking_client import BookingClient
from ..adapters.mock_availability_client import MockAvailabilityClient
from ..adapters.suggestion_client import SuggestionClient
from ..config import AppConfig, get_default_config_path
from ..domain.booking import BookingResult, MeetingType
from ..domain.exceptions import ConfigurationError, SchedulerError
from ..domain.models import CandidateSlot
from ..domain.slot_generator import SlotGenerator
from ..domain.suggestions import SuggestionRequest
from ..services.scheduler import SchedulerService

app = typer.Typer(
    name="meetscheduler",
    help="Find free meeting slots and book them via the booking webhook",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig, mock: bool = False) -> SchedulerService:
    """Wire adapters for the configured webhooks (or mock data) into a service."""
    tz = config.timezone

    availability_client = None
    if mock:
        availability_client = MockAvailabilityClient(timezone=tz, data_file=config.mock_data_file)
    elif config.webhooks.availability_url:
        availability_client = AvailabilityClient(
            url=config.webhooks.availability_url,
            timezone=tz,
            timeout=config.webhooks.timeout_seconds
        )

    booking_client = None
    if config.webhooks.booking_url:
        booking_client = BookingClient(
            url=config.webhooks.booking_url,
            meeting_label=config.webhooks.meeting_label,
            timeout=config.webhooks.timeout_seconds
        )

    suggestion_client = None
    if config.suggestions.api_key:
        suggestion_client = SuggestionClient(
            api_url=config.suggestions.api_url,
            api_key=config.suggestions.api_key,
            model=config.suggestions.model,
            timeout=config.suggestions.timeout_seconds
        )

    return SchedulerService(
        availability_client=availability_client,
        booking_client=booking_client,
        suggestion_client=suggestion_client,
        slot_generator=SlotGenerator(config.defaults.working_window()),
        timezone=tz,
    )


def _parse_day(value: Optional[str], tz: str) -> DateTime:
    if not value:
        return pendulum.now(tz).start_of("day")
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz)
    except ValueError as e:
        console.print(f"[red]Error al interpretar la fecha '{value}': {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _check_timezone(value: str, choices: List[str]) -> str:
    if value not in choices:
        console.print(f"[red]Zona horaria no soportada: {escape(value)}. Opciones: {', '.join(choices)}[/red]")
        raise typer.Exit(1)
    return value


def _resolve_meeting_type(duration: int) -> MeetingType:
    try:
        return MeetingType.from_minutes(duration)
    except ValueError:
        allowed = ", ".join(t.value for t in MeetingType)
        console.print(f"[red]Duración no soportada: {duration}. Opciones: {allowed}[/red]")
        raise typer.Exit(1)


def _print_slots(day: DateTime, slots: List[CandidateSlot], numbered: bool = False) -> None:
    if not slots:
        console.print(
            "[yellow]⚠ No hay horarios disponibles.[/yellow]\n"
            "Por favor, selecciona otra fecha."
        )
        return

    console.print(f"[bold green]✓ {len(slots)} horario(s) disponible(s) el {day.format('DD.MM.YYYY')}:[/bold green]\n")
    for idx, slot in enumerate(slots, 1):
        prefix = f"{idx:>3}. " if numbered else "  "
        console.print(f"{prefix}{slot.format_display()}")


def _print_booking_result(result: BookingResult) -> None:
    if not result.success:
        console.print(f"[bold red]Error en la reserva:[/bold red] {escape(result.message)}")
        return

    when = pendulum.instance(result.booked_start).format("DD.MM.YYYY HH:mm") if result.booked_start else "-"
    console.print(Panel.fit(
        f"[bold green]✓ {result.message}[/bold green]\n\n"
        f"[bold]Nombre:[/bold] {result.booked_name}\n"
        f"[bold]Fecha:[/bold] {when}\n"
        f"[bold]Enlace:[/bold] {result.meeting_link}",
        title="Reserva confirmada"
    ))


@app.command()
def slots(
    date: Annotated[Optional[str], typer.Argument(help="Day to check (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes (30 or 60)")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock busy data instead of the availability webhook.")] = False,
):
    """
    Show the free start times for a day.

    Examples:

        meetscheduler slots 2024-11-25
        meetscheduler slots 2024-11-25 --duration 60 --mock
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone
        day = _parse_day(date, tz)
        minutes = duration if duration is not None else config.defaults.duration_minutes
        meeting_type = _resolve_meeting_type(minutes)

        if mock:
            console.print("[yellow]⚠  MODO MOCK: usando datos de prueba[/yellow]\n")

        service = _build_service(config, mock=mock)
        found = asyncio.run(service.available_slots(
            date=day,
            duration_minutes=meeting_type.duration_minutes,
            step_minutes=config.defaults.step_minutes,
        ))

        _print_slots(day, found)
        console.print()

    except (FileNotFoundError, SchedulerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def book(
    name: Annotated[str, typer.Option("--name", help="Attendee first name")],
    last_name: Annotated[str, typer.Option("--last-name", help="Attendee last name")],
    email: Annotated[str, typer.Option("--email", help="Attendee email")],
    start: Annotated[str, typer.Option("--start", help="Meeting start (YYYY-MM-DD HH:mm)")],
    config_file: ConfigOption = None,
    duration: Annotated[int, typer.Option("--duration", "-d", help="Meeting duration in minutes (30 or 60)")] = 30,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Optional notes for the host")] = None,
):
    """
    Book a meeting through the booking webhook.
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone

        try:
            start_time = pendulum.from_format(start, "YYYY-MM-DD HH:mm", tz=tz)
        except ValueError as e:
            console.print(f"[red]Error al interpretar el inicio '{start}': {escape(str(e))}[/red]")
            raise typer.Exit(1)

        meeting_type = _resolve_meeting_type(duration)
        if not config.webhooks.booking_url:
            raise ConfigurationError("webhooks.booking_url is not configured.")

        service = _build_service(config)
        result = asyncio.run(service.book({
            "name": name,
            "last_name": last_name,
            "email": email,
            "start": start_time,
            "meeting_type": meeting_type,
            "notes": notes,
        }))

        _print_booking_result(result)
        if not result.success:
            raise typer.Exit(1)

    except (FileNotFoundError, SchedulerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def suggest(
    config_file: ConfigOption = None,
    user_tz: Annotated[Optional[str], typer.Option("--user-tz", help="Your IANA timezone")] = None,
    host_tz: Annotated[Optional[str], typer.Option("--host-tz", help="Host IANA timezone. Defaults to the configured timezone.")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Typical meeting duration in minutes (>= 15)")] = None,
    days: Annotated[Optional[int], typer.Option("--days", help="How many upcoming days to consider")] = None,
):
    """
    Ask the AI assistant for optimal meeting times.
    """
    try:
        config = _load_config(config_file)
        if not config.suggestions.api_key:
            raise ConfigurationError("suggestions.api_key is not configured.")

        tz = config.timezone
        choices = config.suggestions.timezone_choices(tz)
        request = SuggestionRequest.for_upcoming_days(
            user_timezone=_check_timezone(user_tz or tz, choices),
            host_timezone=_check_timezone(host_tz or tz, choices),
            duration_minutes=duration if duration is not None else config.defaults.duration_minutes,
            today=pendulum.now(tz),
            days_ahead=days if days is not None else config.suggestions.days_ahead,
            common_breaks=config.suggestions.common_breaks,
        )

        service = _build_service(config)
        suggestions = asyncio.run(service.suggest(request))

        if not suggestions:
            console.print(
                "[yellow]No se encontraron sugerencias.[/yellow]\n"
                "Intenta con diferentes parámetros o en otro momento."
            )
            return

        table = Table(title="Sugerencias IA", show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim")
        table.add_column("Horario", style="bold yellow")

        for idx, suggestion in enumerate(suggestions, 1):
            table.add_row(str(idx), suggestion.to_slot(request.host_timezone).format_display())

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, SchedulerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def _prompt_slot(service: SchedulerService, config: AppConfig, meeting_type: MeetingType) -> CandidateSlot:
    """Ask for a day until one with free slots is chosen, then ask for a slot."""
    tz = config.timezone

    while True:
        day_str = typer.prompt(
            "→ Fecha (YYYY-MM-DD)",
            default=pendulum.now(tz).format("YYYY-MM-DD")
        ).strip()
        day = _parse_day(day_str, tz)

        if day < pendulum.now(tz).start_of("day"):
            console.print("[yellow]La fecha ya pasó, elige otra.[/yellow]")
            continue

        found = asyncio.run(service.available_slots(
            date=day,
            duration_minutes=meeting_type.duration_minutes,
            step_minutes=config.defaults.step_minutes,
        ))
        _print_slots(day, found, numbered=True)

        if found:
            break

    return found[_prompt_numbered("\n→ Horario (número)", len(found))]


def _prompt_numbered(label: str, count: int) -> int:
    choice = typer.prompt(label, default=1, type=int)
    while not 1 <= choice <= count:
        console.print(f"[yellow]Número {choice} inválido[/yellow]")
        choice = typer.prompt(label, default=1, type=int)
    return choice - 1


def _prompt_suggested_slot(
    service: SchedulerService,
    config: AppConfig,
    meeting_type: MeetingType
) -> Optional[CandidateSlot]:
    """
    Offer AI suggestions for the upcoming days and let the user pick one.

    Returns None when no usable suggestion comes back, so the caller can
    fall back to the day-by-day picker.
    """
    tz = config.timezone
    choices = config.suggestions.timezone_choices(tz)

    console.print("\n[bold]Tu zona horaria:[/bold]")
    for idx, name in enumerate(choices, 1):
        console.print(f"  {idx}. {name}")
    user_tz = choices[_prompt_numbered("→ Zona horaria", len(choices))]

    now = pendulum.now(tz)
    request = SuggestionRequest.for_upcoming_days(
        user_timezone=user_tz,
        host_timezone=tz,
        duration_minutes=meeting_type.duration_minutes,
        today=now,
        days_ahead=config.suggestions.days_ahead,
        common_breaks=config.suggestions.common_breaks,
    )

    console.print("[cyan]Buscando sugerencias...[/cyan]")
    suggestions = asyncio.run(service.suggest(request))

    # The booked length is the meeting type's, whatever the model proposed
    offered = [
        CandidateSlot.starting_at(s.to_slot(tz).start, meeting_type.duration_minutes)
        for s in suggestions
    ]
    offered = [slot for slot in offered if slot.start >= now]

    if not offered:
        console.print("[yellow]No se encontraron sugerencias.[/yellow]")
        return None

    console.print(f"\n[bold green]✓ {len(offered)} sugerencia(s):[/bold green]\n")
    for idx, slot in enumerate(offered, 1):
        console.print(f"{idx:>3}. {slot.format_display()}")

    return offered[_prompt_numbered("\n→ Sugerencia (número)", len(offered))]


@app.command()
def schedule(
    config_file: ConfigOption = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use mock busy data instead of the availability webhook.")] = False,
):
    """
    Interactive booking: pick a meeting type, a day and a slot, then book it.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, mock=mock)

        console.print("\n" + "="*60)
        console.print("[bold cyan]🗓️  Agendar una reunión[/bold cyan]")
        console.print("="*60 + "\n")

        # 1. TIPO Y FECHA
        console.print("[bold]1️⃣  Selecciona el tipo y fecha[/bold]")
        types = list(MeetingType)
        for idx, meeting_type in enumerate(types, 1):
            console.print(f"  {idx}. {meeting_type.label} ({meeting_type.duration_minutes} min.)")
        type_idx = typer.prompt("→ Tipo", default=1, type=int)
        meeting_type = types[type_idx - 1] if 1 <= type_idx <= len(types) else MeetingType.SHORT

        slot = None
        if config.suggestions.api_key and typer.confirm("¿Ver sugerencias IA?", default=False):
            slot = _prompt_suggested_slot(service, config, meeting_type)
        if slot is None:
            slot = _prompt_slot(service, config, meeting_type)

        # 2. DATOS DEL ASISTENTE
        console.print(f"\n[bold]2️⃣  Confirmar reserva[/bold]: {slot.format_display()}")
        while True:
            booking_data = {
                "name": typer.prompt("→ Nombre"),
                "last_name": typer.prompt("→ Apellido"),
                "email": typer.prompt("→ Email"),
                "notes": typer.prompt("→ Notas (opcional)", default="", show_default=False) or None,
                "start": slot.start,
                "meeting_type": meeting_type,
            }

            result = asyncio.run(service.book(booking_data))
            _print_booking_result(result)

            if result.success or not typer.confirm("¿Reintentar?", default=True):
                break

        console.print()

    except (FileNotFoundError, SchedulerError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]meetscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
