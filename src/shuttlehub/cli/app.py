"""Shuttlehub CLI application.

Usage:
    shuttlehub sessions list
    shuttlehub --admin sessions create --date 2025-03-14 --start 19:00 --end 21:00 --location SRC
    shuttlehub sessions join 3f2a Alice
    shuttlehub --admin sessions approve 3f2a Alice
    shuttlehub locations list
    shuttlehub stats --period month
    shuttlehub --admin backup export backup.json
    shuttlehub advise
"""

import re
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer
from dotenv import load_dotenv

# Load .env file for API keys, etc.
load_dotenv()
from rich.console import Console  # noqa: E402
from rich.table import Table  # noqa: E402

from shuttlehub import bind_context, clear_context, configure_logging  # noqa: E402
from shuttlehub.config import get_settings  # noqa: E402
from shuttlehub.credentials import authenticate  # noqa: E402
from shuttlehub.dao import create_store  # noqa: E402
from shuttlehub.errors import PersistenceError, ShuttlehubError  # noqa: E402
from shuttlehub.models import LocationConfig, Session, SessionDraft, SessionPatch  # noqa: E402
from shuttlehub.services.advisor import SessionAdvisor  # noqa: E402
from shuttlehub.services.analytics import Period  # noqa: E402
from shuttlehub.services.backup import (  # noqa: E402
    dump_backup,
    export_backup,
    parse_backup,
    restore_backup,
)
from shuttlehub.services.costs import cost_per_person, format_currency, total_event_cost  # noqa: E402
from shuttlehub.services.session_service import SessionService, SessionView  # noqa: E402

console = Console()
app = typer.Typer(
    name="shuttlehub",
    help="Badminton club sessions and cost splitting",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    admin: bool = typer.Option(False, "--admin", help="Run as club admin (asks for password)"),
    password: str = typer.Option(None, "--password", "-p", help="Admin password"),
):
    """Shuttlehub club manager."""
    settings = get_settings()
    configure_logging(settings)

    if admin:
        if not password:
            password = typer.prompt("Admin password", hide_input=True)
        if authenticate(settings, settings.admin_username, password) is None:
            console.print("[red]Invalid admin password[/red]")
            raise typer.Exit(1)

    clear_context()
    bind_context(role="admin" if admin else "member")
    ctx.obj = {"is_admin": admin}


def _is_admin(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("is_admin"))


@contextmanager
def _service() -> Iterator[SessionService]:
    """Open the configured store and yield a service over it.

    Domain errors are printed and end the command with exit code 1.
    """
    settings = get_settings()
    try:
        with create_store(settings) as store:
            yield SessionService.from_settings(store, settings)
    except PersistenceError as e:
        console.print(f"[red]Storage error: {e}[/red]")
        console.print("[dim]Changes were not saved.[/dim]")
        raise typer.Exit(1) from None
    except ShuttlehubError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None


def _money(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        console.print(f"[red]Invalid amount: {value}[/red]")
        raise typer.Exit(1) from None
    if amount < 0:
        console.print(f"[red]Amount must not be negative: {value}[/red]")
        raise typer.Exit(1)
    return amount


def _resolve_session(service: SessionService, ref: str) -> Session:
    """Resolve a session by id prefix (min 4 chars).

    Raises:
        typer.Exit: If the session is not found or the prefix is ambiguous
    """
    ref = ref.strip().lower()
    if len(ref) < 4 or not re.match(r"^[0-9a-z-]+$", ref):
        console.print(f"[red]Invalid session reference: '{ref}'[/red]")
        console.print("[dim]Use at least the first 4 characters of the session ID[/dim]")
        raise typer.Exit(1)

    matches = [s for s in service.list_sessions() if s.id.lower().startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        console.print(f"[red]Ambiguous ID '{ref}' matches {len(matches)} sessions:[/red]")
        for s in matches[:5]:
            console.print(f"  {s.id[:8]}  {s}")
        raise typer.Exit(1)

    console.print(f"[red]Session not found: '{ref}'[/red]")
    raise typer.Exit(1)


def _status_label(session: Session) -> str:
    if session.is_completed:
        return "[dim]completed[/dim]"
    if session.is_full:
        return "[yellow]full[/yellow]"
    return "[green]open[/green]"


# =============================================================================
# SESSION COMMANDS
# =============================================================================

sessions_app = typer.Typer(help="Session commands", no_args_is_help=True)
app.add_typer(sessions_app, name="sessions")


@sessions_app.command("list")
def sessions_list(
    view: SessionView = typer.Option(SessionView.ACTIVE, "--view", "-v", help="active/history/all"),
):
    """List sessions, most recent first."""
    currency = get_settings().currency
    with _service() as service:
        sessions = service.list_sessions(view)

    if not sessions:
        console.print(f"[yellow]No {view.value} sessions[/yellow]")
        return

    table = Table(title=f"Sessions - {view.value} ({len(sessions)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Location")
    table.add_column("Players", justify="right")
    table.add_column("Waiting", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Per person", justify="right")
    table.add_column("Status")

    for s in sessions:
        players = f"{len(s.participants)}/{s.max_participants}"
        if s.is_over_capacity:
            players = f"[red]{players}[/red]"
        table.add_row(
            s.id[:8],
            s.date.isoformat(),
            s.time,
            s.location,
            players,
            str(len(s.waiting_list)) if s.waiting_list else "-",
            format_currency(total_event_cost(s), currency),
            format_currency(cost_per_person(s), currency),
            _status_label(s),
        )

    console.print(table)


@sessions_app.command("show")
def sessions_show(session_ref: str = typer.Argument(..., help="Session ID (prefix)")):
    """Show a session with its roster and costs."""
    currency = get_settings().currency
    with _service() as service:
        session = _resolve_session(service, session_ref)

    table = Table(title=str(session), show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("ID", session.id)
    table.add_row("Status", _status_label(session))
    table.add_row("Courts", str(session.court_count))
    table.add_row("Court fee", format_currency(session.court_fee, currency))
    table.add_row(
        "Shuttles",
        f"{session.shuttle_qty} x {format_currency(session.shuttle_price, currency)}",
    )
    table.add_row("Total", format_currency(total_event_cost(session), currency))
    table.add_row("Per person", format_currency(cost_per_person(session), currency))
    table.add_row("Players", f"{len(session.participants)}/{session.max_participants}")
    console.print(table)

    if session.participants:
        console.print("[bold]Participants[/bold]")
        for i, name in enumerate(session.participants, 1):
            flag = " [yellow](leave requested)[/yellow]" if name in session.deletion_requests else ""
            console.print(f"  {i}. {name}{flag}")
    if session.waiting_list:
        console.print("[bold]Waiting list[/bold]")
        for i, name in enumerate(session.waiting_list, 1):
            console.print(f"  {i}. {name}")


@sessions_app.command("create")
def sessions_create(
    ctx: typer.Context,
    date: datetime = typer.Option(..., "--date", "-d", formats=["%Y-%m-%d"], help="YYYY-MM-DD"),
    start: str = typer.Option(..., "--start", help="Start time (HH:MM)"),
    end: str = typer.Option(..., "--end", help="End time (HH:MM)"),
    location: str = typer.Option(..., "--location", "-l", help="Venue name"),
    courts: int = typer.Option(1, "--courts", "-c", min=1, help="Number of courts"),
    court_fee: str = typer.Option(
        None, "--court-fee", help="Total court fee (default: venue rate x courts x hours)"
    ),
    shuttles: int = typer.Option(0, "--shuttles", "-s", min=0, help="Shuttlecocks used"),
    shuttle_price: str = typer.Option(None, "--shuttle-price", help="Price per shuttlecock"),
    max_players: int = typer.Option(None, "--max", "-m", min=1, help="Maximum participants"),
):
    """Publish a new session (admin only)."""
    try:
        draft = SessionDraft(
            date=date.date(),
            time=f"{start} - {end}",
            location=location,
            court_count=courts,
            court_fee=_money(court_fee),
            shuttle_qty=shuttles,
            shuttle_price=_money(shuttle_price),
            max_participants=max_players,
        )
    except ValueError as e:
        console.print(f"[red]Invalid session: {e}[/red]")
        raise typer.Exit(1) from None

    with _service() as service:
        session = service.create_session(draft, is_admin=_is_admin(ctx))

    console.print(f"[green]Created session {session.id[:8]}[/green] {session}")
    console.print(f"Court fee: {format_currency(session.court_fee, get_settings().currency)}")


@sessions_app.command("edit")
def sessions_edit(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    date: datetime = typer.Option(None, "--date", "-d", formats=["%Y-%m-%d"], help="YYYY-MM-DD"),
    start: str = typer.Option(None, "--start", help="Start time (HH:MM)"),
    end: str = typer.Option(None, "--end", help="End time (HH:MM)"),
    location: str = typer.Option(None, "--location", "-l", help="Venue name"),
    courts: int = typer.Option(None, "--courts", "-c", min=1, help="Number of courts"),
    court_fee: str = typer.Option(None, "--court-fee", help="Total court fee"),
    shuttles: int = typer.Option(None, "--shuttles", "-s", min=0, help="Shuttlecocks used"),
    shuttle_price: str = typer.Option(None, "--shuttle-price", help="Price per shuttlecock"),
    max_players: int = typer.Option(None, "--max", "-m", min=1, help="Maximum participants"),
):
    """Edit session details (admin only)."""
    with _service() as service:
        session = _resolve_session(service, session_ref)

        changes: dict = {
            "date": date.date() if date else None,
            "location": location,
            "court_count": courts,
            "court_fee": _money(court_fee),
            "shuttle_qty": shuttles,
            "shuttle_price": _money(shuttle_price),
            "max_participants": max_players,
        }
        if start or end:
            changes["time"] = f"{start or session.start_time} - {end or session.end_time}"
        changes = {k: v for k, v in changes.items() if v is not None}

        if not changes:
            console.print("[yellow]Nothing to change[/yellow]")
            return

        try:
            patch = SessionPatch(**changes)
        except ValueError as e:
            console.print(f"[red]Invalid change: {e}[/red]")
            raise typer.Exit(1) from None

        updated = service.update_details(session.id, patch, is_admin=_is_admin(ctx))

    console.print(f"[green]Updated session {updated.id[:8]}[/green] {updated}")


@sessions_app.command("join")
def sessions_join(
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Name to sign up"),
):
    """Sign up for a session."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        result = service.join(session.id, name)

    if not result.accepted:
        console.print("[yellow]Session is completed; nothing changed[/yellow]")
    elif result.waitlisted:
        console.print(
            f"[yellow]Session is full. {result.name} is #{result.position} on the waiting list[/yellow]"
        )
    else:
        console.print(f"[green]{result.name} joined[/green] ({result.position}/{session.max_participants})")


@sessions_app.command("leave")
def sessions_leave(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Name to take off the roster"),
):
    """Leave a session. Members file a request that an admin approves."""
    is_admin = _is_admin(ctx)
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.request_leave(session.id, name, is_admin=is_admin)

    if is_admin:
        console.print(f"[green]Removed {name}[/green]")
    else:
        console.print(f"[green]Leave request filed for {name}[/green]")
        console.print("[dim]An admin needs to approve it.[/dim]")


@sessions_app.command("approve")
def sessions_approve(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Name with a pending leave request"),
):
    """Approve a leave request (admin only)."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.approve_deletion(session.id, name, is_admin=_is_admin(ctx))
    console.print(f"[green]Approved: {name} removed[/green]")


@sessions_app.command("reject")
def sessions_reject(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Name with a pending leave request"),
):
    """Reject a leave request (admin only)."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.reject_deletion(session.id, name, is_admin=_is_admin(ctx))
    console.print(f"[green]Rejected: {name} stays on the roster[/green]")


@sessions_app.command("remove")
def sessions_remove(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Participant to remove"),
):
    """Remove a participant directly (admin only)."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.remove_participant(session.id, name, is_admin=_is_admin(ctx))
    console.print(f"[green]Removed {name}[/green]")


@sessions_app.command("unwait")
def sessions_unwait(
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    name: str = typer.Argument(..., help="Name to take off the waiting list"),
):
    """Take a name off the waiting list."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.remove_from_waiting_list(session.id, name)
    console.print(f"[green]{name} is no longer waiting[/green]")


@sessions_app.command("complete")
def sessions_complete(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
):
    """Mark a session completed (admin only). This cannot be undone."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        service.complete_session(session.id, is_admin=_is_admin(ctx))
    console.print(f"[green]Completed {session}[/green]")


@sessions_app.command("delete")
def sessions_delete(
    ctx: typer.Context,
    session_ref: str = typer.Argument(..., help="Session ID (prefix)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a session permanently (admin only)."""
    with _service() as service:
        session = _resolve_session(service, session_ref)
        if not yes and not typer.confirm(f"Delete {session} permanently?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)
        service.delete_session(session.id, is_admin=_is_admin(ctx))
    console.print(f"[green]Deleted {session}[/green]")


# =============================================================================
# LOCATION COMMANDS
# =============================================================================

locations_app = typer.Typer(help="Venue registry commands", no_args_is_help=True)
app.add_typer(locations_app, name="locations")


def _resolve_location(locations: list[LocationConfig], ref: str) -> LocationConfig:
    """Resolve a venue by exact id or name (case-insensitive)."""
    for location in locations:
        if location.id == ref or location.name.casefold() == ref.strip().casefold():
            return location
    console.print(f"[red]Location not found: '{ref}'[/red]")
    raise typer.Exit(1)


@locations_app.command("list")
def locations_list():
    """List registered venues."""
    currency = get_settings().currency
    with _service() as service:
        locations = service.list_locations()

    if not locations:
        console.print("[yellow]No locations registered[/yellow]")
        return

    table = Table(title=f"Locations ({len(locations)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Rate / court / hour", justify="right")
    for location in locations:
        table.add_row(
            location.id[:8],
            location.name,
            format_currency(location.default_court_fee, currency),
        )
    console.print(table)


@locations_app.command("add")
def locations_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Venue name"),
    rate: str = typer.Argument(..., help="Hourly rate per court"),
):
    """Register a venue, or update the rate of an existing one (admin only)."""
    amount = _money(rate)
    with _service() as service:
        location = service.add_location(name, amount, is_admin=_is_admin(ctx))
    console.print(f"[green]Saved {location.name}[/green] at {location.default_court_fee}/court/hour")


@locations_app.command("remove")
def locations_remove(
    ctx: typer.Context,
    location_ref: str = typer.Argument(..., help="Venue ID or name"),
):
    """Delete a venue (admin only). Existing sessions keep their venue name."""
    with _service() as service:
        location = _resolve_location(service.list_locations(), location_ref)
        service.remove_location(location.id, is_admin=_is_admin(ctx))
    console.print(f"[green]Removed {location.name}[/green]")


@locations_app.command("reset")
def locations_reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Restore the default venues (admin only)."""
    if not yes and not typer.confirm("Replace all venues with the defaults?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)
    with _service() as service:
        locations = service.reset_locations(is_admin=_is_admin(ctx))
    console.print(f"[green]Restored {len(locations)} default venues[/green]")


# =============================================================================
# STATS
# =============================================================================


@app.command("stats")
def stats(
    period: Period = typer.Option(Period.MONTH, "--period", "-p", help="day/month/year"),
):
    """Show cost analytics."""
    currency = get_settings().currency
    with _service() as service:
        summary = service.summary()
        groups = service.period_summaries(period)

    console.print(f"Sessions: [bold]{summary.session_count}[/bold]")
    console.print(f"Total cost: [bold]{format_currency(summary.total_cost, currency)}[/bold]")
    console.print(f"Total sign-ups: [bold]{summary.total_participants}[/bold]")
    console.print(
        f"Average per session: [bold]{format_currency(summary.avg_cost_per_session, currency)}[/bold]"
    )

    if not groups:
        return

    table = Table(title=f"By {period.value}")
    table.add_column(period.value.capitalize(), style="cyan", no_wrap=True)
    table.add_column("Sessions", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Players", justify="right")
    table.add_column("Per person", justify="right")
    table.add_column("Shuttles", justify="right")
    table.add_column("Venues")
    for group in groups:
        table.add_row(
            group.key,
            str(group.session_count),
            format_currency(group.total_cost, currency),
            str(group.total_participants),
            format_currency(group.cost_per_person, currency),
            str(group.total_shuttles),
            group.location_label,
        )
    console.print(table)


# =============================================================================
# BACKUP COMMANDS (Admin only)
# =============================================================================

backup_app = typer.Typer(help="Backup export and import (admin only)", no_args_is_help=True)
app.add_typer(backup_app, name="backup")


@backup_app.command("export")
def backup_export(
    ctx: typer.Context,
    output: Path = typer.Argument(None, help="Output file (default: stdout)"),
):
    """Export all sessions and venues as JSON."""
    if not _is_admin(ctx):
        console.print("[red]Admin access required to export backups[/red]")
        raise typer.Exit(1)

    with _service() as service:
        backup = export_backup(service.store)
    text = dump_backup(backup)

    if output is None:
        typer.echo(text)
        return
    output.write_text(text, encoding="utf-8")
    console.print(
        f"[green]Exported {len(backup.sessions)} sessions and "
        f"{len(backup.locations)} venues to {output}[/green]"
    )


@backup_app.command("import")
def backup_import(
    ctx: typer.Context,
    input_file: Path = typer.Argument(..., help="Backup file to restore"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Replace all sessions and venues with a backup. Cannot be undone."""
    if not input_file.exists():
        console.print(f"[red]File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        backup = parse_backup(input_file.read_text(encoding="utf-8"))
    except ShuttlehubError as e:
        console.print(f"[red]Invalid backup: {e}[/red]")
        raise typer.Exit(1) from None

    console.print(
        f"Backup from {backup.export_date:%Y-%m-%d %H:%M}: "
        f"{len(backup.sessions)} sessions, {len(backup.locations)} venues"
    )
    confirmed = yes or typer.confirm("This overwrites ALL current data. Continue?")
    if not confirmed:
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(0)

    with _service() as service:
        restore_backup(service.store, backup, is_admin=_is_admin(ctx), confirmed=confirmed)
    console.print("[green]Backup restored[/green]")


# =============================================================================
# ADVISOR
# =============================================================================


@app.command("advise")
def advise():
    """Ask Claude for suggestions based on recent sessions."""
    settings = get_settings()
    if not settings.anthropic_api_key:
        console.print("[yellow]ANTHROPIC_API_KEY not set; showing the default message[/yellow]")
        console.print("[dim]Add to .env: ANTHROPIC_API_KEY=sk-ant-...[/dim]")

    advisor = SessionAdvisor(
        api_key=(
            settings.anthropic_api_key.get_secret_value() if settings.anthropic_api_key else None
        ),
        model=settings.advisor_model,
    )
    with _service() as service:
        sessions = service.list_sessions()

    with console.status("Asking Claude..."):
        advice_text = advisor.advise(sessions)
    console.print(advice_text)


if __name__ == "__main__":
    app()
