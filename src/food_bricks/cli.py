"""Command-line interface for Food Bricks."""

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .errors import FoodBricksError
from .models import Food, ReactionSeverity, ReactionType
from .services import (
    BabyService,
    DashboardAggregator,
    FoodCatalog,
    PreferencesService,
    ReminderService,
    ReportService,
    Surface,
    TrackerStorage,
    TrialController,
    classify,
    status_label,
)
from .utils.config import get_settings

app = typer.Typer(
    name="bricks",
    help="Food Bricks - Track food introductions and allergy risk",
    no_args_is_help=True,
)
console = Console()

BRICK_GLYPHS = {"safe": "[green]■[/green]", "warning": "[yellow]■[/yellow]", "reaction": "[red]■[/red]"}
TONE_STYLES = {"success": "green", "warning": "yellow", "danger": "red", "neutral": "dim"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@contextmanager
def domain_errors() -> Iterator[None]:
    """Print domain errors in red and exit non-zero."""
    try:
        yield
    except FoodBricksError as exc:
        console.print(f"[red]{exc.message}[/red]")
        if exc.details:
            console.print(f"[dim]{exc.details}[/dim]")
        raise typer.Exit(1)


def parse_date(date_str: Optional[str]) -> datetime:
    """Parse a date string or return now.

    Supports:
    - None or empty: now
    - "today": now
    - "yesterday": 24 hours ago
    - "-N": N days ago (e.g., "-1" = yesterday, "-7" = a week ago)
    - "YYYY-MM-DD": specific date
    """
    if date_str is None or date_str.lower() == "today":
        return datetime.now()

    if date_str.lower() == "yesterday":
        return datetime.now() - timedelta(days=1)

    if date_str.startswith("-") and date_str[1:].isdigit():
        return datetime.now() - timedelta(days=int(date_str[1:]))

    try:
        return datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        console.print(f"[red]Invalid date format: {date_str}[/red]")
        console.print("[dim]Use: YYYY-MM-DD, 'yesterday', or -N (days ago)[/dim]")
        raise typer.Exit(1)


def resolve_food(catalog: FoodCatalog, food: str) -> Food:
    """Look a food up by id first, then by name (creating custom foods)."""
    found = catalog.storage.get_food(food)
    if found is not None:
        return found
    return catalog.get_or_create(food)


def format_bricks(types) -> str:
    return "".join(BRICK_GLYPHS[t.value] for t in types) or "[dim]-[/dim]"


@app.command()
def seed():
    """Load the default food catalog."""
    with TrackerStorage() as storage:
        added = FoodCatalog(storage).seed()
    if added:
        console.print(f"[green]✓ Inserted {added} foods[/green]")
    else:
        console.print("[yellow]Catalog already seeded[/yellow]")


@app.command(name="add-baby")
def add_baby(
    name: str = typer.Argument(..., help="Baby's name"),
    dob: str = typer.Option(..., "--dob", help="Date of birth (YYYY-MM-DD)"),
    user: str = typer.Option("me", "--user", "-u", help="Your user id"),
    gender: Optional[str] = typer.Option(None, "--gender"),
):
    """Create a baby profile."""
    with TrackerStorage() as storage, domain_errors():
        baby = BabyService(storage).create_baby(user, name, parse_date(dob), gender)
    console.print(f"[green]✓ Created {baby.name}[/green] [dim]({baby.id})[/dim]")


@app.command(name="babies")
def list_babies(
    user: str = typer.Option("me", "--user", "-u", help="Your user id"),
):
    """List the babies you can access."""
    with TrackerStorage() as storage:
        babies = BabyService(storage).list_babies_for_user(user)

    if not babies:
        console.print("[yellow]No babies yet. Run 'bricks add-baby' first.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Babies")
    table.add_column("Name")
    table.add_column("Born", style="cyan")
    table.add_column("ID", style="dim")
    for baby in babies:
        table.add_row(baby.name, f"{baby.date_of_birth:%Y-%m-%d}", baby.id)
    console.print(table)


@app.command(name="foods")
def list_foods(
    common: bool = typer.Option(False, "--common", "-c", help="Only common foods"),
):
    """List the food catalog."""
    with TrackerStorage() as storage:
        foods = FoodCatalog(storage).list_foods(common_only=common)

    if not foods:
        console.print("[yellow]No foods found. Run 'bricks seed' first.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Foods")
    table.add_column("Food")
    table.add_column("Category", style="cyan")
    table.add_column("Common", justify="center")
    table.add_column("ID", style="dim")
    for food in foods:
        table.add_row(
            food.display_name,
            food.category.value if food.category else "-",
            "✓" if food.is_common else "",
            food.id,
        )
    console.print(table)


@app.command()
def start(
    baby_id: str = typer.Argument(..., help="Baby id"),
    food: str = typer.Argument(..., help="Food id or name"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d",
        help="Trial date (YYYY-MM-DD). Defaults to now.",
    ),
    days: Optional[int] = typer.Option(None, "--days", "-n", help="Observation period (1-14 days)"),
    notes: Optional[str] = typer.Option(None, "--notes"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Your user id (for your default period)"),
):
    """Start a food trial."""
    with TrackerStorage() as storage, domain_errors():
        chosen = resolve_food(FoodCatalog(storage), food)
        trial = TrialController(storage).start_trial(
            baby_id, chosen.id, parse_date(date_str),
            observation_period_days=days, notes=notes, user_id=user,
        )
    console.print(
        f"[green]✓ Observing {chosen.display_name}[/green] until "
        f"{trial.observation_ends_at:%A, %B %d} [dim]({trial.id})[/dim]"
    )


@app.command()
def complete(trial_id: str = typer.Argument(..., help="Trial id")):
    """Mark a trial as passed with no reaction."""
    with TrackerStorage() as storage, domain_errors():
        TrialController(storage).complete_trial(trial_id)
    console.print(f"[green]✓ Trial passed[/green] {BRICK_GLYPHS['safe']}")


@app.command()
def react(
    trial_id: str = typer.Argument(..., help="Trial id"),
    types: list[ReactionType] = typer.Option(..., "--type", "-t", help="Symptom (repeatable)"),
    severity: ReactionSeverity = typer.Option(ReactionSeverity.MILD, "--severity", "-s"),
    notes: Optional[str] = typer.Option(None, "--notes"),
):
    """Log a reaction against a trial."""
    with TrackerStorage() as storage, domain_errors():
        controller = TrialController(storage)
        reaction = controller.log_reaction(trial_id, {"types": types, "severity": severity, "notes": notes})
        trial = controller.get_trial(trial_id)
        latest = controller.get_bricks(trial.baby_id, trial.food_id)[-1]
    console.print(
        f"[red]Reaction logged[/red] ({reaction.display_types}) {BRICK_GLYPHS[latest.type.value]}"
    )


@app.command()
def undo(
    baby_id: str = typer.Argument(..., help="Baby id"),
    food: str = typer.Argument(..., help="Food id or name"),
):
    """Delete the most recent trial for a food."""
    with TrackerStorage() as storage, domain_errors():
        chosen = resolve_food(FoodCatalog(storage), food)
        trial = TrialController(storage).delete_latest_trial_for_food(baby_id, chosen.id)
    console.print(f"[green]✓ Removed trial from {trial.trial_date:%Y-%m-%d}[/green]")


@app.command()
def reset(
    baby_id: str = typer.Argument(..., help="Baby id"),
    food: str = typer.Argument(..., help="Food id or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete all progress for a food."""
    if not yes and not typer.confirm(f"Delete every trial of {food}?"):
        raise typer.Exit(0)
    with TrackerStorage() as storage, domain_errors():
        chosen = resolve_food(FoodCatalog(storage), food)
        deleted = TrialController(storage).delete_all_progress_for_food(baby_id, chosen.id)
    console.print(f"[green]✓ Deleted {deleted} trial(s)[/green]")


@app.command()
def dashboard(baby_id: str = typer.Argument(..., help="Baby id")):
    """Show stats, active trials and food progress."""
    with TrackerStorage() as storage, domain_errors():
        baby = BabyService(storage).get_baby(baby_id)
        data = DashboardAggregator(storage).build(baby_id)

    stats = data.stats
    console.print(Panel(
        f"Foods tried: {stats.total_foods} | "
        f"[green]Safe: {stats.safe_foods}[/green] | "
        f"[red]Allergies: {stats.food_allergies}[/red]",
        title=f"🧱 {baby.name}",
    ))

    if data.active_trials:
        console.print("\n[bold]Under observation:[/bold]")
        for active in data.active_trials:
            console.print(
                f"  • {active.food.display_name} ends "
                f"{active.trial.observation_ends_at:%a %d %b} ({active.days_left} days left)"
            )

    if data.food_progress:
        table = Table(title="Food Progress")
        table.add_column("Food")
        table.add_column("Bricks")
        table.add_column("Status")
        table.add_column("Last Trial", style="cyan")
        for progress in data.food_progress:
            status = classify(progress.brick_types, progress.has_active_trial)
            style = TONE_STYLES[status.tone]
            table.add_row(
                progress.food.display_name,
                format_bricks(progress.brick_types),
                f"[{style}]{status_label(status, Surface.DASHBOARD)}[/{style}]",
                f"{progress.last_trial_date:%Y-%m-%d}",
            )
        console.print(table)

    if data.recent_activity:
        console.print("\n[bold]Recent activity:[/bold]")
        for event in data.recent_activity:
            console.print(f"  [dim]{event.timestamp:%Y-%m-%d %H:%M}[/dim] {event.description}")


@app.command()
def report(
    baby_id: str = typer.Argument(..., help="Baby id"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file to write"),
):
    """Export a per-food history report."""
    with TrackerStorage() as storage, domain_errors():
        BabyService(storage).get_baby(baby_id)
        service = ReportService(DashboardAggregator(storage))
        if output is not None:
            service.export_csv(baby_id, output)
            console.print(f"[green]✓ Wrote {output}[/green]")
            return
        df = service.food_table(baby_id)

    if df.empty:
        console.print("[yellow]No food trials recorded yet[/yellow]")
        raise typer.Exit(0)
    console.print(df.to_string(index=False))


@app.command()
def remind():
    """Mark due observation reminders as sent."""
    with TrackerStorage() as storage:
        sent = ReminderService(storage).process_due()
    if not sent:
        console.print("[dim]No reminders due[/dim]")
        return
    for notification in sent:
        console.print(f"📬 {notification.title}: {notification.message}")


@app.command(name="settings")
def user_settings(
    user: str = typer.Option("me", "--user", "-u", help="Your user id"),
    period: Optional[int] = typer.Option(None, "--period", help="Default observation period (1-14 days)"),
    email: Optional[bool] = typer.Option(None, "--email/--no-email", help="Email notifications"),
    push: Optional[bool] = typer.Option(None, "--push/--no-push", help="Push notifications"),
    timezone: Optional[str] = typer.Option(None, "--timezone"),
):
    """Show or change your settings."""
    changes = {
        "default_observation_period_days": period,
        "email_notifications": email,
        "push_notifications": push,
        "timezone": timezone,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    with TrackerStorage() as storage, domain_errors():
        service = PreferencesService(storage)
        prefs = service.update(user, changes) if changes else service.get_or_create(user)

    table = Table(title=f"Settings for {user}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Default observation period", f"{prefs.default_observation_period_days} days")
    table.add_row("Email notifications", "on" if prefs.email_notifications else "off")
    table.add_row("Push notifications", "on" if prefs.push_notifications else "off")
    table.add_row("In-app notifications", "on" if prefs.in_app_notifications else "off")
    table.add_row("Timezone", prefs.timezone)
    console.print(table)


@app.command()
def status():
    """Show configuration."""
    settings = get_settings()

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Database", str(settings.db_path.absolute()))
    table.add_row("Max active observations", str(settings.max_active_observations))
    table.add_row("Default observation period", f"{settings.default_observation_period_days} days")
    table.add_row("Recent activity shown", str(settings.recent_activity_limit))
    console.print(table)
    console.print(f"\nToday: {date.today():%A, %B %d, %Y}")


@app.command()
def web(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Start the web API."""
    from .web import run as run_web

    settings = get_settings()
    host = host or settings.web_host
    port = port or settings.web_port
    console.print(f"[green]Starting API at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    run_web(host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
