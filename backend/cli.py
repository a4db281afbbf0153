"""
Floor Ops CLI.

Command-line interface for database setup and bill consistency checks.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

app = typer.Typer(
    name="floor-ops",
    help="Restaurant order-to-bill engine CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all database tables."""
    from rest_api.models import Base
    from shared.infrastructure.db import engine

    console.print(f"[blue]Creating tables on: {engine.url.render_as_string(hide_password=True)}[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Table creation failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Tables created[/green]")


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed the database with tables and a default menu."""
    from rest_api.seed import seed as seed_database
    from shared.config.settings import settings
    from shared.infrastructure.db import get_db_context

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    try:
        with get_db_context() as db:
            seed_database(db)
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Seeding failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Seed complete[/green]")


# =============================================================================
# Consistency Commands
# =============================================================================

@app.command()
def verify_bills(
    fix: bool = typer.Option(False, "--fix", help="Rewrite drifted totals from their items"),
):
    """
    Check every OPEN bill against the sum of its non-cancelled items.

    Exits with status 1 when drift is found and --fix was not given.
    """
    from rest_api.models import Bill
    from rest_api.services.domain import BillAggregator
    from shared.config.constants import BillStatus
    from shared.infrastructure.db import get_db_context, run_atomic

    with get_db_context() as db:
        bills = BillAggregator(db)
        open_bills = db.scalars(
            select(Bill).where(Bill.status == BillStatus.OPEN).order_by(Bill.table_id)
        ).all()

        table = Table(title="Open Bills")
        table.add_column("Bill", style="cyan")
        table.add_column("Table", style="cyan")
        table.add_column("Stored", justify="right")
        table.add_column("Items", justify="right")
        table.add_column("Status")

        drifted = []
        for bill in open_bills:
            expected = bills.calculate_total(bill.id)
            if expected == bill.total_cents:
                table.add_row(bill.id, str(bill.table_id), str(bill.total_cents), str(expected), "[green]ok[/green]")
            else:
                drifted.append(bill.id)
                table.add_row(bill.id, str(bill.table_id), str(bill.total_cents), str(expected), "[red]drift[/red]")
        db.rollback()

        console.print(table)

        if not drifted:
            console.print(f"[green]✓ {len(open_bills)} open bills consistent[/green]")
            return

        if not fix:
            console.print(f"[red]✗ {len(drifted)} bills drifted. Re-run with --fix to repair[/red]")
            raise typer.Exit(1)

        for bill_id in drifted:
            repaired = run_atomic(db, lambda: bills.recompute(bill_id), name="verify_bills")
            console.print(f"[yellow]Fixed {bill_id}: total now {repaired.total_cents}[/yellow]")
        console.print(f"[green]✓ {len(drifted)} bills repaired[/green]")


@app.command()
def tables():
    """Show the floor overview."""
    from rest_api.services.domain import TableRegistry
    from shared.infrastructure.db import get_db_context
    from shared.infrastructure.events import LoggingNotificationGateway

    with get_db_context() as db:
        rows = TableRegistry(db, LoggingNotificationGateway()).list_table_status()

    table = Table(title="Floor")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Available")
    table.add_column("Occupied")
    table.add_column("Calling")
    table.add_column("Active orders", justify="right")
    table.add_column("Ready items", justify="right")
    table.add_column("Open total", justify="right", style="green")

    def flag(value: bool) -> str:
        return "✓" if value else "-"

    for row in rows:
        table.add_row(
            str(row.id),
            row.name,
            flag(row.is_available),
            flag(row.is_occupied),
            flag(row.is_calling_staff),
            str(row.active_orders),
            str(row.ready_items),
            f"{row.total_cents / 100:.2f}",
        )
    console.print(table)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Floor Ops Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
