"""
Talier CLI.

Command-line interface for common operations.
"""

import sys

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="talier",
    help="Talier meal planning and payments CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create missing database tables."""
    from shared.infrastructure.db import engine
    from rest_api.models import Base

    console.print(f"[blue]Creating tables on: {engine.dialect.name}[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
        console.print("[green]✓ Tables created/verified[/green]")
    except Exception as e:
        console.print(f"[red]✗ Table creation failed: {e}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Payment Commands
# =============================================================================

@app.command()
def reconcile_payments():
    """Apply logged charges that arrived before their order."""
    from shared.infrastructure.db import get_db_context
    from rest_api.services.domain import OrderService

    with get_db_context() as db:
        report = OrderService(db).reconcile_pending_payments()

    table = Table(title="Payment Reconciliation")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green")

    table.add_row("References examined", str(report.examined))
    table.add_row("Charges applied", str(report.applied))
    table.add_row("Still waiting for an order", str(report.waiting))

    console.print(table)


@app.command()
def breaker_stats():
    """Show circuit breaker state for outbound gateways."""
    from rest_api.services.payments.circuit_breaker import get_all_breaker_stats

    table = Table(title="Circuit Breakers")
    table.add_column("Breaker", style="cyan")
    table.add_column("State", style="green")
    table.add_column("Calls", style="yellow")
    table.add_column("Failed", style="red")
    table.add_column("Rejected", style="red")

    for name, stats in get_all_breaker_stats().items():
        table.add_row(
            name,
            str(stats["state"]),
            str(stats["total_calls"]),
            str(stats["failed_calls"]),
            str(stats["rejected_calls"]),
        )

    console.print(table)


@app.command()
def order_number(
    prefix: str = typer.Option(None, help="Three uppercase letters (defaults to ORDER_NUMBER_PREFIX)"),
):
    """Print a freshly generated order number."""
    from shared.config.settings import settings
    from shared.utils.exceptions import ValidationError
    from rest_api.services.payments.references import generate_order_number

    try:
        console.print(generate_order_number(prefix or settings.order_number_prefix))
    except ValidationError as e:
        console.print(f"[red]✗ {e.detail}[/red]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    table = Table(title="Talier Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
