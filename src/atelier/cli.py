"""CLI entry point for the atelier simulator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from atelier import __version__

if TYPE_CHECKING:
    from atelier.engine.simulation import SimulationResult

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="atelier")
def main() -> None:
    """Atelier: robots sharing probabilistic skills to finish products."""


@main.command()
def init() -> None:
    """Initialize the atelier: create ~/.atelier/ and the run database."""
    from atelier.storage.database import Database

    db = Database()
    db.ensure_tables()
    console.print(f"[green]Atelier initialized at {db.data_dir}[/green]")
    console.print(f"  Database: {db.db_path}")


@main.command()
@click.option("--workers", type=int, default=None, help="Number of robot agents")
@click.option("--skills", type=int, default=None, help="Number of distinct skills")
@click.option("--products", type=int, default=None, help="Products in the backlog")
@click.option("--arrival-ms", type=int, default=None, help="λ1: gap between robot start-ups")
@click.option("--window-ms", type=int, default=None, help="λ2: how long to wait for the run to settle")
@click.option("--processing-ms", type=int, default=None, help="λ3: per-message processing time")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible runs")
@click.option("--no-record", is_flag=True, help="Do not store the run in the history database")
@click.option("--verbose", "-v", is_flag=True, help="Log every agent interaction")
def run(
    workers: int | None,
    skills: int | None,
    products: int | None,
    arrival_ms: int | None,
    window_ms: int | None,
    processing_ms: int | None,
    seed: int | None,
    no_record: bool,
    verbose: bool,
) -> None:
    """Run one simulation and print the final statistics."""
    from atelier.config import SimulationConfig
    from atelier.engine.simulation import run_simulation

    _setup_logging(verbose)
    try:
        config = SimulationConfig.from_env(
            workers=workers,
            skills=skills,
            products=products,
            arrival_interval_ms=arrival_ms,
            production_window_ms=window_ms,
            processing_delay_ms=processing_ms,
            seed=seed,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    console.print(
        f"[bold cyan]Simulation:[/bold cyan] {config.workers} robots, "
        f"{config.skills} skills, {config.products} products"
    )
    result = run_simulation(config, record=not no_record)
    _print_result(result)


@main.command()
@click.option("--limit", default=20, help="Number of runs to show")
def history(limit: int) -> None:
    """Show recently recorded runs."""
    from atelier.storage.database import Database

    db = Database()
    db.ensure_tables()
    runs = db.recent_runs(limit)

    if not runs:
        console.print("[dim]No runs recorded yet. Use `atelier run` first.[/dim]")
        return

    table = Table(title="Run History")
    table.add_column("Run", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Robots")
    table.add_column("Skills")
    table.add_column("Done", style="bold")
    table.add_column("Messages")
    table.add_column("Delegations")
    table.add_column("Date")

    for row in runs:
        table.add_row(
            str(row["run_id"]),
            str(row["status"]),
            str(row["workers"]),
            str(row["skills"]),
            f"{row['completed']}/{row['products']}",
            str(row["messages"]),
            str(row["delegations"]),
            str(row["started_at"])[:16],
        )

    console.print(table)


def _print_result(result: SimulationResult) -> None:
    """Print the end-of-run report."""
    status_color = {"complete": "green", "partial": "yellow", "idle": "red"}.get(
        result.status, "dim"
    )

    console.print(f"\n[{status_color}]Status: {result.status}[/{status_color}]")
    console.print(f"Products completed: {result.completed}")
    console.print(f"Messages exchanged: {result.messages}")
    console.print(f"Delegations: {result.delegations}")
    console.print(f"Duration: {result.duration_seconds:.2f}s")
    if result.timed_out:
        console.print("[yellow]Stopped at the end of the production window.[/yellow]")

    duplicates = result.coordinator.get("duplicate_confirmations") or {}
    for name, count in duplicates.items():
        console.print(f"[yellow]{name} confirmed {count} times[/yellow]")

    table = Table(title="Robots")
    table.add_column("Robot", style="cyan")
    table.add_column("Skills")
    table.add_column("Tasks")
    table.add_column("Applied")
    table.add_column("Failed")
    table.add_column("Helped")
    table.add_column("Confirms", style="bold")

    for worker in result.workers:
        skills = ", ".join(f"{s}={p:.2f}" for s, p in worker["skills"].items())
        table.add_row(
            worker["name"],
            skills,
            str(worker["tasks_received"]),
            str(worker["skills_applied"]),
            str(worker["skills_failed"]),
            str(worker["help_given"]),
            str(worker["confirms_sent"]),
        )

    console.print(table)
