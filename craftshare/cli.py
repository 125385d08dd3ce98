"""CraftShare CLI.

Commands:
- init: Initialize database schema
- check: Run startup validation
- recompute: Recompute a project's completion flag
- resources: Show materials/tools committed to a project
- stock: Show a user's stock with committed quantities
- web serve: Run the API server
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from craftshare.completion import recompute_completion
from craftshare.config import get_config
from craftshare.core.logging import configure_logging
from craftshare.db.connection import close_db, get_session, init_db
from craftshare.errors import CraftShareError
from craftshare.inventory import list_for_project, stock_summary
from craftshare.models import ResourceKind, TaskStatus
from craftshare.startup_validation import StartupValidationError, run_startup_validation

app = typer.Typer(
    name="craftshare",
    help="CraftShare - shared inventory and projects for hobby crafters",
    no_args_is_help=True,
)
web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


@app.callback()
def main():
    """CraftShare - shared inventory and projects for hobby crafters."""
    configure_logging()


def _run(coro):
    async def _wrapped():
        try:
            return await coro
        finally:
            await close_db()

    try:
        return asyncio.run(_wrapped())
    except CraftShareError as exc:
        console.print(f"[red]✗ {exc.kind.value}:[/red] {exc.message}")
        raise typer.Exit(code=1) from exc


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    _run(init_db(drop=drop))
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def check():
    """Validate configuration and database connectivity."""
    try:
        _run(run_startup_validation())
    except StartupValidationError as exc:
        console.print(f"[red]✗ Startup validation failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print("[bold green]✓[/bold green] Startup validation passed")


@app.command()
def recompute(project_id: int = typer.Argument(..., help="Project ID")):
    """Recompute a project's completion flag from its tasks."""

    async def _recompute():
        async with get_session() as session:
            return await recompute_completion(session, project_id)

    status = _run(_recompute())

    table = Table(title=f"Project {project_id} tasks")
    table.add_column("Status")
    table.add_column("Tasks", justify="right")
    for task_status in TaskStatus:
        table.add_row(task_status.value, str(status.status_counts.get(task_status, 0)))
    console.print(table)

    label = "[green]completed[/green]" if status.is_completed else "[yellow]not completed[/yellow]"
    console.print(f"Project {project_id} is {label} ({status.total_tasks} tasks)")


@app.command()
def resources(
    project_id: int = typer.Argument(..., help="Project ID"),
    kind: ResourceKind = typer.Option(ResourceKind.MATERIAL, "--kind", help="material or tool"),
):
    """Show resources committed to a project."""

    async def _list():
        async with get_session() as session:
            return await list_for_project(session, project_id, kind)

    lines = _run(_list())
    if not lines:
        console.print(f"[yellow]No {kind.value}s committed to project {project_id}[/yellow]")
        return

    table = Table(title=f"Project {project_id} {kind.value}s")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Owner", justify="right")
    table.add_column("Qty used", justify="right")
    table.add_column("Unit cost", justify="right")
    table.add_column("Line cost", justify="right")
    for line in lines:
        table.add_row(
            str(line.resource_id),
            line.name,
            str(line.user_id),
            str(line.quantity_used),
            f"{line.cost:.2f}",
            f"{line.line_cost:.2f}",
        )
    console.print(table)


@app.command()
def stock(
    user_id: int = typer.Argument(..., help="User ID"),
    kind: ResourceKind = typer.Option(ResourceKind.MATERIAL, "--kind", help="material or tool"),
):
    """Show a user's stock with quantities committed to projects."""

    async def _summary():
        async with get_session() as session:
            return await stock_summary(session, user_id, kind)

    positions = _run(_summary())

    table = Table(title=f"User {user_id} {kind.value}s")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("On hand", justify="right")
    table.add_column("Committed", justify="right")
    table.add_column("Owned", justify="right")
    for p in positions:
        table.add_row(str(p.resource_id), p.name, str(p.on_hand), str(p.committed), str(p.total_owned))
    console.print(table)


@web_cli.command("serve")
def web_serve(
    host: Optional[str] = typer.Option(None, help="Host to bind (default: HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, help="Port to bind (default: PORT or 8000)"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI server."""
    import uvicorn

    server = get_config().server
    host = host or server.host
    port = port or server.port
    typer.echo(f"Starting CraftShare API on http://{host}:{port}")
    uvicorn.run("craftshare.web.app:app", host=host, port=port, reload=reload, workers=1)


if __name__ == "__main__":
    app()
