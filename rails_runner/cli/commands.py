"""CLI commands for rails_runner.

Each command boots a runner client for the work directory, issues one
request and always shuts the worker down before exiting.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import typer
from rich.console import Console
from rich.table import Table

from rails_runner import __version__
from rails_runner.cli.shared.logging_utils import configure_stderr, ensure_rotating_log_file
from rails_runner.client import ClientState, NullClient, create_client
from rails_runner.config.loader import load_config
from rails_runner.core.contracts import RunnerClientContract

app = typer.Typer(
    name="rails-runner",
    help="Query a Rails application through a long-lived runner worker",
    no_args_is_help=True,
)

console = Console()


@dataclass
class CliOptions:
    workdir: Path
    config_path: Path | None = None


def version_callback(value: bool):
    if value:
        console.print(f"rails-runner v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    workdir: Path = typer.Option(Path("."), "--workdir", "-w", help="Rails application root"),
    config: Path = typer.Option(None, "--config", "-c", help="Path to a JSON config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Log worker diagnostics at DEBUG"),
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
):
    """rails-runner - Rails introspection over a runner worker."""
    configure_stderr(verbose=verbose)
    ensure_rotating_log_file("rails-runner")
    ctx.obj = CliOptions(workdir=workdir.resolve(), config_path=config)


def _open_client(ctx: typer.Context) -> RunnerClientContract:
    options: CliOptions = ctx.obj
    try:
        cfg = load_config(options.config_path)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2)
    return create_client(work_dir=options.workdir, config=cfg)


def _run(ctx: typer.Context, query: Callable[[RunnerClientContract], Any]) -> None:
    client = _open_client(ctx)
    try:
        result = query(client)
    finally:
        client.shutdown()
    if result is None:
        console.print("[yellow]No data returned. Run with --verbose for worker diagnostics.[/yellow]")
        raise typer.Exit(1)
    console.print_json(data=result)


@app.command()
def model(ctx: typer.Context, name: str = typer.Argument(..., help="Model class name, e.g. User")):
    """Show schema information for a model."""
    _run(ctx, lambda client: client.model(name))


@app.command()
def association(
    ctx: typer.Context,
    model_name: str = typer.Argument(..., help="Model owning the association"),
    association_name: str = typer.Argument(..., help="Association name, e.g. posts"),
):
    """Locate the target of a model association."""
    _run(ctx, lambda client: client.association_target_location(model_name, association_name))


@app.command("route-location")
def route_location(ctx: typer.Context, name: str = typer.Argument(..., help="Route helper name, e.g. users_path")):
    """Locate the routes file entry for a named route."""
    _run(ctx, lambda client: client.route_location(name))


@app.command()
def route(
    ctx: typer.Context,
    controller: str = typer.Argument(..., help="Controller name, e.g. users"),
    action: str = typer.Argument(..., help="Action name, e.g. index"),
):
    """Show the route that maps to a controller action."""
    _run(ctx, lambda client: client.route(controller, action))


@app.command()
def reload(ctx: typer.Context):
    """Ask the worker to reload the Rails application."""
    client = _open_client(ctx)
    try:
        client.trigger_reload()
    finally:
        client.shutdown()
    console.print("[green]Reload requested[/green]")


@app.command()
def status(ctx: typer.Context):
    """Boot the worker once and report whether it came up."""
    options: CliOptions = ctx.obj
    client = _open_client(ctx)
    booted = not isinstance(client, NullClient)
    try:
        table = Table(title="Rails Runner")
        table.add_column("Check", style="cyan")
        table.add_column("Value")
        table.add_row("work dir", str(options.workdir))
        table.add_row("client", type(client).__name__)
        table.add_row("state", getattr(client, "state", ClientState.STOPPED).value)
        console.print(table)
    finally:
        client.shutdown()
    if not booted:
        raise typer.Exit(1)
