"""
Top-level CLI commands: start, status.
"""

import os
from typing import Optional

import typer

from shishatimer.cli._http import _http_get, get_server_url


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from shishatimer.logger import setup_logging

    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(level=log_level)


def register_commands(app: typer.Typer):
    """Register the server commands on the root app."""

    @app.command()
    def start(
        host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
        port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
        debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level"),
    ):
        """Start the shisha timer server."""
        from shishatimer.server import run

        if debug:
            os.environ["LOG_LEVEL"] = "DEBUG"

        typer.echo("Starting shisha timer server...")
        run(host=host, port=port)

    @app.command()
    def status():
        """Show server health and tick runner state."""
        health = _http_get("/health")
        ticker = _http_get("/ticker/status")

        typer.echo(f"  Server:      {get_server_url()} ({health.get('status', 'unknown')})")
        typer.echo(f"  Uptime:      {health.get('uptime_seconds', 0)}s")
        typer.echo(f"  Ticker:      {'RUNNING' if ticker.get('running') else 'STOPPED'}")
        typer.echo(f"  Ticks:       {ticker.get('tick_count', 0)}")

        if ticker.get("last_tick_at"):
            typer.echo(f"  Last tick:   {ticker['last_tick_at']}")
        if ticker.get("last_error"):
            typer.echo(f"  Last error:  {ticker['last_error']}")
