"""
Shisha CLI - charcoal timer for the lounge floor.

This package splits CLI commands into focused modules:
- main:   start, status
- tables: tables, tap, activate, change, reset, transfer, sound, alerts, watch
"""

import typer

from shishatimer.cli._http import _http_get, _http_post  # noqa: F401 re-export for test patching
from shishatimer.cli.main import configure_logging, register_commands
from shishatimer.cli.tables import register_commands as register_table_commands

app = typer.Typer(help="Shisha CLI - charcoal timer for the lounge floor")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    Shisha CLI - charcoal timer for the lounge floor.
    """
    configure_logging(verbose)


register_commands(app)
register_table_commands(app)

if __name__ == "__main__":
    app()
