"""
CLI commands for working the tables of a running server.

Usage:
    shisha tables
    shisha tap <n>
    shisha activate <n>
    shisha change <n>
    shisha reset <n>
    shisha transfer <from> <to>
    shisha sound [on|off]
    shisha alerts
    shisha watch
"""

import time
from typing import Optional

import typer

from shishatimer.cli._http import _http_get, _http_post

_STATUS_LABELS = {
    "available": "Available",
    "active": "Active",
    "alert": "ALERT!",
}


def format_table_line(table: dict) -> str:
    """One line per table: number, status, countdown and change badge."""
    session = table.get("session", {})
    status = session.get("status", "available")
    line = f"  T{table.get('table_number', '?'):<3} {_STATUS_LABELS.get(status, status):<10}"

    if status == "active" and table.get("countdown"):
        line += f" {table['countdown']}"
    else:
        line += "      "

    change = session.get("current_change", 0)
    if change > 0 and status != "available":
        line += f"  {change}/2"
    return line


def _print_tables(data: dict) -> None:
    tables = data.get("tables", [])
    if not tables:
        typer.echo("No tables.")
        return
    for table in tables:
        typer.echo(format_table_line(table))


def _report_intent(data: dict, action: str) -> None:
    if not data.get("changed"):
        typer.echo(f"Nothing to {action}.")
        return
    for table in data.get("tables", []):
        typer.echo(format_table_line(table))


def register_commands(app: typer.Typer):
    """Register the table commands on the root app."""

    @app.command("tables")
    def list_tables():
        """Show all tables with their countdowns."""
        data = _http_get("/tables")
        _print_tables(data)
        typer.echo(f"\n  Sound: {'on' if data.get('sound_enabled') else 'off'}")

    @app.command("tap")
    def tap(table: int = typer.Argument(..., help="Table number")):
        """Tap a table: start it if available, change charcoal if alerting."""
        _report_intent(_http_post(f"/tables/{table}/tap"), "do")

    @app.command("activate")
    def activate(table: int = typer.Argument(..., help="Table number")):
        """Start the charcoal countdown on an available table."""
        _report_intent(_http_post(f"/tables/{table}/activate"), "activate")

    @app.command("change")
    def change(table: int = typer.Argument(..., help="Table number")):
        """Record a charcoal change on an alerting table."""
        _report_intent(_http_post(f"/tables/{table}/charcoal"), "change")

    @app.command("reset")
    def reset(table: int = typer.Argument(..., help="Table number")):
        """Force a table back to available."""
        _report_intent(_http_post(f"/tables/{table}/reset"), "reset")

    @app.command("transfer")
    def transfer(
        source: int = typer.Argument(..., help="Occupied table to move from"),
        target: int = typer.Argument(..., help="Available table to move to"),
    ):
        """Move a running session to another table."""
        _report_intent(
            _http_post("/tables/transfer", data={"from": source, "to": target}),
            "transfer",
        )

    @app.command("sound")
    def sound(
        state: Optional[str] = typer.Argument(None, help="'on' or 'off'"),
    ):
        """Show or toggle the alert sound."""
        if state is None:
            data = _http_get("/sound")
        elif state.lower() in ("on", "off"):
            data = _http_post("/sound", data={"enabled": state.lower() == "on"})
        else:
            typer.echo("Error: state must be 'on' or 'off'.")
            raise typer.Exit(code=1)
        typer.echo(f"Sound: {'on' if data.get('enabled') else 'off'}")

    @app.command("alerts")
    def alerts():
        """Drain alerts fired since the last poll."""
        pending = _http_get("/alerts").get("alerts", [])
        if not pending:
            typer.echo("No new alerts.")
            return
        for alert in pending:
            typer.echo(f"  Alert fired at {alert.get('fired_at')}")

    @app.command("watch")
    def watch(
        interval: float = typer.Option(1.0, "--interval", "-i", help="Seconds between refreshes"),
        bell: bool = typer.Option(True, "--bell/--no-bell", help="Ring the terminal bell on alerts"),
    ):
        """Refresh the table board and ring on alerts until Ctrl+C."""
        try:
            while True:
                data = _http_get("/tables")
                fired = _http_get("/alerts").get("alerts", [])
                typer.clear()
                _print_tables(data)
                if fired:
                    typer.echo(f"\n  {len(fired)} new alert(s)")
                    if bell:
                        typer.echo("\a", nl=False)
                time.sleep(interval)
        except KeyboardInterrupt:
            typer.echo("")
