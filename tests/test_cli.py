"""
Unit tests for the shisha CLI commands.
"""

from unittest.mock import patch

import typer
from typer.testing import CliRunner

from shishatimer.cli import app
from shishatimer.cli._http import get_server_url
from shishatimer.cli.tables import format_table_line

runner = CliRunner()


def _table(n, status="available", change=0, countdown=None):
    return {
        "id": n,
        "table_number": n,
        "session": {
            "status": status,
            "current_change": change,
            "timer_start_time": None,
            "timer_end_time": None,
        },
        "remaining_seconds": None,
        "countdown": countdown,
    }


class TestCLIRoot:
    def test_help_shows_all_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in (
            "start",
            "status",
            "tables",
            "tap",
            "activate",
            "change",
            "reset",
            "transfer",
            "sound",
            "alerts",
            "watch",
        ):
            assert command in result.output


class TestTablesCommand:
    @patch("shishatimer.cli.tables._http_get")
    def test_tables_board(self, mock_get):
        mock_get.return_value = {
            "tables": [
                _table(1),
                _table(2, "active", 1, "12:05"),
                _table(3, "alert", 2),
            ],
            "sound_enabled": False,
        }
        result = runner.invoke(app, ["tables"])
        assert result.exit_code == 0
        assert "T1" in result.output
        assert "Available" in result.output
        assert "12:05" in result.output
        assert "ALERT!" in result.output
        assert "2/2" in result.output
        assert "Sound: off" in result.output
        mock_get.assert_called_once_with("/tables")

    @patch("shishatimer.cli.tables._http_get")
    def test_tables_empty(self, mock_get):
        mock_get.return_value = {"tables": [], "sound_enabled": True}
        result = runner.invoke(app, ["tables"])
        assert "No tables." in result.output


class TestIntentCommands:
    @patch("shishatimer.cli.tables._http_post")
    def test_tap(self, mock_post):
        mock_post.return_value = {
            "changed": True,
            "tables": [_table(5, "active", 1, "30:00")],
        }
        result = runner.invoke(app, ["tap", "5"])
        assert result.exit_code == 0
        assert "30:00" in result.output
        mock_post.assert_called_once_with("/tables/5/tap")

    @patch("shishatimer.cli.tables._http_post")
    def test_activate_noop(self, mock_post):
        mock_post.return_value = {"changed": False, "tables": [_table(5, "active", 1)]}
        result = runner.invoke(app, ["activate", "5"])
        assert result.exit_code == 0
        assert "Nothing to activate." in result.output

    @patch("shishatimer.cli.tables._http_post")
    def test_change_and_reset_paths(self, mock_post):
        mock_post.return_value = {"changed": True, "tables": [_table(6)]}
        runner.invoke(app, ["change", "6"])
        runner.invoke(app, ["reset", "6"])
        paths = [call.args[0] for call in mock_post.call_args_list]
        assert paths == ["/tables/6/charcoal", "/tables/6/reset"]

    @patch("shishatimer.cli.tables._http_post")
    def test_transfer(self, mock_post):
        mock_post.return_value = {
            "changed": True,
            "tables": [_table(3), _table(9, "active", 1, "21:00")],
        }
        result = runner.invoke(app, ["transfer", "3", "9"])
        assert result.exit_code == 0
        assert "21:00" in result.output
        mock_post.assert_called_once_with(
            "/tables/transfer", data={"from": 3, "to": 9}
        )

    @patch("shishatimer.cli.tables._http_post")
    def test_transfer_refused_is_not_an_error(self, mock_post):
        mock_post.return_value = {"changed": False, "tables": []}
        result = runner.invoke(app, ["transfer", "3", "9"])
        assert result.exit_code == 0
        assert "Nothing to transfer." in result.output


class TestSoundCommand:
    @patch("shishatimer.cli.tables._http_get")
    def test_show(self, mock_get):
        mock_get.return_value = {"enabled": True}
        result = runner.invoke(app, ["sound"])
        assert "Sound: on" in result.output

    @patch("shishatimer.cli.tables._http_post")
    def test_turn_off(self, mock_post):
        mock_post.return_value = {"enabled": False}
        result = runner.invoke(app, ["sound", "off"])
        assert "Sound: off" in result.output
        mock_post.assert_called_once_with("/sound", data={"enabled": False})

    def test_rejects_bad_state(self):
        result = runner.invoke(app, ["sound", "loud"])
        assert result.exit_code == 1


class TestAlertsCommand:
    @patch("shishatimer.cli.tables._http_get")
    def test_no_alerts(self, mock_get):
        mock_get.return_value = {"alerts": []}
        result = runner.invoke(app, ["alerts"])
        assert "No new alerts." in result.output

    @patch("shishatimer.cli.tables._http_get")
    def test_lists_alerts(self, mock_get):
        mock_get.return_value = {
            "alerts": [{"id": 1, "fired_at": "2026-10-19T18:30:00+00:00"}]
        }
        result = runner.invoke(app, ["alerts"])
        assert "2026-10-19T18:30:00+00:00" in result.output


class TestStatusCommand:
    @patch("shishatimer.cli.main._http_get")
    def test_status(self, mock_get):
        mock_get.side_effect = [
            {"status": "healthy", "uptime_seconds": 42},
            {"running": True, "tick_count": 40, "last_tick_at": None, "last_error": None},
        ]
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "healthy" in result.output
        assert "RUNNING" in result.output


class TestServerConnection:
    @patch("shishatimer.cli.tables._http_get")
    def test_unreachable_server_exits(self, mock_get):
        def refuse(path):
            typer.echo("Cannot connect to the shisha timer server. Is it running?")
            raise typer.Exit(code=1)

        mock_get.side_effect = refuse
        result = runner.invoke(app, ["tables"])
        assert result.exit_code == 1
        assert "Cannot connect" in result.output

    def test_server_url_override(self, monkeypatch):
        monkeypatch.setenv("SHISHA_SERVER_URL", "http://lounge.local:9000/")
        assert get_server_url() == "http://lounge.local:9000"

    def test_server_url_default(self, monkeypatch):
        monkeypatch.delenv("SHISHA_SERVER_URL", raising=False)
        monkeypatch.setenv("SHISHA_HOST", "0.0.0.0")
        monkeypatch.setenv("SHISHA_PORT", "8123")
        assert get_server_url() == "http://localhost:8123"


def test_format_table_line_hides_badge_when_available():
    assert "/2" not in format_table_line(_table(1))
    assert "1/2" in format_table_line(_table(1, "active", 1, "29:59"))
