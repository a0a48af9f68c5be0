"""
Shared HTTP helpers for CLI commands that talk to the running server.
"""

import os

import typer


def get_server_url() -> str:
    """Get the server URL from environment or default."""
    if url := os.getenv("SHISHA_SERVER_URL"):
        return url.rstrip("/")

    host = os.getenv("SHISHA_HOST", "localhost")
    if host == "0.0.0.0":
        host = "localhost"
    port = os.getenv("SHISHA_PORT", "8000")
    return f"http://{host}:{port}"


def _error_detail(e) -> str:
    try:
        return e.response.json().get("error", str(e))
    except Exception:
        return str(e.response.status_code)


def _http_get(path: str) -> dict:
    """Make a GET request to the running server."""
    import httpx

    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.get(url, timeout=10.0)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        typer.echo("Cannot connect to the shisha timer server. Is it running?")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as e:
        typer.echo(f"Server error: {_error_detail(e)}")
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)


def _http_post(path: str, data: dict = None) -> dict:
    """Make a POST request to the running server."""
    import httpx

    url = f"{get_server_url()}{path}"
    try:
        resp = httpx.post(url, json=data or {}, timeout=10.0)
        resp.raise_for_status()
        return resp.json()
    except httpx.ConnectError:
        typer.echo("Cannot connect to the shisha timer server. Is it running?")
        raise typer.Exit(code=1)
    except httpx.HTTPStatusError as e:
        typer.echo(f"Server error: {_error_detail(e)}")
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
