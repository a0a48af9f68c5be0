"""
Table API routes.

Intent endpoints always answer 200: an intent that doesn't apply to the
table is ignored, and the response says whether anything changed.
"""

import json
from datetime import datetime
from typing import Optional

from starlette.requests import Request
from starlette.responses import JSONResponse

from shishatimer.core.engine import SessionEngine
from shishatimer.core.transitions import countdown_seconds, format_countdown
from shishatimer.models import Table, TableStatus


def _engine(request: Request) -> SessionEngine:
    return request.app.state.engine


def serialize_table(table: Table, now: datetime) -> dict:
    """Table record plus the countdown a display needs."""
    data = table.model_dump(mode="json")
    session = table.session
    seconds = countdown_seconds(session, now)
    data["remaining_seconds"] = (
        seconds if session.status is TableStatus.ACTIVE else None
    )
    data["countdown"] = (
        format_countdown(seconds) if session.status is TableStatus.ACTIVE else None
    )
    return data


async def _read_json(request: Request) -> Optional[dict]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400)


def _intent_response(
    engine: SessionEngine, before: int, table_numbers: list
) -> JSONResponse:
    now = engine.now()
    tables = [
        serialize_table(table, now)
        for n in table_numbers
        if (table := engine.registry.get(n)) is not None
    ]
    return JSONResponse(
        {
            "changed": engine.registry.version != before,
            "tables": tables,
        }
    )


async def list_tables(request: Request) -> JSONResponse:
    """All tables ordered by number."""
    engine = _engine(request)
    now = engine.now()
    return JSONResponse(
        {
            "tables": [serialize_table(t, now) for t in engine.registry.ordered()],
            "sound_enabled": engine.sound_enabled,
            "now": now.isoformat(),
        }
    )


async def get_table(request: Request) -> JSONResponse:
    engine = _engine(request)
    table_number = request.path_params["table_number"]
    if not (table := engine.registry.get(table_number)):
        return JSONResponse(
            {"error": f"Table {table_number} not found"}, status_code=404
        )
    return JSONResponse(serialize_table(table, engine.now()))


async def activate_table(request: Request) -> JSONResponse:
    engine = _engine(request)
    table_number = request.path_params["table_number"]
    before = engine.registry.version
    engine.activate(table_number)
    return _intent_response(engine, before, [table_number])


async def charcoal_change(request: Request) -> JSONResponse:
    engine = _engine(request)
    table_number = request.path_params["table_number"]
    before = engine.registry.version
    engine.handle_charcoal_change(table_number)
    return _intent_response(engine, before, [table_number])


async def tap_table(request: Request) -> JSONResponse:
    engine = _engine(request)
    table_number = request.path_params["table_number"]
    before = engine.registry.version
    engine.tap(table_number)
    return _intent_response(engine, before, [table_number])


async def reset_table(request: Request) -> JSONResponse:
    engine = _engine(request)
    table_number = request.path_params["table_number"]
    before = engine.registry.version
    engine.reset_table(table_number)
    return _intent_response(engine, before, [table_number])


async def transfer_table(request: Request) -> JSONResponse:
    """Move a session: body {"from": <table>, "to": <table>}."""
    if (body := await _read_json(request)) is None:
        return _bad_request("Expected a JSON object body")

    source, target = body.get("from"), body.get("to")
    if not all(
        isinstance(n, int) and not isinstance(n, bool) for n in (source, target)
    ):
        return _bad_request("'from' and 'to' must be table numbers")

    engine = _engine(request)
    before = engine.registry.version
    engine.transfer_table(source, target)
    return _intent_response(engine, before, [source, target])


async def get_sound(request: Request) -> JSONResponse:
    return JSONResponse({"enabled": _engine(request).sound_enabled})


async def set_sound(request: Request) -> JSONResponse:
    """Toggle the alert sound: body {"enabled": bool}."""
    if (body := await _read_json(request)) is None:
        return _bad_request("Expected a JSON object body")

    enabled = body.get("enabled")
    if not isinstance(enabled, bool):
        return _bad_request("'enabled' must be true or false")

    engine = _engine(request)
    engine.set_sound_enabled(enabled)
    return JSONResponse({"enabled": engine.sound_enabled})


async def drain_alerts(request: Request) -> JSONResponse:
    """Pending alert firings since the last poll."""
    feed = request.app.state.alert_feed
    return JSONResponse({"alerts": feed.drain()})
