"""
Health check and tick runner status endpoints.
"""

import time
from datetime import datetime, timezone

from starlette.requests import Request
from starlette.responses import JSONResponse

start_time = time.time()


async def health_check(request: Request) -> JSONResponse:
    """
    Basic health check endpoint.

    Returns 200 if the service is running.
    """
    return JSONResponse(
        {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": int(time.time() - start_time),
        }
    )


async def get_ticker_status(request: Request) -> JSONResponse:
    """Tick runner status, or a stopped placeholder before startup."""
    ticker = getattr(request.app.state, "ticker", None)
    if ticker is None:
        return JSONResponse(
            {
                "running": False,
                "interval_seconds": 0,
                "tick_count": 0,
                "last_tick_at": None,
                "last_error": None,
            }
        )
    return JSONResponse(ticker.get_status())
