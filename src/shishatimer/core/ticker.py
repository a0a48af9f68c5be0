"""
Tick Runner: drives the expiry sweep about once per second.

The interval is advisory. Each sweep compares stored end times against the
wall clock, so a late or skipped tick only delays an alert, it never loses
one.
"""

import asyncio
from datetime import datetime
from typing import Optional

from shishatimer.core.engine import SessionEngine
from shishatimer.logger import get_logger

logger = get_logger(__name__)

_active_instance: Optional["TickRunner"] = None


def get_active_ticker() -> Optional["TickRunner"]:
    """Return the running TickRunner instance, or None."""
    return _active_instance


class TickRunner:
    """Runs SessionEngine.update_timers on a fixed interval."""

    def __init__(self, engine: SessionEngine, interval: float = 1.0):
        self.engine = engine
        self.interval = interval
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._tick_count = 0
        self._last_tick_at: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the tick loop. Starting a running ticker does nothing."""
        global _active_instance
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        _active_instance = self
        logger.info(f"TickRunner started (every {self.interval}s)")

    async def stop(self):
        """Stop the tick loop and wait for it to finish."""
        global _active_instance
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if _active_instance is self:
            _active_instance = None
        logger.info("TickRunner stopped.")

    def tick_now(self):
        """Run one sweep immediately."""
        self._tick()

    def get_status(self) -> dict:
        return {
            "running": self._running,
            "interval_seconds": self.interval,
            "tick_count": self._tick_count,
            "last_tick_at": self._last_tick_at.isoformat() if self._last_tick_at else None,
            "last_error": self._last_error,
        }

    # -- Internal ------------------------------------------------------------

    async def _run_loop(self):
        while self._running:
            self._tick()
            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break

    def _tick(self):
        self._tick_count += 1
        try:
            now = self.engine.now()
            self._last_tick_at = now
            self.engine.update_timers(now)
            self._last_error = None
        except Exception as e:
            logger.error(f"Tick error: {e}")
            self._last_error = str(e)
