"""
Pure session transitions.

Each function takes the current session (plus the current time where a
countdown is involved) and returns the next session. When an intent does
not apply to the session's status the very same object is returned, so
callers can detect a no-op with an identity check.
"""

from datetime import datetime, timedelta
from typing import Optional

from shishatimer.models import MAX_CHANGES, TableSession, TableStatus

SESSION_LENGTH = timedelta(minutes=30)


def available_session() -> TableSession:
    """The baseline: no occupancy, no changes, no timers."""
    return TableSession()


def _countdown(now: datetime, change: int, length: timedelta) -> TableSession:
    return TableSession(
        status=TableStatus.ACTIVE,
        current_change=change,
        timer_start_time=now,
        timer_end_time=now + length,
    )


def activate(
    session: TableSession, now: datetime, length: timedelta = SESSION_LENGTH
) -> TableSession:
    """Start the first countdown on an available table."""
    if session.status is not TableStatus.AVAILABLE:
        return session
    return _countdown(now, 1, length)


def charcoal_change(
    session: TableSession, now: datetime, length: timedelta = SESSION_LENGTH
) -> TableSession:
    """
    Acknowledge an alert.

    Below the change limit this restarts the countdown and counts one more
    change; at the limit it ends the occupancy cycle.
    """
    if session.status is not TableStatus.ALERT:
        return session
    if session.current_change >= MAX_CHANGES:
        return available_session()
    return _countdown(now, session.current_change + 1, length)


def remaining_seconds(session: TableSession, now: datetime) -> Optional[int]:
    """
    Whole seconds until the countdown ends, truncated toward zero.

    Returns None when the session has no running countdown.
    """
    if session.status is not TableStatus.ACTIVE or session.timer_end_time is None:
        return None
    return int((session.timer_end_time - now).total_seconds())


def expire(session: TableSession, now: datetime) -> TableSession:
    """Turn an elapsed countdown into an alert, keeping its counters and timers."""
    remaining = remaining_seconds(session, now)
    if remaining is None or remaining > 0:
        return session
    return session.model_copy(update={"status": TableStatus.ALERT})


def countdown_seconds(session: TableSession, now: datetime) -> int:
    """Seconds left for display; never negative, 0 without a countdown."""
    remaining = remaining_seconds(session, now)
    return max(0, remaining) if remaining is not None else 0


def format_countdown(seconds: int) -> str:
    """Render seconds as MM:SS."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"
