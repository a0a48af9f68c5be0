"""
Pydantic models for tables and their charcoal sessions.

Models are frozen: every change produces a new instance, so a collection
handed to a reader is never modified underneath it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_CHANGES = 2


class TableStatus(str, Enum):
    """Lifecycle of a table's session."""

    AVAILABLE = "available"
    ACTIVE = "active"
    ALERT = "alert"


class TableSession(BaseModel):
    """Occupancy and countdown state of a single table."""

    model_config = ConfigDict(frozen=True)

    status: TableStatus = TableStatus.AVAILABLE
    current_change: int = Field(default=0, ge=0, le=MAX_CHANGES)
    timer_start_time: Optional[datetime] = None
    timer_end_time: Optional[datetime] = None

    @field_validator("timer_start_time", "timer_end_time")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_status_invariants(self) -> "TableSession":
        has_timers = (
            self.timer_start_time is not None and self.timer_end_time is not None
        )

        if self.status is TableStatus.AVAILABLE:
            if self.current_change != 0:
                raise ValueError("available session must have current_change 0")
            if self.timer_start_time is not None or self.timer_end_time is not None:
                raise ValueError("available session must not carry timers")

        elif self.status is TableStatus.ACTIVE:
            if not has_timers:
                raise ValueError("active session requires both timer fields")
            if self.timer_end_time <= self.timer_start_time:
                raise ValueError("timer_end_time must be after timer_start_time")
            if self.current_change < 1:
                raise ValueError("active session must count at least one change")

        elif self.current_change < 1:
            raise ValueError("alert session must count at least one change")

        return self

    @property
    def is_available(self) -> bool:
        return self.status is TableStatus.AVAILABLE


class Table(BaseModel):
    """A lounge table. `table_number` is the user-facing lookup key."""

    model_config = ConfigDict(frozen=True)

    id: int
    table_number: int = Field(ge=1)
    session: TableSession = Field(default_factory=TableSession)

    def with_session(self, session: TableSession) -> "Table":
        return self.model_copy(update={"session": session})
