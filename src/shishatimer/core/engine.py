"""
Session Engine: applies session transitions to the table registry.

Every operation is addressed by table number. Unknown tables and intents
that don't fit a table's current status are ignored; they are what a stale
screen or a double tap produces, not errors. Each committed change is
persisted and pushed to subscribers.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Mapping, Optional

from shishatimer.core import transitions
from shishatimer.core.notifier import Notifier
from shishatimer.core.registry import TableRegistry
from shishatimer.logger import get_logger
from shishatimer.models import Table, TableSession, TableStatus

logger = get_logger(__name__)

Subscriber = Callable[[Mapping[int, Table]], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionEngine:
    """State container for all table sessions."""

    def __init__(
        self,
        registry: TableRegistry,
        notifier: Optional[Notifier] = None,
        sound_enabled: bool = True,
        session_length: timedelta = transitions.SESSION_LENGTH,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.notifier = notifier
        self.session_length = session_length
        self._sound_enabled = sound_enabled
        self._clock = clock
        self._subscribers: List[Subscriber] = []

    # -- Queries -------------------------------------------------------------

    @property
    def tables(self) -> Mapping[int, Table]:
        return self.registry.tables

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    def set_sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = bool(enabled)
        logger.info(f"Alert sound {'enabled' if self._sound_enabled else 'disabled'}")

    def now(self) -> datetime:
        return self._clock()

    # -- Subscriptions -------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback that receives the table mapping after each change.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- Commands ------------------------------------------------------------

    def activate(
        self, table_number: int, now: Optional[datetime] = None
    ) -> Mapping[int, Table]:
        """Start the first countdown on an available table."""
        now = self._resolve_now(now)
        return self._apply(
            table_number,
            lambda s: transitions.activate(s, now, self.session_length),
            "activated",
        )

    def handle_charcoal_change(
        self, table_number: int, now: Optional[datetime] = None
    ) -> Mapping[int, Table]:
        """Acknowledge an alerting table: restart its countdown or free it."""
        now = self._resolve_now(now)
        return self._apply(
            table_number,
            lambda s: transitions.charcoal_change(s, now, self.session_length),
            "charcoal changed",
        )

    def reset_table(self, table_number: int) -> Mapping[int, Table]:
        """Force a table back to available, whatever its status."""
        return self._apply(
            table_number,
            lambda s: transitions.available_session(),
            "reset",
            force=True,
        )

    def tap(self, table_number: int, now: Optional[datetime] = None) -> Mapping[int, Table]:
        """
        The single-tap gesture: activate an available table, record a
        charcoal change on an alerting one, ignore a running countdown.
        """
        table = self.registry.get(table_number)
        if table is None:
            logger.debug(f"Ignoring tap on unknown table {table_number}")
            return self.tables

        status = table.session.status
        if status is TableStatus.AVAILABLE:
            return self.activate(table_number, now)
        if status is TableStatus.ALERT:
            return self.handle_charcoal_change(table_number, now)
        return self.tables

    def transfer_table(self, from_number: int, to_number: int) -> Mapping[int, Table]:
        """
        Move an occupied session to an available table.

        The countdown moves as is; both tables change in one commit.
        """
        source = self.registry.get(from_number)
        target = self.registry.get(to_number)

        if source is None or target is None:
            logger.debug(f"Ignoring transfer {from_number} -> {to_number}: unknown table")
            return self.tables
        if source.session.is_available or not target.session.is_available:
            logger.debug(
                f"Ignoring transfer {from_number} -> {to_number}: "
                f"{source.session.status.value} -> {target.session.status.value}"
            )
            return self.tables

        moved = source.session.model_copy()
        tables = self._commit(
            {
                to_number: target.with_session(moved),
                from_number: source.with_session(transitions.available_session()),
            }
        )
        logger.info(f"Transferred table {from_number} to table {to_number}")
        return tables

    def update_timers(self, now: Optional[datetime] = None) -> Mapping[int, Table]:
        """
        Expiry sweep. Moves every elapsed countdown to alert.

        All transitions of one sweep go out as a single commit; a sweep
        that finds nothing elapsed writes nothing.
        """
        now = self._resolve_now(now)
        updates: Dict[int, Table] = {}

        for table_number, table in self.registry.tables.items():
            expired = transitions.expire(table.session, now)
            if expired is not table.session:
                updates[table_number] = table.with_session(expired)

        if not updates:
            return self.tables

        tables = self._commit(updates)
        logger.info(f"Timer expired on tables {sorted(updates)}")

        for _ in updates:
            self._fire_alert()
        return tables

    # -- Internal ------------------------------------------------------------

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    def _apply(
        self,
        table_number: int,
        transition: Callable[[TableSession], TableSession],
        action: str,
        force: bool = False,
    ) -> Mapping[int, Table]:
        table = self.registry.get(table_number)
        if table is None:
            logger.debug(f"Ignoring {action} on unknown table {table_number}")
            return self.tables

        session = transition(table.session)
        if session is table.session and not force:
            logger.debug(
                f"Ignoring {action} on table {table_number} "
                f"({table.session.status.value})"
            )
            return self.tables

        tables = self._commit({table_number: table.with_session(session)})
        logger.info(
            f"Table {table_number} {action}: {session.status.value} "
            f"({session.current_change} changes)"
        )
        return tables

    def _commit(self, updates: Mapping[int, Table]) -> Mapping[int, Table]:
        tables = self.registry.replace(updates)
        self.registry.save()
        self._publish(tables)
        return tables

    def _publish(self, tables: Mapping[int, Table]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(tables)
            except Exception as e:
                logger.error(f"Table subscriber failed: {e}")

    def _fire_alert(self) -> None:
        if not self._sound_enabled or self.notifier is None:
            return
        try:
            self.notifier()
        except Exception as e:
            logger.error(f"Error playing alert sound: {e}")
