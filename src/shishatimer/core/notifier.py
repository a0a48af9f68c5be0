"""
Alert notifiers.

A notifier is any zero-argument callable. The session engine calls it once
for every countdown that runs out while sound is enabled; how the alert is
actually voiced is up to whoever consumes it.
"""

from collections import deque
from datetime import datetime, timezone
from typing import Callable, List

Notifier = Callable[[], None]


def null_notifier() -> None:
    """Notifier that does nothing."""


class AlertFeed:
    """
    Records alert firings in a bounded queue for clients to poll.

    Clients drain the feed and play the sound on their side.
    """

    def __init__(self, maxlen: int = 50):
        self._pending: deque = deque(maxlen=maxlen)
        self.total_fired = 0

    def __call__(self) -> None:
        self.total_fired += 1
        self._pending.append(
            {
                "id": self.total_fired,
                "fired_at": datetime.now(timezone.utc).isoformat(),
            }
        )

    def __len__(self) -> int:
        return len(self._pending)

    def drain(self) -> List[dict]:
        """Drain and return all pending alerts."""
        alerts = list(self._pending)
        self._pending.clear()
        return alerts
