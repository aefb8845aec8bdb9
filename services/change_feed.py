"""In-process change notifications for staff records."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class StaffChange:
    """A committed change to one staff record."""

    event: ChangeType
    record_id: UUID


Subscriber = Callable[[StaffChange], None]


class StaffChangeFeed:
    """Fan-out of staff record changes to subscribers.

    Listeners use it only to invalidate cached lists; reads never depend on
    it.
    """

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: StaffChange) -> None:
        """Deliver a change to every subscriber.

        A failing subscriber is logged and skipped; the change has already
        been committed.
        """
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception(
                    "Change subscriber failed: event=%s, record_id=%s",
                    change.event.value,
                    change.record_id,
                )
