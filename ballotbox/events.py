"""Ordered, append-only log of election notifications."""

import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from ballotbox.models import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """A notification together with the call that produced it.

    Attributes:
        sequence: Position in the log, starting at 0
        operation: Name of the election operation that emitted the event
        caller: Identity that invoked the operation
        event: The notification itself
    """
    sequence: int
    operation: str
    caller: str
    event: Event

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "operation": self.operation,
            "caller": self.caller,
            **self.event.to_dict(),
        }


Subscriber = Callable[[LogEntry], None]


class EventLog:
    """Append-only notification log with subscribers.

    Entries are appended by the election while it holds its own lock;
    subscribers are notified separately via publish() once that lock has
    been released, so a callback may safely read from the election.
    """

    def __init__(self):
        self._entries: list[LogEntry] = []
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def append(self, event: Event, operation: str, caller: str) -> LogEntry:
        with self._lock:
            entry = LogEntry(
                sequence=len(self._entries),
                operation=operation,
                caller=caller,
                event=event,
            )
            self._entries.append(entry)
        return entry

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for future entries.

        Returns:
            A function that removes the subscription when called.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, entries: list[LogEntry]) -> None:
        """Deliver entries to every subscriber, in log order."""
        with self._lock:
            subscribers = list(self._subscribers)
        for entry in entries:
            for callback in subscribers:
                try:
                    callback(entry)
                except Exception:
                    # The operation already succeeded; report and carry on
                    logger.exception(
                        "Subscriber %r failed on %s #%d",
                        callback, entry.event.name, entry.sequence,
                    )

    def since(self, sequence: int) -> list[LogEntry]:
        """Return entries with a sequence number >= the given one."""
        with self._lock:
            return self._entries[max(sequence, 0):]

    def of_type(self, event_cls: type[Event]) -> list[Event]:
        """Return the events of one notification type, in order."""
        return [entry.event for entry in self if isinstance(entry.event, event_cls)]

    def __iter__(self) -> Iterator[LogEntry]:
        with self._lock:
            entries = list(self._entries)
        return iter(entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class EventFeed:
    """Read-only view of an EventLog.

    Readers can iterate, query and subscribe, but only the election that
    owns the log can append to it or publish.
    """

    def __init__(self, log: EventLog):
        self._log = log

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self._log.subscribe(callback)

    def since(self, sequence: int) -> list[LogEntry]:
        return self._log.since(sequence)

    def of_type(self, event_cls: type[Event]) -> list[Event]:
        return self._log.of_type(event_cls)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._log)

    def __len__(self) -> int:
        return len(self._log)
