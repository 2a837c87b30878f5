"""Fan-out channel for worker log and status records."""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class LogType(str, Enum):
    """Fixed vocabulary of worker log records."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SUCCESS = "success"
    PROCESS = "process"
    DEBUG = "debug"
    COMPLETE = "complete"
    STOP = "stop"


@dataclass(frozen=True)
class LogEntry:
    type: LogType
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "message": self.message}


class Subscription(Generic[T]):
    """One subscriber's unbounded queue of records, in emission order."""

    def __init__(self, broadcaster: Broadcaster[T]) -> None:
        self._broadcaster = broadcaster
        self._queue: queue.Queue[T] = queue.Queue()

    def _put(self, record: T) -> None:
        self._queue.put(record)

    def get(self, timeout: float | None = None) -> T | None:
        """Next record, or None when the timeout elapses."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[T]:
        """All records currently queued, without blocking."""
        records: list[T] = []
        while True:
            try:
                records.append(self._queue.get_nowait())
            except queue.Empty:
                return records

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)

    def __iter__(self) -> Iterator[T]:
        while True:
            yield self._queue.get()

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Broadcaster(Generic[T]):
    """Deliver each published record to every current subscriber. No replay."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription[T]] = []

    def subscribe(self) -> Subscription[T]:
        subscription = Subscription(self)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, record: T) -> None:
        # Held across delivery so concurrent publishers cannot interleave per subscriber.
        with self._lock:
            for subscription in self._subscriptions:
                subscription._put(record)


__all__ = ["Broadcaster", "LogEntry", "LogType", "Subscription"]
