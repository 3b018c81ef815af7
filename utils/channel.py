"""
MODULE: utils.channel
RESPONSIBILITY: Bounded, closable FIFO for handing work between worker pools.
ALLOWED: queue, threading.
FORBIDDEN: Business logic, IO.
ERRORS: ChannelClosedError.

A Channel wraps queue.Queue(maxsize). Producers block on send() while the
channel is full; consumers iterate until the channel is closed and drained.
One close() releases every consumer: each consumer that sees the end marker
puts it back for the next one.
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosedError(RuntimeError):
    """send() on a closed channel"""


class Channel(Generic[T]):
    """Bounded multi-producer / multi-consumer channel."""

    def __init__(self, capacity: int = 0):
        """
        Args:
            capacity: Maximum buffered items; 0 means unbounded
        """
        self.capacity = max(0, capacity)
        # One extra slot so close() never blocks behind a full buffer
        self._queue: queue.Queue = queue.Queue(maxsize=self.capacity + 1 if self.capacity else 0)
        self._slots = threading.BoundedSemaphore(self.capacity) if self.capacity else None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        """Put an item, blocking while the channel is full."""
        if self._slots is not None:
            self._slots.acquire()
        with self._lock:
            if self._closed:
                if self._slots is not None:
                    self._slots.release()
                raise ChannelClosedError("send on closed channel")
            self._queue.put_nowait(item)

    def close(self) -> None:
        """Mark the end of the stream. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    def __iter__(self) -> Iterator[T]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                self._queue.put_nowait(_CLOSED)
                return
            if self._slots is not None:
                self._slots.release()
            yield item
