# src/s3copy/work_queue.py
"""
The work queue shared by the lister and the copy workers.

Producers never block on `put`. The lister throttles itself with
`wait_for_room`, which sleeps on a condition variable notified by every
`get` rather than polling the queue depth.
"""

import logging
import threading
from collections import deque
from enum import Enum
from typing import Deque, Union

logger: logging.Logger = logging.getLogger(__name__)


class Sentinel(Enum):
    """Termination marker; one is enqueued per worker once listing ends."""

    END_OF_BUCKET = "END_OF_BUCKET"


WorkItem = Union[str, Sentinel]


class WorkQueue:
    """
    A thread-safe FIFO queue of `WorkItem`s with soft backpressure.

    Every consumer is counted from construction. A consumer that stops
    reading, normally or because it failed, must call `detach_consumer` so
    a throttled producer is not left waiting on a queue nobody drains.
    """

    def __init__(self, consumers: int) -> None:
        """
        Initialize an empty queue.

        Args:
            consumers (int): Number of threads that will read from the queue.
        """
        self._items: Deque[WorkItem] = deque()
        self._lock: threading.Lock = threading.Lock()
        self._not_empty: threading.Condition = threading.Condition(self._lock)
        self._drained: threading.Condition = threading.Condition(self._lock)
        self._consumers: int = consumers

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def consumers(self) -> int:
        """
        Number of consumers that have not detached yet.

        Returns:
            int: The live consumer count.
        """
        with self._lock:
            return self._consumers

    def put(self, item: WorkItem) -> None:
        """Append an item to the tail of the queue without blocking."""
        with self._lock:
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> WorkItem:
        """
        Remove and return the item at the head, blocking while empty.

        Returns:
            WorkItem: The next object key or sentinel.
        """
        with self._not_empty:
            while not self._items:
                self._not_empty.wait()
            item: WorkItem = self._items.popleft()
            self._drained.notify_all()
            return item

    def wait_for_room(self, limit: int) -> bool:
        """
        Block until the queue holds at most `limit` items.

        The check is advisory: a producer that appends a whole page after
        this returns can still push the depth past `limit`.

        Args:
            limit (int): The depth the queue must fall to.

        Returns:
            bool: True once there is room, False if every consumer detached
                while the queue was still over the limit.
        """
        with self._drained:
            while len(self._items) > limit and self._consumers > 0:
                self._drained.wait()
            return len(self._items) <= limit

    def detach_consumer(self) -> None:
        """Record that one consumer will not read from the queue again."""
        with self._lock:
            self._consumers -= 1
            logger.debug(
                f"Consumer detached; {self._consumers} left, "
                f"{len(self._items)} items queued."
            )
            self._drained.notify_all()
