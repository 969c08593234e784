# src/s3copy/progress.py
"""
Thread-safe progress counters for a replication run.

All three counters live behind one lock so any snapshot is consistent, and
the decision to print a progress line is taken under that same lock so each
multiple of the progress interval is reported exactly once.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable

import click


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    A consistent view of the counters at one instant.

    Attributes:
        elapsed_s (float): Seconds since the tracker was created.
        listed (int): Keys enqueued by the lister.
        copied (int): Keys copied to the destination.
        skipped (int): Keys skipped because the destination already had them.
    """

    elapsed_s: float
    listed: int
    copied: int
    skipped: int

    @property
    def processed(self) -> int:
        return self.copied + self.skipped

    def format_line(self) -> str:
        """
        Render the snapshot as a progress line.

        Returns:
            str: `"{elapsed}: Total copied: …, Total skipped: …, Total listed: …"`.
        """
        return (
            f"{self.elapsed_s:.2f}: Total copied: {self.copied}, "
            f"Total skipped: {self.skipped}, Total listed: {self.listed}"
        )


class ProgressTracker:
    """Shared listed/copied/skipped counters with periodic progress lines."""

    def __init__(
        self,
        progress_interval: int = 1000,
        emit: Callable[[str], None] = click.echo,
    ) -> None:
        """
        Initialize zeroed counters and start the elapsed-time clock.

        Args:
            progress_interval (int): Combined copy+skip events between lines.
            emit (Callable[[str], None]): Sink for progress lines.
        """
        self._lock: threading.Lock = threading.Lock()
        self._interval: int = progress_interval
        self._emit: Callable[[str], None] = emit
        self._start: float = time.monotonic()
        self._listed: int = 0
        self._copied: int = 0
        self._skipped: int = 0

    def record_listed(self, count: int = 1) -> None:
        # Only the lister writes this, but readers in other threads take the
        # same lock.
        with self._lock:
            self._listed += count

    def record_copied(self) -> None:
        """Count one copied key, printing a progress line on each interval."""
        self._record(copied=1)

    def record_skipped(self) -> None:
        """Count one skipped key, printing a progress line on each interval."""
        self._record(skipped=1)

    def _record(self, copied: int = 0, skipped: int = 0) -> None:
        with self._lock:
            self._copied += copied
            self._skipped += skipped
            if (self._copied + self._skipped) % self._interval == 0:
                # Emitted under the lock so successive lines never go backwards.
                self._emit(self._snapshot_locked().format_line())

    def snapshot(self) -> ProgressSnapshot:
        """
        Read all three counters atomically.

        Returns:
            ProgressSnapshot: The current counters and elapsed time.
        """
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            elapsed_s=time.monotonic() - self._start,
            listed=self._listed,
            copied=self._copied,
            skipped=self._skipped,
        )
