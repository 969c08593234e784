# tests/unit/test_progress.py
"""Unit tests for the `ProgressTracker` counters and progress lines."""

import re
import threading
from typing import List, Tuple

from s3copy.progress import ProgressSnapshot, ProgressTracker

LINE_PATTERN: re.Pattern = re.compile(
    r"^\d+\.\d{2}: Total copied: (\d+), Total skipped: (\d+), Total listed: (\d+)$"
)


def _parse(line: str) -> Tuple[int, int, int]:
    match = LINE_PATTERN.match(line)
    assert match, f"Unexpected progress line: {line!r}"
    copied, skipped, listed = (int(group) for group in match.groups())
    return copied, skipped, listed


def test_snapshot_reflects_recorded_events() -> None:
    tracker: ProgressTracker = ProgressTracker(emit=lambda line: None)
    tracker.record_listed()
    tracker.record_listed()
    tracker.record_listed()
    tracker.record_copied()
    tracker.record_skipped()

    snapshot: ProgressSnapshot = tracker.snapshot()
    assert (snapshot.listed, snapshot.copied, snapshot.skipped) == (3, 1, 1)
    assert snapshot.processed == 2
    assert snapshot.elapsed_s >= 0


def test_format_line() -> None:
    snapshot: ProgressSnapshot = ProgressSnapshot(
        elapsed_s=12.3456, listed=9000, copied=3000, skipped=1000
    )
    assert snapshot.format_line() == (
        "12.35: Total copied: 3000, Total skipped: 1000, Total listed: 9000"
    )


def test_progress_line_every_interval_of_combined_events() -> None:
    """
    Tests that copies and skips count together towards the interval.

    Arrange:
        - A tracker with an interval of 3.
    Act:
        - Record 7 events alternating copy and skip.
    Assert:
        - Exactly two lines, at 3 and 6 combined events.
    """
    # Arrange
    lines: List[str] = []
    tracker: ProgressTracker = ProgressTracker(progress_interval=3, emit=lines.append)
    tracker.record_listed(7)

    # Act
    for i in range(7):
        if i % 2:
            tracker.record_skipped()
        else:
            tracker.record_copied()

    # Assert
    assert len(lines) == 2
    assert _parse(lines[0]) == (2, 1, 7)
    assert _parse(lines[1]) == (3, 3, 7)


def test_progress_lines_exactly_once_and_monotonic_under_contention() -> None:
    """
    Tests that concurrent workers produce one line per interval and that
    successive lines never go backwards.

    Arrange:
        - A tracker with an interval of 100.
    Act:
        - Eight threads each record 500 events.
    Assert:
        - 40 lines in total, with strictly increasing processed counts.
    """
    # Arrange
    lines: List[str] = []
    tracker: ProgressTracker = ProgressTracker(
        progress_interval=100, emit=lines.append
    )
    tracker.record_listed(4000)

    def work(thread_index: int) -> None:
        for i in range(500):
            if (thread_index + i) % 3:
                tracker.record_copied()
            else:
                tracker.record_skipped()

    # Act
    threads: List[threading.Thread] = [
        threading.Thread(target=work, args=(i,)) for i in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    # Assert
    assert len(lines) == 40
    parsed: List[Tuple[int, int, int]] = [_parse(line) for line in lines]
    processed: List[int] = [copied + skipped for copied, skipped, _ in parsed]
    assert processed == [100 * (i + 1) for i in range(40)]
    for previous, current in zip(parsed, parsed[1:]):
        assert current[0] >= previous[0]
        assert current[1] >= previous[1]

    snapshot: ProgressSnapshot = tracker.snapshot()
    assert snapshot.copied + snapshot.skipped == 4000
