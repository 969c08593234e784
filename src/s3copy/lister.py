# src/s3copy/lister.py
"""
The producer side of the pipeline.

A single lister pages through the source bucket in key order and feeds every
key into the shared work queue. Whatever happens while listing, it finishes
by enqueuing one sentinel per worker so that no worker is left blocked on an
empty queue.
"""

import logging
from typing import List

from s3copy.client import ObjectStoreClient
from s3copy.config import Config
from s3copy.exceptions import ListError, ObjectStoreError
from s3copy.progress import ProgressTracker
from s3copy.work_queue import Sentinel, WorkQueue

logger: logging.Logger = logging.getLogger(__name__)


class Lister:
    """Paginates the source bucket into a `WorkQueue`."""

    def __init__(
        self,
        config: Config,
        queue: WorkQueue,
        tracker: ProgressTracker,
    ) -> None:
        """
        Initialize the lister.

        Args:
            config (Config): The run configuration.
            queue (WorkQueue): The queue shared with the workers.
            tracker (ProgressTracker): Receives one `listed` event per key.
        """
        self._config: Config = config
        self._queue: WorkQueue = queue
        self._tracker: ProgressTracker = tracker

    def run(self, client: ObjectStoreClient) -> int:
        """
        List the whole source bucket, then enqueue the worker sentinels.

        Args:
            client (ObjectStoreClient): A client owned by the lister thread.

        Returns:
            int: The number of keys enqueued.

        Raises:
            ListError: If a page fetch fails or every worker has exited.
                Sentinels are enqueued before the error propagates.
        """
        logger.info(f"Lister started on 's3://{self._config.source_bucket}'.")
        try:
            listed: int = self._list_all(client)
        finally:
            self.release_workers()
        logger.info(f"Lister finished: {listed} keys listed.")
        return listed

    def release_workers(self) -> None:
        """Enqueue one end-of-bucket sentinel per worker."""
        for _ in range(self._config.app.thread_count):
            self._queue.put(Sentinel.END_OF_BUCKET)
        logger.debug(f"Lister enqueued {self._config.app.thread_count} sentinel(s).")

    def _list_all(self, client: ObjectStoreClient) -> int:
        bucket: str = self._config.source_bucket
        max_queue: int = self._config.app.max_queue
        marker: str = ""
        listed: int = 0

        while True:
            if len(self._queue) > max_queue:
                logger.debug(f"Queue above {max_queue} items, lister throttled.")
            if not self._queue.wait_for_room(max_queue):
                raise ListError(
                    f"All workers exited with {len(self._queue)} keys still "
                    f"queued; stopped listing after '{marker}'."
                )

            try:
                keys: List[str] = client.list_page(
                    bucket, marker, self._config.app.page_size
                )
            except ObjectStoreError as e:
                raise ListError(str(e)) from e

            if not keys:
                return listed

            for key in keys:
                # Counted before it is visible to workers, so listed never
                # trails copied + skipped.
                self._tracker.record_listed()
                self._queue.put(key)
            listed += len(keys)
            marker = keys[-1]
