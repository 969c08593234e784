# src/s3copy/worker.py
"""
Defines the copy worker function.

This module contains the logic for a single worker thread that continuously
pulls object keys from the shared queue and applies the copy-or-skip policy
to each one until it receives its end-of-bucket sentinel.
"""

import logging
from typing import Any, Dict

from s3copy.client import HeadResult, HeadStatus, ObjectStoreClient
from s3copy.config import Config, ExistenceCheck
from s3copy.exceptions import CopyError, ExistenceCheckError, ObjectStoreError
from s3copy.progress import ProgressTracker
from s3copy.work_queue import Sentinel, WorkItem, WorkQueue

logger: logging.Logger = logging.getLogger(__name__)


def copy_worker(
    worker_id: int,
    config: Config,
    queue: WorkQueue,
    tracker: ProgressTracker,
    client: ObjectStoreClient,
) -> int:
    """
    A long-lived worker that processes keys until it dequeues a sentinel.

    Any error raised while processing a key ends the worker. The key is not
    retried or re-enqueued, and the exception propagates so the caller can
    report it against this worker.

    Args:
        worker_id (int): A unique identifier for this worker.
        config (Config): The run configuration.
        queue (WorkQueue): The queue from which to pull work items.
        tracker (ProgressTracker): Shared copied/skipped counters.
        client (ObjectStoreClient): A client owned by this worker's thread.

    Returns:
        int: The number of keys this worker processed.
    """
    logger.debug(f"Worker {worker_id} started.")
    processed: int = 0
    try:
        while True:
            item: WorkItem = queue.get()
            if item is Sentinel.END_OF_BUCKET:
                logger.debug(
                    f"Worker {worker_id} reached end of bucket after "
                    f"{processed} keys."
                )
                return processed
            process_key(worker_id, item, config, tracker, client)
            processed += 1
    finally:
        queue.detach_consumer()


def process_key(
    worker_id: int,
    key: str,
    config: Config,
    tracker: ProgressTracker,
    client: ObjectStoreClient,
) -> bool:
    """
    Apply the copy policy to a single key.

    Args:
        worker_id (int): The worker handling the key, for log messages.
        key (str): The object key.
        config (Config): The run configuration.
        tracker (ProgressTracker): Shared counters to update.
        client (ObjectStoreClient): The worker's client.

    Returns:
        bool: True if the object was copied, False if it was skipped.
    """
    if not config.app.clobber and _exists_at_destination(
        worker_id, key, config, client
    ):
        logger.debug(f"Worker {worker_id}: '{key}' exists at destination, skipped.")
        tracker.record_skipped()
        return False

    copy_with_acl(key, config, client)
    logger.debug(f"Worker {worker_id}: copied '{key}'.")
    tracker.record_copied()
    return True


def _exists_at_destination(
    worker_id: int, key: str, config: Config, client: ObjectStoreClient
) -> bool:
    result: HeadResult = client.head_object(config.destination_bucket, key)
    if result.status is HeadStatus.FOUND:
        return True
    if result.status is HeadStatus.NOT_FOUND:
        return False

    if config.app.existence_check is ExistenceCheck.LENIENT:
        logger.warning(
            f"Worker {worker_id}: existence check for '{key}' failed "
            f"({result.error}); treating as not found."
        )
        return False
    raise ExistenceCheckError(key, str(result.error)) from result.error


def copy_with_acl(key: str, config: Config, client: ObjectStoreClient) -> None:
    """
    Copy an object and its ACL from the source to the destination bucket.

    The three requests are not atomic. If applying the ACL fails, the object
    is left at the destination with the bucket's default ACL.

    Args:
        key (str): The object key, identical in both buckets.
        config (Config): The run configuration.
        client (ObjectStoreClient): The worker's client.

    Raises:
        CopyError: Naming the key and the step that failed.
    """
    src: str = config.source_bucket
    dst: str = config.destination_bucket

    try:
        acl: Dict[str, Any] = client.get_acl(src, key)
    except ObjectStoreError as e:
        raise CopyError(key, "read source ACL", str(e)) from e

    try:
        client.copy_object(src, key, dst, key)
    except ObjectStoreError as e:
        raise CopyError(key, "copy object", str(e)) from e

    try:
        client.put_acl(dst, key, acl)
    except ObjectStoreError as e:
        raise CopyError(key, "apply destination ACL", str(e)) from e
