# src/s3copy/pipeline.py
"""Core orchestration logic for the s3copy pipeline."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import click

from s3copy.client import ObjectStoreClient, S3ObjectStoreClient
from s3copy.config import Config
from s3copy.lister import Lister
from s3copy.progress import ProgressSnapshot, ProgressTracker
from s3copy.work_queue import WorkQueue
from s3copy.worker import copy_worker

logger: logging.Logger = logging.getLogger(__name__)

ClientFactory = Callable[[], ObjectStoreClient]

LISTER_NAME: str = "lister"


def worker_name(worker_id: int) -> str:
    return f"worker-{worker_id}"


@dataclass(frozen=True)
class ThreadOutcome:
    """
    How one pipeline thread ended.

    Attributes:
        name (str): The thread's identity, e.g. `lister` or `worker-3`.
        error (BaseException, optional): The exception that ended the thread,
            or None if it returned normally.
    """

    name: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunSummary:
    """
    The result of a replication run.

    Attributes:
        listed (int): Keys listed from the source.
        copied (int): Keys copied to the destination.
        skipped (int): Keys skipped because they already existed.
        elapsed_s (float): Wall-clock duration of the run in seconds.
        outcomes (List[ThreadOutcome]): One entry per lister/worker thread.
    """

    listed: int
    copied: int
    skipped: int
    elapsed_s: float
    outcomes: List[ThreadOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[ThreadOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failures


def collect_outcomes(futures: Dict[str, "Future[int]"]) -> List[ThreadOutcome]:
    """
    Wait for every thread and record how each one ended.

    A failed thread is logged and collection carries on with the rest, so
    the returned list always has one entry per future.

    Args:
        futures (Dict[str, Future[int]]): Running threads keyed by name.

    Returns:
        List[ThreadOutcome]: Outcomes in the order the futures were given.
    """
    outcomes: List[ThreadOutcome] = []
    for name, future in futures.items():
        error: Optional[BaseException] = future.exception()
        if error is not None:
            logger.error(
                f"Failure on thread {name}: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )
        outcomes.append(ThreadOutcome(name=name, error=error))
    return outcomes


class ReplicationPipeline:
    """Orchestrates a bucket-to-bucket copy from start to finish."""

    def __init__(
        self,
        config: Config,
        client_factory: Optional[ClientFactory] = None,
        emit: Callable[[str], None] = click.echo,
    ) -> None:
        """
        Initializes the pipeline with the given configuration.

        Args:
            config (Config): The run configuration.
            client_factory (ClientFactory, optional): Builds one object store
                client per call. Called once inside each thread so that no
                client is shared. Defaults to boto3 clients built from
                `config`.
            emit (Callable[[str], None]): Sink for banners, progress lines
                and the final summary.
        """
        self._config: Config = config
        self._client_factory: ClientFactory = client_factory or (
            lambda: S3ObjectStoreClient.from_config(config.credentials, config.app)
        )
        self._emit: Callable[[str], None] = emit

    def run(self) -> RunSummary:
        """
        Executes the full replication.

        Credentials are validated before any thread starts. Then the lister
        and `thread_count` workers run to completion and their outcomes are
        collected.

        Returns:
            RunSummary: Final counters and per-thread outcomes.

        Raises:
            AuthError: If credential validation fails.
        """
        self._client_factory().validate_credentials()

        src: str = self._config.source_bucket
        dst: str = self._config.destination_bucket
        clobber_state: str = "clobber" if self._config.app.clobber else "no clobber"
        self._emit(f"START: Copying from {src} to {dst} ({clobber_state})")

        thread_count: int = self._config.app.thread_count
        queue: WorkQueue = WorkQueue(consumers=thread_count)
        tracker: ProgressTracker = ProgressTracker(
            self._config.app.progress_interval, emit=self._emit
        )
        lister: Lister = Lister(self._config, queue, tracker)

        futures: Dict[str, "Future[int]"] = {}
        with ThreadPoolExecutor(
            max_workers=thread_count + 1, thread_name_prefix="s3copy"
        ) as executor:
            futures[LISTER_NAME] = executor.submit(self._lister_job, lister)
            for worker_id in range(thread_count):
                logger.debug(f"Starting {worker_name(worker_id)}.")
                futures[worker_name(worker_id)] = executor.submit(
                    self._worker_job, worker_id, queue, tracker
                )
            outcomes: List[ThreadOutcome] = collect_outcomes(futures)

        snapshot: ProgressSnapshot = tracker.snapshot()
        summary: RunSummary = RunSummary(
            listed=snapshot.listed,
            copied=snapshot.copied,
            skipped=snapshot.skipped,
            elapsed_s=snapshot.elapsed_s,
            outcomes=outcomes,
        )
        self._emit(
            f"Total copied: {summary.copied}, Total skipped: {summary.skipped}, "
            f"Total listed: {summary.listed}"
        )
        if not summary.ok:
            logger.warning(
                f"{len(summary.failures)} thread(s) failed; "
                f"{summary.listed - summary.copied - summary.skipped} listed "
                "key(s) were not processed."
            )
        self._emit(f"END: Copied from {src} to {dst}!")
        return summary

    # The jobs below run inside the pool threads, so every thread builds its
    # own client.

    def _lister_job(self, lister: Lister) -> int:
        try:
            client: ObjectStoreClient = self._client_factory()
        except Exception:
            lister.release_workers()
            raise
        return lister.run(client)

    def _worker_job(
        self, worker_id: int, queue: WorkQueue, tracker: ProgressTracker
    ) -> int:
        try:
            client: ObjectStoreClient = self._client_factory()
        except Exception:
            queue.detach_consumer()
            raise
        return copy_worker(worker_id, self._config, queue, tracker, client)
