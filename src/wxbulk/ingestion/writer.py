"""Bulk writes of row batches, with retry and an optional dead-letter directory."""

import csv
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Sequence

from wxbulk.database.service import DatabaseService
from wxbulk.errors import WriteError
from wxbulk.ingestion.stats import PipelineStats

logger = logging.getLogger(__name__)


class BatchWriter:
    """Write one batch per call as a single bulk copy in its own transaction.

    A failed attempt is rolled back and retried with exponential backoff.
    When every attempt fails the batch is written to ``dead_letter_dir`` as
    CSV if one is configured; otherwise WriteError is raised.
    """

    def __init__(
        self,
        service: DatabaseService,
        table: str,
        columns: Sequence[str],
        max_retries: int = 3,
        base_delay: float = 1.0,
        dead_letter_dir: Path | None = None,
        stats: PipelineStats | None = None,
    ):
        self._service = service
        self._table = table
        self._columns = list(columns)
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._dead_letter_dir = dead_letter_dir
        self._stats = stats if stats is not None else PipelineStats()

    def write(self, batch_num: int, rows: Sequence[tuple]) -> int:
        """Write ``rows``; return how many were committed (0 if dead-lettered)."""
        for attempt in range(self._max_retries):
            try:
                with self._service.transaction():
                    count = self._service.bulk_copy(self._table, self._columns, rows)
                self._stats.incr("written", count)
                self._stats.incr("batches")
                logger.info("Batch %d: wrote %d rows to %s", batch_num, count, self._table)
                return count
            except self._service.errors as e:
                if attempt < self._max_retries - 1:
                    delay = self._base_delay * (2**attempt)
                    logger.warning(
                        "Batch %d attempt %d failed: %s. Retrying in %.1fs...",
                        batch_num,
                        attempt + 1,
                        e,
                        delay,
                    )
                    time.sleep(delay)
                    continue
                self._stats.incr("failed_batches")
                error = WriteError(batch_num, len(rows), e)
                if self._dead_letter_dir is None:
                    raise error from e
                logger.error("%s", error)
                try:
                    self._dead_letter(batch_num, rows)
                except OSError as dead_letter_exc:
                    raise error from dead_letter_exc
                return 0
        return 0

    def _dead_letter(self, batch_num: int, rows: Sequence[tuple]) -> Path:
        self._dead_letter_dir.mkdir(parents=True, exist_ok=True)
        path = self._dead_letter_dir / f"{self._table}-batch-{batch_num:06d}.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(self._columns)
            writer.writerows(rows)
        logger.warning("Batch %d: %d rows written to dead-letter file %s", batch_num, len(rows), path)
        return path


class BatchingSink:
    """Run batch writes on a worker pool with a bounded number in flight.

    ``submit`` blocks while ``workers`` batches are already being written,
    which keeps memory bounded when the database is slower than the parser.
    ``close`` waits for every in-flight write and re-raises the first
    WriteError. With one worker, writes happen strictly in submission order.
    """

    def __init__(self, writer: BatchWriter, workers: int = 1):
        self._writer = writer
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wxbulk-flush")
        self._slots = threading.BoundedSemaphore(workers)
        self._futures: list[Future] = []
        self._submitted = 0

    def __enter__(self) -> "BatchingSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self._executor.shutdown(wait=True, cancel_futures=True)

    def submit(self, rows: Sequence[tuple]) -> None:
        self._raise_failures()
        self._slots.acquire()
        self._submitted += 1
        try:
            future = self._executor.submit(self._writer.write, self._submitted, rows)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        self._futures.append(future)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._raise_failures()

    def _raise_failures(self) -> None:
        pending = []
        for future in self._futures:
            if not future.done():
                pending.append(future)
                continue
            error = future.exception()
            if error is not None:
                raise error
        self._futures = pending
