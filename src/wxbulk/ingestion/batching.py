"""Size-or-time batching of a row stream.

A reader thread pulls rows from the (CPU-bound) parse pipeline into a
bounded queue. The consuming thread waits on that queue with a timeout
equal to the time left in the current window, so a partial batch is
released when input stalls for longer than ``max_latency``.
"""

import logging
import threading
import time
from queue import Empty, Full, Queue
from typing import Callable, Generic, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DONE = object()


class _Failure:
    def __init__(self, exc: BaseException):
        self.exc = exc


class BatchAccumulator(Generic[T]):
    """Buffer items and release them when either threshold is reached.

    A batch is released when it holds ``max_size`` items, or when
    ``max_latency`` seconds have passed since the previous release,
    whichever happens first. The timer restarts on every release. Empty
    batches are never released.
    """

    def __init__(
        self,
        max_size: int,
        max_latency: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        if max_latency <= 0:
            raise ValueError(f"max_latency must be > 0, got {max_latency}")
        self._max_size = max_size
        self._max_latency = max_latency
        self._clock = clock
        self._buffer: list[T] = []
        self._deadline = clock() + max_latency

    def __len__(self) -> int:
        return len(self._buffer)

    def time_remaining(self) -> float:
        return max(0.0, self._deadline - self._clock())

    def add(self, item: T) -> list[T] | None:
        """Buffer an item; return a full batch if the size bound was reached."""
        self._buffer.append(item)
        if len(self._buffer) >= self._max_size:
            return self._release()
        return None

    def poll(self) -> list[T] | None:
        """Return the buffered items if the time window has elapsed."""
        if self._clock() >= self._deadline:
            return self._release()
        return None

    def drain(self) -> list[T] | None:
        """Return whatever is left, regardless of the thresholds."""
        return self._release()

    def _release(self) -> list[T] | None:
        batch, self._buffer = self._buffer, []
        self._deadline = self._clock() + self._max_latency
        return batch or None


def iter_batches(
    rows: Iterable[T],
    max_size: int,
    max_latency: float,
    queue_size: int | None = None,
) -> Iterator[list[T]]:
    """Group ``rows`` into batches bounded by count and by time.

    ``rows`` is consumed on a background thread. Batches keep input order.
    When ``rows`` is exhausted the remaining partial batch is yielded. An
    exception raised while iterating ``rows`` is re-raised here.
    """
    accumulator: BatchAccumulator[T] = BatchAccumulator(max_size, max_latency)
    channel: Queue = Queue(maxsize=queue_size or max_size)
    stop = threading.Event()

    def put(item) -> bool:
        while not stop.is_set():
            try:
                channel.put(item, timeout=0.1)
                return True
            except Full:
                continue
        return False

    def read() -> None:
        try:
            for row in rows:
                if not put(row):
                    return
        except BaseException as e:  # handed to the consumer, which re-raises it
            put(_Failure(e))
            return
        put(_DONE)

    reader = threading.Thread(target=read, name="wxbulk-reader", daemon=True)
    reader.start()
    try:
        while True:
            try:
                item = channel.get(timeout=accumulator.time_remaining())
            except Empty:
                batch = accumulator.poll()
                if batch:
                    logger.debug("Time window elapsed, releasing %d rows", len(batch))
                    yield batch
                continue

            if item is _DONE:
                break
            if isinstance(item, _Failure):
                raise item.exc

            batch = accumulator.add(item) or accumulator.poll()
            if batch:
                yield batch

        remainder = accumulator.drain()
        if remainder:
            yield remainder
    finally:
        stop.set()
        reader.join(timeout=1.0)
