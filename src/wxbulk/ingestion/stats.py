"""Run counters shared by the reader thread and the flush workers."""

import threading
from dataclasses import dataclass, field


@dataclass
class PipelineStats:
    """How many records were read, dropped and written, and why."""

    parsed: int = 0
    skipped_invalid: int = 0
    unmatched: int = 0
    written: int = 0
    batches: int = 0
    failed_batches: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def as_dict(self) -> dict[str, int]:
        with self._lock:
            return {
                "parsed": self.parsed,
                "skipped_invalid": self.skipped_invalid,
                "unmatched": self.unmatched,
                "written": self.written,
                "batches": self.batches,
                "failed_batches": self.failed_batches,
            }
