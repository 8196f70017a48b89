import threading
import time
from dataclasses import dataclass


@dataclass(frozen=True)
class StatsSnapshot:
    scanned: int
    open: int
    elapsed: float


class ScanStats:
    """Counters shared by every worker and the progress reporter of one run.

    Every mutation and every snapshot is taken under the same lock, so the
    reporter never sees a half-applied update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._scanned = 0
        self._open = 0
        self._started = time.monotonic()

    def record_attempt(self) -> None:
        with self._lock:
            self._scanned += 1

    def record_open(self) -> None:
        with self._lock:
            self._open += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                scanned=self._scanned,
                open=self._open,
                elapsed=time.monotonic() - self._started,
            )
