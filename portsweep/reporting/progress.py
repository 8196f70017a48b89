import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from portsweep.scanners.stats import ScanStats, StatsSnapshot


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    percent: float
    scanned: int
    total: int
    open: int
    rate: float
    eta: Optional[float]


def compute_progress(snapshot: StatsSnapshot, total: int) -> Progress:
    """Derive percent, rate (ports/s) and ETA (seconds) from a stats snapshot.

    Safe at the very first tick: zero elapsed time gives a zero rate and an
    unknown (``None``) ETA.
    """
    percent = snapshot.scanned * 100 / total if total > 0 else 0.0
    rate = snapshot.scanned / snapshot.elapsed if snapshot.elapsed > 0 else 0.0
    eta = max(total - snapshot.scanned, 0) / rate if rate > 0 else None
    return Progress(
        percent=percent,
        scanned=snapshot.scanned,
        total=total,
        open=snapshot.open,
        rate=rate,
        eta=eta,
    )


class ProgressReporter:
    """Samples ``stats`` every ``interval`` seconds until :meth:`stop` is called."""

    def __init__(
        self,
        stats: ScanStats,
        total: int,
        interval: float,
        emit: Callable[[Progress], None],
    ) -> None:
        self.stats = stats
        self.total = total
        self.interval = interval
        self.emit = emit
        self._done = asyncio.Event()

    def sample(self) -> Progress:
        return compute_progress(self.stats.snapshot(), self.total)

    def stop(self) -> None:
        self._done.set()

    async def run(self) -> None:
        while not self._done.is_set():
            try:
                await asyncio.wait_for(self._done.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                self.emit(self.sample())
        logger.debug("Progress reporter stopped")
