from dataclasses import dataclass


DEFAULT_CONCURRENCY = 100
DEFAULT_RETRIES = 5
DEFAULT_TIMEOUT_MS = 500
DEFAULT_DELAY_MS = 100
DEFAULT_REPORT_INTERVAL = 5.0
DEFAULT_QUEUE_FACTOR = 10


@dataclass(frozen=True)
class ScanConfig:
    """Run parameters shared by the dispatcher, the workers and the reporter."""

    concurrency: int = DEFAULT_CONCURRENCY
    retries: int = DEFAULT_RETRIES
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    delay_ms: int = DEFAULT_DELAY_MS
    report_interval: float = DEFAULT_REPORT_INTERVAL
    queue_factor: int = DEFAULT_QUEUE_FACTOR

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.timeout_ms < 1:
            raise ValueError("timeout_ms must be >= 1")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if self.report_interval <= 0:
            raise ValueError("report_interval must be > 0")
        if self.queue_factor < 1:
            raise ValueError("queue_factor must be >= 1")

    @property
    def queue_size(self) -> int:
        return self.concurrency * self.queue_factor
