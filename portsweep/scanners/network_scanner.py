import asyncio
import contextlib
import logging
import socket
from typing import Iterable, Iterator, List, Optional, Sequence

from tenacity import AsyncRetrying, before_sleep_log, retry_if_result, stop_after_attempt, wait_fixed

from portsweep.config import ScanConfig
from portsweep.reporting.progress import ProgressReporter
from portsweep.reporting.serialize import ResultSink, scan_header
from portsweep.scanners.models import ScanJob, ScanOutcome
from portsweep.scanners.stats import ScanStats, StatsSnapshot


logger = logging.getLogger(__name__)

# Pushed once per worker after the last job; a worker exits when it takes one.
_CLOSED = None


async def _connect_once(host: str, port: int, timeout: float) -> bool:
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (OSError, asyncio.TimeoutError, ValueError) as e:
        logger.debug("Connect to %s:%d failed: %r", host, port, e)
        return False
    writer.close()
    with contextlib.suppress(OSError):
        await writer.wait_closed()
    return True


async def probe_port(host: str, port: int, retries: int, timeout_ms: int, delay_ms: int) -> bool:
    """Try up to ``retries`` TCP connects to ``host:port``.

    Returns ``True`` on the first successful connect (the connection is
    closed right away). Failed attempts, whatever the cause, are followed by
    a ``delay_ms`` pause unless it was the last one.
    """
    if retries <= 0:
        return False
    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries),
        wait=wait_fixed(delay_ms / 1000),
        retry=retry_if_result(lambda is_open: not is_open),
        retry_error_callback=lambda state: False,
        before_sleep=before_sleep_log(logger, logging.DEBUG),
    )
    return await retrying(_connect_once, host, port, timeout_ms / 1000)


async def _lookup(host: str) -> str:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return infos[0][4][0]


async def resolve_display_address(host: str) -> str:
    """Resolve ``host`` to the address shown in results, or return it unchanged."""
    try:
        return await _lookup(host)
    except (OSError, ValueError, IndexError) as e:
        logger.debug("Could not resolve %s, reporting it verbatim: %r", host, e)
        return host


def iter_jobs(hosts: Iterable[str], ports: Iterable[int]) -> Iterator[ScanJob]:
    """Yield the host x port cross product, hosts outer and ports inner."""
    ordered_ports = sorted(ports)
    for host in hosts:
        for port in ordered_ports:
            yield ScanJob(host=host, port=port)


async def _scan_job(job: ScanJob, config: ScanConfig) -> ScanOutcome:
    is_open = await probe_port(job.host, job.port, config.retries, config.timeout_ms, config.delay_ms)
    address = await resolve_display_address(job.host) if is_open else job.host
    return ScanOutcome(job=job, open=is_open, address=address)


async def _worker(queue: asyncio.Queue, config: ScanConfig, stats: ScanStats, sink: ResultSink) -> None:
    while True:
        job = await queue.get()
        try:
            if job is _CLOSED:
                return
            outcome = await _scan_job(job, config)
            if outcome.open:
                sink.open_port(outcome)
                stats.record_open()
            stats.record_attempt()
        finally:
            queue.task_done()


async def _produce(queue: asyncio.Queue, jobs: Iterable[ScanJob], workers: int) -> None:
    for job in jobs:
        await queue.put(job)
    for _ in range(workers):
        await queue.put(_CLOSED)


async def run_scan(
    hosts: Sequence[str],
    ports: Iterable[int],
    config: Optional[ScanConfig] = None,
    sink: Optional[ResultSink] = None,
    stats: Optional[ScanStats] = None,
) -> StatsSnapshot:
    """Probe every (host, port) pair with a fixed pool of workers.

    A single producer feeds a bounded queue, so at most ``queue_size`` jobs
    are materialized at a time no matter how large the cross product is.
    Returns the final counters once every worker has drained the queue.
    """
    if config is None:
        config = ScanConfig()
    if sink is None:
        sink = ResultSink()
    if stats is None:
        stats = ScanStats()
    ports = sorted(set(ports))
    total = len(hosts) * len(ports)
    sink.info(scan_header(len(hosts), len(ports), total))
    if sink.path:
        sink.info(f"Output will be saved to: {sink.path}")

    queue: asyncio.Queue = asyncio.Queue(maxsize=config.queue_size)
    reporter = ProgressReporter(stats, total, config.report_interval, sink.progress)
    reporter_task = asyncio.create_task(reporter.run())
    workers: List[asyncio.Task] = [
        asyncio.create_task(_worker(queue, config, stats, sink)) for _ in range(config.concurrency)
    ]
    producer = asyncio.create_task(_produce(queue, iter_jobs(hosts, ports), config.concurrency))
    logger.info("Dispatching %d jobs to %d workers", total, config.concurrency)

    try:
        await asyncio.gather(*workers)
        await producer
    except BaseException:
        for task in (producer, *workers, reporter_task):
            task.cancel()
        # a reporter failure must not mask the worker error
        await asyncio.gather(reporter_task, return_exceptions=True)
        raise

    reporter.stop()
    await reporter_task

    snapshot = stats.snapshot()
    logger.info("Dispatch finished: %d scanned, %d open", snapshot.scanned, snapshot.open)
    return snapshot
