import contextlib
import threading
from datetime import timedelta
from typing import Callable, Iterator, List, Optional, TextIO

import typer

from portsweep.reporting.progress import Progress
from portsweep.scanners.models import ScanOutcome
from portsweep.scanners.stats import StatsSnapshot


def format_duration(seconds: float) -> str:
    return str(timedelta(seconds=round(seconds)))


def format_address(address: str, port: int) -> str:
    if ":" in address:
        return f"[{address}]:{port}"
    return f"{address}:{port}"


def open_line(outcome: ScanOutcome) -> str:
    return f"{format_address(outcome.address, outcome.job.port)} open"


def scan_header(hosts: int, ports: int, total: int) -> str:
    return f"Scanning {hosts} host(s) across {ports} ports ({total} total combinations)..."


def progress_line(progress: Progress) -> str:
    eta = format_duration(progress.eta) if progress.eta is not None else "unknown"
    return (
        f"[Progress] {progress.percent:.2f}% | Scanned: {progress.scanned}/{progress.total} | "
        f"Open: {progress.open} | Rate: {progress.rate:.0f}/s | ETA: {eta}"
    )


def summary_lines(snapshot: StatsSnapshot) -> List[str]:
    rate = snapshot.scanned / snapshot.elapsed if snapshot.elapsed > 0 else 0.0
    return [
        "",
        "=== Scan Complete ===",
        f"Total scanned: {snapshot.scanned}",
        f"Open ports found: {snapshot.open}",
        f"Time elapsed: {format_duration(snapshot.elapsed)}",
        f"Average rate: {rate:.0f} ports/second",
    ]


class ResultSink:
    """Console output plus an optional result file.

    Open-port lines go to both destinations as one unit under a lock so
    concurrent workers never interleave partial lines.
    """

    def __init__(
        self,
        echo: Callable[[str], None] = typer.echo,
        output: Optional[TextIO] = None,
        path: Optional[str] = None,
    ) -> None:
        self.echo = echo
        self.output = output
        self.path = path
        self._lock = threading.Lock()

    @classmethod
    @contextlib.contextmanager
    def open_file(cls, path: Optional[str], echo: Callable[[str], None] = typer.echo) -> Iterator["ResultSink"]:
        """Yield a sink that also writes to ``path`` (created or truncated).

        Without a path the sink is console only. ``OSError`` from creating the
        file propagates before anything is yielded.
        """
        if not path:
            yield cls(echo=echo)
            return
        with open(path, "w", encoding="utf-8") as f:
            yield cls(echo=echo, output=f, path=path)

    def info(self, line: str) -> None:
        with self._lock:
            self.echo(line)

    def progress(self, progress: Progress) -> None:
        self.info(progress_line(progress))

    def open_port(self, outcome: ScanOutcome) -> None:
        line = open_line(outcome)
        with self._lock:
            self.echo(line)
            if self.output is not None:
                self.output.write(line + "\n")
                self.output.flush()

    def summary(self, snapshot: StatsSnapshot) -> None:
        with self._lock:
            for line in summary_lines(snapshot):
                self.echo(line)
