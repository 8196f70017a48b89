import asyncio
import contextlib
import logging
import sys
from typing import NoReturn, Optional

import typer

from portsweep.config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_DELAY_MS,
    DEFAULT_REPORT_INTERVAL,
    DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_MS,
    ScanConfig,
)
from portsweep.errors import InvalidCIDR, InvalidPortSpec
from portsweep.reporting.serialize import ResultSink
from portsweep.scanners.network_scanner import run_scan
from portsweep.utils.ports import resolve_ports
from portsweep.utils.targets import build_host_set
from portsweep.version import VERSION

app = typer.Typer(no_args_is_help=True, help="portsweep: concurrent TCP connect port scanner")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _report_bad_cidr(cidr: str, error: InvalidCIDR) -> None:
    typer.echo(f"Error expanding CIDR {cidr}: {error}", err=True)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"portsweep {VERSION}")


@app.command()
def scan(
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Single host to scan"),
    hosts_file: Optional[str] = typer.Option(None, "--hosts-file", "-f", help="File with one host per line"),
    cidr_file: Optional[str] = typer.Option(None, "--cidr-file", "-C", help="File with one CIDR range per line"),
    ports: Optional[str] = typer.Option(
        None, "--ports", "-p", envvar="PORTSWEEP_PORTS", help="Ports, e.g. 80 | 80-443 | 22,80,8000-8100 (default: all)"
    ),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Also write open ports to this file"),
    concurrency: int = typer.Option(
        DEFAULT_CONCURRENCY, "--concurrency", "-c", min=1, envvar="PORTSWEEP_CONCURRENCY", help="Concurrent workers"
    ),
    retries: int = typer.Option(
        DEFAULT_RETRIES, "--retries", "-r", min=1, envvar="PORTSWEEP_RETRIES", help="Connect attempts per port"
    ),
    timeout: int = typer.Option(
        DEFAULT_TIMEOUT_MS, "--timeout", "-t", min=1, envvar="PORTSWEEP_TIMEOUT_MS", help="Per-attempt timeout (ms)"
    ),
    sleep: int = typer.Option(
        DEFAULT_DELAY_MS, "--sleep", "-s", min=0, envvar="PORTSWEEP_SLEEP_MS", help="Pause between attempts (ms)"
    ),
    interval: float = typer.Option(
        DEFAULT_REPORT_INTERVAL, "--interval", min=0.01, envvar="PORTSWEEP_INTERVAL", help="Progress period (seconds)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
) -> None:
    """Run a TCP connect scan and report open ports as they are found."""
    _configure_logging(verbose)

    try:
        port_set = resolve_ports(ports)
    except InvalidPortSpec as e:
        _fail(f"Error parsing ports: {e}")

    try:
        hosts = build_host_set(host, hosts_file, cidr_file, on_invalid_cidr=_report_bad_cidr)
    except OSError as e:
        _fail(f"Error reading input file: {e}")

    config = ScanConfig(
        concurrency=concurrency,
        retries=retries,
        timeout_ms=timeout,
        delay_ms=sleep,
        report_interval=interval,
    )

    with contextlib.ExitStack() as stack:
        try:
            sink = stack.enter_context(ResultSink.open_file(output))
        except OSError as e:
            _fail(f"Error creating output file: {e}")

        snapshot = asyncio.run(run_scan(hosts, port_set, config=config, sink=sink))
        sink.summary(snapshot)
