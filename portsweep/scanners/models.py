from dataclasses import dataclass


@dataclass(frozen=True)
class ScanJob:
    host: str
    port: int


@dataclass(frozen=True)
class ScanOutcome:
    job: ScanJob
    open: bool
    # Resolved display address for open ports, the raw host otherwise.
    address: str
