import logging
from ipaddress import ip_network
from itertools import islice
from typing import Callable, List, Optional

from portsweep.errors import InvalidCIDR


logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"


def expand_cidr(cidr: str) -> List[str]:
    """Expand a CIDR block into its usable host addresses, ascending.

    Host bits in the address part are masked off. Blocks larger than two
    addresses lose their network and broadcast address; /31 and /32 (and the
    IPv6 equivalents) are returned whole.
    """
    cidr = cidr.strip()
    if "/" not in cidr:
        raise InvalidCIDR(cidr, "missing prefix length")
    try:
        net = ip_network(cidr, strict=False)
    except ValueError as e:
        raise InvalidCIDR(cidr, str(e)) from e

    size = net.num_addresses
    if size > 2:
        return [str(ip) for ip in islice(net, 1, size - 1)]
    return [str(ip) for ip in net]


def read_lines(path: str) -> List[str]:
    """Read non-empty, non-comment lines from ``path``, stripped."""
    lines: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                lines.append(line)
    return lines


def build_host_set(
    host: Optional[str] = None,
    hosts_file: Optional[str] = None,
    cidr_file: Optional[str] = None,
    on_invalid_cidr: Optional[Callable[[str, InvalidCIDR], None]] = None,
) -> List[str]:
    """Assemble the ordered host list: explicit host, file hosts, CIDR expansions.

    Duplicates are kept. A bad CIDR entry is handed to ``on_invalid_cidr`` and
    skipped; file errors propagate. Falls back to the loopback address when
    no source yields a host.
    """
    hosts: List[str] = []
    if host and host.strip():
        hosts.append(host.strip())
    if hosts_file:
        hosts.extend(read_lines(hosts_file))
    if cidr_file:
        for cidr in read_lines(cidr_file):
            try:
                hosts.extend(expand_cidr(cidr))
            except InvalidCIDR as e:
                logger.warning("Skipping CIDR entry %r: %s", cidr, e)
                if on_invalid_cidr is not None:
                    on_invalid_cidr(cidr, e)
    if not hosts:
        hosts.append(DEFAULT_HOST)
    return hosts
