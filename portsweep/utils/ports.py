from typing import FrozenSet, List, Optional

from portsweep.errors import InvalidPortSpec


MIN_PORT = 1
MAX_PORT = 65535
FULL_PORT_RANGE: FrozenSet[int] = frozenset(range(MIN_PORT, MAX_PORT + 1))


def _to_port(token: str, value: str) -> int:
    value = value.strip()
    digits = value[1:] if value.startswith(("+", "-")) else value
    # int() also takes "8_0" and non-ASCII digits
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidPortSpec(token, f"{value!r} is not a port number")
    port = int(value)
    if port < MIN_PORT or port > MAX_PORT:
        raise InvalidPortSpec(token, f"port numbers must be between {MIN_PORT} and {MAX_PORT}")
    return port


def parse_ports(ports_arg: str) -> Optional[FrozenSet[int]]:
    """Parse a port specification such as ``"22,80-82,443"`` into a set of ints.

    Tokens are comma separated; each is a single port or an inclusive
    ``start-end`` range. Whitespace around tokens and around the hyphen is
    ignored, repeated and overlapping values collapse into one set.

    Returns ``None`` for an empty specification; callers treat that as the
    full port range (see :func:`resolve_ports`).
    """
    if not ports_arg.strip():
        return None

    ports: List[int] = []
    for part in ports_arg.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            bounds = part.split("-")
            if len(bounds) != 2:
                raise InvalidPortSpec(part, "a range takes exactly one hyphen")
            start = _to_port(part, bounds[0])
            end = _to_port(part, bounds[1])
            if start > end:
                raise InvalidPortSpec(part, "start port is greater than end port")
            ports.extend(range(start, end + 1))
        else:
            ports.append(_to_port(part, part))
    return frozenset(ports)


def resolve_ports(ports_arg: Optional[str]) -> FrozenSet[int]:
    """Parse ``ports_arg``, defaulting to every port when nothing is given."""
    ports = parse_ports(ports_arg or "")
    if ports is None:
        return FULL_PORT_RANGE
    return ports
