class PortSweepError(Exception):
    """Base class for configuration errors raised before a scan starts."""


class InvalidCIDR(PortSweepError, ValueError):
    def __init__(self, cidr: str, reason: str) -> None:
        super().__init__(f"invalid CIDR {cidr!r}: {reason}")
        self.cidr = cidr


class InvalidPortSpec(PortSweepError, ValueError):
    def __init__(self, token: str, reason: str) -> None:
        super().__init__(f"invalid port specification {token!r}: {reason}")
        self.token = token
