"""
Concrete convergence probes and the health-check capabilities they use.

- Port probes: is anything still accepting TCP connections?
- Registry probes: is the address healthy, unhealthy, gone from the listing?
- Process probe: has the pid exited?
"""

from .address import HostPort, parse_address
from .health_checks import HttpHealthChecker, tcp_health_check
from .network import DEFAULT_HOST, port_accepts_connections, port_closed, ports_closed
from .process import process_exited
from .registry import AddressLister, HealthCheck, address_healthy, address_removed, address_unhealthy
from .types import DescribedProbe

__all__ = [
    "AddressLister",
    "DEFAULT_HOST",
    "DescribedProbe",
    "HealthCheck",
    "HostPort",
    "HttpHealthChecker",
    "address_healthy",
    "address_removed",
    "address_unhealthy",
    "parse_address",
    "port_accepts_connections",
    "port_closed",
    "ports_closed",
    "process_exited",
    "tcp_health_check",
]
