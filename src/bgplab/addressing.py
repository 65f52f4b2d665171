"""
Address plan for the lab.

Every generated resource is identified by an index key, the two-digit
zero-padded form of its position in ``1..N``. The key also drives the
addressing scheme inside the hub address space ``10.100.0.0/16``:

- subnet ``i`` is ``10.100.<i>.0/24``
- the single host in subnet ``i`` is ``10.100.<i>.<i>0``

For ``i >= 26`` the literal ``<i>0`` is no longer an octet, so the host
falls back to ``10.100.<i>.<i>``. Both forms stay inside the subnet and
clear of the addresses the provider reserves (the first four and the
broadcast address).

Example:
    >>> plan = derive_addressing(4, "1.2.3.4")
    >>> plan.allowed_source
    '1.2.3.0/24'
    >>> [s.cidr for s in plan.subnets.values()]
    ['10.100.1.0/24', '10.100.2.0/24', '10.100.3.0/24', '10.100.4.0/24']
    >>> [h.static_address for h in plan.hosts.values()]
    ['10.100.1.10', '10.100.2.20', '10.100.3.30', '10.100.4.40']
"""

import logging
import re
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv4Network, ip_interface
from types import MappingProxyType
from typing import Mapping

from bgplab.errors import FormatError, RangeError

__all__ = [
    "HUB_ADDRESS_SPACE",
    "MIN_SUBNETS",
    "MAX_SUBNETS",
    "SubnetRecord",
    "HostRecord",
    "AddressPlan",
    "validate_subnet_count",
    "validate_ipv4",
    "allowed_source_cidr",
    "index_key",
    "index_keys",
    "subnet_record",
    "host_record",
    "derive_addressing",
]

_LOGGER = logging.getLogger(__name__)

HUB_ADDRESS_SPACE = IPv4Network("10.100.0.0/16")
MIN_SUBNETS = 2
MAX_SUBNETS = 99

# provider reserves .0-.3 and the broadcast address of every subnet
_LAST_HOST_OCTET = 254

_DOTTED_QUAD = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")


@dataclass(frozen=True)
class SubnetRecord:
    """One numbered subnet of the hub network."""

    index_key: str
    cidr: str


@dataclass(frozen=True)
class HostRecord:
    """The static private address of the VM living in a numbered subnet."""

    index_key: str
    static_address: str


@dataclass(frozen=True)
class AddressPlan:
    """All addressing derived from a subnet count and an operator address.

    Attributes:
        allowed_source: The operator's /24, used by the security policy.
        subnets: Subnet records keyed by index key.
        hosts: Host records keyed by index key.

    Both mappings are read-only views.
    """

    allowed_source: str
    subnets: Mapping[str, SubnetRecord] = field(hash=False)
    hosts: Mapping[str, HostRecord] = field(hash=False)

    def keys(self) -> list[str]:
        """Index keys in ascending numeric order."""
        return sorted(self.subnets, key=int)


def validate_subnet_count(count: object) -> int:
    """Check that ``count`` is an integer in ``[MIN_SUBNETS, MAX_SUBNETS]``.

    Raises:
        RangeError: If the count is not an integer or is out of range.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise RangeError("subnet count", count, MIN_SUBNETS, MAX_SUBNETS)
    if not MIN_SUBNETS <= count <= MAX_SUBNETS:
        raise RangeError("subnet count", count, MIN_SUBNETS, MAX_SUBNETS)
    return count


def validate_ipv4(address: object) -> IPv4Address:
    """Parse a strict IPv4 dotted-quad string.

    Raises:
        FormatError: If ``address`` is not four decimal octets in 0-255.
    """
    if not isinstance(address, str) or not _DOTTED_QUAD.match(address):
        raise FormatError(f"{address!r} is not a valid IPv4 address")
    try:
        return IPv4Address(address)
    except ValueError as err:
        raise FormatError(f"{address!r} is not a valid IPv4 address") from err


def allowed_source_cidr(address: str) -> str:
    """Return the /24 network that contains ``address``.

    >>> allowed_source_cidr("1.2.3.4")
    '1.2.3.0/24'
    """
    parsed = validate_ipv4(address)
    return str(ip_interface(f"{parsed}/24").network)


def index_key(index: int) -> str:
    """Zero-padded two-digit key for a 1-based index."""
    return f"{index:02d}"


def index_keys(count: int) -> list[str]:
    """Keys ``"01"`` up to ``count`` in ascending order."""
    count = validate_subnet_count(count)
    return [index_key(i) for i in range(1, count + 1)]


def subnet_record(key: str) -> SubnetRecord:
    """Subnet of the hub network for one index key.

    Args:
        key: Index key, e.g. ``"03"``.

    Returns:
        A `SubnetRecord` for ``10.100.<i>.0/24``.
    """
    index = int(key)
    network = IPv4Network(f"10.100.{index}.0/24")
    return SubnetRecord(index_key=key, cidr=str(network))


def host_record(key: str) -> HostRecord:
    """Static private address of the VM for one index key.

    Args:
        key: Index key, e.g. ``"03"``.

    Returns:
        A `HostRecord` for ``10.100.<i>.<i>0``, or ``10.100.<i>.<i>`` once
        ``<i>0`` is past the last usable host octet.
    """
    index = int(key)
    octet = index * 10
    if octet > _LAST_HOST_OCTET:
        octet = index
    return HostRecord(index_key=key, static_address=f"10.100.{index}.{octet}")


def derive_addressing(count: int, address: str) -> AddressPlan:
    """Derive the complete address plan for ``count`` subnets.

    Both inputs are validated before any record is built, so a failure
    never leaves a partial plan behind.

    Args:
        count: Number of subnets, between 2 and 99.
        address: The operator's public IPv4 address.

    Returns:
        An `AddressPlan` with one subnet and one host record per key.

    Raises:
        RangeError: If ``count`` is out of range.
        FormatError: If ``address`` is not an IPv4 address.
    """
    count = validate_subnet_count(count)
    allowed = allowed_source_cidr(address)

    keys = index_keys(count)
    subnets = MappingProxyType({key: subnet_record(key) for key in keys})
    hosts = MappingProxyType({key: host_record(key) for key in keys})
    _LOGGER.debug(
        "derived %d subnets in %s, operator network %s",
        len(subnets),
        HUB_ADDRESS_SPACE,
        allowed,
    )
    return AddressPlan(allowed_source=allowed, subnets=subnets, hosts=hosts)
