"""Operator-facing output: one line per VM public address."""

from dataclasses import dataclass
from typing import Mapping

from bgplab.graph import ResourceGraph
from bgplab.resources import PublicAddress

__all__ = [
    "ObservedAddress",
    "PENDING",
    "expected_fqdn",
    "format_public_addresses",
]

PENDING = "(pending)"


@dataclass(frozen=True)
class ObservedAddress:
    """A public address as reported back after apply."""

    ip_address: str
    fqdn: str


def expected_fqdn(address: PublicAddress, location: str) -> str:
    """The FQDN the provider assigns to a labelled public address."""
    return f"{address.domain_name_label}.{location}.cloudapp.azure.com"


def format_public_addresses(
    graph: ResourceGraph,
    observed: Mapping[str, ObservedAddress] | None = None,
) -> list[str]:
    """Render ``"<publicIPName>: <ip_address> / <fqdn>"`` lines.

    Lines are sorted by numeric index, whatever order ``observed`` or the
    graph's mappings iterate in. ``observed`` is keyed by public address
    name; addresses without an observation show `PENDING` and the expected
    FQDN.
    """
    observed = observed or {}
    location = graph.context["location"]
    lines = []
    for key in graph.keys():
        address = graph.public_addresses[key]
        seen = observed.get(address.name)
        if seen is None:
            ip, fqdn = PENDING, expected_fqdn(address, location)
        else:
            ip, fqdn = seen.ip_address, seen.fqdn
        lines.append(f"{address.name}: {ip} / {fqdn}")
    return lines
