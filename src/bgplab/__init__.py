"""
bgplab: Desired-state topology for a BGP lab.

This package derives, from a subnet count and the operator's IPv4 address,
the complete resource graph of a small BGP lab: one resource group, a hub
virtual network (``10.100.0.0/16``), ``N`` numbered subnets sharing one
security policy, and ``N`` single-NIC virtual machines with public
addresses. The graph is a pure value; creating the resources is left to an
external reconciliation engine.

Overview:
    Every per-VM resource is identified by a two-digit index key
    (``"01"`` .. ``"99"``) that also drives its addressing:

    - subnet ``10.100.<i>.0/24``
    - host ``10.100.<i>.<i>0``
    - public address label ``<prefix>-vm<key>-<alias>``

Quick Start:
    Generating a four-router lab::

        from bgplab import generate, format_public_addresses

        graph = generate(4, "203.0.113.7")
        graph.allowed_source          # '203.0.113.0/24'
        graph.keys()                  # ['01', '02', '03', '04']
        document = graph.to_document()
        for wave in graph.creation_waves():
            ...

    Resource dependencies are declared with type markers::

        @dataclass(frozen=True)
        class NetworkInterface(Resource):
            subnet: Ref[Subnet] = None
            public_address: Ref[PublicAddress] | None = None

Exports:
    Generation:
        - `generate`, `generate_from_config`
        - `ResourceGraph`, `TopologyContext`, `LabConfig`
        - `derive_addressing`, `allowed_source_cidr`

    Errors:
        - `TopologyError`, `RangeError`, `FormatError`

    References:
        - `Ref`, `RefList`, `ContextRef`
        - `RefInfo`, `get_refs`, `get_dependencies`, `creation_waves`

    Output and reconciliation:
        - `format_public_addresses`, `ObservedAddress`
        - `plan_changes`, `ChangePlan`, `InMemoryReconciler`
"""

from bgplab._dependencies import (
    RefInfo,
    creation_waves,
    get_dependencies,
    get_refs,
    resource_dependencies,
)
from bgplab._refs import (
    ContextRef,
    Ref,
    RefList,
)
from bgplab.addressing import allowed_source_cidr, derive_addressing
from bgplab.config import LabConfig, TopologyContext
from bgplab.errors import FormatError, RangeError, TopologyError
from bgplab.generator import generate, generate_from_config
from bgplab.graph import ResourceGraph
from bgplab.outputs import ObservedAddress, format_public_addresses
from bgplab.reconcile import ChangePlan, InMemoryReconciler, plan_changes

__all__ = [
    # Generation
    "generate",
    "generate_from_config",
    "ResourceGraph",
    "TopologyContext",
    "LabConfig",
    "derive_addressing",
    "allowed_source_cidr",
    # Errors
    "TopologyError",
    "RangeError",
    "FormatError",
    # References
    "Ref",
    "RefList",
    "ContextRef",
    "RefInfo",
    "get_refs",
    "get_dependencies",
    "resource_dependencies",
    "creation_waves",
    # Output and reconciliation
    "format_public_addresses",
    "ObservedAddress",
    "plan_changes",
    "ChangePlan",
    "InMemoryReconciler",
]

__version__ = "0.1.0"
