"""
Topology generator.

`generate` is a pure function from a subnet count and the operator's IPv4
address to a `ResourceGraph`. It validates both inputs before building
anything, so a bad input never yields a partial graph, and returns an
equal graph every time it is called with equal inputs.

Resource names, for prefix ``bgplab`` and index key ``03``::

    bgplab-rg            resource group
    bgplab-hub-vnet      hub virtual network (10.100.0.0/16)
    bgplab-nsg           shared security policy
    bgplab-subnet03      subnet 10.100.3.0/24
    bgplab-subnet03-nsg  subnet/policy association
    bgplab-pip03         public address, label bgplab-vm03-<alias>
    bgplab-nic03         NIC at 10.100.3.30
    bgplab-vm03          virtual machine
"""

import logging
from types import MappingProxyType

from bgplab.addressing import HUB_ADDRESS_SPACE, derive_addressing
from bgplab.bootconfig import BootConfigRenderer, CloudInitRenderer
from bgplab.config import LabConfig, TopologyContext
from bgplab.graph import ResourceGraph
from bgplab.identity import AliasLookup, dns_label
from bgplab.resources import (
    UBUNTU_IMAGE,
    NetworkInterface,
    PublicAddress,
    ResourceGroup,
    SecurityPolicy,
    Subnet,
    SubnetPolicyAssociation,
    VirtualMachine,
    VirtualNetwork,
    operator_rules,
)

__all__ = [
    "generate",
    "generate_from_config",
]

_LOGGER = logging.getLogger(__name__)


def generate(
    subnet_count: int,
    ip_address: str,
    context: TopologyContext | None = None,
    *,
    boot_renderer: BootConfigRenderer | None = None,
) -> ResourceGraph:
    """Derive the lab's resource graph.

    Args:
        subnet_count: Number of subnets and VMs, between 2 and 99.
        ip_address: The operator's IPv4 address; its /24 is allowed in.
        context: Shared evaluation values. Defaults to `TopologyContext()`.
        boot_renderer: Turns a hostname into a VM's boot configuration.
            Defaults to `CloudInitRenderer`.

    Returns:
        The complete desired-state graph.

    Raises:
        RangeError: If ``subnet_count`` is outside ``[2, 99]``.
        FormatError: If ``ip_address`` is not an IPv4 address, or no valid
            DNS label can be built from the context's alias.
    """
    plan = derive_addressing(subnet_count, ip_address)
    context = context or TopologyContext()
    prefix = context.prefix

    # labels are checked before any resource is declared
    labels = {key: dns_label(prefix, key, context.alias) for key in plan.keys()}

    renderer = boot_renderer or CloudInitRenderer()

    group = ResourceGroup(
        name=f"{prefix}-rg",
        tags=MappingProxyType(dict(context.tags)),
    )
    network = VirtualNetwork(
        name=f"{prefix}-hub-vnet",
        resource_group=group,
        address_space=(str(HUB_ADDRESS_SPACE),),
    )
    policy = SecurityPolicy(
        name=f"{prefix}-nsg",
        resource_group=group,
        rules=operator_rules(plan.allowed_source),
    )

    subnets: dict[str, Subnet] = {}
    associations: dict[str, SubnetPolicyAssociation] = {}
    public_addresses: dict[str, PublicAddress] = {}
    interfaces: dict[str, NetworkInterface] = {}
    machines: dict[str, VirtualMachine] = {}

    for key in plan.keys():
        subnet = Subnet(
            name=f"{prefix}-subnet{key}",
            index_key=key,
            network=network,
            address_prefix=plan.subnets[key].cidr,
        )
        public_address = PublicAddress(
            name=f"{prefix}-pip{key}",
            index_key=key,
            resource_group=group,
            domain_name_label=labels[key],
        )
        interface = NetworkInterface(
            name=f"{prefix}-nic{key}",
            index_key=key,
            resource_group=group,
            subnet=subnet,
            public_address=public_address,
            private_address=plan.hosts[key].static_address,
        )
        hostname = f"{prefix}-vm{key}"
        machine = VirtualMachine(
            name=hostname,
            index_key=key,
            hostname=hostname,
            resource_group=group,
            interfaces=(interface,),
            size=context.vm_size,
            image=UBUNTU_IMAGE,
            admin_username=context.admin_username,
            ssh_public_key=context.ssh_public_key,
            boot_config=renderer.render(hostname),
        )

        subnets[key] = subnet
        associations[key] = SubnetPolicyAssociation(
            name=f"{prefix}-subnet{key}-nsg",
            index_key=key,
            subnet=subnet,
            policy=policy,
        )
        public_addresses[key] = public_address
        interfaces[key] = interface
        machines[key] = machine

    graph = ResourceGraph(
        resource_group=group,
        network=network,
        security_policy=policy,
        subnets=MappingProxyType(subnets),
        associations=MappingProxyType(associations),
        public_addresses=MappingProxyType(public_addresses),
        interfaces=MappingProxyType(interfaces),
        machines=MappingProxyType(machines),
        allowed_source=plan.allowed_source,
        context=MappingProxyType(context.values()),
    )
    _LOGGER.info(
        "generated lab %s: %d subnets, %d resources in %s",
        prefix,
        len(subnets),
        len(graph),
        context.location,
    )
    return graph


def generate_from_config(
    config: LabConfig,
    *,
    alias_lookup: AliasLookup | None = None,
    boot_renderer: BootConfigRenderer | None = None,
) -> ResourceGraph:
    """`generate` driven by a `LabConfig`.

    ``alias_lookup`` resolves the operator alias; without it the config's
    ``alias`` is used.
    """
    alias = alias_lookup.alias() if alias_lookup is not None else None
    return generate(
        config.subnet_count,
        config.ip_address,
        config.context(alias=alias),
        boot_renderer=boot_renderer,
    )
