"""
Resource declarations of the lab.

Each class describes the desired state of one provider resource. The
classes are frozen dataclasses; dependency edges are declared with the
`Ref`/`RefList` markers and the target location with `ContextRef`, so the
creation order and the serialised document both follow from the
annotations alone.

Dependency edges::

    ResourceGroup <- VirtualNetwork <- Subnet <- SubnetPolicyAssociation
    ResourceGroup <- SecurityPolicy <------------/
    ResourceGroup <- PublicAddress <- NetworkInterface <- VirtualMachine
                           Subnet <--/
"""

from dataclasses import dataclass, field
from typing import ClassVar, Mapping

from bgplab._refs import ContextRef, Ref, RefList

__all__ = [
    "Resource",
    "ResourceGroup",
    "VirtualNetwork",
    "Subnet",
    "SecurityRule",
    "SecurityPolicy",
    "SubnetPolicyAssociation",
    "PublicAddress",
    "NetworkInterface",
    "VmImage",
    "VirtualMachine",
    "DEFAULT_VM_SIZE",
    "DEFAULT_ADMIN_USERNAME",
    "UBUNTU_IMAGE",
    "operator_rules",
]

DEFAULT_VM_SIZE = "Standard_B1s"
DEFAULT_ADMIN_USERNAME = "azureuser"


@dataclass(frozen=True)
class Resource:
    """Base class of every declared resource.

    Attributes:
        name: Provider-side name, unique within its kind.
        kind: Resource type, used as the first half of the resource id.
    """

    kind: ClassVar[str] = "resource"

    name: str


@dataclass(frozen=True)
class ResourceGroup(Resource):
    kind: ClassVar[str] = "resource_group"

    tags: Mapping[str, str] = field(default_factory=dict, hash=False)
    location: ContextRef["location"] = None


@dataclass(frozen=True)
class VirtualNetwork(Resource):
    """The hub network holding every lab subnet."""

    kind: ClassVar[str] = "virtual_network"

    resource_group: Ref[ResourceGroup] = None
    address_space: tuple[str, ...] = ()
    location: ContextRef["location"] = None


@dataclass(frozen=True)
class Subnet(Resource):
    kind: ClassVar[str] = "subnet"

    index_key: str = ""
    network: Ref[VirtualNetwork] = None
    address_prefix: str = ""


@dataclass(frozen=True)
class SecurityRule:
    """One rule of a security policy. Not a resource on its own."""

    name: str
    priority: int
    direction: str = "Inbound"
    access: str = "Allow"
    protocol: str = "*"
    source_address_prefix: str = "*"
    source_port_range: str = "*"
    destination_address_prefix: str = "*"
    destination_port_range: str = "*"


@dataclass(frozen=True)
class SecurityPolicy(Resource):
    """The security policy shared by every subnet."""

    kind: ClassVar[str] = "security_policy"

    resource_group: Ref[ResourceGroup] = None
    rules: tuple[SecurityRule, ...] = ()
    location: ContextRef["location"] = None


@dataclass(frozen=True)
class SubnetPolicyAssociation(Resource):
    kind: ClassVar[str] = "subnet_policy_association"

    index_key: str = ""
    subnet: Ref[Subnet] = None
    policy: Ref[SecurityPolicy] = None


@dataclass(frozen=True)
class PublicAddress(Resource):
    """A static public address with a DNS label."""

    kind: ClassVar[str] = "public_address"

    index_key: str = ""
    resource_group: Ref[ResourceGroup] = None
    domain_name_label: str = ""
    allocation: str = "Static"
    sku: str = "Standard"
    location: ContextRef["location"] = None


@dataclass(frozen=True)
class NetworkInterface(Resource):
    """A VM's only NIC, statically addressed inside its subnet.

    IP forwarding is on so the VM can route for its BGP peers. The public
    address is optional; a NIC without one is reachable only privately.
    """

    kind: ClassVar[str] = "network_interface"

    index_key: str = ""
    resource_group: Ref[ResourceGroup] = None
    subnet: Ref[Subnet] = None
    public_address: Ref[PublicAddress] | None = None
    private_address: str = ""
    ip_forwarding: bool = True
    location: ContextRef["location"] = None


@dataclass(frozen=True)
class VmImage:
    publisher: str
    offer: str
    sku: str
    version: str = "latest"


UBUNTU_IMAGE = VmImage(
    publisher="Canonical",
    offer="0001-com-ubuntu-server-jammy",
    sku="22_04-lts-gen2",
)


@dataclass(frozen=True)
class VirtualMachine(Resource):
    """A single-NIC lab router.

    ``boot_config`` is the opaque blob produced by a boot-configuration
    renderer for ``hostname``.
    """

    kind: ClassVar[str] = "virtual_machine"

    index_key: str = ""
    hostname: str = ""
    resource_group: Ref[ResourceGroup] = None
    interfaces: RefList[NetworkInterface] = ()
    size: str = DEFAULT_VM_SIZE
    image: VmImage = UBUNTU_IMAGE
    admin_username: str = DEFAULT_ADMIN_USERNAME
    ssh_public_key: str | None = None
    os_disk_type: str = "Standard_LRS"
    boot_config: str = ""
    location: ContextRef["location"] = None


def operator_rules(allowed_source: str) -> tuple[SecurityRule, ...]:
    """Rule set of the shared security policy.

    A single inbound allow for the operator's whole /24, on every port and
    protocol.
    """
    return (
        SecurityRule(
            name="allow-operator-inbound",
            priority=100,
            source_address_prefix=allowed_source,
        ),
    )
