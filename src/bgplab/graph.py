"""
The resource graph: the complete desired state of one lab.

A `ResourceGraph` is built in one piece by `bgplab.generator.generate` and
never changed afterwards; a new count or operator address means a new
graph. Per-index resources are kept in mappings keyed by index key, so any
ordering is explicit: `ResourceGraph.keys` sorts by numeric index.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from bgplab._dependencies import creation_waves, get_refs, resource_id
from bgplab.errors import TopologyError
from bgplab.resources import (
    NetworkInterface,
    PublicAddress,
    Resource,
    ResourceGroup,
    SecurityPolicy,
    Subnet,
    SubnetPolicyAssociation,
    VirtualMachine,
    VirtualNetwork,
)

__all__ = [
    "ResourceGraph",
    "serialize_resource",
]


@dataclass(frozen=True)
class ResourceGraph:
    """Desired state of every lab resource.

    Attributes:
        resource_group: The lab's resource group.
        network: The hub virtual network.
        security_policy: The policy shared by every subnet.
        subnets: Subnets keyed by index key.
        associations: Subnet/policy associations keyed by index key.
        public_addresses: Public addresses keyed by index key.
        interfaces: Network interfaces keyed by index key.
        machines: Virtual machines keyed by index key.
        allowed_source: The operator /24 allowed by the security policy.
        context: Values `ContextRef` fields resolve against.

    `bgplab.generator.generate` stores every mapping as a read-only view.
    Equal graphs hash equal; the hash covers the fixed resources and the
    allowed source only.
    """

    resource_group: ResourceGroup
    network: VirtualNetwork
    security_policy: SecurityPolicy
    subnets: Mapping[str, Subnet] = field(hash=False)
    associations: Mapping[str, SubnetPolicyAssociation] = field(hash=False)
    public_addresses: Mapping[str, PublicAddress] = field(hash=False)
    interfaces: Mapping[str, NetworkInterface] = field(hash=False)
    machines: Mapping[str, VirtualMachine] = field(hash=False)
    allowed_source: str
    context: Mapping[str, str] = field(hash=False)

    def keys(self) -> list[str]:
        """Index keys sorted by numeric index."""
        return sorted(self.subnets, key=int)

    def resources(self) -> Iterator[Resource]:
        """Every resource: fixed ones first, then per index key."""
        yield self.resource_group
        yield self.network
        yield self.security_policy
        for key in self.keys():
            yield self.subnets[key]
            yield self.associations[key]
            yield self.public_addresses[key]
            yield self.interfaces[key]
            yield self.machines[key]

    def __len__(self) -> int:
        return sum(1 for _ in self.resources())

    def creation_waves(self) -> list[list[Resource]]:
        """Resources layered by dependency, see `creation_waves`."""
        return creation_waves(self.resources())

    def to_document(self) -> dict[str, Any]:
        """JSON-serialisable desired state.

        Layout::

            {
                "context": {"location": ..., ...},
                "resources": {kind: {name: {field: value, ...}}},
            }

        References become ``{"ref": "<kind>.<name>"}`` and context fields
        are resolved from `context`.
        """
        resources: dict[str, dict[str, Any]] = {}
        for resource in self.resources():
            by_name = resources.setdefault(resource.kind, {})
            by_name[resource.name] = serialize_resource(resource, self.context)
        return {"context": dict(self.context), "resources": resources}


def serialize_resource(resource: Resource, context: Mapping[str, str]) -> dict[str, Any]:
    """Properties of ``resource`` with references and context resolved.

    Raises:
        KeyError: If a `ContextRef` names a value missing from ``context``.
        TopologyError: If a required reference is unset.
    """
    refs = get_refs(type(resource))
    properties: dict[str, Any] = {}
    for f in dataclasses.fields(resource):
        if f.name == "name":
            continue
        value = getattr(resource, f.name)
        info = refs.get(f.name)
        if info is None:
            properties[f.name] = _plain(value)
        elif info.is_context:
            properties[f.name] = value if value is not None else context[info.attr]
        elif info.is_list:
            properties[f.name] = [{"ref": resource_id(v)} for v in value]
        elif value is None:
            if not info.is_optional:
                raise TopologyError(f"{resource_id(resource)} has no {f.name}")
            properties[f.name] = None
        else:
            properties[f.name] = {"ref": resource_id(value)}
    return properties


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    return value
