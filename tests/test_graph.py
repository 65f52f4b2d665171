"""Tests for the resource graph document."""

import dataclasses
import json

import pytest

from bgplab import TopologyError, generate
from bgplab.graph import serialize_resource


class TestDocument:
    """Tests for ResourceGraph.to_document."""

    def test_layout(self, graph) -> None:
        """Resources are grouped by kind then name."""
        document = graph.to_document()
        assert document["context"] == {"location": "westeurope", "prefix": "bgplab"}
        resources = document["resources"]
        assert set(resources) == {
            "resource_group",
            "virtual_network",
            "security_policy",
            "subnet",
            "subnet_policy_association",
            "public_address",
            "network_interface",
            "virtual_machine",
        }
        assert sorted(resources["subnet"]) == [f"bgplab-subnet0{i}" for i in range(1, 5)]

    def test_references_serialised(self, graph) -> None:
        """Ref fields become {"ref": id}, RefList fields lists of them."""
        resources = graph.to_document()["resources"]
        nic = resources["network_interface"]["bgplab-nic01"]
        assert nic["subnet"] == {"ref": "subnet.bgplab-subnet01"}
        assert nic["public_address"] == {"ref": "public_address.bgplab-pip01"}
        vm = resources["virtual_machine"]["bgplab-vm01"]
        assert vm["interfaces"] == [{"ref": "network_interface.bgplab-nic01"}]

    def test_context_resolved(self, graph) -> None:
        """Location fields take the context value."""
        resources = graph.to_document()["resources"]
        assert resources["resource_group"]["bgplab-rg"]["location"] == "westeurope"
        assert resources["virtual_machine"]["bgplab-vm02"]["location"] == "westeurope"
        assert "location" not in resources["subnet"]["bgplab-subnet02"]

    def test_nested_values(self, graph) -> None:
        """Rules and images become plain dicts and lists."""
        resources = graph.to_document()["resources"]
        policy = resources["security_policy"]["bgplab-nsg"]
        assert policy["rules"][0]["source_address_prefix"] == "1.2.3.0/24"
        vm = resources["virtual_machine"]["bgplab-vm03"]
        assert vm["image"]["publisher"] == "Canonical"

    def test_json_serialisable(self, graph) -> None:
        """The document survives json.dumps."""
        assert json.loads(json.dumps(graph.to_document())) == graph.to_document()

    def test_missing_context_value(self, graph) -> None:
        """A ContextRef without a context value is an error."""
        with pytest.raises(KeyError):
            serialize_resource(graph.resource_group, {})

    def test_unset_optional_ref(self, graph) -> None:
        """An unset optional reference serialises as None."""
        nic = dataclasses.replace(graph.interfaces["01"], public_address=None)
        properties = serialize_resource(nic, graph.context)
        assert properties["public_address"] is None
        assert properties["subnet"] == {"ref": "subnet.bgplab-subnet01"}

    def test_unset_required_ref(self, graph) -> None:
        """An unset required reference is an error."""
        nic = dataclasses.replace(graph.interfaces["01"], subnet=None)
        message = "network_interface.bgplab-nic01 has no subnet"
        with pytest.raises(TopologyError, match=message):
            serialize_resource(nic, graph.context)


class TestGraphAccess:
    """Tests for lookup helpers."""

    def test_keys_sorted_numerically(self, graph) -> None:
        """keys() sorts even when mappings were filled out of order."""
        shuffled = dict(reversed(list(graph.subnets.items())))
        assert dataclasses.replace(graph, subnets=shuffled).keys() == ["01", "02", "03", "04"]


class TestImmutability:
    """Tests that a generated graph cannot be changed in place."""

    def test_index_mappings_read_only(self, graph) -> None:
        with pytest.raises(TypeError):
            graph.subnets["05"] = graph.subnets["04"]
        with pytest.raises(TypeError):
            del graph.machines["04"]
        assert not hasattr(graph.interfaces, "pop")
        assert graph.keys() == ["01", "02", "03", "04"]

    def test_context_and_tags_read_only(self, graph) -> None:
        with pytest.raises(TypeError):
            graph.context["location"] = "eastus"
        with pytest.raises(TypeError):
            graph.resource_group.tags["env"] = "prod"

    def test_fields_frozen(self, graph) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            graph.allowed_source = "0.0.0.0/0"  # type: ignore

    def test_hashable(self, graph, context, renderer) -> None:
        """Equal graphs are equal and hash equal."""
        again = generate(4, "1.2.3.4", context, boot_renderer=renderer)
        assert again == graph
        assert hash(again) == hash(graph)
        assert len({graph, again}) == 1
