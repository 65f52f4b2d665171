"""Tests for plan_changes and the in-memory reconciler."""

import copy

import pytest

from bgplab import InMemoryReconciler, TopologyError, generate, plan_changes
from bgplab.reconcile import document_waves


class TestPlanChanges:
    def test_empty_state_creates_everything(self, graph) -> None:
        """Against nothing, every resource is created in dependency order."""
        plan = plan_changes(graph.to_document(), {"resources": {}})
        assert len(plan.create) == len(graph)
        assert plan.update == [] and plan.delete == []
        assert plan.create[0] == "resource_group.bgplab-rg"
        assert plan.create[-4:] == [f"virtual_machine.bgplab-vm0{i}" for i in range(1, 5)]

    def test_same_document_is_empty(self, graph) -> None:
        """Planning a document against itself changes nothing."""
        document = graph.to_document()
        plan = plan_changes(document, copy.deepcopy(document))
        assert plan.is_empty

    def test_update(self, graph) -> None:
        """A changed property yields an update of that resource only."""
        actual = graph.to_document()
        actual["resources"]["network_interface"]["bgplab-nic02"]["private_address"] = "10.100.2.99"
        plan = plan_changes(graph.to_document(), actual)
        assert plan.update == ["network_interface.bgplab-nic02"]
        assert plan.create == [] and plan.delete == []

    def test_shrink_deletes_in_reverse_order(self, context, renderer) -> None:
        """Dropping an index deletes its resources, VM first."""
        bigger = generate(3, "1.2.3.4", context, boot_renderer=renderer).to_document()
        smaller = generate(2, "1.2.3.4", context, boot_renderer=renderer).to_document()
        plan = plan_changes(smaller, bigger)
        assert plan.create == [] and plan.update == []
        assert plan.delete == [
            "virtual_machine.bgplab-vm03",
            "network_interface.bgplab-nic03",
            "subnet_policy_association.bgplab-subnet03-nsg",
            "subnet.bgplab-subnet03",
            "public_address.bgplab-pip03",
        ]

    def test_document_waves_cycle(self) -> None:
        document = {
            "resources": {
                "node": {
                    "a": {"peer": {"ref": "node.b"}},
                    "b": {"peer": {"ref": "node.a"}},
                }
            }
        }
        with pytest.raises(TopologyError):
            document_waves(document)


class TestInMemoryReconciler:
    def test_apply_twice_is_idempotent(self, graph) -> None:
        """The second apply of the same document is an empty plan."""
        engine = InMemoryReconciler()
        first = engine.apply(graph.to_document())
        second = engine.apply(graph.to_document())
        assert len(first.create) == len(graph)
        assert second.is_empty
        assert engine.state == graph.to_document()
        assert engine.history == [first, second]

    def test_apply_shrinks_state(self, context, renderer) -> None:
        engine = InMemoryReconciler()
        engine.apply(generate(4, "1.2.3.4", context, boot_renderer=renderer).to_document())
        smaller = generate(2, "1.2.3.4", context, boot_renderer=renderer).to_document()
        plan = engine.apply(smaller)
        assert len(plan.delete) == 10
        assert engine.state == smaller

    def test_operator_move_updates_policy(self, context, renderer) -> None:
        """A new operator network only touches the security policy."""
        engine = InMemoryReconciler()
        engine.apply(generate(2, "1.2.3.4", context, boot_renderer=renderer).to_document())
        plan = engine.apply(
            generate(2, "5.6.7.8", context, boot_renderer=renderer).to_document()
        )
        assert plan.update == ["security_policy.bgplab-nsg"]
        assert plan.create == [] and plan.delete == []
