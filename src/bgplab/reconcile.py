"""
Reconciliation of desired-state documents.

The lab never talks to a provider itself; an external engine takes the
document from `ResourceGraph.to_document` and makes the live state match.
This module fixes the semantics such an engine has to honour:

- `plan_changes` diffs a desired and an actual document into creates,
  updates and deletes. Creates and updates come in dependency order,
  deletes in reverse dependency order.
- Planning the same desired document against the state it produced is
  empty: applying twice changes nothing the second time.

`InMemoryReconciler` is a reference engine that keeps state in memory.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Protocol

from bgplab.errors import TopologyError

__all__ = [
    "Reconciler",
    "ChangePlan",
    "plan_changes",
    "document_waves",
    "InMemoryReconciler",
]

_LOGGER = logging.getLogger(__name__)


class Reconciler(Protocol):
    """The engine that makes live resources match a document."""

    def apply(self, document: Mapping[str, Any]) -> "ChangePlan":
        """Converge the live state on ``document``.

        Args:
            document: Desired state shaped like `ResourceGraph.to_document`.

        Returns:
            The changes that were made. Applying the same document again
            returns an empty plan.
        """
        ...


@dataclass
class ChangePlan:
    """Resource ids (``"<kind>.<name>"``) to create, update and delete."""

    create: list[str] = field(default_factory=list)
    update: list[str] = field(default_factory=list)
    delete: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.create or self.update or self.delete)

    def __str__(self) -> str:
        return (
            f"{len(self.create)} to create, {len(self.update)} to update, "
            f"{len(self.delete)} to delete"
        )


def _flatten(document: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    resources = document.get("resources", {})
    return {
        f"{kind}.{name}": properties
        for kind, by_name in resources.items()
        for name, properties in by_name.items()
    }


def _iter_refs(value: Any) -> Iterator[str]:
    if isinstance(value, Mapping):
        if set(value) == {"ref"}:
            yield value["ref"]
            return
        for v in value.values():
            yield from _iter_refs(v)
    elif isinstance(value, list):
        for v in value:
            yield from _iter_refs(v)


def document_waves(document: Mapping[str, Any]) -> list[list[str]]:
    """Layer the resource ids of a document by their ``ref`` edges.

    References to ids missing from the document are ignored.

    Raises:
        TopologyError: If the references form a cycle.
    """
    flat = _flatten(document)
    edges = {rid: set(_iter_refs(props)) & flat.keys() for rid, props in flat.items()}

    waves: list[list[str]] = []
    done: set[str] = set()
    pending = set(flat)
    while pending:
        ready = sorted(rid for rid in pending if edges[rid] <= done)
        if not ready:
            raise TopologyError(f"dependency cycle between {', '.join(sorted(pending))}")
        waves.append(ready)
        done.update(ready)
        pending.difference_update(ready)
    return waves


def plan_changes(desired: Mapping[str, Any], actual: Mapping[str, Any]) -> ChangePlan:
    """Diff two documents.

    Args:
        desired: The document the live state should match.
        actual: The document describing the live state.

    Returns:
        A `ChangePlan`; empty when both documents hold the same resources
        with the same properties.
    """
    want = _flatten(desired)
    have = _flatten(actual)

    plan = ChangePlan()
    for wave in document_waves(desired):
        for rid in wave:
            if rid not in have:
                plan.create.append(rid)
            elif have[rid] != want[rid]:
                plan.update.append(rid)
    for wave in reversed(document_waves(actual)):
        plan.delete.extend(rid for rid in wave if rid not in want)
    return plan


class InMemoryReconciler:
    """Apply documents to an in-memory state.

    Attributes:
        state: The current live document.
        history: Every plan applied so far.
    """

    def __init__(self, state: Mapping[str, Any] | None = None) -> None:
        self.state: dict[str, Any] = copy.deepcopy(dict(state or {"resources": {}}))
        self.state.setdefault("resources", {})
        self.history: list[ChangePlan] = []

    def apply(self, document: Mapping[str, Any]) -> ChangePlan:
        """Plan against the current state and apply the plan.

        Deletes run first, in reverse dependency order, then creates and
        updates in dependency order.

        Args:
            document: Desired state shaped like `ResourceGraph.to_document`.

        Returns:
            The applied `ChangePlan`, also appended to `history`.
        """
        plan = plan_changes(document, self.state)
        want = _flatten(document)
        resources = self.state["resources"]

        for rid in plan.delete:
            kind, _, name = rid.partition(".")
            _LOGGER.debug("delete %s", rid)
            del resources[kind][name]
            if not resources[kind]:
                del resources[kind]
        for rid in plan.create + plan.update:
            kind, _, name = rid.partition(".")
            _LOGGER.debug("%s %s", "create" if rid in plan.create else "update", rid)
            resources.setdefault(kind, {})[name] = copy.deepcopy(want[rid])

        if "context" in document:
            self.state["context"] = dict(document["context"])
        self.history.append(plan)
        _LOGGER.info("applied plan: %s", plan)
        return plan
