"""
Dependency introspection for lab resources.

This module reads the `Ref`, `RefList` and `ContextRef` markers from
resource annotations and turns them into dependency information:

- `get_refs`: the reference fields declared on a resource class
- `get_dependencies`: the resource classes a class depends on
- `resource_dependencies`: the resource instances a resource depends on
- `creation_waves`: a layering of resources into creation order

Example:
    Ordering a small graph::

        waves = creation_waves([vm, nic, subnet, network, group])
        # [[group], [network], [subnet], [nic], [vm]]
"""

from dataclasses import dataclass
from typing import Any, Iterable, Union, get_args, get_origin, get_type_hints

from bgplab._refs import ContextRef, Ref, RefList
from bgplab.errors import TopologyError

__all__ = [
    "RefInfo",
    "get_refs",
    "get_dependencies",
    "resource_id",
    "resource_dependencies",
    "creation_waves",
]


@dataclass(frozen=True)
class RefInfo:
    """Metadata about a reference field.

    Attributes:
        field: The name of the field containing the reference.
        target: The referenced class. For `ContextRef`, this is `type(None)`.
        attr: The context value name for `ContextRef`, None otherwise.
        is_list: True if the field is a `RefList`.
        is_optional: True if the reference is optional (`Ref[T] | None`).
        is_context: True if the field is a `ContextRef`.
    """

    field: str
    target: type
    attr: str | None = None
    is_list: bool = False
    is_optional: bool = False
    is_context: bool = False


def get_refs(cls: type) -> dict[str, RefInfo]:
    """Extract reference information from a resource class.

    Analyzes the type hints of ``cls`` and returns a mapping from field
    name to `RefInfo` for every `Ref`, `RefList` or `ContextRef` field,
    including optional ones. Plain fields are not included.

    Args:
        cls: The class to analyze, usually a resource dataclass.

    Returns:
        A dictionary mapping field names to `RefInfo` objects.
    """
    refs: dict[str, RefInfo] = {}

    try:
        hints = get_type_hints(cls, include_extras=True)
    except Exception:
        # unresolvable forward references: treat as having no refs
        return refs

    for name, hint in hints.items():
        info = _analyze_type(name, hint)
        if info is not None:
            refs[name] = info

    return refs


def _get_origin(hint: Any) -> Any:
    """`typing.get_origin` that also understands our `_GenericAlias`."""
    origin = get_origin(hint)
    if origin is not None:
        return origin
    if hasattr(hint, "__origin__"):
        return hint.__origin__
    return None


def _get_args(hint: Any) -> tuple[Any, ...]:
    """`typing.get_args` that also understands our `_GenericAlias`."""
    args = get_args(hint)
    if args:
        return args
    if hasattr(hint, "__args__"):
        result: tuple[Any, ...] = hint.__args__
        return result
    return ()


def _analyze_type(field: str, hint: Any) -> RefInfo | None:
    """Return RefInfo if ``hint`` is a reference type, None otherwise."""
    origin = _get_origin(hint)
    args = _get_args(hint)

    if origin is Union:
        non_none_args = [a for a in args if a is not type(None)]
        if len(non_none_args) == 1:
            inner_info = _analyze_type(field, non_none_args[0])
            if inner_info is not None:
                return RefInfo(
                    field=inner_info.field,
                    target=inner_info.target,
                    attr=inner_info.attr,
                    is_list=inner_info.is_list,
                    is_optional=True,
                    is_context=inner_info.is_context,
                )
        return None

    if origin is Ref:
        if args:
            return RefInfo(field=field, target=args[0])
        return None

    if origin is RefList:
        if args:
            return RefInfo(field=field, target=args[0], is_list=True)
        return None

    if origin is ContextRef:
        if args:
            return RefInfo(
                field=field,
                target=type(None),
                attr=args[0],
                is_context=True,
            )
        return None

    return None


def get_dependencies(cls: type, transitive: bool = False) -> set[type]:
    """Compute the classes that ``cls`` depends on.

    `ContextRef` fields are not dependencies. With ``transitive=True`` the
    dependencies of dependencies are followed as well.

    Example:
        >>> get_dependencies(SubnetPolicyAssociation)
        {<class 'Subnet'>, <class 'SecurityPolicy'>}
    """
    refs = get_refs(cls)
    deps = {info.target for info in refs.values() if not info.is_context}
    deps.discard(type(None))

    if not transitive:
        return deps

    visited: set[type] = set()
    to_visit = list(deps)

    while to_visit:
        current = to_visit.pop()
        if current in visited:
            continue
        visited.add(current)
        to_visit.extend(get_dependencies(current, transitive=False) - visited)

    return visited


def resource_id(resource: Any) -> str:
    """Stable identifier ``"<kind>.<name>"`` of a resource instance."""
    return f"{resource.kind}.{resource.name}"


def resource_dependencies(resource: Any) -> list[Any]:
    """Return the resource instances ``resource`` directly depends on.

    Values of `Ref` fields and every element of `RefList` fields are
    returned in field declaration order. Unset optional refs are skipped.
    """
    deps: list[Any] = []
    for name, info in get_refs(type(resource)).items():
        if info.is_context:
            continue
        value = getattr(resource, name)
        if value is None:
            continue
        if info.is_list:
            deps.extend(value)
        else:
            deps.append(value)
    return deps


def creation_waves(resources: Iterable[Any]) -> list[list[Any]]:
    """Layer resources so that each wave only depends on earlier waves.

    Resources in the same wave share no dependency edge and can be created
    in parallel. Deletion uses the waves in reverse. Dependencies outside
    ``resources`` are treated as already existing. Within a wave resources
    are sorted by `resource_id`.

    Raises:
        TopologyError: If the resources contain a dependency cycle.
    """
    pending = {resource_id(r): r for r in resources}
    edges = {
        rid: {resource_id(d) for d in resource_dependencies(r)} & pending.keys()
        for rid, r in pending.items()
    }

    waves: list[list[Any]] = []
    done: set[str] = set()
    while pending:
        ready = sorted(rid for rid in pending if edges[rid] <= done)
        if not ready:
            raise TopologyError(
                f"dependency cycle between {', '.join(sorted(pending))}"
            )
        waves.append([pending.pop(rid) for rid in ready])
        done.update(ready)

    return waves
