"""
Reference markers for lab resource declarations.

Resource dataclasses declare their dependency edges in their annotations
instead of in a side table. Three markers are provided:

- `Ref[T]`: the field holds the resource of type T this one is attached to
- `RefList[T]`: the field holds a tuple of resources of type T
- `ContextRef["name"]`: the field is filled from the evaluation context
  (for example the target location) when the graph is serialised

The markers are plain subscriptable classes. Subscripting returns a
`_GenericAlias` that keeps the origin and arguments so that
`bgplab._dependencies` can read them back with `get_origin`/`get_args`.

Example:
    Declaring a subnet that lives in a virtual network::

        from dataclasses import dataclass
        from bgplab import Ref

        @dataclass(frozen=True)
        class VirtualNetwork:
            name: str

        @dataclass(frozen=True)
        class Subnet:
            name: str
            network: Ref[VirtualNetwork]
"""

from typing import Any, Generic, TypeVar

__all__ = [
    "Ref",
    "RefList",
    "ContextRef",
]

T = TypeVar("T")
NameT = TypeVar("NameT")


class _RefMeta(type):
    """Metaclass that enables Ref[T] subscript syntax."""

    def __getitem__(cls, item: type[T]) -> Any:
        return _GenericAlias(cls, (item,))


class Ref(Generic[T], metaclass=_RefMeta):
    """A dependency on a single resource of type T.

    The value stored in a `Ref[T]` field is the resource instance itself.
    A resource must not be created before every resource it references
    exists, and must be deleted before them.

    Example:
        A network interface attached to a subnet::

            @dataclass(frozen=True)
            class NetworkInterface:
                name: str
                subnet: Ref[Subnet]
    """

    __slots__ = ()


class _RefListMeta(type):
    """Metaclass that enables RefList[T] subscript syntax."""

    def __getitem__(cls, item: type[T]) -> Any:
        return _GenericAlias(cls, (item,))


class RefList(Generic[T], metaclass=_RefListMeta):
    """A dependency on an ordered collection of resources of type T.

    The value stored in a `RefList[T]` field is a tuple of resource
    instances. Every element is a dependency edge.

    Example:
        A virtual machine with its network interfaces::

            @dataclass(frozen=True)
            class VirtualMachine:
                name: str
                interfaces: RefList[NetworkInterface]
    """

    __slots__ = ()


class _ContextRefMeta(type):
    """Metaclass that enables ContextRef["name"] subscript syntax."""

    def __getitem__(cls, item: str) -> Any:
        return _GenericAlias(cls, (item,))


class ContextRef(Generic[NameT], metaclass=_ContextRefMeta):
    """A value taken from the evaluation context.

    Fields annotated with `ContextRef["name"]` are not dependency edges.
    They are left as ``None`` on the resource and resolved from the
    graph's context values when the graph is turned into a document, so a
    single context change (say, a new location) reaches every resource.

    Example:
        A resource group placed in the configured location::

            @dataclass(frozen=True)
            class ResourceGroup:
                name: str
                location: ContextRef["location"] = None
    """

    __slots__ = ()


class _GenericAlias:
    """A generic alias that preserves origin and args for introspection.

    Makes `Ref[T]` and friends compatible with `typing.get_origin` style
    introspection and supports `Ref[T] | None`.
    """

    __slots__ = ("__origin__", "__args__")

    def __init__(self, origin: type, args: tuple[Any, ...]) -> None:
        self.__origin__ = origin
        self.__args__ = args

    def __repr__(self) -> str:
        args_str = ", ".join(
            arg.__name__ if isinstance(arg, type) else repr(arg)
            for arg in self.__args__
        )
        return f"{self.__origin__.__name__}[{args_str}]"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _GenericAlias):
            return (
                self.__origin__ == other.__origin__
                and self.__args__ == other.__args__
            )
        return False

    def __hash__(self) -> int:
        return hash((self.__origin__, self.__args__))

    def __or__(self, other: Any) -> Any:
        """Support for `Ref[T] | None` syntax."""
        import typing

        return typing.Union[self, other]
