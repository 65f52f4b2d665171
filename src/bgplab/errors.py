"""Errors raised while deriving a lab topology."""

__all__ = [
    "TopologyError",
    "RangeError",
    "FormatError",
]


class TopologyError(Exception):
    """Base class for all errors raised by bgplab."""


class RangeError(TopologyError, ValueError):
    """A numeric input lies outside its allowed range.

    Attributes:
        value: The rejected value.
        minimum: Smallest accepted value.
        maximum: Largest accepted value.
    """

    def __init__(self, name: str, value: object, minimum: int, maximum: int) -> None:
        self.name = name
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"{name} must be an integer between {minimum} and {maximum}, got {value!r}"
        )


class FormatError(TopologyError, ValueError):
    """A string input does not have the required format."""
