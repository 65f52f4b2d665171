"""
Lab configuration and evaluation context.

`LabConfig` is the operator-facing input (keyword arguments, CLI flags or a
JSON file using the template parameter names ``location``, ``IPAddress``
and ``subnetCount``). `TopologyContext` is the explicit context handed to
the generator; nothing is read from process-wide state.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from bgplab.resources import DEFAULT_ADMIN_USERNAME, DEFAULT_VM_SIZE

__all__ = [
    "DEFAULT_LOCATION",
    "DEFAULT_PREFIX",
    "DEFAULT_SUBNET_COUNT",
    "TopologyContext",
    "LabConfig",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_LOCATION = "westeurope"
DEFAULT_PREFIX = "bgplab"
DEFAULT_SUBNET_COUNT = 4
DEFAULT_ALIAS = "operator"


@dataclass(frozen=True)
class TopologyContext:
    """Values every resource of one evaluation shares.

    Attributes:
        location: Target region of every resource.
        prefix: Prefix of every resource name and DNS label.
        alias: Operator alias used in DNS labels.
        admin_username: Login user on every VM.
        ssh_public_key: Public key installed for ``admin_username``.
        vm_size: Size of every VM.
        tags: Tags applied to the resource group.
    """

    location: str = DEFAULT_LOCATION
    prefix: str = DEFAULT_PREFIX
    alias: str = DEFAULT_ALIAS
    admin_username: str = DEFAULT_ADMIN_USERNAME
    ssh_public_key: str | None = None
    vm_size: str = DEFAULT_VM_SIZE
    tags: Mapping[str, str] = field(default_factory=dict, hash=False)

    def values(self) -> dict[str, str]:
        """Context values that `ContextRef` fields resolve against."""
        return {"location": self.location, "prefix": self.prefix}


class LabConfig(BaseModel):
    """Operator input for one lab.

    ``subnet_count`` and ``ip_address`` are taken as given, without
    coercion: ``"4"`` stays a string and ``2.5`` stays a float. Their range
    and format are checked by the generator, so a bad value surfaces as
    `RangeError` or `FormatError` wherever it came from.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    location: str = DEFAULT_LOCATION
    ip_address: Any = Field(alias="IPAddress")
    subnet_count: Any = Field(default=DEFAULT_SUBNET_COUNT, alias="subnetCount")
    prefix: str = DEFAULT_PREFIX
    alias: str | None = None
    admin_username: str = DEFAULT_ADMIN_USERNAME
    ssh_public_key: str | None = None
    vm_size: str = DEFAULT_VM_SIZE
    tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: object) -> "LabConfig":
        """Load a JSON config file; ``overrides`` that are not None win."""
        path = Path(path)
        _LOGGER.debug("loading lab config from %s", path)
        data = cls.model_validate_json(path.read_text()).model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)

    def context(self, alias: str | None = None) -> TopologyContext:
        """Build the evaluation context, ``alias`` taking precedence."""
        return TopologyContext(
            location=self.location,
            prefix=self.prefix,
            alias=alias or self.alias or DEFAULT_ALIAS,
            admin_username=self.admin_username,
            ssh_public_key=self.ssh_public_key,
            vm_size=self.vm_size,
            tags=dict(self.tags),
        )
