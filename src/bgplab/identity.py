"""
Operator identity.

Public addresses need globally unique DNS labels. The lab builds them from
the invoking principal's mail alias: ``<prefix>-vm<index>-<alias>``. How the
alias is obtained (a directory lookup, an environment variable, a config
file) is up to the caller, behind the `AliasLookup` protocol.
"""

import re
from typing import Protocol

from bgplab.errors import FormatError

__all__ = [
    "AliasLookup",
    "StaticAliasLookup",
    "PrincipalNameAliasLookup",
    "normalize_alias",
    "dns_label",
]

_INVALID_LABEL_CHARS = re.compile(r"[^a-z0-9-]")
_DNS_LABEL = re.compile(r"^[a-z][a-z0-9-]{0,61}[a-z0-9]$")


class AliasLookup(Protocol):
    """Source of the operator alias used in DNS labels."""

    def alias(self) -> str:
        """The normalised operator alias.

        Returns:
            Lowercase letters and digits only.

        Raises:
            FormatError: If nothing usable is left after normalising.
        """
        ...


class StaticAliasLookup:
    """An alias known up front."""

    def __init__(self, alias: str) -> None:
        self._alias = alias

    def alias(self) -> str:
        return normalize_alias(self._alias)


class PrincipalNameAliasLookup:
    """Alias taken from the local part of a user principal name.

    >>> PrincipalNameAliasLookup("Jane.Doe@contoso.com").alias()
    'janedoe'
    """

    def __init__(self, principal_name: str) -> None:
        self._principal_name = principal_name

    def alias(self) -> str:
        local, _, _ = self._principal_name.partition("@")
        return normalize_alias(local)


def normalize_alias(alias: str) -> str:
    """Lowercase ``alias`` and drop characters not allowed in a DNS label.

    Raises:
        FormatError: If nothing usable is left.
    """
    cleaned = _INVALID_LABEL_CHARS.sub("", alias.strip().lower()).strip("-")
    if not cleaned:
        raise FormatError(f"{alias!r} does not contain a usable alias")
    return cleaned


def dns_label(prefix: str, key: str, alias: str) -> str:
    """Build the DNS label of the public address for index ``key``.

    Raises:
        FormatError: If the result is not a valid DNS label.
    """
    label = f"{prefix}-vm{key}-{normalize_alias(alias)}".lower()
    if not _DNS_LABEL.match(label):
        raise FormatError(f"{label!r} is not a valid DNS label")
    return label
