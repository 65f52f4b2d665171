"""Tests for operator alias handling."""

import pytest

from bgplab import FormatError
from bgplab.identity import (
    PrincipalNameAliasLookup,
    StaticAliasLookup,
    dns_label,
    normalize_alias,
)


class TestAlias:
    def test_static(self) -> None:
        assert StaticAliasLookup("JDoe").alias() == "jdoe"

    def test_principal_name(self) -> None:
        """The alias is the local part of the principal name."""
        assert PrincipalNameAliasLookup("Jane.Doe@contoso.com").alias() == "janedoe"
        assert PrincipalNameAliasLookup("ops-team").alias() == "ops-team"

    def test_normalize_strips_invalid(self) -> None:
        assert normalize_alias(" -J_Doe- ") == "jdoe"

    def test_empty_alias(self) -> None:
        with pytest.raises(FormatError):
            normalize_alias("___")


class TestDnsLabel:
    def test_format(self) -> None:
        """Labels are <prefix>-vm<key>-<alias>."""
        assert dns_label("bgplab", "07", "jdoe") == "bgplab-vm07-jdoe"

    def test_prefix_lowercased(self) -> None:
        assert dns_label("BGPLab", "01", "x") == "bgplab-vm01-x"

    def test_too_long(self) -> None:
        """Labels over 63 characters are rejected."""
        with pytest.raises(FormatError, match="not a valid DNS label"):
            dns_label("bgplab", "01", "a" * 60)

    def test_must_start_with_letter(self) -> None:
        with pytest.raises(FormatError):
            dns_label("1lab", "01", "jdoe")
