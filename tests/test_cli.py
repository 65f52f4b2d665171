"""Tests for the bgplab command line."""

import json

import pytest

from bgplab.cli import main


class TestCli:
    def test_plan(self, capsys) -> None:
        """plan prints the desired-state document."""
        code = main(["plan", "--ip-address", "1.2.3.4", "-n", "3", "-a", "jdoe"])
        assert code == 0
        document = json.loads(capsys.readouterr().out)
        assert sorted(document["resources"]["subnet"]) == [
            "bgplab-subnet01",
            "bgplab-subnet02",
            "bgplab-subnet03",
        ]

    def test_order(self, capsys) -> None:
        """order prints one numbered wave per line."""
        assert main(["order", "--ip-address", "1.2.3.4", "-n", "2"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "1: resource_group.bgplab-rg"
        assert lines[-1] == "5: virtual_machine.bgplab-vm01 virtual_machine.bgplab-vm02"

    def test_outputs_with_principal_name(self, capsys) -> None:
        assert main(
            ["outputs", "--ip-address", "1.2.3.4", "--principal-name", "Jane@contoso.com"]
        ) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 4
        assert lines[0].startswith("bgplab-pip01: (pending) / bgplab-vm01-jane.")

    def test_config_file(self, tmp_path, capsys) -> None:
        """Config files are read and flags override them."""
        path = tmp_path / "lab.json"
        path.write_text(json.dumps({"IPAddress": "1.2.3.4", "subnetCount": 6}))
        assert main(["outputs", "-c", str(path), "-n", "2", "-l", "eastus"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 2
        assert lines[1].endswith(".eastus.cloudapp.azure.com")

    @pytest.mark.parametrize(
        "argv, message",
        [
            (["plan", "--ip-address", "1.2.3.4", "-n", "100"], "between 2 and 99"),
            (["plan", "--ip-address", "999.1.1.1"], "not a valid IPv4 address"),
            (["plan"], "IPAddress"),
        ],
    )
    def test_errors(self, argv, message, capsys) -> None:
        """Invalid input exits with status 2 and names the constraint."""
        assert main(argv) == 2
        assert message in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys) -> None:
        assert main(["plan", "-c", str(tmp_path / "absent.json")]) == 2
        assert "cannot read config" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "data, message",
        [
            ({"IPAddress": "1.2.3.4", "subnetCount": 2.5}, "between 2 and 99, got 2.5"),
            ({"IPAddress": "1.2.3.4", "subnetCount": "4"}, "between 2 and 99, got '4'"),
            ({"IPAddress": 16909060}, "16909060 is not a valid IPv4 address"),
        ],
    )
    def test_config_file_errors(self, tmp_path, data, message, capsys) -> None:
        """Bad config values name the violated constraint, like bad flags do."""
        path = tmp_path / "lab.json"
        path.write_text(json.dumps(data))
        assert main(["plan", "-c", str(path)]) == 2
        assert message in capsys.readouterr().err
