"""Command line entry point: ``bgplab``."""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from bgplab._dependencies import resource_id
from bgplab.config import LabConfig
from bgplab.errors import TopologyError
from bgplab.generator import generate_from_config
from bgplab.identity import PrincipalNameAliasLookup
from bgplab.outputs import format_public_addresses

_LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the ``bgplab`` argument parser.

    Returns:
        A parser with the ``plan``, ``order`` and ``outputs`` subcommands,
        each taking the lab parameters as flags.
    """
    parser = argparse.ArgumentParser(
        prog="bgplab",
        description="Derive the desired state of a BGP lab topology.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    commands = {
        "plan": "print the desired-state document as JSON",
        "order": "print resource ids in creation waves",
        "outputs": "print the expected public address lines",
    }
    for name, help_text in commands.items():
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("-c", "--config", help="JSON config file")
        cmd.add_argument("--ip-address", dest="ip_address", help="operator IPv4 address")
        cmd.add_argument("-n", "--subnet-count", dest="subnet_count", type=int)
        cmd.add_argument("-l", "--location")
        cmd.add_argument("-p", "--prefix")
        alias = cmd.add_mutually_exclusive_group()
        alias.add_argument("-a", "--alias", help="operator mail alias")
        alias.add_argument(
            "--principal-name",
            dest="principal_name",
            help="user principal name to take the alias from",
        )
    return parser


def load_config(args: argparse.Namespace) -> LabConfig:
    """Build the lab config from parsed arguments.

    Flags that were given override the values of the ``--config`` file.

    Args:
        args: Parsed command line.

    Returns:
        The validated `LabConfig`.

    Raises:
        ValidationError: If a required parameter is missing or unknown.
        OSError: If the config file cannot be read.
    """
    overrides = {
        "ip_address": args.ip_address,
        "subnet_count": args.subnet_count,
        "location": args.location,
        "prefix": args.prefix,
        "alias": args.alias,
    }
    if args.config:
        return LabConfig.from_file(args.config, **overrides)
    return LabConfig.model_validate({k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    """Run the ``bgplab`` command.

    Args:
        argv: Arguments without the program name. Defaults to ``sys.argv``.

    Returns:
        0 on success, 2 if the lab cannot be derived.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
        lookup = (
            PrincipalNameAliasLookup(args.principal_name)
            if args.principal_name
            else None
        )
        graph = generate_from_config(config, alias_lookup=lookup)
    except (TopologyError, ValidationError) as err:
        _LOGGER.debug("generation failed", exc_info=True)
        print(f"bgplab: error: {err}", file=sys.stderr)
        return 2
    except OSError as err:
        print(f"bgplab: error: cannot read config: {err}", file=sys.stderr)
        return 2

    if args.command == "plan":
        print(json.dumps(graph.to_document(), indent=2, sort_keys=True))
    elif args.command == "order":
        for i, wave in enumerate(graph.creation_waves(), 1):
            print(f"{i}: {' '.join(resource_id(r) for r in wave)}")
    else:
        for line in format_public_addresses(graph):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
