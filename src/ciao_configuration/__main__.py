"""CLI entry point: python -m ciao_configuration <command>."""

from __future__ import annotations

import argparse
import logging
import sys

from ciao_configuration.args import add_bootstrap_arguments


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="ciao-config",
        description="CIAO configuration CLI",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    show = sub.add_parser("show", help="Resolve a CIP's configuration and print it")
    show.add_argument("--cip-name", required=True, help="Name of the CIP")
    show.add_argument("--cip-version", required=True, help="Version of the CIP")
    show.add_argument(
        "--defaults", default=None,
        help="YAML or .properties file seeded when no configuration exists yet",
    )
    show.add_argument("--json", action="store_true", default=False, help="Output as JSON")
    add_bootstrap_arguments(show)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "show":
        from ciao_configuration.cli.show import run_show
        run_show(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
