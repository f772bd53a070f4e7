"""Valet CLI — inspect which driver serves a site.

Entry point registered as ``valet`` in ``pyproject.toml``::

    [project.scripts]
    valet = "valet.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``valet`` command."""
    parser = argparse.ArgumentParser(
        prog="valet",
        description="Valet — driver resolution for local development sites.",
    )
    parser.add_argument(
        "--home",
        default=None,
        help="Valet home directory (default: $VALET_HOME_PATH or ~/.config/valet)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log resolution decisions to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- valet which ------------------------------------------------------
    which_parser = subparsers.add_parser("which", help="Show which driver serves a site")
    which_parser.add_argument("path", nargs="?", default=".", help="Site directory (default: cwd)")
    which_parser.add_argument("--site", default=None, help="Site name (default: directory name)")
    which_parser.add_argument("--uri", default="/", help="Request URI to resolve")

    # -- valet drivers ----------------------------------------------------
    drivers_parser = subparsers.add_parser("drivers", help="List candidate drivers in resolution order")
    drivers_parser.add_argument("path", nargs="?", default=".", help="Site directory (default: cwd)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "which":
        from valet.cli._which import run_which

        run_which(args)
    elif args.command == "drivers":
        from valet.cli._drivers import run_drivers

        run_drivers(args)
