"""``valet which`` — report the driver that serves a site.

Always bypasses the resolution cache: the answer reflects the site as
it is on disk now.
"""

import argparse
import sys

from valet.cli._config import config_from_args, site_from_args
from valet.drivers.resolver import DriverResolver
from valet.errors import ValetError


def run_which(args: argparse.Namespace) -> None:
    """Print the driver class that serves ``args.path``.

    Exits with code 1 if a local or user-installed driver fails to load.
    """
    site_path, site_name = site_from_args(args)
    resolver = DriverResolver(config_from_args(args))

    try:
        driver = resolver.assign(site_path, site_name, args.uri, no_cache=True)
    except ValetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"This site is served by [{driver.name}].")
