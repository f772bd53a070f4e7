"""``valet drivers`` — list the candidate drivers for a site in order."""

import argparse
import sys

from valet.cli._config import config_from_args, site_from_args
from valet.drivers.registry import collect_candidates
from valet.errors import ValetError


def run_drivers(args: argparse.Namespace) -> None:
    """Print every candidate driver, tagged with where it came from.

    User-installed drivers appear in directory-listing order, which is
    not guaranteed to be stable.
    """
    site_path, _site_name = site_from_args(args)

    try:
        candidates = collect_candidates(site_path, config=config_from_args(args))
    except ValetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if candidates.local is not None:
        print(f"local    {candidates.local.__name__}")
    for driver in candidates.user:
        print(f"user     {driver.__name__}")
    for driver in candidates.builtin:
        print(f"builtin  {driver.__name__}")
