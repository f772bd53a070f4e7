"""Shared CLI helpers: config from flags and site path resolution."""

import argparse
from pathlib import Path

from valet.config import ValetConfig


def config_from_args(args: argparse.Namespace) -> ValetConfig:
    """Environment-derived config with ``--home`` taking precedence."""
    if args.home:
        return ValetConfig.from_env(home_path=Path(args.home).expanduser())
    return ValetConfig.from_env()


def site_from_args(args: argparse.Namespace) -> tuple[str, str]:
    """Return ``(site_path, site_name)``; the name defaults to the directory name."""
    site_path = Path(args.path).expanduser().resolve()
    site_name = getattr(args, "site", None) or site_path.name
    return str(site_path), site_name
