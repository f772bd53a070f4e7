"""Per-site environment variables.

A site may ship a ``.valet-env.json`` file in its root::

    {
        "*": {"APP_ENV": "local"},
        "blog": {"DB_DATABASE": "blog"}
    }

Variables under ``"*"`` apply to every site, then the entry keyed by the
site name is applied on top. A missing file or a missing key is a silent
no-op; a file that is not a JSON object of string mappings is a
configuration error.
"""

import json
import logging
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from valet.context import server_vars
from valet.errors import ConfigurationError

logger = logging.getLogger("valet.server")

ENV_FILE_NAME = ".valet-env.json"
WILDCARD_KEY = "*"


def read_site_variables(
    site_path: str | Path,
    site_name: str,
    *,
    file_name: str = ENV_FILE_NAME,
) -> dict[str, str]:
    """Return the variables that apply to *site_name*, or ``{}``."""
    var_file = Path(site_path) / file_name
    if not var_file.is_file():
        return {}

    try:
        data: Any = json.loads(var_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        msg = f"Unable to read {var_file}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{var_file} must contain a JSON object keyed by site name"
        raise ConfigurationError(msg)

    variables: dict[str, str] = {}
    for key in (WILDCARD_KEY, site_name):
        section = data.get(key)
        if section is None:
            continue
        if not isinstance(section, dict):
            msg = f"{var_file}: entry {key!r} must be an object of variables"
            raise ConfigurationError(msg)
        variables.update({str(name): str(value) for name, value in section.items()})
    return variables


def load_server_environment_variables(
    site_path: str | Path,
    site_name: str,
    *,
    target: MutableMapping[str, str] | None = None,
    file_name: str = ENV_FILE_NAME,
) -> dict[str, str]:
    """Apply the site's variables to *target* (the request's server vars).

    Returns the variables that were applied.
    """
    variables = read_site_variables(site_path, site_name, file_name=file_name)
    if not variables:
        return variables

    if target is None:
        target = server_vars()
    target.update(variables)
    logger.debug("Loaded %d environment variable(s) for %s", len(variables), site_name)
    return variables
