"""Valet configuration.

ValetConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Internal-redirect location the upstream web server maps onto the filesystem
DEFAULT_STATIC_PREFIX = "41c270e4-5535-4daa-b23e-c269744c2f45"


def _default_home() -> Path:
    return Path.home() / ".config" / "valet"


@dataclass(frozen=True, slots=True)
class ValetConfig:
    """Valet configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ValetConfig(home_path="/tmp/valet", cache_ttl=60)
    """

    # User home (user-installed drivers live under <home>/Drivers)
    home_path: str | Path = field(default_factory=_default_home)
    drivers_dir_name: str = "Drivers"

    # Driver naming conventions
    local_driver_name: str = "LocalValetDriver"
    driver_marker: str = "ValetDriver"

    # Static files
    static_prefix: str = DEFAULT_STATIC_PREFIX

    # Resolution cache
    cache_ttl: float = 3600.0

    # Per-site environment variables
    env_file_name: str = ".valet-env.json"

    @property
    def drivers_path(self) -> Path:
        """Directory scanned for user-installed drivers."""
        return Path(self.home_path) / self.drivers_dir_name

    @classmethod
    def from_env(cls, **overrides: object) -> "ValetConfig":
        """Build a config honouring ``VALET_HOME_PATH`` and ``VALET_STATIC_PREFIX``.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, object] = {}
        if home := os.environ.get("VALET_HOME_PATH"):
            values["home_path"] = Path(home)
        if prefix := os.environ.get("VALET_STATIC_PREFIX"):
            values["static_prefix"] = prefix
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
