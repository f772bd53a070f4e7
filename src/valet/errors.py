"""Valet exception hierarchy.

Shared by the driver registry, resolver, environment loader and CLI so
every module raises and catches the same types.

Not-found conditions (no static file, a driver that does not serve the
request) are never exceptions: drivers answer them with ``None`` or
``False``.
"""


class ValetError(Exception):
    """Base for all valet-specific errors."""


class ConfigurationError(ValetError):
    """Raised when site or user configuration is invalid.

    Surfaced to the caller immediately. Resolution never falls back to
    the built-in drivers to hide a broken configuration.
    """


class DriverLoadError(ConfigurationError):
    """A local or user-installed driver file could not be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to load driver {path}: {reason}")
