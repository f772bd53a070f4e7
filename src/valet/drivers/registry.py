"""Driver registry and driver file discovery.

Candidates for a resolution attempt come from three places, in order:

1. the site's own ``LocalValetDriver.py`` (always first),
2. user-installed ``*ValetDriver*.py`` files in ``<home>/Drivers``,
3. the built-in catalog, most specific first, ending with the generic
   ``BasicWithPublicValetDriver`` and ``BasicValetDriver``.

Driver files are plain Python modules loaded with ``importlib``; the class
named after the file stem is the driver. A file that fails to load is a
``DriverLoadError``; it is never silently skipped.

User-installed drivers are yielded in directory-listing order, which the
filesystem does not guarantee to be stable. Callers must not rely on the
relative order of two user drivers that both serve a site.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from valet.config import ValetConfig
from valet.drivers.base import ValetDriver
from valet.drivers.basic import BasicValetDriver, BasicWithPublicValetDriver
from valet.drivers.frameworks import (
    BedrockValetDriver,
    CakeValetDriver,
    Concrete5ValetDriver,
    ContaoValetDriver,
    CraftValetDriver,
    DrupalValetDriver,
    JigsawValetDriver,
    JoomlaValetDriver,
    KatanaValetDriver,
    KirbyValetDriver,
    LaravelValetDriver,
    Magento2ValetDriver,
    MagentoValetDriver,
    NeosValetDriver,
    SculpinValetDriver,
    StatamicV1ValetDriver,
    StatamicValetDriver,
    SymfonyValetDriver,
    Typo3ValetDriver,
    WordPressValetDriver,
)
from valet.errors import DriverLoadError

logger = logging.getLogger("valet.drivers")

# Most distinguishing layouts first; the generic drivers must stay last
BUILTIN_DRIVERS: tuple[type[ValetDriver], ...] = (
    Magento2ValetDriver,
    MagentoValetDriver,
    BedrockValetDriver,
    WordPressValetDriver,
    LaravelValetDriver,
    ContaoValetDriver,
    SymfonyValetDriver,
    CraftValetDriver,
    StatamicValetDriver,
    StatamicV1ValetDriver,
    CakeValetDriver,
    SculpinValetDriver,
    JigsawValetDriver,
    KirbyValetDriver,
    KatanaValetDriver,
    JoomlaValetDriver,
    DrupalValetDriver,
    Concrete5ValetDriver,
    Typo3ValetDriver,
    NeosValetDriver,
    BasicWithPublicValetDriver,
    BasicValetDriver,
)

# The contract's own file name, never treated as a driver
BASE_DRIVER_FILE = "ValetDriver.py"


class DriverRegistry:
    """Named driver classes, in registration order.

    The built-in catalog is registered once at import time; see
    :func:`builtin_registry`.
    """

    __slots__ = ("_drivers",)

    def __init__(self, drivers: Iterable[type[ValetDriver]] = ()) -> None:
        self._drivers: dict[str, type[ValetDriver]] = {}
        for driver in drivers:
            self.register(driver)

    def register(self, driver: type[ValetDriver]) -> type[ValetDriver]:
        """Register a driver class under its class name.

        Returns the class so this can be used as a decorator.
        """
        name = driver.__name__
        if name in self._drivers:
            msg = f"Duplicate driver name: {name!r}"
            raise ValueError(msg)
        self._drivers[name] = driver
        return driver

    def get(self, name: str) -> type[ValetDriver] | None:
        """Look up a driver class by name. Returns ``None`` if not found."""
        return self._drivers.get(name)

    def create(self, name: str) -> ValetDriver:
        """Instantiate a registered driver.

        Raises ``KeyError`` if the name is not registered.
        """
        driver = self._drivers.get(name)
        if driver is None:
            msg = f"Driver not found: {name!r}"
            raise KeyError(msg)
        return driver()

    def names(self) -> list[str]:
        return list(self._drivers)

    def __iter__(self) -> Iterator[type[ValetDriver]]:
        return iter(self._drivers.values())

    def __len__(self) -> int:
        return len(self._drivers)

    def __contains__(self, name: object) -> bool:
        return name in self._drivers


def builtin_registry() -> DriverRegistry:
    """A registry holding the built-in catalog in resolution order."""
    return DriverRegistry(BUILTIN_DRIVERS)


# ----------------------------------------------------------------------
# Driver file loading
# ----------------------------------------------------------------------


class DriverLoader:
    """Loads driver classes from ``.py`` files.

    Each file is executed once per modification time: an unchanged file
    keeps returning the same class, an edited one is loaded again and
    replaces the class remembered for it.
    """

    __slots__ = ("_lock", "_loaded")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # (path, class name) -> (mtime_ns, driver class)
        self._loaded: dict[tuple[str, str], tuple[int, type[ValetDriver]]] = {}

    def load(self, path: str | Path, class_name: str) -> type[ValetDriver]:
        """Load *class_name* from the driver file at *path*.

        Raises:
            DriverLoadError: If the file cannot be executed or does not
                define a concrete ``ValetDriver`` subclass named *class_name*.
        """
        file = Path(path)
        try:
            mtime = file.stat().st_mtime_ns
        except OSError as exc:
            raise DriverLoadError(str(file), str(exc)) from exc

        key = (str(file), class_name)
        with self._lock:
            cached = self._loaded.get(key)
            if cached is not None and cached[0] == mtime:
                return cached[1]
            driver = _load_driver_class(file, class_name)
            self._loaded[key] = (mtime, driver)
        logger.debug("Loaded driver %s from %s", class_name, file)
        return driver

    def __len__(self) -> int:
        with self._lock:
            return len(self._loaded)


def _load_driver_class(file: Path, class_name: str) -> type[ValetDriver]:
    digest = hashlib.sha1(str(file).encode("utf-8")).hexdigest()[:12]
    spec = importlib.util.spec_from_file_location(f"_valet_driver_{class_name}_{digest}", file)
    if spec is None or spec.loader is None:
        raise DriverLoadError(str(file), "not a loadable Python module")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise DriverLoadError(str(file), f"{type(exc).__name__}: {exc}") from exc

    driver = getattr(module, class_name, None)
    if driver is None:
        raise DriverLoadError(str(file), f"no class named {class_name!r}")
    if not (isinstance(driver, type) and issubclass(driver, ValetDriver)):
        raise DriverLoadError(str(file), f"{class_name!r} is not a ValetDriver subclass")
    if inspect.isabstract(driver):
        raise DriverLoadError(str(file), f"{class_name!r} does not implement the driver contract")
    return driver


_default_loader = DriverLoader()


def custom_site_driver(
    site_path: str | Path,
    *,
    config: ValetConfig | None = None,
    loader: DriverLoader | None = None,
) -> type[ValetDriver] | None:
    """Get the site's local driver class, if one exists."""
    config = config or ValetConfig()
    name = config.local_driver_name
    file = Path(site_path) / f"{name}.py"
    if not file.is_file():
        return None
    return (loader if loader is not None else _default_loader).load(file, name)


def drivers_in(
    path: str | Path,
    *,
    config: ValetConfig | None = None,
    loader: DriverLoader | None = None,
) -> list[type[ValetDriver]]:
    """Get all of the driver classes in a given directory.

    Not recursive. A missing directory yields ``[]``.
    """
    config = config or ValetConfig()
    directory = Path(path)
    if not directory.is_dir():
        return []

    loader = loader if loader is not None else _default_loader
    drivers: list[type[ValetDriver]] = []
    for item in directory.iterdir():
        if item.name == BASE_DRIVER_FILE or item.suffix != ".py":
            continue
        if config.driver_marker not in item.stem or not item.is_file():
            continue
        drivers.append(loader.load(item, item.stem))
    return drivers


# ----------------------------------------------------------------------
# Candidate lists
# ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Candidates:
    """Driver classes for one resolution attempt, grouped by origin."""

    local: type[ValetDriver] | None
    user: tuple[type[ValetDriver], ...]
    builtin: tuple[type[ValetDriver], ...]

    def ordered(self) -> list[type[ValetDriver]]:
        """Every candidate in resolution order."""
        head = [self.local] if self.local is not None else []
        return [*head, *self.user, *self.builtin]

    def lookup(self, name: str) -> type[ValetDriver] | None:
        """Find a cacheable (user or built-in) driver by name."""
        for driver in (*self.user, *self.builtin):
            if driver.__name__ == name:
                return driver
        return None


def collect_candidates(
    site_path: str | Path,
    *,
    config: ValetConfig | None = None,
    registry: DriverRegistry | None = None,
    loader: DriverLoader | None = None,
) -> Candidates:
    """Build the ordered candidate list for *site_path*.

    Local and user-installed drivers are loaded on every call so a newly
    added override is seen immediately and broken files always surface.
    """
    config = config or ValetConfig()
    registry = registry if registry is not None else builtin_registry()
    return Candidates(
        local=custom_site_driver(site_path, config=config, loader=loader),
        user=tuple(drivers_in(config.drivers_path, config=config, loader=loader)),
        builtin=tuple(registry),
    )
