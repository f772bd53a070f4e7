"""Driver resolution: find the driver that serves a request.

Precedence, highest first:

1. The site's local override, whenever it serves the request. It is
   checked before the cache, so an override added while a cache entry
   is live wins immediately.
2. A live cache entry for the site name (unless ``no_cache``). No other
   candidate's ``serves`` is evaluated.
3. User-installed drivers, then the built-in catalog. The first driver
   whose ``serves`` returns true is cached and returned.
4. ``BasicValetDriver`` when nothing serves.

Local override matches are not cached; they are re-checked on every
attempt anyway.
"""

import logging
import threading

from valet.config import ValetConfig
from valet.drivers.base import ValetDriver
from valet.drivers.basic import BasicValetDriver
from valet.drivers.cache import DriverCache, MemoryDriverCache
from valet.drivers.registry import (
    DriverLoader,
    DriverRegistry,
    builtin_registry,
    collect_candidates,
)

logger = logging.getLogger("valet.drivers")

CACHE_KEY_PREFIX = "valet_driver_"


def cache_key(site_name: str) -> str:
    return CACHE_KEY_PREFIX + site_name


class DriverResolver:
    """Selects drivers for requests. One instance is shared per process.

    Thread safety:
        Holds no per-request state. The cache and the driver loader do
        their own locking, so ``assign`` may run concurrently.
    """

    __slots__ = ("_cache", "_loader", "_registry", "config")

    def __init__(
        self,
        config: ValetConfig | None = None,
        *,
        cache: DriverCache | None = None,
        registry: DriverRegistry | None = None,
        loader: DriverLoader | None = None,
    ) -> None:
        self.config: ValetConfig = config or ValetConfig()
        self._cache: DriverCache = cache if cache is not None else MemoryDriverCache()
        self._registry = registry if registry is not None else builtin_registry()
        self._loader = loader if loader is not None else DriverLoader()

    @property
    def cache(self) -> DriverCache:
        return self._cache

    def assign(
        self,
        site_path: str,
        site_name: str,
        uri: str,
        *,
        no_cache: bool = False,
    ) -> ValetDriver:
        """Find a driver that can serve the incoming request.

        Never returns ``None``: ``BasicValetDriver`` serves anything the
        candidates decline.

        Raises:
            DriverLoadError: If the local or a user-installed driver file
                is broken.
        """
        candidates = collect_candidates(
            site_path,
            config=self.config,
            registry=self._registry,
            loader=self._loader,
        )

        if candidates.local is not None:
            local = candidates.local()
            if local.serves(site_path, site_name, local.mutate_uri(uri)):
                logger.debug("%s served by local driver %s", site_name, local.name)
                return local

        key = cache_key(site_name)
        if not no_cache:
            cached = self._cache.get(key)
            if cached is not None:
                driver = candidates.lookup(cached)
                if driver is not None:
                    logger.debug("%s served by cached driver %s", site_name, cached)
                    return driver()
                logger.warning("Cached driver %s for %s no longer exists", cached, site_name)
                self._cache.expire(key)

        for driver_cls in (*candidates.user, *candidates.builtin):
            driver = driver_cls()
            if driver.serves(site_path, site_name, driver.mutate_uri(uri)):
                self._cache.put(key, driver.name, self.config.cache_ttl)
                logger.debug("%s served by %s", site_name, driver.name)
                return driver

        logger.debug("No driver serves %s, falling back to BasicValetDriver", site_name)
        return BasicValetDriver()


_default_resolver: DriverResolver | None = None
_default_lock = threading.Lock()


def default_resolver() -> DriverResolver:
    """The process-wide resolver, configured from the environment."""
    global _default_resolver
    if _default_resolver is None:
        with _default_lock:
            if _default_resolver is None:
                _default_resolver = DriverResolver(ValetConfig.from_env())
    return _default_resolver


def assign(site_path: str, site_name: str, uri: str, *, no_cache: bool = False) -> ValetDriver:
    """Find a driver for the request using the process-wide resolver."""
    return default_resolver().assign(site_path, site_name, uri, no_cache=no_cache)
