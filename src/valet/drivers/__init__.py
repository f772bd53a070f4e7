"""Drivers: per-framework request handling strategies and their resolution."""

from valet.drivers.base import ValetDriver
from valet.drivers.basic import BasicValetDriver, BasicWithPublicValetDriver
from valet.drivers.cache import DriverCache, MemoryDriverCache
from valet.drivers.registry import BUILTIN_DRIVERS, DriverLoader, DriverRegistry
from valet.drivers.resolver import DriverResolver, assign

__all__ = [
    "BUILTIN_DRIVERS",
    "BasicValetDriver",
    "BasicWithPublicValetDriver",
    "DriverCache",
    "DriverLoader",
    "DriverRegistry",
    "DriverResolver",
    "MemoryDriverCache",
    "ValetDriver",
    "assign",
]
