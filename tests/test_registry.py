"""Tests for valet.drivers.registry — named drivers and driver file loading."""

import os
from pathlib import Path

import pytest

from valet.config import ValetConfig
from valet.drivers.basic import BasicValetDriver, BasicWithPublicValetDriver
from valet.drivers.frameworks import LaravelValetDriver
from valet.drivers.registry import (
    BUILTIN_DRIVERS,
    DriverLoader,
    DriverRegistry,
    builtin_registry,
    collect_candidates,
    custom_site_driver,
    drivers_in,
)
from valet.errors import DriverLoadError

DRIVER_SOURCE = """\
from valet.drivers import BasicValetDriver


class {name}(BasicValetDriver):
    def serves(self, site_path, site_name, uri):
        return {serves}
"""


def write_driver(directory: Path, name: str, *, serves: bool = True) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    file = directory / f"{name}.py"
    file.write_text(DRIVER_SOURCE.format(name=name, serves=serves))
    return file


class TestCatalog:
    def test_detection_order(self) -> None:
        assert [driver.__name__ for driver in BUILTIN_DRIVERS] == [
            "Magento2ValetDriver",
            "MagentoValetDriver",
            "BedrockValetDriver",
            "WordPressValetDriver",
            "LaravelValetDriver",
            "ContaoValetDriver",
            "SymfonyValetDriver",
            "CraftValetDriver",
            "StatamicValetDriver",
            "StatamicV1ValetDriver",
            "CakeValetDriver",
            "SculpinValetDriver",
            "JigsawValetDriver",
            "KirbyValetDriver",
            "KatanaValetDriver",
            "JoomlaValetDriver",
            "DrupalValetDriver",
            "Concrete5ValetDriver",
            "Typo3ValetDriver",
            "NeosValetDriver",
            "BasicWithPublicValetDriver",
            "BasicValetDriver",
        ]

    def test_generic_drivers_are_last(self) -> None:
        assert BUILTIN_DRIVERS[-2:] == (BasicWithPublicValetDriver, BasicValetDriver)

    def test_builtin_registry_keeps_order(self) -> None:
        assert list(builtin_registry()) == list(BUILTIN_DRIVERS)

    def test_names_are_unique(self) -> None:
        names = [driver.__name__ for driver in BUILTIN_DRIVERS]
        assert len(names) == len(set(names))


class TestDriverRegistry:
    def test_register_and_get(self) -> None:
        registry = DriverRegistry()
        registry.register(LaravelValetDriver)

        assert registry.get("LaravelValetDriver") is LaravelValetDriver
        assert "LaravelValetDriver" in registry
        assert len(registry) == 1
        assert registry.names() == ["LaravelValetDriver"]

    def test_register_as_decorator(self) -> None:
        registry = DriverRegistry()

        @registry.register
        class CustomValetDriver(BasicValetDriver):
            pass

        assert registry.get("CustomValetDriver") is CustomValetDriver

    def test_create_returns_fresh_instances(self) -> None:
        registry = DriverRegistry([BasicValetDriver])
        first = registry.create("BasicValetDriver")
        second = registry.create("BasicValetDriver")

        assert isinstance(first, BasicValetDriver)
        assert first is not second

    def test_unknown_name(self) -> None:
        registry = DriverRegistry()
        assert registry.get("NopeValetDriver") is None
        with pytest.raises(KeyError, match="Driver not found"):
            registry.create("NopeValetDriver")

    def test_duplicate_name(self) -> None:
        registry = DriverRegistry([BasicValetDriver])
        with pytest.raises(ValueError, match="Duplicate driver name"):
            registry.register(BasicValetDriver)


class TestDriversIn:
    def test_missing_directory(self, tmp_path: Path) -> None:
        assert drivers_in(tmp_path / "Drivers") == []

    def test_loads_marked_files(self, tmp_path: Path) -> None:
        write_driver(tmp_path, "FooValetDriver")
        write_driver(tmp_path, "BarValetDriver")

        names = sorted(driver.__name__ for driver in drivers_in(tmp_path, loader=DriverLoader()))

        assert names == ["BarValetDriver", "FooValetDriver"]

    def test_skips_base_contract_and_unmarked_files(self, tmp_path: Path) -> None:
        (tmp_path / "ValetDriver.py").write_text("raise RuntimeError('never loaded')")
        (tmp_path / "helpers.py").write_text("raise RuntimeError('never loaded')")
        (tmp_path / "NotesValetDriver.txt").write_text("not python")
        (tmp_path / "OldValetDriver").mkdir()
        write_driver(tmp_path, "FooValetDriver")

        drivers = drivers_in(tmp_path, loader=DriverLoader())

        assert [driver.__name__ for driver in drivers] == ["FooValetDriver"]

    def test_custom_marker(self, tmp_path: Path) -> None:
        write_driver(tmp_path, "FooSiteHandler")
        write_driver(tmp_path, "FooValetDriver")

        drivers = drivers_in(tmp_path, config=ValetConfig(driver_marker="SiteHandler"), loader=DriverLoader())

        assert [driver.__name__ for driver in drivers] == ["FooSiteHandler"]

    def test_broken_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "BrokenValetDriver.py").write_text("def oops(:\n")

        with pytest.raises(DriverLoadError, match="SyntaxError"):
            drivers_in(tmp_path, loader=DriverLoader())

    def test_missing_class_raises(self, tmp_path: Path) -> None:
        (tmp_path / "EmptyValetDriver.py").write_text("X = 1\n")

        with pytest.raises(DriverLoadError, match="no class named 'EmptyValetDriver'"):
            drivers_in(tmp_path, loader=DriverLoader())

    def test_non_driver_class_raises(self, tmp_path: Path) -> None:
        (tmp_path / "PlainValetDriver.py").write_text("class PlainValetDriver:\n    pass\n")

        with pytest.raises(DriverLoadError, match="not a ValetDriver subclass"):
            drivers_in(tmp_path, loader=DriverLoader())

    def test_abstract_driver_raises(self, tmp_path: Path) -> None:
        (tmp_path / "HalfValetDriver.py").write_text(
            "from valet.drivers import ValetDriver\n\nclass HalfValetDriver(ValetDriver):\n    pass\n"
        )

        with pytest.raises(DriverLoadError, match="does not implement"):
            drivers_in(tmp_path, loader=DriverLoader())


class TestCustomSiteDriver:
    def test_no_override(self, tmp_path: Path) -> None:
        assert custom_site_driver(tmp_path) is None

    def test_loads_override(self, tmp_path: Path) -> None:
        write_driver(tmp_path, "LocalValetDriver")

        driver = custom_site_driver(tmp_path, loader=DriverLoader())

        assert driver is not None
        assert driver.__name__ == "LocalValetDriver"

    def test_overrides_of_different_sites_are_distinct(self, tmp_path: Path) -> None:
        write_driver(tmp_path / "a", "LocalValetDriver", serves=True)
        write_driver(tmp_path / "b", "LocalValetDriver", serves=False)
        loader = DriverLoader()

        a = custom_site_driver(tmp_path / "a", loader=loader)
        b = custom_site_driver(tmp_path / "b", loader=loader)

        assert a is not None and b is not None
        assert a is not b
        assert a().serves("", "", "/") is True
        assert b().serves("", "", "/") is False


class TestDriverLoader:
    def test_unchanged_file_is_loaded_once(self, tmp_path: Path) -> None:
        file = write_driver(tmp_path, "FooValetDriver")
        loader = DriverLoader()

        assert loader.load(file, "FooValetDriver") is loader.load(file, "FooValetDriver")

    def test_edited_file_is_reloaded(self, tmp_path: Path) -> None:
        file = write_driver(tmp_path, "FooValetDriver", serves=True)
        loader = DriverLoader()
        first = loader.load(file, "FooValetDriver")

        write_driver(tmp_path, "FooValetDriver", serves=False)
        stat = file.stat()
        os.utime(file, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        second = loader.load(file, "FooValetDriver")

        assert first is not second
        assert second().serves("", "", "/") is False
        assert len(loader) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DriverLoadError):
            DriverLoader().load(tmp_path / "GoneValetDriver.py", "GoneValetDriver")


class TestCollectCandidates:
    def test_order_is_local_user_builtin(self, tmp_path: Path) -> None:
        site = tmp_path / "site"
        home = tmp_path / "home"
        write_driver(site, "LocalValetDriver")
        write_driver(home / "Drivers", "FooValetDriver")

        candidates = collect_candidates(site, config=ValetConfig(home_path=home), loader=DriverLoader())
        names = [driver.__name__ for driver in candidates.ordered()]

        assert names[0] == "LocalValetDriver"
        assert names[1] == "FooValetDriver"
        assert names[2:] == [driver.__name__ for driver in BUILTIN_DRIVERS]

    def test_lookup_excludes_local_driver(self, tmp_path: Path) -> None:
        site = tmp_path / "site"
        write_driver(site, "LocalValetDriver")

        candidates = collect_candidates(
            site, config=ValetConfig(home_path=tmp_path / "home"), loader=DriverLoader()
        )

        assert candidates.lookup("LocalValetDriver") is None
        assert candidates.lookup("LaravelValetDriver") is LaravelValetDriver

    def test_user_driver_shadows_builtin_name(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        write_driver(home / "Drivers", "LaravelValetDriver")

        candidates = collect_candidates(tmp_path, config=ValetConfig(home_path=home), loader=DriverLoader())

        assert candidates.lookup("LaravelValetDriver") is not LaravelValetDriver
