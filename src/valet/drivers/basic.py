"""Generic drivers: plain PHP/HTML sites with or without a ``public/`` root.

``BasicValetDriver`` serves every request and is the resolver's final
fallback. ``BasicWithPublicValetDriver`` is the same convention rooted at
``public/`` and sits just before it in the catalog.
"""

import os
from collections.abc import Iterator
from pathlib import Path

from valet.context import server_vars
from valet.drivers.base import ValetDriver


class BasicValetDriver(ValetDriver):
    """Catch-all driver. Always serves."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return True

    def document_root(self, site_path: str) -> Path:
        """Directory URIs are resolved against."""
        return Path(site_path)

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        root = self.document_root(site_path)
        index = self.actual_file_under(root, uri.rstrip("/") + "/index.html")
        if index is not None:
            return index
        return self.actual_file_under(root, uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        server = server_vars()
        server["PHP_SELF"] = uri
        server["SERVER_ADDR"] = "127.0.0.1"
        if "HTTP_HOST" in server:
            server["SERVER_NAME"] = server["HTTP_HOST"]

        root = Path(os.path.abspath(self.document_root(site_path)))
        for candidate in self._dynamic_candidates(root, uri):
            if self.is_actual_file(candidate):
                script_name = "/" + candidate.relative_to(root).as_posix()
                self._record_script(candidate, script_name=script_name, docroot=root)
                return str(candidate)

        for candidate, docroot in self._fixed_candidates(site_path):
            if self.is_actual_file(candidate):
                self._record_script(candidate, script_name="/" + candidate.name, docroot=docroot)
                return str(candidate)

        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _dynamic_candidates(self, root: Path, uri: str) -> Iterator[Path]:
        """The URI as a file, then as a directory holding an index."""
        for suffix in ("", "/index.php", "/index.html"):
            candidate = self.resolve_under(root, uri.rstrip("/") + suffix if suffix else uri)
            if candidate is not None:
                yield candidate

    def _fixed_candidates(self, site_path: str) -> list[tuple[Path, Path]]:
        """Site-wide entry points paired with their document roots."""
        site = Path(site_path)
        public = site / "public"
        return [
            (site / "index.php", site),
            (public / "index.php", public),
            (public / "index.html", public),
        ]

    @staticmethod
    def _record_script(candidate: Path, *, script_name: str, docroot: Path) -> None:
        server = server_vars()
        server["SCRIPT_FILENAME"] = str(candidate)
        server["SCRIPT_NAME"] = script_name
        server["DOCUMENT_ROOT"] = str(docroot)


class BasicWithPublicValetDriver(BasicValetDriver):
    """Plain site whose web root is ``public/``."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return (Path(site_path) / "public").is_dir()

    def document_root(self, site_path: str) -> Path:
        return Path(site_path) / "public"

    def _fixed_candidates(self, site_path: str) -> list[tuple[Path, Path]]:
        public = self.document_root(site_path)
        return [
            (public / "index.php", public),
            (public / "index.html", public),
        ]
