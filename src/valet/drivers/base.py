"""The driver contract.

A driver knows one project layout (a framework's conventions). For a
request it answers three questions:

- does it serve this site at all (``serves``)?
- is the URI a static file, and where (``is_static_file``)?
- which front-controller script handles everything else
  (``front_controller_path``)?

``mutate_uri`` lets a driver rewrite the incoming URI first (e.g. to
point into a build directory). The resolver and the dispatch layer call
it exactly once per attempt and pass the same result to every question.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path

from valet.config import DEFAULT_STATIC_PREFIX
from valet.environment import ENV_FILE_NAME
from valet.environment import load_server_environment_variables as _load_site_env
from valet.http.response import Response


class ValetDriver(ABC):
    """Base class for all drivers.

    Built-in, user-installed and local drivers all subclass this. The
    class name is the driver's identifier (it is what the resolution
    cache stores).

    Example local driver, saved as ``LocalValetDriver.py`` in a site root::

        from valet.drivers import BasicValetDriver

        class LocalValetDriver(BasicValetDriver):
            def serves(self, site_path, site_name, uri):
                return True

            def front_controller_path(self, site_path, site_name, uri):
                return site_path + "/app.php"
    """

    # Overridden by the dispatch layer from ValetConfig.static_prefix
    static_prefix: str = DEFAULT_STATIC_PREFIX
    env_file_name: str = ENV_FILE_NAME

    @abstractmethod
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        """Determine if the driver serves the request."""

    @abstractmethod
    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        """Return the static file path for the URI, or ``None``."""

    @abstractmethod
    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        """Return the fully resolved path to the application's front controller."""

    def mutate_uri(self, uri: str) -> str:
        """Rewrite the incoming URI before matching. Identity by default."""
        return uri

    def serve_static_file(
        self,
        static_file_path: str,
        site_path: str,
        site_name: str,
        uri: str,
    ) -> Response:
        """Hand the static file to the upstream server via internal redirect.

        The response carries no Content-Type so the upstream server picks
        the type from the file itself.
        """
        return (
            Response()
            .without_content_type()
            .with_header("X-Accel-Redirect", f"/{self.static_prefix}{static_file_path}")
        )

    def is_actual_file(self, path: str | Path | None) -> bool:
        """Determine if the path is a file and not a directory."""
        if path is None:
            return False
        candidate = Path(path)
        return candidate.exists() and not candidate.is_dir()

    def load_server_environment_variables(self, site_path: str, site_name: str) -> None:
        """Load the site's environment variables into the request scope."""
        _load_site_env(site_path, site_name, file_name=self.env_file_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_under(root: str | Path, uri: str) -> Path | None:
        """Join *uri* onto *root*, refusing paths that escape it.

        Normalises ``..`` segments lexically and verifies the result is
        still within *root* to prevent path traversal. Symlinks inside the
        site (e.g. a linked storage directory) are left alone.
        """
        base = Path(os.path.abspath(root))
        relative = uri.lstrip("/")
        candidate = Path(os.path.normpath(base / relative)) if relative else base
        if not candidate.is_relative_to(base):
            return None
        return candidate

    def actual_file_under(self, root: str | Path, uri: str) -> str | None:
        """Return ``str(path)`` when *uri* names an actual file under *root*."""
        candidate = self.resolve_under(root, uri)
        if candidate is not None and self.is_actual_file(candidate):
            return str(candidate)
        return None

    @property
    def name(self) -> str:
        """Driver identifier (the class name)."""
        return type(self).__name__
