"""Built-in framework drivers.

Each driver recognises one framework by a few marker files and knows
where that framework keeps its public assets and front-controller.
Detection is deliberately shallow: marker files only, no parsing.
"""

from pathlib import Path

from valet.context import server_vars
from valet.drivers.base import ValetDriver
from valet.drivers.basic import BasicValetDriver


def _exists(site_path: str, *parts: str) -> bool:
    return Path(site_path, *parts).exists()


def _is_dir(site_path: str, *parts: str) -> bool:
    return Path(site_path, *parts).is_dir()


def _front_controller(root: Path, script: str = "index.php") -> str:
    """Record ``root/script`` as the request's entry point and return it."""
    server = server_vars()
    server["SCRIPT_FILENAME"] = str(root / script)
    server["SCRIPT_NAME"] = "/" + script
    server["DOCUMENT_ROOT"] = str(root)
    return str(root / script)


class Magento2ValetDriver(ValetDriver):
    """Magento 2 (web root is ``pub/``)."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "bin", "magento") and _exists(site_path, "pub", "index.php")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        # deployed assets carry a cache-busting segment: /static/version1510000000/...
        if uri.startswith("/static/version"):
            _, _, rest = uri.removeprefix("/static/").partition("/")
            uri = "/static/" + rest
        return self.actual_file_under(Path(site_path) / "pub", uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return _front_controller(Path(site_path) / "pub")


class MagentoValetDriver(ValetDriver):
    """Magento 1.x, served from the site root."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "app", "Mage.php")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        # app/ and var/ hold configuration and logs
        if uri.endswith(".php") or uri.startswith(("/app/", "/var/")):
            return None
        return self.actual_file_under(site_path, uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return _front_controller(Path(site_path))


class BedrockValetDriver(BasicValetDriver):
    """Roots' Bedrock WordPress boilerplate (web root is ``web/``)."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "web", "app", "mu-plugins", "bedrock-autoloader.php") or (
            _is_dir(site_path, "web", "app") and _exists(site_path, "web", "wp-config.php")
        )

    def document_root(self, site_path: str) -> Path:
        return Path(site_path) / "web"

    def _fixed_candidates(self, site_path: str) -> list[tuple[Path, Path]]:
        web = self.document_root(site_path)
        return [(web / "index.php", web)]


class WordPressValetDriver(BasicValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "wp-config.php") or _exists(site_path, "wp-config-sample.php")

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        # wp-admin only resolves its index.php with the trailing slash
        if uri.endswith("/wp-admin"):
            uri += "/"
        return super().front_controller_path(site_path, site_name, uri)


class LaravelValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "public", "index.php") and _exists(site_path, "artisan")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        public = self.actual_file_under(Path(site_path) / "public", uri)
        if public is not None:
            return public

        # `php artisan storage:link` may not have been run yet
        if uri.startswith("/storage/"):
            return self.actual_file_under(
                Path(site_path) / "storage" / "app" / "public",
                uri.removeprefix("/storage"),
            )
        return None

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return str(Path(site_path) / "public" / "index.php")


class ContaoValetDriver(ValetDriver):
    """Contao 4 managed edition (``web/``) and Contao 3 (site root)."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        managed = _is_dir(site_path, "vendor", "contao") and _is_dir(site_path, "web")
        return managed or _exists(site_path, "system", "initialize.php")

    def document_root(self, site_path: str) -> Path:
        web = Path(site_path) / "web"
        return web if web.is_dir() else Path(site_path)

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.endswith(".php"):
            return None
        return self.actual_file_under(self.document_root(site_path), uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        root = self.document_root(site_path)
        scripts = ("app.php", "index.php")
        if uri.startswith("/app_dev.php"):
            scripts = ("app_dev.php", *scripts)
        for script in scripts:
            if self.is_actual_file(root / script):
                return _front_controller(root, script)
        return None


class SymfonyValetDriver(ValetDriver):
    """Symfony 2/3 (``web/``) and Symfony 4+ (``public/``) layouts."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        legacy = (
            _exists(site_path, "web", "app_dev.php") or _exists(site_path, "web", "app.php")
        ) and _exists(site_path, "app", "AppKernel.php")
        flex = _exists(site_path, "public", "index.php") and _exists(site_path, "src", "Kernel.php")
        return legacy or flex

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        for root in ("web", "public"):
            found = self.actual_file_under(Path(site_path) / root, uri)
            if found is not None:
                return found
        return None

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        for parts in (("web", "app_dev.php"), ("web", "app.php"), ("public", "index.php")):
            candidate = Path(site_path, *parts)
            if self.is_actual_file(candidate):
                return str(candidate)
        return None


class CraftValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "craft")

    def front_controller_directory(self, site_path: str) -> Path:
        """Craft 3 uses ``web/``; older installs use ``public/``."""
        web = Path(site_path) / "web"
        return web if web.is_dir() else Path(site_path) / "public"

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        return self.actual_file_under(self.front_controller_directory(site_path), uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return _front_controller(self.front_controller_directory(site_path))


class StatamicValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _is_dir(site_path, "statamic")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.startswith("/site/") and not uri.startswith("/site/themes/"):
            return None
        return self.actual_file_under(site_path, uri) or self.actual_file_under(
            Path(site_path) / "public", uri
        )

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        for parts in (("index.php",), ("public", "index.php")):
            candidate = Path(site_path, *parts)
            if self.is_actual_file(candidate):
                return str(candidate)
        return None


class StatamicV1ValetDriver(ValetDriver):
    """Statamic 1.x flat-file sites."""

    PRIVATE_DIRECTORIES = ("/_app/", "/_config/", "/_content/", "/_logs/")

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "_app", "core", "statamic.php")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.endswith(".php") or uri.startswith(self.PRIVATE_DIRECTORIES):
            return None
        return self.actual_file_under(site_path, uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return _front_controller(Path(site_path))


class CakeValetDriver(ValetDriver):
    """CakePHP 3+ (web root is ``webroot/``)."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "bin", "cake") and _exists(site_path, "webroot", "index.php")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        return self.actual_file_under(Path(site_path) / "webroot", uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        return _front_controller(Path(site_path) / "webroot")


class SculpinValetDriver(BasicValetDriver):
    """Static output of ``sculpin generate --watch`` in ``output_dev/``."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _is_dir(site_path, "output_dev") and (
            _exists(site_path, "sculpin.json") or _exists(site_path, "app", "config", "sculpin_kernel.yml")
        )

    def mutate_uri(self, uri: str) -> str:
        return ("/output_dev" + uri).rstrip("/")


class JigsawValetDriver(BasicValetDriver):
    """Static output of ``jigsaw build`` in ``build_local/``."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _is_dir(site_path, "build_local")

    def mutate_uri(self, uri: str) -> str:
        return ("/build_local" + uri).rstrip("/")


class KirbyValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _is_dir(site_path, "kirby")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.endswith(".php"):
            return None
        return self.actual_file_under(site_path, uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        server = server_vars()
        server["SCRIPT_NAME"] = "/index.php"
        if uri.startswith("/panel") and _exists(site_path, "panel", "index.php"):
            server["SCRIPT_NAME"] = "/panel/index.php"
            return str(Path(site_path) / "panel" / "index.php")
        return str(Path(site_path) / "index.php")


class KatanaValetDriver(BasicValetDriver):
    """Static output of Katana in ``public/``."""

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "katana")

    def mutate_uri(self, uri: str) -> str:
        return ("/public" + uri).rstrip("/")


class JoomlaValetDriver(BasicValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _is_dir(site_path, "libraries", "joomla")


class DrupalValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "misc", "drupal.js") or _exists(site_path, "core", "lib", "Drupal.php")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.endswith(".php"):
            return None
        return self.actual_file_under(site_path, uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        # Drupal ships secondary entry points (install.php, update.php)
        script = self.actual_file_under(site_path, uri) if uri.endswith(".php") else None
        if script is None:
            script = str(Path(site_path) / "index.php")
            script_name = "/index.php"
        else:
            script_name = uri

        server = server_vars()
        server["SCRIPT_FILENAME"] = script
        server["SCRIPT_NAME"] = script_name
        server["DOCUMENT_ROOT"] = site_path
        return script


class Concrete5ValetDriver(BasicValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "concrete", "dispatcher.php")

    def _fixed_candidates(self, site_path: str) -> list[tuple[Path, Path]]:
        return [(Path(site_path) / "index.php", Path(site_path))]


class Typo3ValetDriver(ValetDriver):
    """TYPO3 CMS. Composer installs keep the web root in ``web/``."""

    def document_root(self, site_path: str) -> Path:
        web = Path(site_path) / "web"
        return web if (web / "typo3").is_dir() else Path(site_path)

    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        root = self.document_root(site_path)
        return (root / "typo3").is_dir() and (root / "typo3conf").is_dir()

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        if uri.endswith(".php"):
            return None
        return self.actual_file_under(self.document_root(site_path), uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        root = self.document_root(site_path)
        if (uri == "/typo3" or uri.startswith("/typo3/")) and self.is_actual_file(root / "typo3" / "index.php"):
            return _front_controller(root, "typo3/index.php")
        return _front_controller(root)


class NeosValetDriver(ValetDriver):
    def serves(self, site_path: str, site_name: str, uri: str) -> bool:
        return _exists(site_path, "flow") and _is_dir(site_path, "Web")

    def is_static_file(self, site_path: str, site_name: str, uri: str) -> str | None:
        return self.actual_file_under(Path(site_path) / "Web", uri)

    def front_controller_path(self, site_path: str, site_name: str, uri: str) -> str | None:
        server = server_vars()
        server["SCRIPT_FILENAME"] = str(Path(site_path) / "Web" / "index.php")
        server["SCRIPT_NAME"] = "/index.php"
        return str(Path(site_path) / "Web" / "index.php")
