"""Classify a request once its driver is known.

The front-end web server (not part of this package) hands every request
to :func:`dispatch` and acts on the result:

- ``STATIC``: send the response as-is. It carries only an
  ``X-Accel-Redirect`` header, so the web server streams the file and
  picks the Content-Type itself.
- ``DYNAMIC``: run the front-controller at ``classification.path`` with
  ``Dispatch.server`` as its server variables.
- ``NOT_SERVED``: send the 404 response.
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import unquote

from valet.context import in_request_scope, request_scope, server_vars
from valet.drivers.base import ValetDriver
from valet.drivers.resolver import DriverResolver, default_resolver
from valet.http.response import Response
from valet.server.not_found import not_found_response

logger = logging.getLogger("valet.server")


class Outcome(StrEnum):
    NOT_SERVED = "not_served"
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True, slots=True)
class Classification:
    """What a driver made of a request.

    ``path`` is the static file for ``STATIC``, the front-controller for
    ``DYNAMIC`` and ``None`` for ``NOT_SERVED``. ``uri`` is the URI after
    the driver's ``mutate_uri``.
    """

    outcome: Outcome
    driver: str
    uri: str
    path: str | None = None


@dataclass(frozen=True, slots=True)
class Dispatch:
    """A resolved request, ready for the front-end to act on."""

    driver: ValetDriver
    classification: Classification
    response: Response | None = None
    server: dict[str, str] = field(default_factory=dict)


def normalize_request_uri(raw_uri: str) -> str:
    """Drop the query string and percent-decode the path."""
    path = raw_uri.split("?", 1)[0]
    return unquote(path) or "/"


def _is_php_file(uri: str) -> bool:
    return uri.rsplit("/", 1)[-1].endswith(".php")


def classify(driver: ValetDriver, site_path: str, site_name: str, uri: str) -> Classification:
    """Ask *driver* whether *uri* is a static file or needs a front-controller.

    The site root and PHP scripts are never treated as static files.
    Site environment variables are loaded before the front-controller
    lookup so drivers can see them.
    """
    uri = driver.mutate_uri(uri)

    if uri != "/" and not _is_php_file(uri):
        static_path = driver.is_static_file(site_path, site_name, uri)
        if static_path is not None:
            return Classification(Outcome.STATIC, driver.name, uri, static_path)

    driver.load_server_environment_variables(site_path, site_name)
    front_controller = driver.front_controller_path(site_path, site_name, uri)
    if front_controller is None:
        return Classification(Outcome.NOT_SERVED, driver.name, uri)
    return Classification(Outcome.DYNAMIC, driver.name, uri, front_controller)


def dispatch(
    site_path: str,
    site_name: str,
    uri: str,
    *,
    resolver: DriverResolver | None = None,
    no_cache: bool = False,
) -> Dispatch:
    """Resolve the driver for a request and classify it.

    Inside an active :func:`valet.context.request_scope` the server
    variables are written to that scope. Otherwise each call runs in a
    fresh scope of its own.
    """
    if not in_request_scope():
        with request_scope():
            return dispatch(site_path, site_name, uri, resolver=resolver, no_cache=no_cache)

    resolver = resolver or default_resolver()
    uri = normalize_request_uri(uri)

    driver = resolver.assign(site_path, site_name, uri, no_cache=no_cache)
    driver.static_prefix = resolver.config.static_prefix
    driver.env_file_name = resolver.config.env_file_name

    result = classify(driver, site_path, site_name, uri)
    logger.debug("%s %s -> %s (%s)", site_name, uri, result.outcome, result.driver)

    response: Response | None = None
    if result.outcome is Outcome.STATIC and result.path is not None:
        response = driver.serve_static_file(result.path, site_path, site_name, result.uri)
    elif result.outcome is Outcome.NOT_SERVED:
        response = not_found_response(site_name, uri)

    return Dispatch(driver=driver, classification=result, response=response, server=dict(server_vars()))
